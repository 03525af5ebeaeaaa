import logging
import threading
from typing import Dict, Iterable, List, Optional

from dayplanner.schemas import Task

logger = logging.getLogger("services.task_store")


class TaskStore:
    """In-memory task list refreshed by the data layer and read by the reminder loop every tick."""

    def __init__(self, tasks: Optional[Iterable[Task]] = None):
        self._tasks: Dict[str, Task] = {}
        self._lock = threading.Lock()
        if tasks:
            self.replace(tasks)

    def replace(self, tasks: Iterable[Task]) -> int:
        with self._lock:
            self._tasks = {t.id: t for t in tasks}
            count = len(self._tasks)
        logger.info("Task list replaced (%d tasks)", count)
        return count

    def upsert(self, task: Task) -> Task:
        with self._lock:
            self._tasks[task.id] = task
        logger.info("Stored task %s", task.id)
        return task

    def get(self, task_id: str) -> Optional[Task]:
        with self._lock:
            return self._tasks.get(task_id)

    def delete(self, task_id: str) -> bool:
        with self._lock:
            removed = self._tasks.pop(task_id, None)
        if removed is None:
            logger.warning("Task %s not found for deletion", task_id)
            return False
        logger.info("Deleted task %s", task_id)
        return True

    def toggle(self, task_id: str) -> Optional[Task]:
        """Flip a task's completed flag."""
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return None
            task = task.model_copy(update={"completed": not task.completed})
            self._tasks[task_id] = task
        logger.info("Task %s completed=%s", task_id, task.completed)
        return task

    def list(self) -> List[Task]:
        with self._lock:
            return list(self._tasks.values())

    def search(self, query: str) -> List[Task]:
        q = (query or "").strip().lower()
        if not q:
            return self.list()

        def _match(t: Task) -> bool:
            return (
                q in (t.title or "").lower()
                or q in (t.description or "").lower()
                or q in (t.details or "").lower()
            )

        return [t for t in self.list() if _match(t)]

    def clear(self) -> None:
        with self._lock:
            self._tasks.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)
