"""
Reminder scheduler loop: re-evaluates every task against the wall clock once per tick
and dispatches each newly-due occurrence exactly once.

Polling keeps per-tick cost O(tasks) with at most one tick of latency, and there is
nothing to reschedule when the task list changes underneath it.
"""
import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pydantic import ValidationError

from dayplanner.schemas import Task
from .controller import ReminderController
from .ledger import FiredLedger, OccurrenceKey
from .window import compute_trigger_window, minute_of_day

logger = logging.getLogger("reminder_scheduler")

TaskSource = Callable[[], Iterable[Any]]
Clock = Callable[[], datetime]


def _coerce_task(raw: Any) -> Optional[Task]:
    if isinstance(raw, Task):
        return raw
    try:
        return Task.model_validate(raw)
    except ValidationError as e:
        logger.warning("Skipping malformed task %r: %s", raw, e)
        return None


class ReminderScheduler:
    JOB_ID = "reminder_tick"

    def __init__(
        self,
        task_source: TaskSource,
        ledger: FiredLedger,
        controller: ReminderController,
        *,
        clock: Optional[Clock] = None,
        interval_seconds: int = 1,
        prune_ledger: bool = False,
    ):
        self.task_source = task_source
        self.ledger = ledger
        self.controller = controller
        self.clock = clock or datetime.now
        self.interval_seconds = interval_seconds
        self.prune_ledger = prune_ledger
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._last_date: Optional[date] = None

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def run_tick(self, now: Optional[datetime] = None) -> List[Task]:
        """Evaluate all tasks at ``now`` and return the tasks whose occurrence fired on this tick."""
        now = now or self.clock()
        now_date = now.date()
        now_minute = minute_of_day(now)

        if self.prune_ledger and self._last_date is not None and now_date > self._last_date:
            self.ledger.prune_before(now_date)
        self._last_date = now_date

        fired: List[Task] = []
        for raw in self.task_source():
            task = _coerce_task(raw)
            if task is None or task.date != now_date:
                continue
            window = compute_trigger_window(task)
            if window is None or not window.contains(now_minute):
                continue

            key = OccurrenceKey(task.id, window.trigger_minute, now_date)
            if not self.ledger.mark_fired(key):
                continue
            fired.append(task)
            self.controller.dispatch(task)

        if fired:
            logger.info("Fired %d reminder(s) at %s", len(fired), now.strftime("%Y-%m-%d %H:%M:%S"))
        return fired

    async def _tick(self) -> None:
        try:
            self.run_tick()
        except Exception as e:
            logger.error("Error in reminder tick: %s", e)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self._scheduler is not None:
            logger.warning("Reminder scheduler already running")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._tick,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=self.JOB_ID,
            name="Evaluate task reminders",
            replace_existing=True,
            max_instances=1,  # Ticks are never re-entrant
            coalesce=True,
            next_run_time=datetime.now(),
        )
        self._scheduler.start()
        logger.info("Reminder scheduler started (ticking every %d second(s))", self.interval_seconds)

    def stop(self) -> None:
        """Cancel the periodic tick. Safe to call more than once."""
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Reminder scheduler stopped")

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running
