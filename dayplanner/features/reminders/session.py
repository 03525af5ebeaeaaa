"""
Reminder session: one ledger, one controller and one scheduler loop, created at sign-in
and disposed at sign-out.
"""
import logging
from typing import Optional

from dayplanner.config import Settings, get_settings
from dayplanner.schemas import CloseAction, Task
from .controller import ClosedCallback, ReminderController
from .effects import ReminderEffects, build_effects
from .ledger import FiredLedger
from .scheduler import Clock, ReminderScheduler, TaskSource

logger = logging.getLogger("reminder_session")


class ReminderSession:
    def __init__(
        self,
        task_source: TaskSource,
        effects: Optional[ReminderEffects] = None,
        settings: Optional[Settings] = None,
        *,
        clock: Optional[Clock] = None,
        on_closed: Optional[ClosedCallback] = None,
    ):
        settings = settings or get_settings()
        self.effects = effects or build_effects(settings)
        self.ledger = FiredLedger()
        self.controller = ReminderController.from_settings(self.effects, settings, on_closed=self._handle_closed)
        self.scheduler = ReminderScheduler(
            task_source,
            self.ledger,
            self.controller,
            clock=clock,
            interval_seconds=settings.reminder_tick_seconds,
            prune_ledger=settings.reminder_ledger_prune,
        )
        self.editing_task_id: Optional[str] = None
        self._on_closed = on_closed

    def _handle_closed(self, task: Task, action: CloseAction) -> None:
        if action == CloseAction.viewed:
            self.editing_task_id = task.id
        if self._on_closed is not None:
            self._on_closed(task, action)

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        """Stop the loop and silence any reminder still firing. Idempotent."""
        self.scheduler.stop()
        self.controller.dismiss()
        self.effects.notifications.clear()

    @property
    def running(self) -> bool:
        return self.scheduler.running


class SessionManager:
    """Holds at most one reminder session for the hosting application."""

    def __init__(self):
        self.session: Optional[ReminderSession] = None

    def start(self, task_source: TaskSource, **kwargs) -> ReminderSession:
        """Start a fresh session, ending any running one first. The new session has an empty ledger."""
        self.end()
        self.session = ReminderSession(task_source, **kwargs)
        self.session.start()
        logger.info("Reminder session started")
        return self.session

    def end(self) -> bool:
        if self.session is None:
            return False
        self.session.stop()
        self.session = None
        logger.info("Reminder session ended")
        return True
