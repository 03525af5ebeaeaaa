"""
Reminder lifecycle controller: owns the single active-reminder slot and the side effects that go with it.
"""
import logging
import threading
from typing import Callable, List, Optional

from dayplanner.schemas import CloseAction, NotificationPayload, ReminderState, Task
from .effects import ReminderEffects, new_notification_id

logger = logging.getLogger("reminder_controller")

ClosedCallback = Callable[[Task, CloseAction], None]


class ReminderController:
    """Idle -> Firing -> Idle. At most one reminder fires at a time; later dispatches are dropped."""

    def __init__(
        self,
        effects: ReminderEffects,
        *,
        alarm_pattern: List[int],
        notification_pattern: Optional[List[int]] = None,
        title_prefix: str = "",
        default_body: str = "",
        icon: Optional[str] = None,
        on_closed: Optional[ClosedCallback] = None,
    ):
        self.effects = effects
        self.alarm_pattern = list(alarm_pattern)
        self.notification_pattern = list(notification_pattern or [])
        self.title_prefix = title_prefix
        self.default_body = default_body
        self.icon = icon
        self.on_closed = on_closed
        self._active: Optional[Task] = None
        self._notification_id: Optional[str] = None
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, effects: ReminderEffects, settings, on_closed: Optional[ClosedCallback] = None):
        return cls(
            effects,
            alarm_pattern=settings.alarm_pattern(),
            notification_pattern=settings.notification_pattern(),
            title_prefix=settings.notification_title_prefix,
            default_body=settings.notification_default_body,
            icon=settings.notification_icon_url,
            on_closed=on_closed,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def active(self) -> Optional[Task]:
        return self._active

    @property
    def is_active(self) -> bool:
        return self._active is not None

    @property
    def state(self) -> ReminderState:
        return ReminderState.firing if self._active is not None else ReminderState.idle

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def dispatch(self, task: Task) -> bool:
        """Occupy the slot with ``task``. Returns False when another reminder is already firing."""
        with self._lock:
            if self._active is not None:
                logger.warning(
                    "Reminder for task %s dropped; task %s is still firing", task.id, self._active.id
                )
                return False
            self._active = task

        logger.info("Reminder firing for task %s (%s)", task.id, task.title)
        self._engage(task)
        return True

    def dismiss(self) -> Optional[Task]:
        """Stop side effects and clear the slot. Returns the dismissed task, None when idle."""
        task = self._release()
        if task is not None:
            logger.info("Reminder for task %s dismissed", task.id)
            self._notify_closed(task, CloseAction.dismissed)
        return task

    def back(self) -> bool:
        """Back-navigation while a reminder is showing counts as a dismiss."""
        return self.dismiss() is not None

    def view(self) -> Optional[Task]:
        """Dismiss and route the active task to editing."""
        task = self._release()
        if task is not None:
            logger.info("Reminder for task %s opened for editing", task.id)
            self._notify_closed(task, CloseAction.viewed)
        return task

    def _on_notification_activated(self, task: Task) -> None:
        # The notification always surfaces its own task, whatever occupies the slot now
        released = self._release()
        if released is not None and released.id != task.id:
            logger.info("Notification for task %s cleared active reminder %s", task.id, released.id)
            self._notify_closed(released, CloseAction.dismissed)
        self._notify_closed(task, CloseAction.viewed)

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------
    def _release(self) -> Optional[Task]:
        with self._lock:
            task, self._active = self._active, None
            notification_id, self._notification_id = self._notification_id, None
        if notification_id is not None:
            self._safely("notifications.discard", self.effects.notifications.discard, notification_id)
        if task is not None:
            self._safely("audio.pause", self.effects.audio.pause)
            self._safely("audio.reset", self.effects.audio.reset)
            self._safely("vibration.cancel", self.effects.vibration.cancel)
        return task

    def _engage(self, task: Task) -> None:
        audio = self.effects.audio
        self._safely("audio.reset", audio.reset)
        self._safely("audio.loop", setattr, audio, "loop", True)
        self._safely("audio.play", audio.play)
        self._safely("vibration.vibrate", self.effects.vibration.vibrate, self.alarm_pattern)

        sink = self.effects.notifications
        if not self._safely("notifications.permitted", sink.permitted):
            logger.debug("System notification not permitted; skipping for task %s", task.id)
            return
        payload = NotificationPayload(
            notification_id=new_notification_id(),
            task_id=task.id,
            title=f"{self.title_prefix}{task.title}",
            body=task.details or self.default_body,
            icon=self.icon,
            require_interaction=True,
            vibrate=self.notification_pattern,
        )
        with self._lock:
            self._notification_id = payload.notification_id
        self._safely("notifications.notify", sink.notify, payload, lambda: self._on_notification_activated(task))

    def _safely(self, name: str, fn, *args):
        try:
            return fn(*args)
        except Exception as e:
            logger.warning("Reminder side effect %s failed: %s", name, e)
            return None

    def _notify_closed(self, task: Task, action: CloseAction) -> None:
        if self.on_closed is None:
            return
        try:
            self.on_closed(task, action)
        except Exception as e:
            logger.error("Reminder closed callback failed for task %s: %s", task.id, e)
