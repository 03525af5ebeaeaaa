"""
Trigger window calculation: when a task's reminder opens and closes, in minutes since local midnight.
"""
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from dayplanner.schemas import Task

_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})", re.ASCII)


@dataclass(frozen=True)
class TriggerWindow:
    """Half-open window ``[trigger_minute, scheduled_minute + 1)``."""

    trigger_minute: int
    scheduled_minute: int

    @property
    def close_minute(self) -> int:
        return self.scheduled_minute + 1

    def contains(self, minute: int) -> bool:
        return self.trigger_minute <= minute < self.close_minute


def parse_time_of_day(text: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse ``HH:MM`` into ``(hour, minute)``; None when absent or malformed."""
    if not text or not isinstance(text, str):
        return None
    match = _TIME_RE.fullmatch(text.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour < 24 and 0 <= minute < 60):
        return None
    return hour, minute


def minute_of_day(now: datetime) -> int:
    return now.hour * 60 + now.minute


def is_reminder_eligible(task: Task) -> bool:
    """A task can remind only when scheduled on a date and time, armed with a lead time, and open."""
    if task.completed or task.date is None or task.reminder_minutes is None:
        return False
    if task.reminder_minutes < 0:
        return False
    return parse_time_of_day(task.time) is not None


def compute_trigger_window(task: Task) -> Optional[TriggerWindow]:
    """Return the task's firing window, or None when it can never fire.

    The subtraction is not date-aware: a lead time reaching back past midnight
    yields a negative trigger minute, and such a reminder never fires.
    """
    if not is_reminder_eligible(task):
        return None
    hour, minute = parse_time_of_day(task.time)
    scheduled = hour * 60 + minute
    trigger = scheduled - task.reminder_minutes
    if trigger < 0:
        return None
    return TriggerWindow(trigger_minute=trigger, scheduled_minute=scheduled)
