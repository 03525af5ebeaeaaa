"""
Reminder feature module: local, exactly-once reminders for date- and time-scheduled tasks
"""
from .controller import ReminderController
from .effects import AlarmAudio, DeviceVibration, ReminderEffects, WebhookNotificationSink, build_effects
from .ledger import FiredLedger, OccurrenceKey
from .scheduler import ReminderScheduler
from .session import ReminderSession, SessionManager
from .window import TriggerWindow, compute_trigger_window, is_reminder_eligible, parse_time_of_day

__all__ = [
    "ReminderController",
    "AlarmAudio",
    "DeviceVibration",
    "ReminderEffects",
    "WebhookNotificationSink",
    "build_effects",
    "FiredLedger",
    "OccurrenceKey",
    "ReminderScheduler",
    "ReminderSession",
    "SessionManager",
    "TriggerWindow",
    "compute_trigger_window",
    "is_reminder_eligible",
    "parse_time_of_day",
]
