import os
from datetime import date, datetime

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient

# Load .env, then force the settings tests depend on
load_dotenv()
os.environ["REMINDER_AUTOSTART"] = "false"
os.environ["NOTIFICATION_PUSH_URL"] = ""
os.environ["REMINDER_TICK_SECONDS"] = "1"

from dayplanner.config import Settings  # noqa: E402
from dayplanner.features.reminders import ReminderController, ReminderEffects  # noqa: E402
from dayplanner.schemas import Task  # noqa: E402


class FakeAudio:
    def __init__(self, calls):
        self.calls = calls
        self.loop = False

    def play(self):
        self.calls.append("audio.play")

    def pause(self):
        self.calls.append("audio.pause")

    def reset(self):
        self.calls.append("audio.reset")


class FakeVibration:
    def __init__(self, calls):
        self.calls = calls
        self.patterns = []

    def vibrate(self, pattern):
        self.calls.append("vibrate")
        self.patterns.append(list(pattern))

    def cancel(self):
        self.calls.append("vibrate.cancel")


class FakeNotifications:
    def __init__(self, calls, allowed=True):
        self.calls = calls
        self.allowed = allowed
        self.sent = []
        self.discarded = []

    def permitted(self):
        return self.allowed

    def notify(self, payload, on_activate):
        self.calls.append("notify")
        self.sent.append((payload, on_activate))

    def discard(self, notification_id):
        self.calls.append("notify.discard")
        self.discarded.append(notification_id)

    def clear(self):
        self.calls.append("notify.clear")


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def calls():
    return []


@pytest.fixture()
def effects(calls):
    return ReminderEffects(
        audio=FakeAudio(calls),
        vibration=FakeVibration(calls),
        notifications=FakeNotifications(calls),
    )


@pytest.fixture()
def settings():
    return Settings(reminder_tick_seconds=1, notification_push_url=None, reminder_ledger_prune=False)


@pytest.fixture()
def closed():
    return []


@pytest.fixture()
def controller(effects, settings, closed):
    return ReminderController.from_settings(
        effects, settings, on_closed=lambda task, action: closed.append((task.id, action.value))
    )


def make_task(task_id="a", day=date(2024, 6, 1), time="09:00", reminder_minutes=10, **kwargs) -> Task:
    return Task(
        id=task_id,
        title=kwargs.pop("title", f"Task {task_id}"),
        date=day,
        time=time,
        reminder_minutes=reminder_minutes,
        **kwargs,
    )


@pytest.fixture()
def client():
    from dayplanner.main import app
    with TestClient(app) as c:
        yield c
