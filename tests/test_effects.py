import json

import httpx
import pytest

from conftest import make_task
from dayplanner.config import Settings
from dayplanner.features.reminders import (
    AlarmAudio,
    DeviceVibration,
    ReminderController,
    WebhookNotificationSink,
    build_effects,
)
from dayplanner.schemas import NotificationPayload


def _payload(notification_id="n1"):
    return NotificationPayload(notification_id=notification_id, task_id="a", title="Academy Reminder: A", body="Body")


def _ok_transport(seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(200, json={"ok": True})
    return httpx.MockTransport(handler)


def test_alarm_audio_state():
    """Alarm audio tracks playing and position for the client."""
    audio = AlarmAudio(source="alarm.mp3")
    audio.position = 3.2
    audio.play()
    assert audio.playing and audio.loop
    audio.pause()
    audio.reset()
    assert not audio.playing
    assert audio.position == 0.0


def test_device_vibration_state():
    """Vibration keeps the engaged pattern until cancelled."""
    vibration = DeviceVibration()
    vibration.vibrate([800, 200])
    assert vibration.pattern == [800, 200]
    vibration.cancel()
    assert vibration.pattern == []


def test_permission_requires_url_and_flag():
    """Notifications need both a push URL and the enabled flag."""
    assert not WebhookNotificationSink(None).permitted()
    assert not WebhookNotificationSink("http://push.test/hook", enabled=False).permitted()
    assert WebhookNotificationSink("http://push.test/hook").permitted()


def test_build_effects_from_settings():
    """Default sinks are configured from settings."""
    effects = build_effects(Settings(notification_push_url="http://push.test/hook", notifications_enabled=True))
    assert effects.audio.source.endswith(".mp3")
    assert effects.notifications.permitted()


def test_notify_without_event_loop_registers_nothing():
    """A notification that cannot be sent cannot be activated later."""
    sink = WebhookNotificationSink("http://push.test/hook")
    sink.notify(_payload("n1"), lambda: None)
    assert sink.awaiting_activation == 0
    assert sink.activate("n1") is False


@pytest.mark.asyncio
async def test_activation_runs_once():
    """Each notification activates at most once."""
    sink = WebhookNotificationSink("http://push.test/hook", transport=_ok_transport())
    activated = []
    sink.notify(_payload("n1"), lambda: activated.append("n1"))
    await sink.flush()

    assert sink.activate("n1") is True
    assert sink.activate("n1") is False
    assert sink.activate("unknown") is False
    assert activated == ["n1"]


@pytest.mark.asyncio
async def test_discard_and_clear():
    """Discarded or cleared notifications can no longer be activated."""
    sink = WebhookNotificationSink("http://push.test/hook", transport=_ok_transport())
    sink.notify(_payload("n1"), lambda: None)
    sink.notify(_payload("n2"), lambda: None)
    await sink.flush()
    assert sink.awaiting_activation == 2

    sink.discard("n1")
    assert sink.activate("n1") is False
    sink.clear()
    assert sink.awaiting_activation == 0


@pytest.mark.asyncio
async def test_closed_reminders_leave_no_callbacks(settings):
    """Repeated fire and dismiss cycles do not accumulate activation callbacks."""
    effects = build_effects(Settings(notification_push_url="http://push.test/hook"))
    effects.notifications.transport = _ok_transport()
    controller = ReminderController.from_settings(effects, settings)

    for i in range(5):
        controller.dispatch(make_task(f"t{i}"))
        controller.dismiss()
    await effects.notifications.flush()

    assert effects.notifications.awaiting_activation == 0


@pytest.mark.asyncio
async def test_notify_posts_payload_with_token():
    """The webhook receives the payload with a bearer token."""
    seen = []
    sink = WebhookNotificationSink("http://push.test/hook", "secret", transport=_ok_transport(seen))
    sink.notify(_payload(), lambda: None)
    await sink.flush()

    assert len(seen) == 1
    assert seen[0].headers["Authorization"] == "Bearer secret"
    body = json.loads(seen[0].content)
    assert body["title"] == "Academy Reminder: A"
    assert body["require_interaction"] is True


@pytest.mark.asyncio
async def test_notify_failure_is_swallowed():
    """A rejected webhook post is logged, and the notification stays activatable."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    sink = WebhookNotificationSink("http://push.test/hook", transport=httpx.MockTransport(handler))
    sink.notify(_payload(), lambda: None)
    await sink.flush()
    assert sink.activate("n1") is True
