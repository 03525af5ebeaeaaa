"""
Side-effect sinks engaged by the reminder controller: alarm audio, vibration, system notification.
"""
import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Set

import httpx

from dayplanner.schemas import NotificationPayload

logger = logging.getLogger("reminder_effects")

ActivateCallback = Callable[[], None]


class AudioSink(Protocol):
    loop: bool

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def reset(self) -> None: ...


class VibrationSink(Protocol):
    def vibrate(self, pattern: List[int]) -> None: ...

    def cancel(self) -> None: ...


class NotificationSink(Protocol):
    def permitted(self) -> bool: ...

    def notify(self, payload: NotificationPayload, on_activate: ActivateCallback) -> None: ...

    def discard(self, notification_id: str) -> None: ...

    def clear(self) -> None: ...


@dataclass
class ReminderEffects:
    audio: AudioSink
    vibration: VibrationSink
    notifications: NotificationSink


# ---------------------------------------------------------------------------
# Client-mirrored sinks
# ---------------------------------------------------------------------------
class AlarmAudio:
    """Audio control whose state the client polls and mirrors."""

    def __init__(self, source: Optional[str] = None, loop: bool = True):
        self.source = source
        self.loop = loop
        self.playing = False
        self.position = 0.0

    def play(self) -> None:
        self.playing = True
        logger.debug("Alarm playing (%s, loop=%s)", self.source, self.loop)

    def pause(self) -> None:
        self.playing = False

    def reset(self) -> None:
        self.position = 0.0


class DeviceVibration:
    """Holds the vibration pattern currently engaged; an empty pattern means stopped."""

    def __init__(self):
        self.pattern: List[int] = []

    def vibrate(self, pattern: List[int]) -> None:
        self.pattern = list(pattern)

    def cancel(self) -> None:
        self.pattern = []


# ---------------------------------------------------------------------------
# Webhook notifications
# ---------------------------------------------------------------------------
class WebhookNotificationSink:
    """Posts notifications to a push URL and routes activations back to the controller."""

    def __init__(
        self,
        push_url: Optional[str],
        token: Optional[str] = None,
        *,
        enabled: bool = True,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.push_url = push_url
        self.token = token
        self.enabled = enabled
        self.timeout = timeout
        self.transport = transport
        self._callbacks: Dict[str, ActivateCallback] = {}
        self._pending: Set[asyncio.Task] = set()
        self._lock = threading.Lock()

    def permitted(self) -> bool:
        return self.enabled and bool(self.push_url)

    def notify(self, payload: NotificationPayload, on_activate: ActivateCallback) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; notification %s not sent", payload.notification_id)
            return
        task = loop.create_task(self._post(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        with self._lock:
            self._callbacks[payload.notification_id] = on_activate

    async def _post(self, payload: NotificationPayload) -> None:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(self.push_url, json=payload.model_dump(), headers=headers)
                resp.raise_for_status()
                logger.info("Notification %s sent (%s)", payload.notification_id, resp.status_code)
        except httpx.HTTPStatusError as e:
            logger.warning("Notification %s rejected (%s)", payload.notification_id, e.response.status_code)
        except Exception as e:
            logger.warning("Notification %s failed: %s", payload.notification_id, e)

    async def flush(self) -> None:
        """Wait for in-flight notification requests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def activate(self, notification_id: str) -> bool:
        """Run the activation callback for a notification once. Returns False if unknown."""
        with self._lock:
            callback = self._callbacks.pop(notification_id, None)
        if callback is None:
            logger.warning("Unknown or already activated notification %s", notification_id)
            return False
        callback()
        return True

    def discard(self, notification_id: str) -> None:
        """Forget a notification whose reminder is no longer active."""
        with self._lock:
            self._callbacks.pop(notification_id, None)

    def clear(self) -> None:
        with self._lock:
            self._callbacks.clear()

    @property
    def awaiting_activation(self) -> int:
        with self._lock:
            return len(self._callbacks)


def new_notification_id() -> str:
    return str(uuid.uuid4())


def build_effects(settings) -> ReminderEffects:
    """Default sinks for a session, configured from settings."""
    return ReminderEffects(
        audio=AlarmAudio(source=settings.alarm_sound_url, loop=True),
        vibration=DeviceVibration(),
        notifications=WebhookNotificationSink(
            settings.notification_push_url,
            settings.notification_push_token,
            enabled=settings.notifications_enabled,
        ),
    )
