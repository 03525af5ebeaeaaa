from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_pattern(raw: str) -> List[int]:
    """Parse a comma-separated list of millisecond durations."""
    return [int(p.strip()) for p in raw.split(",") if p.strip().isdigit()]


class Settings(BaseSettings):
    # App environment
    env: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Reminder loop
    reminder_tick_seconds: int = Field(default=1, ge=1, alias="REMINDER_TICK_SECONDS")
    reminder_ledger_prune: bool = Field(default=False, alias="REMINDER_LEDGER_PRUNE")  # Drop fired keys from past days
    reminder_autostart: bool = Field(default=False, alias="REMINDER_AUTOSTART")  # Start a session on app startup

    # Sounds
    alarm_sound_url: str = Field(
        default="https://assets.mixkit.co/active_storage/sfx/2869/2869-preview.mp3",
        alias="ALARM_SOUND_URL",
    )

    # Vibration patterns (comma-separated on/off milliseconds)
    alarm_vibration_pattern: str = Field(default="800,200,800,200,800,200,800", alias="ALARM_VIBRATION_PATTERN")
    notification_vibration_pattern: str = Field(default="200,100,200,100,200", alias="NOTIFICATION_VIBRATION_PATTERN")

    # System notification
    notifications_enabled: bool = Field(default=True, alias="NOTIFICATIONS_ENABLED")
    notification_title_prefix: str = Field(default="Academy Reminder: ", alias="NOTIFICATION_TITLE_PREFIX")
    notification_default_body: str = Field(
        default="It's time for your scheduled event.", alias="NOTIFICATION_DEFAULT_BODY"
    )
    notification_icon_url: str = Field(
        default="https://cdn-icons-png.flaticon.com/512/906/906334.png", alias="NOTIFICATION_ICON_URL"
    )
    notification_push_url: Optional[str] = Field(default=None, alias="NOTIFICATION_PUSH_URL")
    notification_push_token: Optional[str] = Field(default=None, alias="NOTIFICATION_PUSH_TOKEN")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def alarm_pattern(self) -> List[int]:
        return parse_pattern(self.alarm_vibration_pattern)

    def notification_pattern(self) -> List[int]:
        return parse_pattern(self.notification_vibration_pattern)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
