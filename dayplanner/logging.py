import importlib.util
from logging.config import dictConfig
from typing import Optional

from dayplanner.config import get_settings

# ---------------------------------------------------
# Colorlog Availability Check
# ---------------------------------------------------
COLORLOG_AVAILABLE = importlib.util.find_spec("colorlog") is not None

# Loggers owned by the reminder engine
REMINDER_LOGGERS = (
    "reminder_scheduler",
    "reminder_controller",
    "reminder_ledger",
    "reminder_effects",
    "reminder_session",
)


def build_logging_config(level: Optional[str] = None) -> dict:
    level = (level or get_settings().log_level).upper()
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            },
            "color": (
                {
                    "()": "colorlog.ColoredFormatter",
                    "format": "%(log_color)s%(asctime)s %(levelname)s [%(name)s] %(message)s",
                    "log_colors": {
                        "DEBUG": "cyan",
                        "INFO": "green",
                        "WARNING": "yellow",
                        "ERROR": "red",
                        "CRITICAL": "bold_red",
                    },
                }
                if COLORLOG_AVAILABLE
                else {}
            ),
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "color" if COLORLOG_AVAILABLE else "default",
                "level": level,
            },
        },
        "loggers": {
            # Silence uvicorn noise in console
            "uvicorn": {"level": "WARNING"},
            "uvicorn.access": {"level": "WARNING"},
            # APScheduler logs every job execution at INFO; the loop ticks every second
            "apscheduler": {"level": "WARNING"},
            "httpx": {"level": "WARNING"},
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    }
    for name in REMINDER_LOGGERS:
        config["loggers"][name] = {"level": level}
    return config


# ---------------------------------------------------
# Initialize Logging
# ---------------------------------------------------
def init_logging(level: Optional[str] = None) -> None:
    dictConfig(build_logging_config(level))
