# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dayplanner import __version__
from dayplanner.config import get_settings
from dayplanner.features.reminders import SessionManager, build_effects
from dayplanner.logging import init_logging
from dayplanner.routes import router
from dayplanner.services.task_store import TaskStore

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
init_logging()
logger = logging.getLogger("main")


# ---------------------------------------------------------------------------
# App lifespan (startup/shutdown)
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the task store and the reminder session for the app's lifetime."""
    settings = get_settings()
    app.state.tasks = TaskStore()
    app.state.reminders = SessionManager()
    app.state.clock = None  # wall clock unless overridden
    app.state.build_effects = build_effects

    if settings.reminder_autostart:
        logger.info("Startup: starting reminder session...")
        try:
            app.state.reminders.start(
                app.state.tasks.list,
                effects=app.state.build_effects(settings),
                settings=settings,
                clock=app.state.clock,
            )
        except Exception as e:
            logger.error("Failed to start reminder session: %s", e)
    else:
        logger.info("Reminder session not autostarted (REMINDER_AUTOSTART not set)")

    yield  # app runs during this block

    logger.info("Shutdown: ending reminder session...")
    try:
        app.state.reminders.end()
    except Exception as e:
        logger.error("Error ending reminder session: %s", e)


# ---------------------------------------------------------------------------
# FastAPI Application
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Day Planner - Reminders",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Health"])
async def root():
    """Basic health check to verify the service is running."""
    return {"status": "ok", "message": "Day planner reminders are running."}


app.include_router(router)
