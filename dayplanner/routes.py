import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request

from dayplanner import schemas
from dayplanner.config import get_settings
from dayplanner.features.reminders import ReminderSession, SessionManager, WebhookNotificationSink
from dayplanner.services.task_store import TaskStore

logger = logging.getLogger("routes")
router = APIRouter(tags=["Core"])


def _tasks(request: Request) -> TaskStore:
    return request.app.state.tasks


def _sessions(request: Request) -> SessionManager:
    return request.app.state.reminders


def _require_session(request: Request) -> ReminderSession:
    session = _sessions(request).session
    if session is None:
        raise HTTPException(status_code=409, detail="No reminder session running")
    return session


def _session_out(session: Optional[ReminderSession]) -> schemas.SessionOut:
    if session is None:
        return schemas.SessionOut(running=False)
    return schemas.SessionOut(
        running=session.running,
        fired_count=len(session.ledger),
        editing_task_id=session.editing_task_id,
    )


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
@router.post("/session/start", response_model=schemas.SessionOut)
async def start_session(request: Request):
    settings = get_settings()
    session = _sessions(request).start(
        _tasks(request).list,
        effects=request.app.state.build_effects(settings),
        settings=settings,
        clock=request.app.state.clock,
    )
    return _session_out(session)


@router.post("/session/end", response_model=schemas.SessionOut)
async def end_session(request: Request):
    if not _sessions(request).end():
        logger.warning("Session end requested but no session was running")
    return _session_out(None)


@router.get("/session", response_model=schemas.SessionOut)
async def get_session(request: Request):
    return _session_out(_sessions(request).session)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------
@router.get("/tasks", response_model=schemas.TaskList)
async def get_tasks(request: Request, q: Optional[str] = None):
    tasks = _tasks(request).search(q) if q else _tasks(request).list()
    return {"count": len(tasks), "tasks": tasks}


@router.put("/tasks", response_model=schemas.TaskList)
async def replace_tasks(request: Request, tasks: List[schemas.Task]):
    _tasks(request).replace(tasks)
    return {"count": len(tasks), "tasks": tasks}


@router.post("/tasks", response_model=schemas.Task)
async def upsert_task(request: Request, task: schemas.Task):
    return _tasks(request).upsert(task)


@router.post("/tasks/{task_id}/toggle", response_model=schemas.Task)
async def toggle_task(request: Request, task_id: str):
    task = _tasks(request).toggle(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.delete("/tasks/{task_id}")
async def delete_task(request: Request, task_id: str):
    if not _tasks(request).delete(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"status": "deleted", "task_id": task_id}


# ---------------------------------------------------------------------------
# Reminders
# ---------------------------------------------------------------------------
@router.get("/reminders/active", response_model=schemas.ActiveReminderOut)
async def get_active_reminder(request: Request):
    session = _sessions(request).session
    if session is None:
        return schemas.ActiveReminderOut(state=schemas.ReminderState.idle, active=False)

    controller = session.controller
    audio = session.effects.audio
    return schemas.ActiveReminderOut(
        state=controller.state,
        active=controller.is_active,
        task=controller.active,
        audio=schemas.AudioStateOut(
            source=getattr(audio, "source", None),
            loop=getattr(audio, "loop", False),
            playing=getattr(audio, "playing", False),
            position=getattr(audio, "position", 0.0),
        ),
        vibration=list(getattr(session.effects.vibration, "pattern", [])),
    )


@router.post("/reminders/dismiss", response_model=schemas.ReminderActionOut)
async def dismiss_reminder(request: Request):
    task = _require_session(request).controller.dismiss()
    if task is None:
        return {"status": "idle", "task_id": None, "handled": False}
    return {"status": "dismissed", "task_id": task.id, "handled": True}


@router.post("/reminders/view", response_model=schemas.ReminderActionOut)
async def view_reminder(request: Request):
    task = _require_session(request).controller.view()
    if task is None:
        return {"status": "idle", "task_id": None, "handled": False}
    return {"status": "viewed", "task_id": task.id, "handled": True}


@router.post("/reminders/back", response_model=schemas.ReminderActionOut)
async def back_navigation(request: Request):
    session = _sessions(request).session
    task = session.controller.active if session else None
    if task is None or not session.controller.back():
        # Nothing to dismiss; the client handles navigation itself
        return {"status": "idle", "task_id": None, "handled": False}
    return {"status": "dismissed", "task_id": task.id, "handled": True}


@router.post("/reminders/notifications/{notification_id}/activate", response_model=schemas.ReminderActionOut)
async def activate_notification(request: Request, notification_id: str):
    session = _require_session(request)
    sink = session.effects.notifications
    if not isinstance(sink, WebhookNotificationSink) or not sink.activate(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"status": "viewed", "task_id": session.editing_task_id, "handled": True}
