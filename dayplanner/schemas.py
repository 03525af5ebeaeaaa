from datetime import date as Date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ItemType(str, Enum):
    task = "task"
    note = "note"


class ReminderState(str, Enum):
    idle = "idle"
    firing = "firing"


class CloseAction(str, Enum):
    dismissed = "dismissed"
    viewed = "viewed"


# ---------------------------------------------------------------------------
# Task Schemas
# ---------------------------------------------------------------------------
class Task(BaseModel):
    """A planner item as delivered by the data layer.

    Only ``date``, ``time``, ``reminder_minutes`` and ``completed`` matter to
    the reminder engine; ``time`` is kept as the raw ``HH:MM`` string so a
    malformed value makes the task ineligible instead of failing validation.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Opaque identifier, stable for the task's lifetime")
    title: str = Field("", description="Title shown in the reminder")
    type: ItemType = Field(ItemType.task, description="Timeline item kind")
    description: Optional[str] = Field(None, description="Free-form description")
    details: Optional[str] = Field(None, description="Details used as the notification body")
    date: Optional[Date] = Field(None, description="Local calendar date; absent means unscheduled")
    time: Optional[str] = Field(None, description="Local time of day as HH:MM")
    reminder_minutes: Optional[int] = Field(
        None, alias="reminderMinutes", description="Lead time in minutes before `time`"
    )
    completed: bool = Field(False, description="Completed tasks never remind")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value):
        # Remote stores often hand out integer keys
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class TaskList(BaseModel):
    count: int = Field(..., description="Total number of tasks returned")
    tasks: List[Task] = Field(..., description="List of tasks")


# ---------------------------------------------------------------------------
# Reminder Schemas
# ---------------------------------------------------------------------------
class NotificationPayload(BaseModel):
    notification_id: str = Field(..., description="Identifier used to route the activation back")
    task_id: str = Field(..., description="Task the notification is about")
    title: str = Field(..., description="Notification title")
    body: str = Field(..., description="Notification body")
    icon: Optional[str] = Field(None, description="Icon URL")
    require_interaction: bool = Field(True, description="Keep the notification until the user acts")
    vibrate: List[int] = Field(default_factory=list, description="On/off vibration pattern in ms")


class AudioStateOut(BaseModel):
    source: Optional[str] = None
    loop: bool = False
    playing: bool = False
    position: float = 0.0


class ActiveReminderOut(BaseModel):
    state: ReminderState = Field(..., description="Controller state")
    active: bool = Field(..., description="Whether a reminder currently occupies the slot")
    task: Optional[Task] = Field(None, description="Task occupying the slot")
    audio: AudioStateOut = Field(default_factory=AudioStateOut)
    vibration: List[int] = Field(default_factory=list, description="Vibration pattern currently engaged")


class ReminderActionOut(BaseModel):
    status: str = Field(..., description="Outcome of the action (e.g. 'dismissed')")
    task_id: Optional[str] = Field(None, description="Task the action applied to")
    handled: bool = Field(True, description="False when there was no active reminder")


class SessionOut(BaseModel):
    running: bool = Field(..., description="Whether the reminder loop is running")
    fired_count: int = Field(0, description="Occurrences fired during this session")
    editing_task_id: Optional[str] = Field(None, description="Task routed to editing by the last view")
