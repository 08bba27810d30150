from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TITLE_MAX_LENGTH = 255


def _clean_title(value: str) -> str:
    s = value.strip()
    if not s:
        raise ValueError("The title field is required.")
    if len(s) > TITLE_MAX_LENGTH:
        raise ValueError(f"The title may not be greater than {TITLE_MAX_LENGTH} characters.")
    return s


def _clean_description(value: Optional[str]) -> Optional[str]:
    # Blank descriptions are stored as null.
    if value is None:
        return None
    s = value.strip()
    return s or None


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a Task, also used for full replacement (PUT).

    Unknown fields, including any client-supplied owner_id, are ignored:
    the owner always comes from the authenticated caller.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Two litres, semi-skimmed",
                "completed": False,
            }
        },
    )

    title: str = Field(..., description="Short title for the task", min_length=1)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Strip whitespace and enforce 1..255 length."""
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _clean_description(v)


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for partially updating a Task (PATCH).
    Only fields present in the payload are applied.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": {"title": "Buy oat milk", "completed": True}},
    )

    title: Optional[str] = Field(default=None, description="Short title for the task", min_length=1)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("The title field is required.")
        return _clean_title(v)

    @field_validator("completed")
    @classmethod
    def validate_completed(cls, v: Optional[bool]) -> Optional[bool]:
        if v is None:
            raise ValueError("The completed field must be true or false.")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _clean_description(v)

    @classmethod
    def replacing(cls, payload: TaskCreate) -> "TaskUpdate":
        """Turn a full create-style payload into an update touching every field."""
        return cls(
            title=payload.title,
            description=payload.description,
            completed=payload.completed,
        )

    def changes(self) -> Dict[str, Any]:
        """Return only the fields explicitly provided by the client."""
        return {name: getattr(self, name) for name in self.model_fields_set}


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a Task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 7,
                "owner_id": 1,
                "title": "Buy milk",
                "description": None,
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456",
                "updated_at": "2025-01-25T10:15:30.123456",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the task")
    owner_id: int = Field(..., description="Id of the owning user")
    title: str = Field(..., description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class TaskMessage(BaseModel):
    """Outcome of a mutating request: a human-readable message and the task."""

    message: str
    task: TaskOut


class Message(BaseModel):
    message: str


class TaskPage(BaseModel):
    """
    Envelope for one page of the caller's tasks.
    """

    items: List[TaskOut] = Field(..., description="Tasks on this page, newest first")
    total: int = Field(..., description="Total number of the caller's tasks")
    page: int = Field(..., description="1-based page number")
    per_page: int = Field(..., description="Page size")
    last_page: int = Field(..., description="Number of the last page (at least 1)")


# PUBLIC_INTERFACE
class WeatherOut(BaseModel):
    """Current weather conditions for a city."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "city": "London",
                "country": "GB",
                "temperature": 12,
                "feels_like": 10,
                "description": "Light rain",
                "icon": "10d",
                "humidity": 81,
                "wind_speed": 4.1,
            }
        }
    )

    city: str
    country: str
    temperature: int = Field(..., description="Degrees Celsius")
    feels_like: int = Field(..., description="Degrees Celsius")
    description: str
    icon: str = Field(..., description="OpenWeatherMap icon code")
    humidity: int = Field(..., description="Relative humidity in percent")
    wind_speed: float = Field(..., description="Metres per second")


class TaskIndex(BaseModel):
    """The task list view: a page of tasks plus the weather panel."""

    tasks: TaskPage
    weather: Optional[WeatherOut] = None
    weather_icon_url: Optional[str] = None


class FormField(BaseModel):
    name: str
    type: str
    required: bool
    max_length: Optional[int] = None


class TaskForm(BaseModel):
    """Describes the fields a task form submits."""

    fields: List[FormField]


class TaskEdit(BaseModel):
    task: TaskOut
    form: TaskForm


TASK_FORM = TaskForm(
    fields=[
        FormField(name="title", type="string", required=True, max_length=TITLE_MAX_LENGTH),
        FormField(name="description", type="string", required=False),
        FormField(name="completed", type="boolean", required=False),
    ]
)
