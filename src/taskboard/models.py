from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A lightweight domain model representing a Task for the storage backends.

    Fields:
    - id: Unique integer identifier, assigned by the store
    - owner_id: Id of the user who created the task; never changes
    - title: Short title (1..255 chars, trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Boolean completion flag
    - created_at: Creation timestamp, set once
    - updated_at: Last mutation timestamp
    """

    id: int
    owner_id: int
    title: str
    description: Optional[str]
    completed: bool
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class User:
    """The authenticated caller of a request."""

    id: int
    name: str


# PUBLIC_INTERFACE
class WeatherSnapshot(TypedDict):
    """
    Normalized current conditions for a city, as kept in the cache.

    Temperatures are degrees Celsius rounded to whole numbers, wind speed is
    m/s rounded to one decimal.
    """

    city: str
    country: str
    temperature: int
    feels_like: int
    description: str
    icon: str
    humidity: int
    wind_speed: float
