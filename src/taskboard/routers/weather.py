from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth import get_current_user
from ..dependencies import get_app_settings, get_weather_service
from ..errors import ExternalServiceError
from ..models import User
from ..schemas import WeatherOut
from ..settings import Settings
from ..weather import WeatherService

router = APIRouter(
    prefix="/api/weather",
    tags=["weather"],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=WeatherOut,
    summary="Current Weather",
    description="Current conditions for a city (default city when omitted).",
    responses={500: {"description": "Weather data could not be fetched"}},
)
def current_weather(
    city: Optional[str] = Query(None, description="City name, e.g. 'London'"),
    user: User = Depends(get_current_user),
    weather_service: WeatherService = Depends(get_weather_service),
    settings: Settings = Depends(get_app_settings),
) -> WeatherOut:
    snapshot = weather_service.get_current_weather((city or "").strip() or settings.weather_default_city)
    if snapshot is None:
        raise ExternalServiceError()
    return WeatherOut(**snapshot)
