from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from .auth import UserDirectory, get_current_user
from .cache import Cache, InMemoryCache
from .errors import AppError
from .models import User
from .policies import PolicyRegistry, build_policy_registry
from .repositories import Repository, get_repository
from .routers import tasks as tasks_router
from .routers import weather as weather_router
from .settings import Settings, get_settings
from .weather import WeatherService

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, read, update, delete and toggle the caller's own tasks.",
    },
    {"name": "weather", "description": "Current weather conditions from OpenWeatherMap."},
]


def _field_messages(errors: List[dict]) -> Dict[str, List[str]]:
    """Group pydantic error messages by field name."""
    fields: Dict[str, List[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        # Drop the 'body' / 'query' / 'path' prefix when there is a field name after it.
        name = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        fields.setdefault(name or "request", []).append(str(err.get("msg", "")))
    return fields


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": [... pydantic/fastapi error details ...],
            "fields": {"title": ["..."], ...}
        }
    """
    errors = list(exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder([{k: v for k, v in e.items() if k != "ctx"} for e in errors]),
            "fields": _field_messages(errors),
        },
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError with its status code, payload and headers."""
    return JSONResponse(status_code=exc.status_code, content=exc.payload(), headers=exc.headers())


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[Repository] = None,
    cache: Optional[Cache] = None,
    http_client: Optional[httpx.Client] = None,
    policies: Optional[PolicyRegistry] = None,
) -> FastAPI:
    """
    Build the application and its collaborators.

    Anything not passed in is built from settings (read from the environment
    when settings is omitted). Collaborators are stored on ``app.state`` and
    injected into handlers through ``taskboard.dependencies``.
    """
    settings = settings or get_settings()
    weather = WeatherService(
        api_key=settings.openweather_api_key,
        cache=cache if cache is not None else InMemoryCache(),
        http_client=http_client,
        url=settings.openweather_url,
        timeout=settings.weather_timeout_seconds,
        ttl_seconds=settings.weather_cache_ttl,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        weather.close()

    app = FastAPI(
        title="Taskboard Backend",
        description="Personal task lists with a current-weather panel.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.repository = repository if repository is not None else get_repository(settings)
    app.state.policies = policies if policies is not None else build_policy_registry()
    app.state.users = UserDirectory(settings.auth_users)
    app.state.weather = weather

    if not app.state.users:
        logger.warning("AUTH_USERS is empty; every request will be rejected as unauthenticated")
    if not weather.configured:
        logger.warning("OPENWEATHER_API_KEY is not set; the weather panel is disabled")

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]

    # PUBLIC_INTERFACE
    @app.get("/health", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {
            "message": "Healthy",
            "backend": settings.persistence_backend,
            "weather": weather.configured,
        }

    @app.get("/", include_in_schema=False)
    def home() -> RedirectResponse:
        return RedirectResponse(url="/tasks")

    @app.get("/dashboard", include_in_schema=False)
    def dashboard(user: User = Depends(get_current_user)) -> RedirectResponse:
        return RedirectResponse(url="/tasks")

    app.include_router(tasks_router.router)
    app.include_router(weather_router.router)
    return app


app = create_app()
