from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - AUTH_USERS: comma-separated 'name:password' pairs allowed to sign in with HTTP Basic
    - CONCEAL_FOREIGN_TASKS: 'true' to answer 404 instead of 403 for other users' tasks
    - TASKS_PER_PAGE: page size of the task list (default 10)
    - OPENWEATHER_API_KEY: OpenWeatherMap key; weather is disabled when unset
    - OPENWEATHER_URL: current-weather endpoint
    - WEATHER_DEFAULT_CITY: city shown on the task list (default 'London')
    - WEATHER_CACHE_TTL: seconds a weather snapshot stays cached (default 600)
    - WEATHER_TIMEOUT_SECONDS: upstream request timeout (default 5)
    - LOG_LEVEL: root log level for the server entry point (default INFO)
    """

    persistence_backend: str = "memory"
    sqlite_db_path: str = "./data/tasks.db"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    auth_users: Tuple[Tuple[str, str], ...] = ()
    conceal_foreign_tasks: bool = False
    tasks_per_page: int = 10
    openweather_api_key: Optional[str] = None
    openweather_url: str = "https://api.openweathermap.org/data/2.5/weather"
    weather_default_city: str = "London"
    weather_cache_ttl: int = 600
    weather_timeout_seconds: float = 5.0
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_positive_int(value: str, default: int) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_positive_float(value: str, default: float) -> float:
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    # Rejects nan and inf as well as non-positive values.
    return parsed if 0 < parsed < float("inf") else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_users(users_value: str) -> Tuple[Tuple[str, str], ...]:
    """
    Parse 'alice:secret,bob:hunter2' into ((name, password), ...).

    Entries without a colon, or with an empty name or password, are skipped.
    Passwords may contain colons; only the first one separates the name.
    """
    users = []
    for entry in users_value.split(","):
        name, sep, password = entry.strip().partition(":")
        if sep and name.strip() and password:
            users.append((name.strip(), password))
    return tuple(users)


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        backend = "memory"

    api_key = os.getenv("OPENWEATHER_API_KEY", "").strip() or None

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasks.db").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        auth_users=_parse_users(_get_env("AUTH_USERS", "")),
        conceal_foreign_tasks=_parse_bool(_get_env("CONCEAL_FOREIGN_TASKS", "false"), False),
        tasks_per_page=_parse_positive_int(_get_env("TASKS_PER_PAGE", "10"), 10),
        openweather_api_key=api_key,
        openweather_url=_get_env(
            "OPENWEATHER_URL", "https://api.openweathermap.org/data/2.5/weather"
        ).strip(),
        weather_default_city=_get_env("WEATHER_DEFAULT_CITY", "London").strip(),
        weather_cache_ttl=_parse_positive_int(_get_env("WEATHER_CACHE_TTL", "600"), 600),
        weather_timeout_seconds=_parse_positive_float(_get_env("WEATHER_TIMEOUT_SECONDS", "5"), 5.0),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
