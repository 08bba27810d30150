"""
FastAPI dependencies exposing the collaborators built by ``create_app``.

Everything a handler needs (settings, repository, policies, weather service)
lives on ``app.state`` and is injected from there, never read from module
globals.
"""
from __future__ import annotations

from typing import Callable

from fastapi import Depends, Path, Request

from .auth import get_current_user
from .errors import AuthorizationError, NotFoundError
from .models import TaskEntity, User
from .policies import PolicyRegistry
from .repositories import Repository
from .settings import Settings
from .weather import WeatherService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repo(request: Request) -> Repository:
    return request.app.state.repository


def get_policies(request: Request) -> PolicyRegistry:
    return request.app.state.policies


def get_weather_service(request: Request) -> WeatherService:
    return request.app.state.weather


# PUBLIC_INTERFACE
def get_task_or_404(
    task_id: str = Path(..., description="Id of the task"),
    repo: Repository = Depends(get_repo),
) -> TaskEntity:
    """
    Resolve the path id to its task before any handler logic runs.

    Ids that are not integers cannot name a task and get the same 404 as
    unknown ones.

    Raises:
        NotFoundError (404) if no task has this id.
    """
    try:
        key = int(task_id)
    except ValueError:
        raise NotFoundError() from None
    task = repo.get(key)
    if task is None:
        raise NotFoundError()
    return task


# PUBLIC_INTERFACE
def authorized_task(ability: str) -> Callable[..., TaskEntity]:
    """
    Build a dependency returning the path's task once the caller may perform
    ability on it.

    A denial is a 403, or the same 404 as a missing id when the
    conceal_foreign_tasks setting is on.
    """

    def _dependency(
        user: User = Depends(get_current_user),
        task: TaskEntity = Depends(get_task_or_404),
        policies: PolicyRegistry = Depends(get_policies),
        settings: Settings = Depends(get_app_settings),
    ) -> TaskEntity:
        try:
            policies.authorize(user, ability, "task", task)
        except AuthorizationError:
            if settings.conceal_foreign_tasks:
                raise NotFoundError() from None
            raise
        return task

    return _dependency
