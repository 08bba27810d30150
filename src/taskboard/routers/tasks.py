from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ..auth import get_current_user
from ..dependencies import (
    authorized_task,
    get_app_settings,
    get_policies,
    get_repo,
    get_weather_service,
)
from ..errors import NotFoundError
from ..models import TaskEntity, User
from ..policies import PolicyRegistry
from ..repositories import ListQuery, Repository
from ..schemas import (
    TASK_FORM,
    Message,
    TaskCreate,
    TaskEdit,
    TaskForm,
    TaskIndex,
    TaskMessage,
    TaskOut,
    TaskPage,
    TaskUpdate,
    WeatherOut,
)
from ..settings import Settings
from ..utils import pagination_envelope
from ..weather import WeatherService

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
)

_not_found = {404: {"description": "Task not found"}}
_forbidden = {403: {"description": "Task belongs to another user"}}


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TaskIndex,
    summary="List Tasks",
    description=(
        "The caller's tasks, newest first, in fixed-size pages, together with the "
        "current weather for the default city. The weather fields are null when "
        "weather data is unavailable."
    ),
)
def list_tasks(
    page: int = Query(1, ge=1, description="1-based page number"),
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repo),
    policies: PolicyRegistry = Depends(get_policies),
    weather_service: WeatherService = Depends(get_weather_service),
    settings: Settings = Depends(get_app_settings),
) -> TaskIndex:
    policies.authorize(user, "list", "task")
    per_page = settings.tasks_per_page
    items, total = repo.list_for_owner(ListQuery(owner_id=user.id, page=page, per_page=per_page))
    envelope = pagination_envelope(
        items=[TaskOut(**it) for it in items],  # type: ignore[arg-type]
        total=total,
        page=page,
        per_page=per_page,
    )

    snapshot = weather_service.get_current_weather(settings.weather_default_city)
    return TaskIndex(
        tasks=TaskPage(**envelope),
        weather=WeatherOut(**snapshot) if snapshot else None,
        weather_icon_url=weather_service.icon_url(snapshot["icon"]) if snapshot else None,
    )


# PUBLIC_INTERFACE
@router.get(
    "/create",
    response_model=TaskForm,
    summary="Task Form",
    description="Describe the fields accepted when creating a task.",
)
def create_form(user: User = Depends(get_current_user)) -> TaskForm:
    return TASK_FORM


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskMessage,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a task owned by the caller. Any owner_id in the payload is ignored.",
    responses={422: {"description": "Validation error"}},
)
def create_task(
    payload: TaskCreate,
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repo),
    policies: PolicyRegistry = Depends(get_policies),
) -> TaskMessage:
    policies.authorize(user, "create", "task")
    created = repo.create(user.id, payload)
    return TaskMessage(message="Task created successfully.", task=TaskOut(**created))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    responses={**_forbidden, **_not_found},
)
def show_task(task: TaskEntity = Depends(authorized_task("view"))) -> TaskOut:
    return TaskOut(**task)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}/edit",
    response_model=TaskEdit,
    summary="Edit Task Form",
    description="The task's current values and the fields an update accepts.",
    responses={**_forbidden, **_not_found},
)
def edit_task(task: TaskEntity = Depends(authorized_task("update"))) -> TaskEdit:
    return TaskEdit(task=TaskOut(**task), form=TASK_FORM)  # type: ignore[arg-type]


def _apply_update(repo: Repository, task: TaskEntity, update: TaskUpdate) -> TaskMessage:
    updated = repo.update(task["id"], update)
    if updated is None:
        # Deleted between lookup and write.
        raise NotFoundError()
    return TaskMessage(message="Task updated successfully.", task=TaskOut(**updated))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskMessage,
    summary="Replace Task",
    description="Replace every editable field; omitted optional fields fall back to their defaults.",
    responses={**_forbidden, **_not_found},
)
def put_task(
    payload: TaskCreate,
    task: TaskEntity = Depends(authorized_task("update")),
    repo: Repository = Depends(get_repo),
) -> TaskMessage:
    return _apply_update(repo, task, TaskUpdate.replacing(payload))


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=TaskMessage,
    summary="Update Task",
    description="Update only the fields present in the payload.",
    responses={**_forbidden, **_not_found},
)
def patch_task(
    payload: TaskUpdate,
    task: TaskEntity = Depends(authorized_task("update")),
    repo: Repository = Depends(get_repo),
) -> TaskMessage:
    return _apply_update(repo, task, payload)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=Message,
    summary="Delete Task",
    responses={**_forbidden, **_not_found},
)
def delete_task(
    task: TaskEntity = Depends(authorized_task("delete")),
    repo: Repository = Depends(get_repo),
) -> Message:
    if not repo.delete(task["id"]):
        raise NotFoundError()
    return Message(message="Task deleted successfully.")


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=TaskMessage,
    summary="Toggle Task",
    description="Flip the task between completed and pending.",
    responses={**_forbidden, **_not_found},
)
def toggle_task(
    task: TaskEntity = Depends(authorized_task("update")),
    repo: Repository = Depends(get_repo),
) -> TaskMessage:
    updated = repo.update(task["id"], TaskUpdate(completed=not task["completed"]))
    if updated is None:
        raise NotFoundError()
    phrase = "completed" if updated["completed"] else "marked as pending"
    return TaskMessage(message=f"Task {phrase} successfully.", task=TaskOut(**updated))  # type: ignore[arg-type]
