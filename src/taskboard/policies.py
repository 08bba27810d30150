"""
Who may do what to which resource.

Abilities are plain predicates ``(user, resource) -> bool`` grouped per
resource type in a ``PolicyRegistry``. The registry is built once by the
application factory and handed to request handlers.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from .errors import AuthorizationError
from .models import TaskEntity, User

Ability = Callable[[User, Optional[Any]], bool]


def _owns(user: User, task: Optional[TaskEntity]) -> bool:
    return task is not None and user.id == task["owner_id"]


# PUBLIC_INTERFACE
def can_view(user: User, task: Optional[TaskEntity]) -> bool:
    return _owns(user, task)


# PUBLIC_INTERFACE
def can_update(user: User, task: Optional[TaskEntity]) -> bool:
    return _owns(user, task)


# PUBLIC_INTERFACE
def can_delete(user: User, task: Optional[TaskEntity]) -> bool:
    return _owns(user, task)


# PUBLIC_INTERFACE
def can_create(user: User, task: Optional[TaskEntity] = None) -> bool:
    """Any authenticated user may create tasks; they always own them."""
    return True


# PUBLIC_INTERFACE
def can_list_own(user: User, task: Optional[TaskEntity] = None) -> bool:
    """Listing is always scoped to the caller's own tasks."""
    return True


TASK_ABILITIES: Dict[str, Ability] = {
    "view": can_view,
    "update": can_update,
    "delete": can_delete,
    "create": can_create,
    "list": can_list_own,
}


# PUBLIC_INTERFACE
class PolicyRegistry:
    """
    Maps a resource type (e.g. ``"task"``) to its ability table.

    Unknown resource types and unknown abilities are denied.
    """

    def __init__(self, policies: Mapping[str, Mapping[str, Ability]]) -> None:
        self._policies = {name: dict(abilities) for name, abilities in policies.items()}

    def allows(self, user: User, ability: str, resource_type: str, resource: Optional[Any] = None) -> bool:
        check = self._policies.get(resource_type, {}).get(ability)
        if check is None:
            return False
        return bool(check(user, resource))

    def authorize(self, user: User, ability: str, resource_type: str, resource: Optional[Any] = None) -> None:
        """
        Raise AuthorizationError unless user may perform ability on resource.
        """
        if not self.allows(user, ability, resource_type, resource):
            raise AuthorizationError()


# PUBLIC_INTERFACE
def build_policy_registry() -> PolicyRegistry:
    """Return the registry with every resource type the application knows."""
    return PolicyRegistry({"task": TASK_ABILITIES})
