from datetime import datetime

import pytest

from taskboard.errors import AuthorizationError
from taskboard.models import User
from taskboard.policies import (
    PolicyRegistry,
    build_policy_registry,
    can_create,
    can_delete,
    can_list_own,
    can_update,
    can_view,
)

ALICE = User(id=1, name="alice")
BOB = User(id=2, name="bob")


def make_task(owner_id=1):
    now = datetime.now()
    return {
        "id": 10,
        "owner_id": owner_id,
        "title": "Buy milk",
        "description": None,
        "completed": False,
        "created_at": now,
        "updated_at": now,
    }


@pytest.mark.parametrize("check", [can_view, can_update, can_delete])
def test_owner_only_abilities(check):
    task = make_task(owner_id=ALICE.id)
    assert check(ALICE, task) is True
    assert check(BOB, task) is False


@pytest.mark.parametrize("check", [can_view, can_update, can_delete])
def test_no_task_means_no_access(check):
    assert check(ALICE, None) is False


def test_create_and_list_open_to_any_user():
    assert can_create(BOB) is True
    assert can_list_own(BOB) is True


class TestPolicyRegistry:
    def test_authorize_passes_for_owner(self):
        registry = build_policy_registry()
        registry.authorize(ALICE, "view", "task", make_task(owner_id=1))

    def test_authorize_raises_generic_error(self):
        registry = build_policy_registry()
        with pytest.raises(AuthorizationError) as excinfo:
            registry.authorize(BOB, "delete", "task", make_task(owner_id=1))
        assert excinfo.value.status_code == 403
        assert excinfo.value.message == "This action is unauthorized."

    def test_unknown_ability_or_resource_denied(self):
        registry = build_policy_registry()
        assert registry.allows(ALICE, "archive", "task", make_task()) is False
        assert registry.allows(ALICE, "view", "project", make_task()) is False

    def test_custom_registration(self):
        registry = PolicyRegistry({"note": {"view": lambda user, note: user.name == "bob"}})
        assert registry.allows(BOB, "view", "note") is True
        assert registry.allows(ALICE, "view", "note") is False
