"""Unit tests for the task access-control rules"""

from types import SimpleNamespace

import pytest

from workforce.exceptions import ForbiddenError, NotFoundError
from workforce.models import Role, Task
from workforce.utils.access_control import (
    PRIVILEGED_ROLES,
    can_access,
    can_delete,
    can_reassign,
    check_task_access,
    is_privileged,
    visibility_filter,
)


def actor(id_, role):
    return SimpleNamespace(id=id_, role=role)


def task(created_by, assigned_to=None, deleted_at=None):
    return SimpleNamespace(created_by=created_by, assigned_to=assigned_to, deleted_at=deleted_at)


class TestCanAccess:
    @pytest.mark.parametrize("role", ["admin", "manager", Role.ADMIN, Role.MANAGER])
    def test_privileged_roles_always_allowed(self, role):
        decision = can_access(99, role, owner_id=1, assignee_id=2)
        assert decision.allowed
        assert decision.reason is None

    def test_owner_allowed(self):
        assert can_access(1, "employee", owner_id=1, assignee_id=None).allowed

    def test_assignee_allowed(self):
        assert can_access(2, "employee", owner_id=1, assignee_id=2).allowed

    def test_stranger_denied_with_reason(self):
        decision = can_access(3, "employee", owner_id=1, assignee_id=2)
        assert not decision
        assert decision.reason == "access denied"
        assert decision.status_code == 403

    def test_unassigned_task_does_not_match_missing_actor(self):
        assert not can_access(3, "employee", owner_id=1, assignee_id=None).allowed


class TestCanReassign:
    def test_privileged_may_assign_anyone(self):
        assert can_reassign(1, "manager", current_assignee_id=2, new_assignee_id=3).allowed

    def test_employee_may_assign_self(self):
        assert can_reassign(1, "employee", current_assignee_id=None, new_assignee_id=1).allowed

    def test_employee_cannot_assign_third_party(self):
        decision = can_reassign(1, "employee", current_assignee_id=None, new_assignee_id=5)
        assert not decision.allowed
        assert decision.status_code == 403

    def test_employee_cannot_move_assignment_away_from_self(self):
        assert not can_reassign(1, "employee", current_assignee_id=1, new_assignee_id=2).allowed

    def test_creator_cannot_unassign_self(self):
        assert not can_reassign(1, "employee", current_assignee_id=1, new_assignee_id=None).allowed

    def test_no_op_is_allowed(self):
        assert can_reassign(1, "employee", current_assignee_id=7, new_assignee_id=7).allowed


class TestCanDelete:
    def test_creator_may_delete(self):
        assert can_delete(1, "employee", owner_id=1).allowed

    def test_assignee_alone_may_not_delete(self):
        assert not can_delete(2, "employee", owner_id=1).allowed

    def test_manager_may_delete(self):
        assert can_delete(2, "manager", owner_id=1).allowed


def test_privileged_roles_are_admin_and_manager():
    assert PRIVILEGED_ROLES == {"admin", "manager"}
    assert is_privileged(Role.ADMIN)
    assert not is_privileged(Role.EMPLOYEE)
    assert not is_privileged("superuser")


def test_visibility_filter_is_none_for_privileged():
    assert visibility_filter(actor(1, "admin"), Task.created_by, Task.assigned_to) is None


def test_visibility_filter_restricts_employee_to_owned_or_assigned():
    predicate = visibility_filter(actor(4, "employee"), Task.created_by, Task.assigned_to)
    sql = str(predicate.compile(compile_kwargs={"literal_binds": True}))
    assert "tasks.created_by = 4" in sql
    assert "tasks.assigned_to = 4" in sql
    assert " OR " in sql


class TestCheckTaskAccess:
    def test_missing_task_is_not_found(self):
        with pytest.raises(NotFoundError):
            check_task_access(None, actor(1, "admin"))

    def test_soft_deleted_task_is_not_found_even_for_admin(self):
        with pytest.raises(NotFoundError):
            check_task_access(task(1, deleted_at="2024-01-01"), actor(1, "admin"))

    def test_existing_but_forbidden_task(self):
        with pytest.raises(ForbiddenError) as exc_info:
            check_task_access(task(1, 2), actor(3, "employee"))
        assert exc_info.value.status_code == 403

    def test_returns_task_when_allowed(self):
        item = task(1, 2)
        assert check_task_access(item, actor(2, "employee")) is item
