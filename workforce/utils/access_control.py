# workforce/utils/access_control.py
"""
Who may see and change a task

Everything here is a pure decision over ids and roles, so the routers, the
list/stats queries and the tests all share one set of rules:

- admin and manager see and change everything
- anyone else works only on tasks they created or are assigned to
- a non-privileged user can only ever assign a task to themself
- deleting needs the creator or a privileged role; being the assignee is not enough
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_

from workforce.exceptions import ForbiddenError, NotFoundError
from workforce.models.enums import Role

PRIVILEGED_ROLES = frozenset({Role.ADMIN.value, Role.MANAGER.value})


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None
    status_code: int = 200

    def __bool__(self):
        return self.allowed


ALLOW = AccessDecision(True)


def _deny(reason: str) -> AccessDecision:
    return AccessDecision(False, reason, 403)


def _role_value(role) -> str:
    return getattr(role, "value", role)


def is_privileged(role) -> bool:
    return _role_value(role) in PRIVILEGED_ROLES


def can_access(actor_id: int, actor_role, owner_id: Optional[int], assignee_id: Optional[int]) -> AccessDecision:
    """Read/update eligibility for a task"""
    if is_privileged(actor_role):
        return ALLOW
    if actor_id == owner_id or (assignee_id is not None and actor_id == assignee_id):
        return ALLOW
    return _deny("access denied")


def can_reassign(
    actor_id: int,
    actor_role,
    current_assignee_id: Optional[int],
    new_assignee_id: Optional[int],
) -> AccessDecision:
    if is_privileged(actor_role):
        return ALLOW
    if new_assignee_id == current_assignee_id:
        return ALLOW
    if new_assignee_id == actor_id:
        return ALLOW
    return _deny("only managers and admins can assign tasks to other users")


def can_delete(actor_id: int, actor_role, owner_id: Optional[int]) -> AccessDecision:
    if is_privileged(actor_role) or actor_id == owner_id:
        return ALLOW
    return _deny("only the creator or a manager can delete this task")


def visibility_filter(actor, owner_column, assignee_column):
    """Row restriction for list/stats queries, or None when the actor sees everything"""
    if is_privileged(actor.role):
        return None
    return or_(owner_column == actor.id, assignee_column == actor.id)


def check_task_access(task, actor, message: str = "Task not found"):
    """Raise 404 for a missing or soft-deleted task and 403 when the actor may not touch it"""
    if task is None or task.deleted_at is not None:
        raise NotFoundError(message, code="TASK_NOT_FOUND")
    decision = can_access(actor.id, actor.role, task.created_by, task.assigned_to)
    if not decision:
        raise ForbiddenError("Access denied", code="ACCESS_DENIED")
    return task
