from workforce.models.enums import (
    CLOSED_TASK_STATUSES,
    NotificationType,
    Role,
    TaskPriority,
    TaskStatus,
    UserStatus,
)
from workforce.models.user import User
from workforce.models.team import Team, TeamMember
from workforce.models.board import Board
from workforce.models.task import Task
from workforce.models.refresh_token import RefreshToken
from workforce.models.notification import Notification

__all__ = [
    "CLOSED_TASK_STATUSES",
    "NotificationType",
    "Role",
    "TaskPriority",
    "TaskStatus",
    "UserStatus",
    "User",
    "Team",
    "TeamMember",
    "Board",
    "Task",
    "RefreshToken",
    "Notification",
]
