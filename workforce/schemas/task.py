# workforce/schemas/task.py
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from workforce.models.enums import TaskPriority, TaskStatus
from workforce.schemas.common import CamelModel, PaginationOut, UserRef

TITLE_MAX_LENGTH = 255
MAX_TAGS = 20
TAG_MAX_LENGTH = 50


def _clean_title(value: Optional[str]) -> str:
    if not isinstance(value, str):
        raise ValueError("Title is required and must be a string")
    value = value.strip()
    if not value:
        raise ValueError("Title must not be empty")
    if len(value) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return value


def _clean_tags(value: Optional[List[str]]) -> List[str]:
    if value is None:
        return []
    if len(value) > MAX_TAGS:
        raise ValueError(f"At most {MAX_TAGS} tags are allowed")
    tags = []
    for tag in value:
        tag = tag.strip()
        if not tag:
            raise ValueError("Tags must not be empty")
        if len(tag) > TAG_MAX_LENGTH:
            raise ValueError(f"Tags must be at most {TAG_MAX_LENGTH} characters")
        tags.append(tag)
    return tags


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TaskBase(CamelModel):
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    actual_hours: Optional[float] = Field(default=None, ge=0)
    tags: Optional[List[str]] = None
    assigned_to: Optional[int] = None
    board_id: Optional[int] = None
    position: Optional[int] = Field(default=None, ge=0)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v):
        return _to_naive_utc(v)


class TaskCreate(TaskBase):
    title: str

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        return _clean_title(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)


class TaskUpdate(TaskBase):
    """Partial update; only fields present in the body are applied"""

    title: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        return _clean_title(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)

    @field_validator("priority", "status", "actual_hours", "position")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class TaskStatusUpdate(CamelModel):
    status: TaskStatus


class TaskOut(CamelModel):
    id: int
    board_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    assigned_to: Optional[int] = None
    created_by: int
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    actual_hours: float = 0
    position: int = 0
    tags: List[str] = []
    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    assignee: Optional[UserRef] = None
    creator: Optional[UserRef] = None


class TaskListOut(CamelModel):
    tasks: List[TaskOut]
    pagination: PaginationOut


class MonthlyTrend(CamelModel):
    month: str
    created: int
    completed: int


class TaskStatsOut(CamelModel):
    total: int
    by_status: Dict[str, int]
    by_priority: Dict[str, int]
    overdue: int
    completion_rate: float
    monthly_trend: List[MonthlyTrend]
