# workforce/schemas/notification.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from workforce.models.enums import NotificationType
from workforce.schemas.common import CamelModel, PaginationOut


class NotificationOut(CamelModel):
    id: int
    title: str
    content: str
    type: NotificationType = Field(validation_alias="notification_type")
    related_type: Optional[str] = None
    related_id: Optional[int] = None
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime] = None


class NotificationListOut(CamelModel):
    notifications: List[NotificationOut]
    pagination: PaginationOut


class UnreadCountOut(CamelModel):
    unread_count: int


class MarkAllReadOut(CamelModel):
    message: str
    updated: int
