# workforce/utils/notifications.py
"""
Utility functions for creating notifications
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from workforce.models import Notification, NotificationType, Task

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    user_id: int,
    title: str,
    content: str,
    notification_type: NotificationType = NotificationType.SYSTEM,
    related_type: Optional[str] = None,
    related_id: Optional[int] = None,
    commit: bool = True,
) -> Notification:
    """
    Create a new notification for a user

    Args:
        db: Database session
        user_id: ID of the user to notify
        title: Notification title
        content: Notification body
        notification_type: Type of notification
        related_type: Type of related entity (e.g. 'task', 'team')
        related_id: ID of related entity
        commit: Commit immediately; batch callers pass False and commit once

    Returns:
        Created notification object
    """
    notification = Notification(
        user_id=user_id,
        title=title,
        content=content,
        notification_type=notification_type,
        related_type=related_type,
        related_id=related_id,
    )
    db.add(notification)
    if commit:
        db.commit()
        db.refresh(notification)
    return notification


def notify_task_assigned(db: Session, task: Task, actor) -> Optional[Notification]:
    """Tell the new assignee about a task someone else gave them"""
    if task.assigned_to is None or task.assigned_to == actor.id:
        return None
    return _safe_create(
        db,
        user_id=task.assigned_to,
        title="New task assigned",
        content=f"{actor.name} assigned you the task \"{task.title}\"",
        task=task,
    )


def notify_status_changed(db: Session, task: Task, actor, old_status) -> Optional[Notification]:
    """Tell the creator when someone else moves their task"""
    if task.created_by == actor.id or old_status == task.status:
        return None
    return _safe_create(
        db,
        user_id=task.created_by,
        title="Task status updated",
        content=f"{actor.name} moved \"{task.title}\" from {_label(old_status)} to {_label(task.status)}",
        task=task,
    )


def _label(status) -> str:
    return str(getattr(status, "value", status)).replace("_", " ")


def _safe_create(db: Session, user_id: int, title: str, content: str, task: Task) -> Optional[Notification]:
    # A failed notification must not undo the task change that triggered it
    try:
        return create_notification(
            db,
            user_id=user_id,
            title=title,
            content=content,
            notification_type=NotificationType.TASK,
            related_type="task",
            related_id=task.id,
        )
    except Exception:
        logger.exception("Failed to create notification for user %s on task %s", user_id, task.id)
        db.rollback()
        return None
