# workforce/routers/notifications.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from workforce.database import get_db, utcnow
from workforce.exceptions import NotFoundError
from workforce.models import Notification, User
from workforce.schemas import MarkAllReadOut, NotificationListOut, NotificationOut, UnreadCountOut
from workforce.utils.auth import get_current_user
from workforce.utils.query_builder import QueryBuilder

router = APIRouter(prefix="/notifications", tags=["notifications"])

SORTABLE_COLUMNS = {"createdAt": Notification.created_at}


@router.get("", response_model=NotificationListOut)
def list_notifications(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    unread_only: bool = Query(False, alias="unreadOnly"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the caller's notifications, newest first"""
    builder = QueryBuilder(Notification, SORTABLE_COLUMNS, default_sort="createdAt").restrict(
        Notification.user_id == current_user.id
    )
    if unread_only:
        builder.where(Notification.is_read.is_(False))
    result = builder.order_by("createdAt", "desc").paginate(page, limit).fetch(db)

    return {
        "notifications": [NotificationOut.model_validate(item) for item in result.items],
        "pagination": result.pagination,
    }


@router.get("/unread-count", response_model=UnreadCountOut)
def get_unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    count = (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == current_user.id, Notification.is_read.is_(False))
        .scalar()
    )
    return {"unread_count": count or 0}


@router.patch("/read-all", response_model=MarkAllReadOut)
def mark_all_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Mark every unread notification of the caller as read"""
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id, Notification.is_read.is_(False))
        .update({Notification.is_read: True, Notification.read_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    return {"message": "All notifications marked as read", "updated": updated}


@router.patch("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Mark one notification as read"""
    # Other users' notifications are reported as missing
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == current_user.id)
        .first()
    )
    if notification is None:
        raise NotFoundError("Notification not found", code="NOTIFICATION_NOT_FOUND")

    notification.mark_read()
    db.commit()
    db.refresh(notification)
    return NotificationOut.model_validate(notification)
