# workforce/routers/tasks.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Query as OrmQuery, Session, joinedload

from workforce.database import get_db, utcnow
from workforce.exceptions import ForbiddenError, NotFoundError, field_error
from workforce.models import CLOSED_TASK_STATUSES, Board, Task, TaskPriority, TaskStatus, User, UserStatus
from workforce.schemas import (
    MessageOut,
    TaskCreate,
    TaskListOut,
    TaskOut,
    TaskStatsOut,
    TaskStatusUpdate,
    TaskUpdate,
)
from workforce.utils.access_control import can_delete, can_reassign, check_task_access, visibility_filter
from workforce.utils.auth import get_current_user
from workforce.utils.notifications import notify_status_changed, notify_task_assigned
from workforce.utils.query_builder import QueryBuilder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])

SORTABLE_COLUMNS = {
    "createdAt": Task.created_at,
    "created_at": Task.created_at,
    "updatedAt": Task.updated_at,
    "updated_at": Task.updated_at,
    "dueDate": Task.due_date,
    "due_date": Task.due_date,
    "priority": Task.priority,
    "status": Task.status,
    "title": Task.title,
}

TREND_MONTHS = 6


def active_tasks(db: Session) -> OrmQuery:
    """Every task read starts here; soft-deleted rows are never returned"""
    return db.query(Task).filter(Task.not_deleted())


def _load_task(db: Session, task_id: int) -> Optional[Task]:
    return (
        active_tasks(db)
        .options(joinedload(Task.creator), joinedload(Task.assignee))
        .filter(Task.id == task_id)
        .first()
    )


def serialize_task(task: Task) -> TaskOut:
    return TaskOut.model_validate(task)


def _validate_assignee(db: Session, user_id: int) -> User:
    assignee = db.query(User).filter(User.id == user_id).first()
    if assignee is None or assignee.status != UserStatus.ACTIVE:
        raise field_error("assignedTo", "Assigned user not found or inactive", user_id, code="INVALID_ASSIGNEE")
    return assignee


def _validate_board(db: Session, board_id: int) -> Board:
    board = db.query(Board).filter(Board.id == board_id).first()
    if board is None:
        raise field_error("boardId", "Board not found", board_id, code="INVALID_BOARD")
    return board


def _check_reassignment(current_user: User, current_assignee: Optional[int], new_assignee: Optional[int]) -> None:
    decision = can_reassign(current_user.id, current_user.role, current_assignee, new_assignee)
    if not decision:
        raise ForbiddenError("You can only assign tasks to yourself", code="REASSIGNMENT_DENIED")


@router.get("", response_model=TaskListOut)
def list_tasks(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = None,
    assigned_to: Optional[int] = Query(None, alias="assignedTo"),
    created_by: Optional[int] = Query(None, alias="createdBy"),
    board_id: Optional[int] = Query(None, alias="boardId"),
    search: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the tasks the caller may see, filtered, sorted and paginated"""
    builder = (
        QueryBuilder(Task, SORTABLE_COLUMNS, default_sort="createdAt")
        .restrict(Task.not_deleted())
        .restrict(visibility_filter(current_user, Task.created_by, Task.assigned_to))
        .filter_eq(Task.status, status_filter)
        .filter_eq(Task.priority, priority)
        .filter_eq(Task.assigned_to, assigned_to)
        .filter_eq(Task.created_by, created_by)
        .filter_eq(Task.board_id, board_id)
        .search(search, Task.title, Task.description)
        .order_by(sort_by, sort_order)
        .paginate(page, limit)
    )
    result = builder.fetch(db, joinedload(Task.creator), joinedload(Task.assignee))

    return {
        "tasks": [serialize_task(task) for task in result.items],
        "pagination": result.pagination,
    }


def _month_starts(now: datetime, count: int) -> List[datetime]:
    year, month = now.year, now.month
    starts = []
    for _ in range(count):
        starts.append(datetime(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(starts))


def _next_month(start: datetime) -> datetime:
    if start.month == 12:
        return datetime(start.year + 1, 1, 1)
    return datetime(start.year, start.month + 1, 1)


def task_statistics(db: Session, current_user: User, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Aggregate counts over the tasks visible to current_user"""
    now = now or utcnow()
    visible = [Task.not_deleted()]
    restriction = visibility_filter(current_user, Task.created_by, Task.assigned_to)
    if restriction is not None:
        visible.append(restriction)

    def count(*predicates) -> int:
        return db.query(func.count(Task.id)).filter(*visible, *predicates).scalar() or 0

    by_status = {item.value: 0 for item in TaskStatus}
    for value, total in db.query(Task.status, func.count(Task.id)).filter(*visible).group_by(Task.status):
        by_status[value.value] = total

    by_priority = {item.value: 0 for item in TaskPriority}
    for value, total in db.query(Task.priority, func.count(Task.id)).filter(*visible).group_by(Task.priority):
        by_priority[value.value] = total

    total = sum(by_status.values())
    completed = by_status[TaskStatus.COMPLETED.value]

    trend = []
    for start in _month_starts(now, TREND_MONTHS):
        end = _next_month(start)
        trend.append({
            "month": start.strftime("%Y-%m"),
            "created": count(Task.created_at >= start, Task.created_at < end),
            "completed": count(Task.completed_at >= start, Task.completed_at < end),
        })

    return {
        "total": total,
        "by_status": by_status,
        "by_priority": by_priority,
        "overdue": count(Task.due_date < now, Task.status.notin_(CLOSED_TASK_STATUSES)),
        "completion_rate": round(completed * 100.0 / total, 2) if total else 0.0,
        "monthly_trend": trend,
    }


@router.get("/stats", response_model=TaskStatsOut)
def get_task_stats(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Task counts by status and priority for the caller's visible tasks"""
    return task_statistics(db, current_user)


@router.get("/stats/overview", response_model=TaskStatsOut)
def get_task_stats_overview(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Dashboard overview; same figures as /stats"""
    return task_statistics(db, current_user)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a task owned by the caller"""
    if payload.assigned_to is not None:
        # Existence is checked before the policy, so an unknown id is a 400 even for employees
        _validate_assignee(db, payload.assigned_to)
        _check_reassignment(current_user, None, payload.assigned_to)
    if payload.board_id is not None:
        _validate_board(db, payload.board_id)

    task = Task(
        title=payload.title,
        description=payload.description,
        priority=payload.priority or TaskPriority.MEDIUM,
        created_by=current_user.id,
        assigned_to=payload.assigned_to,
        board_id=payload.board_id,
        due_date=payload.due_date,
        estimated_hours=payload.estimated_hours,
        actual_hours=payload.actual_hours or 0,
        position=payload.position or 0,
        tags=list(payload.tags or []),
    )
    task.set_status(payload.status or TaskStatus.TODO)

    db.add(task)
    db.commit()
    logger.info("User %s created task %s", current_user.id, task.id)

    notify_task_assigned(db, task, current_user)
    return serialize_task(_load_task(db, task.id))


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Get a specific task by ID with role-based access control"""
    task = check_task_access(_load_task(db, task_id), current_user)
    return serialize_task(task)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Partially update a task; only fields present in the body change"""
    task = check_task_access(_load_task(db, task_id), current_user)
    changes = payload.model_dump(exclude_unset=True)

    previous_assignee = task.assigned_to
    previous_status = task.status

    if "assigned_to" in changes:
        new_assignee = changes.pop("assigned_to")
        if new_assignee != previous_assignee:
            # Same order as create: unknown assignee 400, then the reassignment policy
            if new_assignee is not None:
                _validate_assignee(db, new_assignee)
            _check_reassignment(current_user, previous_assignee, new_assignee)
            task.assigned_to = new_assignee

    if changes.get("board_id") is not None:
        _validate_board(db, changes["board_id"])

    new_status = changes.pop("status", None)
    if new_status is not None and new_status != previous_status:
        task.set_status(new_status)

    for field, value in changes.items():
        setattr(task, field, value)
    task.updated_at = utcnow()

    db.commit()
    logger.info("User %s updated task %s (%s)", current_user.id, task.id, ", ".join(sorted(payload.model_fields_set)))

    if task.assigned_to != previous_assignee:
        notify_task_assigned(db, task, current_user)
    notify_status_changed(db, task, current_user, previous_status)
    return serialize_task(_load_task(db, task_id))


@router.patch("/{task_id}/status", response_model=TaskOut)
def update_task_status(
    task_id: int,
    payload: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Change only the status of a task"""
    task = check_task_access(_load_task(db, task_id), current_user)
    previous_status = task.status

    if payload.status != previous_status:
        task.set_status(payload.status)
    task.updated_at = utcnow()
    db.commit()

    notify_status_changed(db, task, current_user, previous_status)
    return serialize_task(_load_task(db, task_id))


@router.delete("/{task_id}", response_model=MessageOut)
def delete_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Soft delete a task; only its creator or a manager/admin may do this"""
    task = _load_task(db, task_id)
    if task is None:
        raise NotFoundError("Task not found", code="TASK_NOT_FOUND")
    if not can_delete(current_user.id, current_user.role, task.created_by):
        raise ForbiddenError("Only the task creator or a manager can delete this task", code="ACCESS_DENIED")

    task.deleted_at = utcnow()
    db.commit()
    logger.info("User %s deleted task %s", current_user.id, task_id)
    return {"message": "Task deleted successfully"}
