# workforce/services/scheduler.py
"""
Maintenance jobs run by APScheduler

The jobs are plain methods over a Database, so they can also be called
directly.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from workforce.config import Settings
from workforce.database import Database, utcnow
from workforce.models import CLOSED_TASK_STATUSES, Notification, NotificationType, Task
from workforce.services.token_service import token_service
from workforce.utils.notifications import create_notification

logger = logging.getLogger(__name__)


class MaintenanceScheduler:
    """Periodic cleanup and reminder jobs"""

    def __init__(self, database: Database, settings: Settings):
        self.database = database
        self.settings = settings
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.is_running = False

    def start(self):
        """Start the scheduler"""
        if self.is_running:
            return

        self.scheduler.add_job(
            self.purge_refresh_tokens,
            trigger=IntervalTrigger(hours=1),
            id="purge_refresh_tokens",
            name="Purge Expired Refresh Tokens",
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.notify_overdue_tasks,
            trigger=CronTrigger(hour=9, minute=0),
            id="notify_overdue_tasks",
            name="Daily Overdue Task Reminders",
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.cleanup_old_notifications,
            trigger=CronTrigger(hour=0, minute=0),
            id="cleanup_notifications",
            name="Cleanup Old Notifications",
            replace_existing=True,
        )

        self.scheduler.start()
        self.is_running = True
        logger.info("Maintenance scheduler started")

    def stop(self):
        """Stop the scheduler"""
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Maintenance scheduler stopped")

    def status(self) -> Dict[str, Any]:
        jobs: List[Dict[str, Any]] = []
        if self.is_running:
            for job in self.scheduler.get_jobs():
                jobs.append({
                    "id": job.id,
                    "name": job.name,
                    "nextRun": job.next_run_time.isoformat() if job.next_run_time else None,
                })
        return {"running": self.is_running, "jobs": jobs}

    # Jobs

    def purge_refresh_tokens(self) -> int:
        try:
            with self.database.session() as db:
                removed = token_service.purge_expired(db)
            logger.info("Purged %d expired or revoked refresh tokens", removed)
            return removed
        except Exception:
            logger.exception("Refresh token purge failed")
            return 0

    def notify_overdue_tasks(self, now: Optional[datetime] = None) -> int:
        """Remind assignees of open tasks past their due date, once per task per day"""
        now = now or utcnow()
        start_of_day = datetime.combine(now.date(), datetime.min.time())
        sent = 0
        try:
            with self.database.session() as db:
                overdue = (
                    db.query(Task)
                    .filter(
                        Task.not_deleted(),
                        Task.assigned_to.isnot(None),
                        Task.due_date < now,
                        Task.status.notin_(CLOSED_TASK_STATUSES),
                    )
                    .all()
                )
                for task in overdue:
                    already_sent = (
                        db.query(Notification.id)
                        .filter(
                            Notification.user_id == task.assigned_to,
                            Notification.related_type == "task",
                            Notification.related_id == task.id,
                            Notification.notification_type == NotificationType.REMINDER,
                            Notification.created_at >= start_of_day,
                        )
                        .first()
                    )
                    if already_sent:
                        continue
                    create_notification(
                        db,
                        user_id=task.assigned_to,
                        title="Task overdue",
                        content=f"\"{task.title}\" was due {task.due_date.strftime('%Y-%m-%d %H:%M')} UTC",
                        notification_type=NotificationType.REMINDER,
                        related_type="task",
                        related_id=task.id,
                        commit=False,
                    )
                    sent += 1
            logger.info("Sent %d overdue task reminders", sent)
            return sent
        except Exception:
            logger.exception("Overdue task check failed")
            return 0

    def cleanup_old_notifications(self, now: Optional[datetime] = None) -> int:
        """Delete read notifications older than the retention period"""
        cutoff = (now or utcnow()) - timedelta(days=self.settings.notification_retention_days)
        try:
            with self.database.session() as db:
                removed = (
                    db.query(Notification)
                    .filter(Notification.is_read.is_(True), Notification.created_at < cutoff)
                    .delete(synchronize_session=False)
                )
            logger.info("Deleted %d read notifications older than %s", removed, cutoff.date())
            return removed
        except Exception:
            logger.exception("Notification cleanup failed")
            return 0
