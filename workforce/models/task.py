# workforce/models/task.py
from sqlalchemy import Column, Integer, String, Text, DateTime, Float, ForeignKey, JSON
from sqlalchemy.orm import relationship

from workforce.database import Base, utcnow
from workforce.models.enums import TaskStatus, TaskPriority, enum_type


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    board_id = Column(Integer, ForeignKey("boards.id"), nullable=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    # Task properties
    status = Column(enum_type(TaskStatus), default=TaskStatus.TODO, nullable=False, index=True)
    priority = Column(enum_type(TaskPriority), default=TaskPriority.MEDIUM, nullable=False, index=True)

    # Ownership; created_by is written once at creation
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # Planning
    due_date = Column(DateTime, nullable=True)
    estimated_hours = Column(Float, nullable=True)
    actual_hours = Column(Float, nullable=False, default=0)
    position = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)

    # System dates
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True, index=True)

    # Relationships
    board = relationship("Board", back_populates="tasks")
    creator = relationship("User", foreign_keys=[created_by], back_populates="created_tasks")
    assignee = relationship("User", foreign_keys=[assigned_to], back_populates="assigned_tasks")

    @classmethod
    def not_deleted(cls):
        """Predicate every read path applies; soft-deleted rows never leave the store"""
        return cls.deleted_at.is_(None)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def set_status(self, status: TaskStatus) -> None:
        self.status = status
        self.completed_at = utcnow() if status == TaskStatus.COMPLETED else None

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}')>"
