"""
Development Tracker
Task model.

A task belongs to exactly one development. It is never hard-deleted by
the tracker: completion is a flag that can be toggled back and forth.
``needs_review`` marks a task handed to someone by another person; it is
cleared when the task is completed.
"""

from datetime import datetime, timezone

from devtracker.models import db
from devtracker.models.development import serialize_value


class DevelopmentTask(db.Model):

    __tablename__ = "development_tasks"

    id = db.Column(db.Integer, primary_key=True)
    development_id = db.Column(
        db.Integer, db.ForeignKey("developments.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    description = db.Column(db.Text, nullable=False)
    due_date = db.Column(db.Date, nullable=True, index=True)
    complete = db.Column(db.Boolean, nullable=False, default=False, index=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    needs_review = db.Column(db.Boolean, nullable=False, default=False)
    priority = db.Column(db.String(20), nullable=True, comment="low | medium | high")
    assigned_to = db.Column(db.String(150), nullable=True, index=True)
    assigned_by_id = db.Column(db.String(150), nullable=True)
    task_type_id = db.Column(
        db.Integer, db.ForeignKey("task_types.id", ondelete="SET NULL"), nullable=True,
    )

    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    task_type = db.relationship("TaskType")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "development_id": self.development_id,
            "description": self.description,
            "due_date": serialize_value(self.due_date),
            "complete": self.complete,
            "completed_at": serialize_value(self.completed_at),
            "needs_review": self.needs_review,
            "priority": self.priority,
            "assigned_to": self.assigned_to,
            "assigned_by_id": self.assigned_by_id,
            "task_type_id": self.task_type_id,
            "task_type": self.task_type.to_dict() if self.task_type else None,
            "created_at": serialize_value(self.created_at),
            "updated_at": serialize_value(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<DevelopmentTask {self.id} dev={self.development_id}>"
