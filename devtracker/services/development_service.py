"""
Development read models and creation.

List and detail payloads are assembled here so that every view derives
the stage, completeness and staleness through the same pure functions.
"""

from __future__ import annotations

import logging
from datetime import datetime

from devtracker.core.exceptions import NotFoundError, ValidationError
from devtracker.services import activity, development_repository as repo
from devtracker.services.lifecycle import Stage, infer_stage, lifecycle_summary
from devtracker.services.reconciliation import coerce_payload
from devtracker.services.sections import NEW_DEVELOPMENT_FIELDS
from devtracker.utils.helpers import ensure_utc, utcnow

logger = logging.getLogger(__name__)


def create_development(payload, now: datetime | None = None):
    """Create a development from overview fields; ``name`` is mandatory."""
    values = coerce_payload(NEW_DEVELOPMENT_FIELDS, payload, creating=True)
    development = repo.create_development(values, now or utcnow())
    logger.info(
        "Development %s created", development.id,
        extra={"development_id": development.id, "section": "overview"},
    )
    return development


def get_development(development_id: int):
    development = repo.find_development_by_id(development_id)
    if development is None:
        raise NotFoundError("Development", development_id)
    return development


def parse_stage(value: str | None) -> Stage | None:
    if not value:
        return None
    try:
        return Stage(value.strip().lower())
    except ValueError:
        choices = ", ".join(stage.value for stage in Stage)
        raise ValidationError(
            "Validation failed", details={"stage": f"Must be one of: {choices}"},
        ) from None


def summarize(development, now: datetime, stalled_after_days: int) -> dict:
    """Row for the list view."""
    stage = infer_stage(development)
    return {
        "id": development.id,
        "name": development.name,
        "project_no": development.project_no,
        "status": development.status.to_dict() if development.status else None,
        "stage": stage.value,
        "internal_developer": development.internal_developer,
        "media_owner": development.media_owner.to_dict() if development.media_owner else None,
        "open_tasks": activity.open_count(development.tasks),
        "stalled": activity.is_stalled(development, now, stalled_after_days),
        "updated_at": ensure_utc(development.updated_at).isoformat() if development.updated_at else None,
    }


def list_developments(
    stage: Stage | None = None,
    now: datetime | None = None,
    stalled_after_days: int = activity.DEFAULT_STALLED_AFTER_DAYS,
) -> list[dict]:
    now = now or utcnow()
    rows = []
    for development in repo.list_developments():
        if stage is not None and infer_stage(development) is not stage:
            continue
        rows.append(summarize(development, now, stalled_after_days))
    return rows


def development_detail(
    development_id: int,
    now: datetime | None = None,
    stalled_after_days: int = activity.DEFAULT_STALLED_AFTER_DAYS,
    notes_limit: int = 5,
) -> dict:
    """Detail view: fields plus every derived projection."""
    now = now or utcnow()
    development = get_development(development_id)
    tasks = repo.list_tasks_for_development(development_id)

    data = development.to_dict()
    data.update(lifecycle_summary(development))
    data["stalled"] = activity.is_stalled(development, now, stalled_after_days)
    data["days_since_update"] = activity.days_since_update(development, now)
    data["tasks"] = [
        {**task.to_dict(), "overdue": activity.is_overdue(task, now)}
        for task in activity.display_order(tasks)
    ]
    data["task_metrics"] = activity.task_metrics(tasks, now)
    data["next_step"] = activity.recommend_next_step(development, tasks)
    data["notes"] = [note.to_dict() for note in development.notes[:notes_limit]]
    data["panel_configurations"] = [panel.to_dict() for panel in development.panel_configurations]
    data["tender_offers"] = [offer.to_dict() for offer in development.tender_offers]
    return data
