"""
Task, note and tender-offer writes.

All sub-record writes follow the reconciliation contract: payloads are
filtered to the record's allow-list and coerced field by field, every
error is reported at once, and a successful write stamps the parent
development's ``updated_at`` in the same commit.

Task completion is an idempotent toggle. Asking for the state a task is
already in performs no write and leaves ``updated_at`` alone; a real
change is a write like any other.
"""

from __future__ import annotations

import logging
from datetime import datetime

from devtracker.core.exceptions import NotFoundError, ValidationError
from devtracker.services import development_repository as repo
from devtracker.services.reconciliation import coerce_payload
from devtracker.services.sections import NOTE_FIELDS, TASK_FIELDS, TENDER_OFFER_FIELDS
from devtracker.utils.helpers import utcnow

logger = logging.getLogger(__name__)


def _get_development(development_id: int):
    development = repo.find_development_by_id(development_id)
    if development is None:
        raise NotFoundError("Development", development_id)
    return development


# ── Tasks ────────────────────────────────────────────────────────────────────


def list_tasks_for_development(development_id: int):
    _get_development(development_id)
    return repo.list_tasks_for_development(development_id)


def list_open_tasks(assigned_to: str | None = None):
    return repo.list_tasks(assigned_to=assigned_to, open_only=True)


def create_task(development_id: int, payload, now: datetime | None = None):
    """Create a task under a development.

    ``needs_review`` defaults to True when the task was assigned by someone
    other than its assignee; an explicit boolean in the payload wins.
    """
    development = _get_development(development_id)
    values = coerce_payload(TASK_FIELDS, payload, creating=True)

    review_flag = values.pop("needs_review", None)
    if review_flag is None:
        assigned_by = values.get("assigned_by_id")
        review_flag = bool(assigned_by) and assigned_by != values.get("assigned_to")
    values["needs_review"] = review_flag

    task = repo.create_task(development, values, now or utcnow())
    logger.info(
        "Task %s created", task.id,
        extra={"development_id": development_id, "section": "tasks"},
    )
    return task


def set_task_complete(task_id: int, complete: bool, now: datetime | None = None):
    """Set the completion flag; a request for the current state is a no-op.

    Completing clears ``needs_review`` and stamps ``completed_at``;
    reopening clears ``completed_at``.
    """
    if not isinstance(complete, bool):
        raise ValidationError("Validation failed", details={"complete": "Must be true or false"})
    task = repo.find_task_by_id(task_id)
    if task is None:
        raise NotFoundError("Task", task_id)
    if task.complete == complete:
        return task

    now = now or utcnow()
    if complete:
        values = {"complete": True, "completed_at": now, "needs_review": False}
    else:
        values = {"complete": False, "completed_at": None}
    repo.update_task(task, values, now)
    logger.info(
        "Task %s marked %s", task_id, "complete" if complete else "open",
        extra={"development_id": task.development_id, "section": "tasks"},
    )
    return task


# ── Notes ────────────────────────────────────────────────────────────────────


def add_note(development_id: int, payload, now: datetime | None = None):
    development = _get_development(development_id)
    values = coerce_payload(NOTE_FIELDS, payload, creating=True)
    now = now or utcnow()
    if values.get("note_date") is None:
        values["note_date"] = now.date()
    note = repo.add_note(development, values, now)
    logger.info("Note %s added", note.id, extra={"development_id": development_id, "section": "notes"})
    return note


# ── Tender offers ────────────────────────────────────────────────────────────


def add_tender_offer(development_id: int, payload, now: datetime | None = None):
    development = _get_development(development_id)
    values = coerce_payload(TENDER_OFFER_FIELDS, payload, creating=True)
    offer = repo.add_tender_offer(development, values, now or utcnow())
    logger.info(
        "Tender offer %s added", offer.id,
        extra={"development_id": development_id, "section": "marketing"},
    )
    return offer


def delete_tender_offer(development_id: int, offer_id: int, now: datetime | None = None) -> None:
    development = _get_development(development_id)
    offer = repo.find_tender_offer(development_id, offer_id)
    if offer is None:
        raise NotFoundError("Tender offer", offer_id)
    repo.delete_tender_offer(development, offer, now or utcnow())
    logger.info(
        "Tender offer %s deleted", offer_id,
        extra={"development_id": development_id, "section": "marketing"},
    )
