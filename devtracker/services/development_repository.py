"""Storage repository for developments and their sub-records.

The lifecycle services never query or commit on their own; they go
through these functions. Each write function performs exactly one commit
and, where a development is touched, stamps its ``updated_at`` inside the
same transaction.

Transaction policy:
  - One commit per call; rollback on any SQLAlchemy failure.
  - Storage failures are logged with the traceback and re-raised as an
    opaque StorageError.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from devtracker.core.exceptions import StorageError
from devtracker.models import db
from devtracker.models.development import (
    Development, DevelopmentNote, PanelConfiguration, TenderOffer,
)
from devtracker.models.task import DevelopmentTask

logger = logging.getLogger(__name__)


def _commit(action: str, development_id: int | None) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception(
            "Storage failure during %s", action,
            extra={"development_id": development_id},
        )
        raise StorageError() from exc


def _touch(development: Development, touched_at: datetime) -> None:
    development.updated_at = touched_at


# ── Reads ────────────────────────────────────────────────────────────────────


def find_development_by_id(development_id: int) -> Development | None:
    return db.session.get(Development, development_id)


def list_developments() -> list[Development]:
    return list(
        db.session.execute(select(Development).order_by(Development.id)).scalars()
    )


def list_tasks_for_development(development_id: int) -> list[DevelopmentTask]:
    return list(
        db.session.execute(
            select(DevelopmentTask).where(DevelopmentTask.development_id == development_id)
        ).scalars()
    )


def list_tasks(assigned_to: str | None = None, open_only: bool = False) -> list[DevelopmentTask]:
    stmt = select(DevelopmentTask)
    if assigned_to:
        stmt = stmt.where(DevelopmentTask.assigned_to == assigned_to)
    if open_only:
        stmt = stmt.where(DevelopmentTask.complete.is_(False))
    return list(db.session.execute(stmt.order_by(DevelopmentTask.id)).scalars())


def find_task_by_id(task_id: int) -> DevelopmentTask | None:
    return db.session.get(DevelopmentTask, task_id)


def find_panel_config(development_id: int, detail_id: int) -> PanelConfiguration | None:
    return db.session.execute(
        select(PanelConfiguration).where(
            PanelConfiguration.id == detail_id,
            PanelConfiguration.development_id == development_id,
        )
    ).scalar_one_or_none()


def find_tender_offer(development_id: int, offer_id: int) -> TenderOffer | None:
    return db.session.execute(
        select(TenderOffer).where(
            TenderOffer.id == offer_id,
            TenderOffer.development_id == development_id,
        )
    ).scalar_one_or_none()


# ── Writes ───────────────────────────────────────────────────────────────────


def create_development(values: dict, created_at: datetime) -> Development:
    development = Development(**values, created_at=created_at, updated_at=created_at)
    db.session.add(development)
    _commit("create development", None)
    return development


def update_development_fields(development_id: int, delta: dict) -> Development:
    """Write ``delta`` onto the development row; nothing else is touched.

    ``delta`` already carries ``updated_at``.
    """
    development = db.session.get(Development, development_id)
    for field, value in delta.items():
        setattr(development, field, value)
    _commit("development field update", development_id)
    return development


def create_panel_config(development: Development, values: dict, touched_at: datetime) -> PanelConfiguration:
    panel = PanelConfiguration(development_id=development.id, **values)
    db.session.add(panel)
    _touch(development, touched_at)
    _commit("panel configuration create", development.id)
    return panel


def update_panel_config(
    development: Development, panel: PanelConfiguration, values: dict, touched_at: datetime,
) -> PanelConfiguration:
    for field, value in values.items():
        setattr(panel, field, value)
    _touch(development, touched_at)
    _commit("panel configuration update", development.id)
    return panel


def delete_panel_config(development: Development, panel: PanelConfiguration, touched_at: datetime) -> None:
    db.session.delete(panel)
    _touch(development, touched_at)
    _commit("panel configuration delete", development.id)


def add_tender_offer(development: Development, values: dict, touched_at: datetime) -> TenderOffer:
    offer = TenderOffer(development_id=development.id, **values)
    db.session.add(offer)
    _touch(development, touched_at)
    _commit("tender offer create", development.id)
    return offer


def delete_tender_offer(development: Development, offer: TenderOffer, touched_at: datetime) -> None:
    db.session.delete(offer)
    _touch(development, touched_at)
    _commit("tender offer delete", development.id)


def add_note(development: Development, values: dict, touched_at: datetime) -> DevelopmentNote:
    note = DevelopmentNote(development_id=development.id, **values)
    db.session.add(note)
    _touch(development, touched_at)
    _commit("note create", development.id)
    return note


def create_task(development: Development, values: dict, touched_at: datetime) -> DevelopmentTask:
    task = DevelopmentTask(
        development_id=development.id, created_at=touched_at, updated_at=touched_at, **values,
    )
    db.session.add(task)
    _touch(development, touched_at)
    _commit("task create", development.id)
    return task


def update_task(task: DevelopmentTask, values: dict, touched_at: datetime) -> DevelopmentTask:
    for field, value in values.items():
        setattr(task, field, value)
    task.updated_at = touched_at
    _touch(task.development, touched_at)
    _commit("task update", task.development_id)
    return task
