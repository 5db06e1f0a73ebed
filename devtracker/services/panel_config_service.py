"""
Panel-configuration set editor.

Single-record operations (create / update / delete) and a batch that
applies many of them in one request. Every operation goes through the
same allow-list and coercion as the section editors and commits on its
own, touching the parent development's ``updated_at``.

Batch order is fixed: deletes, then updates, then creates. An update
aimed at a record deleted earlier in the same batch is reported as
skipped, never attempted. A failing item does not undo the items
committed before it; each item gets its own result entry.

An empty create adds a blank panel to be filled in later; an empty update
is a no-op like any other section update.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime

from devtracker.core.exceptions import (
    NoOpError, NotFoundError, StorageError, ValidationError,
)
from devtracker.services import development_repository as repo
from devtracker.services.coercion import CoercionError, FieldSpec, FOREIGN_KEY, coerce_value
from devtracker.services.reconciliation import coerce_payload
from devtracker.services.sections import PANEL_CONFIGURATION_FIELDS
from devtracker.utils.helpers import utcnow

logger = logging.getLogger(__name__)

_DETAIL_ID = FieldSpec(FOREIGN_KEY, required=True)

_BATCH_KEYS = ("delete", "update", "create")


def _get_development(development_id: int):
    development = repo.find_development_by_id(development_id)
    if development is None:
        raise NotFoundError("Development", development_id)
    return development


def _detail_id(raw) -> int:
    try:
        return coerce_value(raw, _DETAIL_ID)
    except CoercionError as exc:
        raise ValidationError("Validation failed", details={"detail_id": exc.message}) from None


def _get_panel(development_id: int, detail_id: int):
    panel = repo.find_panel_config(development_id, detail_id)
    if panel is None:
        raise NotFoundError("Panel configuration", detail_id)
    return panel


# ── Single-record operations ─────────────────────────────────────────────────


def list_panel_configs(development_id: int):
    return list(_get_development(development_id).panel_configurations)


def create_panel_config(development_id: int, payload, now: datetime | None = None):
    development = _get_development(development_id)
    values = coerce_payload(PANEL_CONFIGURATION_FIELDS, payload, allow_empty=True)
    panel = repo.create_panel_config(development, values, now or utcnow())
    logger.info(
        "Panel configuration %s created", panel.id,
        extra={"development_id": development_id, "section": "panel-configuration"},
    )
    return panel


def update_panel_config(development_id: int, detail_id, payload, now: datetime | None = None):
    development = _get_development(development_id)
    panel = _get_panel(development_id, _detail_id(detail_id))
    values = coerce_payload(PANEL_CONFIGURATION_FIELDS, payload)
    repo.update_panel_config(development, panel, values, now or utcnow())
    logger.info(
        "Panel configuration %s updated", panel.id,
        extra={"development_id": development_id, "section": "panel-configuration"},
    )
    return panel


def delete_panel_config(development_id: int, detail_id, now: datetime | None = None) -> int:
    development = _get_development(development_id)
    panel_id = _detail_id(detail_id)
    panel = _get_panel(development_id, panel_id)
    repo.delete_panel_config(development, panel, now or utcnow())
    logger.info(
        "Panel configuration %s deleted", panel_id,
        extra={"development_id": development_id, "section": "panel-configuration"},
    )
    return panel_id


# ── Batch ────────────────────────────────────────────────────────────────────


def _ok(operation: str, index: int, **extra) -> dict:
    return {"operation": operation, "index": index, "ok": True, **extra}


def _failed(operation: str, index: int, error: Exception, detail_id=None) -> dict:
    entry = {"operation": operation, "index": index, "ok": False, "detail_id": detail_id}
    if isinstance(error, ValidationError):
        entry.update(code="validation", error=str(error), details=error.details)
    elif isinstance(error, NotFoundError):
        entry.update(code="not_found", error=f"{error.resource} not found")
    elif isinstance(error, NoOpError):
        entry.update(code="nothing_to_update", error=str(error))
    else:
        entry.update(code="storage", error="Database error")
    return entry


def _update_item(item) -> tuple[object, Mapping]:
    """Split an update entry into (raw detail id, field payload)."""
    if not isinstance(item, Mapping):
        raise ValidationError("Update entries must be objects")
    fields = item.get("fields")
    if fields is None:
        fields = {key: value for key, value in item.items() if key not in ("detail_id", "id")}
    return item.get("detail_id", item.get("id")), fields


def apply_panel_batch(development_id: int, payload, now: datetime | None = None) -> dict:
    """Apply ``{"delete": [...], "update": [...], "create": [...]}``.

    ``delete`` holds detail ids; ``update`` holds objects with a
    ``detail_id`` plus fields (flat or under ``fields``); ``create`` holds
    field objects.

    Returns:
        {"results": [...], "succeeded": n, "failed": n, "panel_configurations": [...]}

    Raises:
        NotFoundError: the development does not exist (nothing applied).
        ValidationError: the batch envelope itself is malformed.
    """
    _get_development(development_id)
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")
    envelope_errors = {
        key: "Must be a list"
        for key in _BATCH_KEYS
        if payload.get(key) is not None and not isinstance(payload.get(key), list)
    }
    if envelope_errors:
        raise ValidationError("Validation failed", details=envelope_errors)

    now = now or utcnow()
    results: list[dict] = []
    deleted: set[int] = set()

    for index, raw_id in enumerate(payload.get("delete") or []):
        try:
            panel_id = delete_panel_config(development_id, raw_id, now)
            deleted.add(panel_id)
            results.append(_ok("delete", index, detail_id=panel_id))
        except (ValidationError, NotFoundError, StorageError) as exc:
            results.append(_failed("delete", index, exc, detail_id=raw_id))

    for index, item in enumerate(payload.get("update") or []):
        raw_id = None
        try:
            raw_id, fields = _update_item(item)
            panel_id = _detail_id(raw_id)
            if panel_id in deleted:
                results.append({
                    "operation": "update", "index": index, "ok": False,
                    "detail_id": panel_id, "code": "skipped",
                    "error": "Panel configuration deleted in this batch",
                })
                continue
            panel = update_panel_config(development_id, panel_id, fields, now)
            results.append(_ok("update", index, detail_id=panel.id))
        except (ValidationError, NotFoundError, NoOpError, StorageError) as exc:
            results.append(_failed("update", index, exc, detail_id=raw_id))

    for index, fields in enumerate(payload.get("create") or []):
        try:
            panel = create_panel_config(development_id, fields, now)
            results.append(_ok("create", index, detail_id=panel.id))
        except (ValidationError, NotFoundError, NoOpError, StorageError) as exc:
            results.append(_failed("create", index, exc))

    succeeded = sum(1 for entry in results if entry["ok"])
    failed = len(results) - succeeded
    logger.info(
        "Panel batch applied: %d ok, %d failed", succeeded, failed,
        extra={"development_id": development_id, "section": "panel-configuration"},
    )
    return {
        "results": results,
        "succeeded": succeeded,
        "failed": failed,
        "panel_configurations": [
            panel.to_dict() for panel in _get_development(development_id).panel_configurations
        ],
    }
