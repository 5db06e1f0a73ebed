"""Partial-update reconciliation.

Every section editor funnels its payload through here:

  1. Keys outside the section's allow-list are dropped silently (clients
     may send whole forms).
  2. Each allowed key is coerced with the section's FieldSpec.
  3. All field errors are collected; nothing short-circuits.
  4. Any error → ValidationError, no write.
     No allowed key at all → NoOpError, no write.
  5. Otherwise ``updated_at`` is stamped and the delta is committed as a
     single update of the development row.

A missing development is reported (NotFoundError) before the payload is
looked at. Storage failures surface as StorageError from the repository.

Usage:
    from devtracker.services.reconciliation import apply_section_update

    development = apply_section_update(42, "commercial", {"probability": "80"})
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import NamedTuple

from devtracker.core.exceptions import NoOpError, NotFoundError, ValidationError
from devtracker.services import development_repository as repo
from devtracker.services.coercion import MESSAGES, REQUIRED, CoercionError, coerce_value
from devtracker.services.sections import DEVELOPMENT_SECTIONS
from devtracker.utils.helpers import utcnow

logger = logging.getLogger(__name__)


class Reconciliation(NamedTuple):
    delta: dict
    errors: dict


def reconcile(fields: Mapping, payload: Mapping) -> Reconciliation:
    """Filter ``payload`` to ``fields`` and coerce every surviving value.

    Pure: no storage access. Returns the typed delta and a
    ``{field: message}`` map of every failure.
    """
    delta: dict = {}
    errors: dict = {}
    for key, raw in payload.items():
        spec = fields.get(key)
        if spec is None:
            continue
        try:
            delta[key] = coerce_value(raw, spec)
        except CoercionError as exc:
            errors[key] = exc.message
    return Reconciliation(delta, errors)


def coerce_payload(
    fields: Mapping, payload, *, creating: bool = False, allow_empty: bool = False,
) -> dict:
    """Reconcile and raise on failure; returns the delta.

    With ``creating`` set, required fields absent from the payload are
    reported as errors too (on updates they simply stay untouched).

    Raises:
        ValidationError: payload is not an object, or a field failed.
        NoOpError: no allowed field present (unless ``allow_empty``).
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")
    delta, errors = reconcile(fields, payload)
    if creating:
        for key, spec in fields.items():
            if spec.required and key not in payload:
                errors[key] = MESSAGES[REQUIRED]
    if errors:
        raise ValidationError("Validation failed", details=errors)
    if not delta and not allow_empty:
        raise NoOpError()
    return delta


def apply_section_update(
    development_id: int,
    section: str,
    payload,
    now: datetime | None = None,
):
    """Validate ``payload`` against ``section`` and commit it.

    Returns:
        The updated Development.

    Raises:
        NotFoundError: unknown section or development.
        ValidationError / NoOpError: see ``coerce_payload``.
        StorageError: commit failed.
    """
    fields = DEVELOPMENT_SECTIONS.get(section)
    if fields is None:
        raise NotFoundError("Section", section)

    if repo.find_development_by_id(development_id) is None:
        raise NotFoundError("Development", development_id)

    delta = coerce_payload(fields, payload)
    delta["updated_at"] = now or utcnow()

    development = repo.update_development_fields(development_id, delta)
    logger.info(
        "Section %s updated (%d fields)", section, len(delta) - 1,
        extra={"development_id": development_id, "section": section},
    )
    return development
