"""Standardised API error responses.

Usage
-----
    from devtracker.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Development not found")
    return api_error(E.VALIDATION_INVALID, "Validation failed", details=errors)
"""

from __future__ import annotations

from flask import jsonify


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants (``ERR_`` prefix)."""

    # Validation – HTTP 400
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"
    NOTHING_TO_UPDATE = "ERR_NOTHING_TO_UPDATE"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Server – HTTP 500
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.NOTHING_TO_UPDATE: 400,
    E.NOT_FOUND: 404,
    E.DATABASE: 500,
    E.INTERNAL: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for developers / UI.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Field-level errors (``{field: message}``).

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


def register_core_error_handlers(bp):
    """Attach the core exception → JSON mapping to a blueprint."""
    import logging

    from flask import request
    from werkzeug.exceptions import HTTPException

    from devtracker.core.exceptions import (
        NoOpError, NotFoundError, StorageError, ValidationError,
    )

    logger = logging.getLogger(bp.import_name)

    @bp.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return api_error(E.NOT_FOUND, f"{error.resource} not found")

    @bp.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @bp.errorhandler(NoOpError)
    def _handle_noop(error: NoOpError):
        return api_error(E.NOTHING_TO_UPDATE, str(error))

    @bp.errorhandler(StorageError)
    def _handle_storage(error: StorageError):
        return api_error(E.DATABASE, "Database error")

    @bp.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return error
        logger.exception("Unexpected error in %s endpoint=%s", bp.name, request.endpoint)
        return api_error(E.INTERNAL, "Internal server error")
