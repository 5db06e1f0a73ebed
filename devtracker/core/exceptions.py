"""
Platform-wide exception hierarchy.

Services raise these; blueprints register handlers against them once and
get consistent HTTP status codes everywhere. The panel-configuration batch
editor catches the same types per item and reports them as result entries.

Usage:
    from devtracker.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Development", resource_id=42)
    raise ValidationError("Validation failed", details={"probability": "..."})
"""


class NotFoundError(Exception):
    """Raised when a development (or one of its sub-records) does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Development", "Panel detail").
        resource_id: The PK that was looked up. Included in logs and messages.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when one or more submitted fields fail coercion.

    Args:
        message: Human-readable summary.
        details: Field-level breakdown. Keys are field names; values are
                 error messages a client can render inline.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class NoOpError(Exception):
    """Raised when a payload carries no recognised fields after filtering."""

    def __init__(self, message: str = "No valid fields to update") -> None:
        super().__init__(message)


class StorageError(Exception):
    """Raised when the storage layer fails during a commit.

    The original exception is chained (``raise ... from exc``) and logged
    by the repository; callers only ever see the generic message.
    """

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message)
