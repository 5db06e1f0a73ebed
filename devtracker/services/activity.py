"""Task & activity aggregation.

Pure functions over task lists and development snapshots. Nothing here
queries or writes; the caller supplies the evaluation instant ``now`` so
results never depend on the wall clock.

    open_count          tasks not yet complete
    is_overdue          incomplete and due strictly before today
    needs_review        the stored flag, nothing derived
    sort_next_actions   needs-review first, then due date, then newest
    is_stalled          untouched for the threshold and not parked/live
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from devtracker.services.lifecycle import NEXT_STEP_HINTS, Stage, infer_stage
from devtracker.utils.helpers import ensure_utc

DEFAULT_STALLED_AFTER_DAYS = 30

# Far-future stand-in so tasks without a due date sort after dated ones
_NO_DUE_DATE = date.max


def _today(now: datetime | date) -> date:
    return now.date() if isinstance(now, datetime) else now


def open_count(tasks: Iterable) -> int:
    return sum(1 for task in tasks if not task.complete)


def is_overdue(task, now: datetime | date) -> bool:
    if task.complete or task.due_date is None:
        return False
    return task.due_date < _today(now)


def needs_review(task) -> bool:
    return bool(task.needs_review)


def task_sort_key(task):
    """Total order: needs-review first, earliest due date, newest created, id."""
    created = ensure_utc(task.created_at)
    created_rank = -created.timestamp() if created else 0.0
    return (
        not needs_review(task),
        task.due_date or _NO_DUE_DATE,
        created_rank,
        -(task.id or 0),
    )


def sort_next_actions(tasks: Iterable) -> list:
    return sorted(tasks, key=task_sort_key)


def next_actions(tasks: Iterable, limit: int | None = None) -> list:
    """Open tasks in next-action order."""
    ordered = sort_next_actions(task for task in tasks if not task.complete)
    return ordered if limit is None else ordered[:limit]


def task_metrics(tasks: Iterable, now: datetime | date) -> dict:
    tasks = list(tasks)
    return {
        "total": len(tasks),
        "open": open_count(tasks),
        "overdue": sum(1 for task in tasks if is_overdue(task, now)),
        "needs_review": sum(1 for task in tasks if not task.complete and needs_review(task)),
    }


def is_parked(development) -> bool:
    status = getattr(development, "status", None)
    return bool(status is not None and status.is_parked)


def is_stalled(
    development,
    now: datetime,
    threshold_days: int = DEFAULT_STALLED_AFTER_DAYS,
) -> bool:
    """Untouched for longer than ``threshold_days`` while still active.

    Live developments and those in a parked status are never stalled.
    """
    if infer_stage(development) is Stage.LIVE or is_parked(development):
        return False
    updated_at = ensure_utc(development.updated_at)
    if updated_at is None:
        return False
    return updated_at < ensure_utc(now) - timedelta(days=threshold_days)


def days_since_update(development, now: datetime) -> int | None:
    updated_at = ensure_utc(development.updated_at)
    if updated_at is None:
        return None
    return (ensure_utc(now) - updated_at).days


def recommend_next_step(development, tasks: Iterable | None = None) -> dict:
    """The first open task if there is one, otherwise a per-stage hint."""
    pending = next_actions(development.tasks if tasks is None else tasks, limit=1)
    if pending:
        task = pending[0]
        return {
            "source": "task",
            "task_id": task.id,
            "text": task.description,
            "due_date": task.due_date.isoformat() if task.due_date else None,
        }
    stage = infer_stage(development)
    return {"source": "stage", "stage": stage.value, "text": NEXT_STEP_HINTS[stage]}


def display_order(tasks: Iterable) -> list:
    """Open tasks in next-action order, completed ones after them."""
    tasks = list(tasks)
    return next_actions(tasks) + sort_next_actions(task for task in tasks if task.complete)
