"""
Dashboard aggregation.

One pass over developments and open tasks:
  - stage distribution (every stage present, zero when empty)
  - stalled developments, oldest update first
  - task totals: open / overdue / needs review
  - overdue and needs-review lists, and the next actions in display order

``assigned_to`` narrows every task figure to one assignee; the
development figures are unaffected.
"""

from __future__ import annotations

from datetime import datetime

from devtracker.services import activity, development_repository as repo
from devtracker.services.lifecycle import STAGE_ORDER, infer_stage
from devtracker.utils.helpers import ensure_utc, utcnow

NEXT_ACTIONS_LIMIT = 10


def _task_row(task, now) -> dict:
    return {
        **task.to_dict(),
        "development_name": task.development.name if task.development else None,
        "overdue": activity.is_overdue(task, now),
    }


def build_dashboard(
    now: datetime | None = None,
    stalled_after_days: int = activity.DEFAULT_STALLED_AFTER_DAYS,
    assigned_to: str | None = None,
) -> dict:
    now = now or utcnow()
    developments = repo.list_developments()

    stage_counts = {stage.value: 0 for stage in STAGE_ORDER}
    stalled = []
    for development in developments:
        stage = infer_stage(development)
        stage_counts[stage.value] += 1
        if activity.is_stalled(development, now, stalled_after_days):
            stalled.append({
                "id": development.id,
                "name": development.name,
                "stage": stage.value,
                "status": development.status_name,
                "updated_at": ensure_utc(development.updated_at).isoformat(),
                "days_since_update": activity.days_since_update(development, now),
            })
    stalled.sort(key=lambda row: row["updated_at"])

    open_tasks = repo.list_tasks(assigned_to=assigned_to, open_only=True)
    ordered = activity.sort_next_actions(open_tasks)
    overdue = [task for task in ordered if activity.is_overdue(task, now)]
    review = [task for task in ordered if activity.needs_review(task)]

    return {
        "generated_at": ensure_utc(now).isoformat(),
        "developments": {
            "total": len(developments),
            "by_stage": stage_counts,
            "stalled_count": len(stalled),
        },
        "stalled": stalled,
        "tasks": {
            "open": activity.open_count(open_tasks),
            "overdue": len(overdue),
            "needs_review": len(review),
        },
        "overdue_tasks": [_task_row(task, now) for task in overdue],
        "needs_review_tasks": [_task_row(task, now) for task in review],
        "next_actions": [_task_row(task, now) for task in ordered[:NEXT_ACTIONS_LIMIT]],
        "stalled_after_days": stalled_after_days,
    }
