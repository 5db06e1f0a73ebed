"""Development lifecycle — stage inference.

A development's stage is never stored. It is read off the populated
fields every time, so the list view, the detail view and the dashboard
cannot disagree and there is no cached value to go stale.

Inference scans from the most advanced stage down; the first stage whose
signal is present wins:

    live        build_live_date
    build       build_start_date or build_completion_date
    marketing   media_owner_id
    planning    planning_application_submitted or advert_application_submitted
    design      design_signed_off == "Yes"
    commercial  contract_signed or offer_agreed
    survey      (default)

Stage completeness is a separate, stricter check per stage. A stage can be
complete without being current and current without being complete.

Both functions accept a Development instance or any mapping with the same
field names.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum


class Stage(str, Enum):
    SURVEY = "survey"
    COMMERCIAL = "commercial"
    DESIGN = "design"
    PLANNING = "planning"
    MARKETING = "marketing"
    BUILD = "build"
    LIVE = "live"


# Pipeline order, earliest first
STAGE_ORDER = (
    Stage.SURVEY,
    Stage.COMMERCIAL,
    Stage.DESIGN,
    Stage.PLANNING,
    Stage.MARKETING,
    Stage.BUILD,
    Stage.LIVE,
)

BUILD_PROGRESS_STEPS = ("Not Started", "In Progress", "Complete", "Live")

NEXT_STEP_HINTS = {
    Stage.SURVEY: "Agree an offer with the site owner",
    Stage.COMMERCIAL: "Get the design signed off",
    Stage.DESIGN: "Submit the planning or advertisement application",
    Stage.PLANNING: "Appoint a media owner",
    Stage.MARKETING: "Start the build",
    Stage.BUILD: "Set the live date",
    Stage.LIVE: "Site is live: monitor performance",
}


def _field(snapshot, name: str):
    if isinstance(snapshot, Mapping):
        return snapshot.get(name)
    return getattr(snapshot, name, None)


def _present(snapshot, *names: str) -> bool:
    """True when any of ``names`` holds a non-blank value."""
    for name in names:
        value = _field(snapshot, name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return True
    return False


def _signed_off(snapshot) -> bool:
    return _field(snapshot, "design_signed_off") == "Yes"


# ── Current stage ────────────────────────────────────────────────────────────

# Highest precedence first
_STAGE_SIGNALS = (
    (Stage.LIVE, lambda s: _present(s, "build_live_date")),
    (Stage.BUILD, lambda s: _present(s, "build_start_date", "build_completion_date")),
    (Stage.MARKETING, lambda s: _present(s, "media_owner_id")),
    (Stage.PLANNING, lambda s: _present(
        s, "planning_application_submitted", "advert_application_submitted",
    )),
    (Stage.DESIGN, _signed_off),
    (Stage.COMMERCIAL, lambda s: _present(s, "contract_signed", "offer_agreed")),
)


def infer_stage(snapshot) -> Stage:
    """Return the furthest stage the snapshot shows evidence of."""
    for stage, has_signal in _STAGE_SIGNALS:
        if has_signal(snapshot):
            return stage
    return Stage.SURVEY


# ── Completeness ─────────────────────────────────────────────────────────────


def _planning_complete(snapshot) -> bool:
    applications = (
        ("planning_application_submitted", "planning_app_determination_date"),
        ("advert_application_submitted", "advert_app_determination_date"),
    )
    submitted = [decided for sent, decided in applications if _present(snapshot, sent)]
    return bool(submitted) and all(_present(snapshot, decided) for decided in submitted)


def _marketing_complete(snapshot) -> bool:
    offers = _field(snapshot, "tender_offers") or ()
    return _present(snapshot, "media_owner_id") and len(offers) > 0


_COMPLETENESS = {
    # survey ends once an offer is agreed
    Stage.SURVEY: lambda s: _present(s, "offer_agreed"),
    Stage.COMMERCIAL: lambda s: _present(s, "contract_signed"),
    Stage.DESIGN: _signed_off,
    Stage.PLANNING: _planning_complete,
    Stage.MARKETING: _marketing_complete,
    Stage.BUILD: lambda s: _present(s, "build_completion_date"),
    Stage.LIVE: lambda s: _present(s, "build_live_date"),
}


def is_stage_complete(snapshot, stage: Stage | str) -> bool:
    return _COMPLETENESS[Stage(stage)](snapshot)


def stage_completion(snapshot) -> dict[str, bool]:
    """{stage value: complete?} for every stage, in pipeline order."""
    return {stage.value: is_stage_complete(snapshot, stage) for stage in STAGE_ORDER}


def stage_index(stage: Stage | str) -> int:
    return STAGE_ORDER.index(Stage(stage))


# ── Build progress ───────────────────────────────────────────────────────────


def build_progress(snapshot) -> str:
    """Position on the build card: Not Started → In Progress → Complete → Live."""
    if _present(snapshot, "build_live_date"):
        return BUILD_PROGRESS_STEPS[3]
    if _present(snapshot, "build_completion_date"):
        return BUILD_PROGRESS_STEPS[2]
    if _present(snapshot, "build_start_date"):
        return BUILD_PROGRESS_STEPS[1]
    return BUILD_PROGRESS_STEPS[0]


def lifecycle_summary(snapshot) -> dict:
    stage = infer_stage(snapshot)
    return {
        "stage": stage.value,
        "stage_index": stage_index(stage),
        "stage_completion": stage_completion(snapshot),
        "build_progress": build_progress(snapshot),
    }
