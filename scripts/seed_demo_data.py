#!/usr/bin/env python3
"""
Development Tracker — Demo Data Seed Script.

Creates the lookup tables, four developments at different stages (one of
them stalled) and five tasks (two needing review, one overdue). All
development writes go through the service layer, so the seeded data is
exactly what the API would have produced.

Usage:
    python scripts/seed_demo_data.py
    python scripts/seed_demo_data.py --append
    APP_ENV=production python scripts/seed_demo_data.py
"""

import argparse
import logging
import sys
from datetime import timedelta

sys.path.insert(0, ".")

from devtracker import create_app
from devtracker.models import db
from devtracker.models.development import Development
from devtracker.models.lookups import (
    Contact, DevelopmentStatus, MediaOwner, Orientation, PanelSize, PanelType,
    PlanningStatus, StructureType, TaskType,
)
from devtracker.services import development_service, panel_config_service, task_service
from devtracker.services.reconciliation import apply_section_update
from devtracker.utils.helpers import utcnow

logger = logging.getLogger("seed")

# ── Lookup data ──────────────────────────────────────────────────────────

DEVELOPMENT_STATUSES = [
    ("Offer accepted", "Deal agreed, development created", "#17a2b8"),
    ("Head of terms agreed", "Formal terms documented", "#17a2b8"),
    ("ASGF required", "Advertising Safety Guidance Form needed (roadside)", "#ffc107"),
    ("Awaiting ASGF outcome", "Waiting on ASGF approval", "#ffc107"),
    ("Planning / advert application submitted", "Application with local authority", "#6f42c1"),
    ("Planning / advert consent refused", "Need to appeal or redesign", "#dc3545"),
    ("Planning / advert consent granted", "Approved - can proceed", "#28a745"),
    ("Contracts in negotiation", "Legal stage - negotiating contracts", "#fd7e14"),
    ("Contracts exchanged", "Legally committed", "#28a745"),
    ("Out to tender", "Finding advertisers", "#20c997"),
    ("Site in development", "Construction underway", "#6610f2"),
    ("Site operational", "Live and earning", "#28a745"),
    ("Development on hold", "Temporary pause", "#6c757d"),
    ("Development dropped", "Cancelled/abandoned", "#dc3545"),
]

SIMPLE_LOOKUPS = {
    PlanningStatus: ["Submitted", "Validated", "Approved", "Refused", "Withdrawn"],
    MediaOwner: ["Clear Channel", "Global", "JCDecaux", "Ocean Outdoor"],
    TaskType: ["Call", "Email", "Meeting", "Site Visit", "Internal"],
    PanelType: ["Digital", "Paper & Paste", "Backlit"],
    PanelSize: ["48 Sheet", "96 Sheet", "6 Sheet"],
    Orientation: ["Landscape", "Portrait"],
    StructureType: ["Monopole", "Wall mounted", "Gantry"],
}

CONTACTS = [
    ("Harper & Lowe LLP", "Harper & Lowe", "lawyer"),
    ("Outdoor Sites Ltd", "Outdoor Sites", "contracting_entity"),
    ("Dana Whitfield", "Media Agents UK", "agent"),
]


def _get_or_create(model, name, **fields):
    row = model.query.filter_by(name=name).first()
    if row is None:
        row = model(name=name, **fields)
        db.session.add(row)
    return row


def seed_lookups():
    statuses = {}
    for order, (name, description, colour) in enumerate(DEVELOPMENT_STATUSES, start=1):
        statuses[name] = _get_or_create(
            DevelopmentStatus, name, description=description, colour=colour, sort_order=order,
        )
    ids = {}
    for model, names in SIMPLE_LOOKUPS.items():
        for order, name in enumerate(names, start=1):
            ids[(model, name)] = _get_or_create(model, name, sort_order=order)
    for name, company, role in CONTACTS:
        ids[(Contact, name)] = _get_or_create(Contact, name, company=company, role=role)
    db.session.commit()
    return statuses, ids


def seed_developments(statuses, ids):
    now = utcnow()
    today = now.date()
    stale = now - timedelta(days=60)

    # Commercial, untouched for two months: shows up as stalled
    cromwell = development_service.create_development(
        {"name": "92 Cromwell Road", "project_no": 1001,
         "status_id": statuses["Contracts in negotiation"].id, "internal_developer": "Jo Patel"},
        now=stale,
    )
    apply_section_update(cromwell.id, "commercial", {
        "offer_agreed": str(today - timedelta(days=90)), "lease_per_annum": "18000",
        "probability": "60", "term": "15",
    }, now=stale)

    # Planning submitted
    high_street = development_service.create_development(
        {"name": "Manchester High Street", "project_no": 1002,
         "status_id": statuses["Planning / advert application submitted"].id},
    )
    apply_section_update(high_street.id, "design", {"design_signed_off": "Yes"})
    apply_section_update(high_street.id, "planning", {
        "planning_app_status_id": ids[(PlanningStatus, "Submitted")].id,
        "planning_application_submitted": str(today - timedelta(days=14)),
        "planning_score": "4",
    })

    # Out to tender with an offer
    junction = development_service.create_development(
        {"name": "M1 Junction 12", "project_no": 1003, "status_id": statuses["Out to tender"].id},
    )
    apply_section_update(junction.id, "marketing", {
        "media_owner_id": ids[(MediaOwner, "Global")].id,
        "media_owner_agent_id": ids[(Contact, "Dana Whitfield")].id,
    })
    task_service.add_tender_offer(junction.id, {
        "offer_amount": "42000", "offer_from": "Global", "offer_date": str(today - timedelta(days=3)),
    })
    panel_config_service.apply_panel_batch(junction.id, {"create": [
        {"panel_type_id": ids[(PanelType, "Digital")].id, "panel_size_id": ids[(PanelSize, "48 Sheet")].id,
         "digital": "Yes", "illuminated": "Yes", "sides": 2, "quantity": 1},
    ]})

    # Live and operational
    station = development_service.create_development(
        {"name": "Birmingham Station Road", "project_no": 1004,
         "status_id": statuses["Site operational"].id},
    )
    apply_section_update(station.id, "build", {
        "build_start_date": str(today - timedelta(days=120)),
        "build_completion_date": str(today - timedelta(days=70)),
        "build_live_date": str(today - timedelta(days=60)),
        "build_contractor": "Signworks",
    })
    task_service.add_note(station.id, {"body": "Screen commissioned", "author": "Jo Patel"})

    # Tasks
    task_service.create_task(high_street.id, {
        "description": "Chase planning officer", "assigned_to": "sam", "assigned_by_id": "jo",
        "due_date": str(today + timedelta(days=7)), "task_type_id": ids[(TaskType, "Call")].id,
    })
    task_service.create_task(junction.id, {
        "description": "Review tender offers", "assigned_to": "alex", "assigned_by_id": "jo",
        "due_date": str(today + timedelta(days=2)), "task_type_id": ids[(TaskType, "Meeting")].id,
    })
    task_service.create_task(junction.id, {
        "description": "Send heads of terms", "assigned_to": "alex", "assigned_by_id": "alex",
        "due_date": str(today - timedelta(days=4)), "task_type_id": ids[(TaskType, "Email")].id,
    })
    task_service.create_task(station.id, {
        "description": "Book maintenance visit", "assigned_to": "jo",
        "due_date": str(today + timedelta(days=30)), "task_type_id": ids[(TaskType, "Site Visit")].id,
    })
    done = task_service.create_task(high_street.id, {
        "description": "Upload design pack", "assigned_to": "sam",
    })
    task_service.set_task_complete(done.id, True)

    return [cromwell, high_street, junction, station]


def seed_all(app, append=False):
    with app.app_context():
        if not append and Development.query.first() is not None:
            logger.warning("Developments already exist; use --append to add more")
            return
        statuses, ids = seed_lookups()
        developments = seed_developments(statuses, ids)
        logger.info("Seeded %d developments", len(developments))


def main():
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument("--append", action="store_true")
    args = parser.parse_args()

    app = create_app()
    logger.info("DB: %s", app.config["SQLALCHEMY_DATABASE_URI"])
    with app.app_context():
        db.create_all()
    seed_all(app, append=args.append)


if __name__ == "__main__":
    main()
