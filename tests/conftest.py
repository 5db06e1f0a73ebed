"""
Shared pytest fixtures for the Development Tracker test suite.

Provides:
    - app: Flask application (session-scoped, in-memory SQLite)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - now: fixed evaluation instant for anything time-dependent
    - make_development / make_task: factories writing straight to the DB
    - lookups: one row in every lookup table
"""

from datetime import datetime, timedelta, timezone

import pytest

from devtracker import create_app
from devtracker.models import db as _db
from devtracker.models.development import Development
from devtracker.models.lookups import (
    Contact, DevelopmentStatus, MediaOwner, Orientation, PanelSize, PanelType,
    PlanningStatus, StructureType, TaskType,
)
from devtracker.models.task import DevelopmentTask

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def now():
    return FIXED_NOW


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def lookups():
    """One row per lookup table, returned by short name."""
    rows = {
        "status": DevelopmentStatus(name="Site identified", sort_order=1),
        "on_hold": DevelopmentStatus(name="Development on hold", sort_order=8),
        "planning_status": PlanningStatus(name="Approved"),
        "media_owner": MediaOwner(name="Clear Channel"),
        "agent": Contact(name="Sam Agent", company="Agents Ltd", role="Agent"),
        "task_type": TaskType(name="Site visit"),
        "panel_type": PanelType(name="Billboard"),
        "panel_size": PanelSize(name="48 sheet"),
        "orientation": Orientation(name="Landscape"),
        "structure_type": StructureType(name="Monopole"),
    }
    _db.session.add_all(rows.values())
    _db.session.commit()
    return rows


@pytest.fixture()
def make_development(now):
    """Factory: insert a development, ``updated_at`` defaults to ``now``."""

    def _make(**fields):
        fields.setdefault("name", "Station Road")
        fields.setdefault("created_at", now - timedelta(days=120))
        fields.setdefault("updated_at", now)
        development = Development(**fields)
        _db.session.add(development)
        _db.session.commit()
        return development

    return _make


@pytest.fixture()
def development(make_development):
    return make_development()


@pytest.fixture()
def make_task(now):
    """Factory: insert a task for a development."""

    def _make(development, **fields):
        fields.setdefault("description", "Chase landlord")
        fields.setdefault("created_at", now - timedelta(days=1))
        fields.setdefault("updated_at", fields["created_at"])
        task = DevelopmentTask(development_id=development.id, **fields)
        _db.session.add(task)
        _db.session.commit()
        return task

    return _make
