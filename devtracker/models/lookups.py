"""
Development Tracker
Lookup (reference) tables.

Foreign keys on developments, tasks and panel configurations point here.
Coercion only turns submitted ids into integers; the FK constraints on
these tables are what reject ids that do not exist.

Models:
    - DevelopmentStatus: pipeline status of a development
    - PlanningStatus: status of a planning / advertisement application
    - MediaOwner: company that sells advertising on a finished site
    - Contact: agents, lawyers and contracting entities
    - TaskType: call, email, meeting, site visit, ...
    - PanelType / PanelSize / Orientation / StructureType: panel references
"""

from devtracker.models import db


# Statuses that park a development: it is deliberately not moving, so it
# is never reported as stalled.
PARKED_STATUS_NAMES = {
    "Site operational",
    "Development on hold",
    "Development dropped",
}


class LookupMixin:
    """id + unique name + sort order, serialised as {id, name}."""

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), unique=True, nullable=False)
    sort_order = db.Column(db.Integer, default=0)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}: {self.name}>"


class DevelopmentStatus(LookupMixin, db.Model):
    __tablename__ = "development_statuses"

    description = db.Column(db.String(300), nullable=True)
    colour = db.Column(db.String(10), nullable=True)

    @property
    def is_parked(self) -> bool:
        return self.name in PARKED_STATUS_NAMES

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "colour": self.colour,
            "is_parked": self.is_parked,
        }


class PlanningStatus(LookupMixin, db.Model):
    __tablename__ = "planning_statuses"


class MediaOwner(LookupMixin, db.Model):
    __tablename__ = "media_owners"


class Contact(LookupMixin, db.Model):
    __tablename__ = "contacts"

    company = db.Column(db.String(150), nullable=True)
    role = db.Column(db.String(50), nullable=True, comment="agent | lawyer | contracting_entity")


class TaskType(LookupMixin, db.Model):
    __tablename__ = "task_types"


class PanelType(LookupMixin, db.Model):
    __tablename__ = "panel_types"


class PanelSize(LookupMixin, db.Model):
    __tablename__ = "panel_sizes"


class Orientation(LookupMixin, db.Model):
    __tablename__ = "orientations"


class StructureType(LookupMixin, db.Model):
    __tablename__ = "structure_types"
