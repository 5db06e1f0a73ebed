"""
Development Tracker
Development domain models.

Models:
    - Development: one advertising-site development project. Fields are
      grouped by the lifecycle section that owns (and edits) them.
    - PanelConfiguration: a physical panel/sign specification (0..n per
      development, table ``development_details``)
    - TenderOffer: an offer received while marketing the site
    - DevelopmentNote: free-text activity entry

There is no stored "stage" column: the current stage is always derived
from the populated fields (see devtracker.services.lifecycle).
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from devtracker.models import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def serialize_value(value):
    """JSON-safe rendering of a column value."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


class Development(db.Model):
    """A development project moving through survey → ... → live."""

    __tablename__ = "developments"

    id = db.Column(db.Integer, primary_key=True)

    # ── Overview ──
    name = db.Column(db.String(200), nullable=True)
    project_no = db.Column(db.Integer, nullable=True, index=True)
    status_id = db.Column(
        db.Integer, db.ForeignKey("development_statuses.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    internal_developer = db.Column(db.String(150), nullable=True)

    # ── Commercial: deal summary ──
    offer_agreed = db.Column(db.Date, nullable=True)
    lease_per_annum = db.Column(db.Numeric(12, 2), nullable=True)
    contract_signed = db.Column(db.Date, nullable=True)
    probability = db.Column(db.Integer, nullable=True, comment="0-100")
    estimate_or_actual = db.Column(db.String(20), nullable=True)
    # cost / revenue / profit
    purchase_price = db.Column(db.Numeric(12, 2), nullable=True)
    rental_value = db.Column(db.Numeric(12, 2), nullable=True)
    lease_start_date = db.Column(db.Date, nullable=True)
    term = db.Column(db.Numeric(6, 2), nullable=True, comment="years")
    profit_year1 = db.Column(db.Numeric(12, 2), nullable=True)
    profit_thereafter = db.Column(db.Numeric(12, 2), nullable=True)
    fee_proposal = db.Column(db.String(200), nullable=True)
    # consultancy
    rental_value_consultancy = db.Column(db.Numeric(12, 2), nullable=True)
    consultancy_financials = db.Column(db.Text, nullable=True)
    # existing lease
    current_rent_per_annum = db.Column(db.Numeric(12, 2), nullable=True)
    current_lease_start_date = db.Column(db.Date, nullable=True)
    current_lease_end_date = db.Column(db.Date, nullable=True)
    current_lease_term = db.Column(db.Numeric(6, 2), nullable=True)
    current_lease_url = db.Column(db.String(500), nullable=True)
    # agreement for lease
    afl_signed = db.Column(db.Date, nullable=True)
    afl_expiry_date = db.Column(db.Date, nullable=True)
    afl_signed_comment = db.Column(db.Text, nullable=True)
    afl_expiry_comment = db.Column(db.Text, nullable=True)
    # contract terms
    contracting_entity_id = db.Column(
        db.Integer, db.ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True,
    )
    matter_no = db.Column(db.String(50), nullable=True)
    contract_issued = db.Column(db.Date, nullable=True)
    lease_assignable = db.Column(db.String(20), nullable=True)
    rpi_increases = db.Column(db.String(50), nullable=True)
    rent_commencement = db.Column(db.String(100), nullable=True)
    contract_term = db.Column(db.String(100), nullable=True)
    contract_annual_rent = db.Column(db.String(100), nullable=True)
    contract_url = db.Column(db.String(500), nullable=True)
    lawyer_id = db.Column(
        db.Integer, db.ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True,
    )

    # ── Design ──
    design_url = db.Column(db.String(500), nullable=True)
    design_final_or_draft = db.Column(db.String(20), nullable=True, comment="Stock | Proposed | Draft | Final")
    design_signed_off = db.Column(db.String(10), nullable=True, comment="Yes | No | TBC")
    design_signed_off_date = db.Column(db.Date, nullable=True)
    design_signed_off_by = db.Column(db.String(150), nullable=True)

    # ── Planning: planning application ──
    planning_app_status_id = db.Column(
        db.Integer, db.ForeignKey("planning_statuses.id", ondelete="SET NULL"), nullable=True,
    )
    planning_score = db.Column(db.Integer, nullable=True, comment="1-5")
    planning_application_description = db.Column(db.Text, nullable=True)
    planning_application_detail = db.Column(db.Text, nullable=True)
    planning_client_approval = db.Column(db.String(50), nullable=True)
    planning_application_submitted = db.Column(db.Date, nullable=True)
    planning_app_registration = db.Column(db.Date, nullable=True)
    planning_app_ref_la = db.Column(db.String(100), nullable=True)
    planning_app_determination_date = db.Column(db.Date, nullable=True)
    planning_conditions = db.Column(db.Text, nullable=True)
    planning_conditions_number = db.Column(db.Integer, nullable=True)
    planning_appeal_submitted = db.Column(db.Date, nullable=True)
    planning_appeal_start = db.Column(db.Date, nullable=True)
    planning_appeal_ref_la = db.Column(db.String(100), nullable=True)
    planning_appeal_procedure = db.Column(db.String(100), nullable=True)
    # ── Planning: advertisement application ──
    advert_app_status_id = db.Column(
        db.Integer, db.ForeignKey("planning_statuses.id", ondelete="SET NULL"), nullable=True,
    )
    advert_application_description = db.Column(db.Text, nullable=True)
    advert_application_detail = db.Column(db.Text, nullable=True)
    advert_application_submitted = db.Column(db.Date, nullable=True)
    advert_application_registration = db.Column(db.Date, nullable=True)
    advert_app_ref_la = db.Column(db.String(100), nullable=True)
    advert_app_determination_date = db.Column(db.Date, nullable=True)
    advert_conditions = db.Column(db.Text, nullable=True)
    advert_conditions_number = db.Column(db.Integer, nullable=True)
    advert_appeal_submitted = db.Column(db.Date, nullable=True)
    advert_appeal_start = db.Column(db.Date, nullable=True)
    advert_appeal_ref_la = db.Column(db.String(100), nullable=True)
    advert_appeal_procedure = db.Column(db.String(100), nullable=True)

    # ── Marketing ──
    media_owner_id = db.Column(
        db.Integer, db.ForeignKey("media_owners.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    media_owner_agent_id = db.Column(
        db.Integer, db.ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True,
    )

    # ── Build ──
    build_start_date = db.Column(db.Date, nullable=True)
    build_completion_date = db.Column(db.Date, nullable=True)
    build_live_date = db.Column(db.Date, nullable=True)
    build_contractor = db.Column(db.String(200), nullable=True)
    build_notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    # Stamped explicitly by every reconciliation commit and sub-record write
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    # ── Relationships ──
    status = db.relationship("DevelopmentStatus", lazy="joined")
    media_owner = db.relationship("MediaOwner", foreign_keys=[media_owner_id])
    media_owner_agent = db.relationship("Contact", foreign_keys=[media_owner_agent_id])
    planning_app_status = db.relationship("PlanningStatus", foreign_keys=[planning_app_status_id])
    advert_app_status = db.relationship("PlanningStatus", foreign_keys=[advert_app_status_id])

    tasks = db.relationship(
        "DevelopmentTask", backref="development", cascade="all, delete-orphan",
        order_by="DevelopmentTask.id",
    )
    notes = db.relationship(
        "DevelopmentNote", backref="development", cascade="all, delete-orphan",
        order_by=lambda: (DevelopmentNote.note_date.desc(), DevelopmentNote.id.desc()),
    )
    panel_configurations = db.relationship(
        "PanelConfiguration", backref="development", cascade="all, delete-orphan",
        order_by="PanelConfiguration.id",
    )
    tender_offers = db.relationship(
        "TenderOffer", backref="development", cascade="all, delete-orphan",
        order_by="TenderOffer.id",
    )

    @property
    def status_name(self) -> str | None:
        return self.status.name if self.status else None

    def field_values(self) -> dict:
        """Every column as a JSON-safe value, keyed by attribute name."""
        return {
            col.key: serialize_value(getattr(self, col.key))
            for col in self.__table__.columns
        }

    def to_dict(self) -> dict:
        data = self.field_values()
        data["status"] = self.status.to_dict() if self.status else None
        data["media_owner"] = self.media_owner.to_dict() if self.media_owner else None
        return data

    def __repr__(self) -> str:
        return f"<Development {self.id}: {self.name or self.project_no}>"


class PanelConfiguration(db.Model):
    """Physical panel specification attached to a development."""

    __tablename__ = "development_details"

    id = db.Column(db.Integer, primary_key=True)
    development_id = db.Column(
        db.Integer, db.ForeignKey("developments.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    panel_type_id = db.Column(db.Integer, db.ForeignKey("panel_types.id", ondelete="SET NULL"), nullable=True)
    panel_size_id = db.Column(db.Integer, db.ForeignKey("panel_sizes.id", ondelete="SET NULL"), nullable=True)
    orientation_id = db.Column(db.Integer, db.ForeignKey("orientations.id", ondelete="SET NULL"), nullable=True)
    structure_type_id = db.Column(
        db.Integer, db.ForeignKey("structure_types.id", ondelete="SET NULL"), nullable=True,
    )
    digital = db.Column(db.String(3), nullable=True, comment="Yes | No | TBC")
    illuminated = db.Column(db.String(3), nullable=True, comment="Yes | No | TBC")
    sides = db.Column(db.Integer, nullable=True)
    quantity = db.Column(db.Integer, nullable=True)
    height = db.Column(db.Numeric(8, 2), nullable=True, comment="metres")
    width = db.Column(db.Numeric(8, 2), nullable=True, comment="metres")

    panel_type = db.relationship("PanelType")
    panel_size = db.relationship("PanelSize")
    orientation = db.relationship("Orientation")
    structure_type = db.relationship("StructureType")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "development_id": self.development_id,
            "panel_type_id": self.panel_type_id,
            "panel_type": self.panel_type.to_dict() if self.panel_type else None,
            "panel_size_id": self.panel_size_id,
            "panel_size": self.panel_size.to_dict() if self.panel_size else None,
            "orientation_id": self.orientation_id,
            "orientation": self.orientation.to_dict() if self.orientation else None,
            "structure_type_id": self.structure_type_id,
            "structure_type": self.structure_type.to_dict() if self.structure_type else None,
            "digital": self.digital,
            "illuminated": self.illuminated,
            "sides": self.sides,
            "quantity": self.quantity,
            "height": serialize_value(self.height),
            "width": serialize_value(self.width),
        }

    def __repr__(self) -> str:
        return f"<PanelConfiguration {self.id} dev={self.development_id}>"


class TenderOffer(db.Model):
    """An offer from a media owner received while the site is out to tender."""

    __tablename__ = "tender_offers"

    id = db.Column(db.Integer, primary_key=True)
    development_id = db.Column(
        db.Integer, db.ForeignKey("developments.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    offer_amount = db.Column(db.Numeric(12, 2), nullable=True)
    offer_from = db.Column(db.String(200), nullable=True)
    offer_date = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "development_id": self.development_id,
            "offer_amount": serialize_value(self.offer_amount),
            "offer_from": self.offer_from,
            "offer_date": serialize_value(self.offer_date),
        }


class DevelopmentNote(db.Model):
    """Free-text activity entry; the detail view shows the newest first."""

    __tablename__ = "development_notes"

    id = db.Column(db.Integer, primary_key=True)
    development_id = db.Column(
        db.Integer, db.ForeignKey("developments.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    note_date = db.Column(db.Date, nullable=False, default=date.today)
    author = db.Column(db.String(150), nullable=True)
    body = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "development_id": self.development_id,
            "note_date": serialize_value(self.note_date),
            "author": self.author,
            "body": self.body,
            "created_at": serialize_value(self.created_at),
        }
