"""Section allow-lists.

Each editable section of a development owns a disjoint set of fields. A
section is a plain mapping ``field name → FieldSpec``; the keys are the
allow-list, the values say how each field is coerced. The reconciler
reads these tables at call time and nothing else decides which fields an
endpoint may write.

Text limits and numeric widths mirror the columns in ``devtracker.models``.
"""

from types import MappingProxyType

from devtracker.services.coercion import (
    BOOLEAN, DATE, DECIMAL, ENUM, FOREIGN_KEY, INTEGER, TEXT, YES_NO_TBC, FieldSpec,
)

_TEXT = FieldSpec(TEXT)
_DATE = FieldSpec(DATE)
_DECIMAL = FieldSpec(DECIMAL)
_INTEGER = FieldSpec(INTEGER)
_FK = FieldSpec(FOREIGN_KEY)
_YEARS = FieldSpec(DECIMAL, integer_digits=4)       # Numeric(6, 2)
_METRES = FieldSpec(DECIMAL, integer_digits=6)      # Numeric(8, 2)


def _text(max_length: int, required: bool = False) -> FieldSpec:
    return FieldSpec(TEXT, required=required, max_length=max_length)


def _section(fields: dict) -> MappingProxyType:
    return MappingProxyType(dict(fields))


OVERVIEW_FIELDS = _section({
    "name": _text(200),
    "project_no": _INTEGER,
    "status_id": _FK,
    "internal_developer": _text(150),
})

# Creating a development: same fields, but it must be named
NEW_DEVELOPMENT_FIELDS = _section({
    **OVERVIEW_FIELDS,
    "name": _text(200, required=True),
})

COMMERCIAL_FIELDS = _section({
    # Deal summary
    "offer_agreed": _DATE,
    "lease_per_annum": _DECIMAL,
    "contract_signed": _DATE,
    "probability": FieldSpec(
        INTEGER, minimum=0, maximum=100,
        range_message="Probability must be between 0 and 100",
    ),
    "estimate_or_actual": _text(20),
    # Cost
    "purchase_price": _DECIMAL,
    # Revenue
    "rental_value": _DECIMAL,
    "lease_start_date": _DATE,
    "term": _YEARS,
    # Profit
    "profit_year1": _DECIMAL,
    "profit_thereafter": _DECIMAL,
    "fee_proposal": _text(200),
    # Consultancy
    "rental_value_consultancy": _DECIMAL,
    "consultancy_financials": _TEXT,
    # Existing lease
    "current_rent_per_annum": _DECIMAL,
    "current_lease_start_date": _DATE,
    "current_lease_end_date": _DATE,
    "current_lease_term": _YEARS,
    "current_lease_url": _text(500),
    # Agreement for lease
    "afl_signed": _DATE,
    "afl_expiry_date": _DATE,
    "afl_signed_comment": _TEXT,
    "afl_expiry_comment": _TEXT,
    # Contract terms
    "contracting_entity_id": _FK,
    "matter_no": _text(50),
    "contract_issued": _DATE,
    "lease_assignable": _text(20),
    "rpi_increases": _text(50),
    "rent_commencement": _text(100),
    "contract_term": _text(100),
    "contract_annual_rent": _text(100),
    "contract_url": _text(500),
    # Legal
    "lawyer_id": _FK,
})

DESIGN_FIELDS = _section({
    "design_url": _text(500),
    "design_final_or_draft": _text(20),
    "design_signed_off": _text(10),
    "design_signed_off_date": _DATE,
    "design_signed_off_by": _text(150),
})

PLANNING_FIELDS = _section({
    # Planning application
    "planning_app_status_id": _FK,
    "planning_score": FieldSpec(
        INTEGER, minimum=1, maximum=5,
        range_message="Planning score must be between 1 and 5",
    ),
    "planning_application_description": _TEXT,
    "planning_application_detail": _TEXT,
    "planning_client_approval": _text(50),
    "planning_application_submitted": _DATE,
    "planning_app_registration": _DATE,
    "planning_app_ref_la": _text(100),
    "planning_app_determination_date": _DATE,
    "planning_conditions": _TEXT,
    "planning_conditions_number": _INTEGER,
    # Planning appeal
    "planning_appeal_submitted": _DATE,
    "planning_appeal_start": _DATE,
    "planning_appeal_ref_la": _text(100),
    "planning_appeal_procedure": _text(100),
    # Advertisement application
    "advert_app_status_id": _FK,
    "advert_application_description": _TEXT,
    "advert_application_detail": _TEXT,
    "advert_application_submitted": _DATE,
    "advert_application_registration": _DATE,
    "advert_app_ref_la": _text(100),
    "advert_app_determination_date": _DATE,
    "advert_conditions": _TEXT,
    "advert_conditions_number": _INTEGER,
    # Advertisement appeal
    "advert_appeal_submitted": _DATE,
    "advert_appeal_start": _DATE,
    "advert_appeal_ref_la": _text(100),
    "advert_appeal_procedure": _text(100),
})

MARKETING_FIELDS = _section({
    "media_owner_id": _FK,
    "media_owner_agent_id": _FK,
})

BUILD_FIELDS = _section({
    "build_start_date": _DATE,
    "build_completion_date": _DATE,
    "build_live_date": _DATE,
    "build_contractor": _text(200),
    "build_notes": _TEXT,
})

PANEL_CONFIGURATION_FIELDS = _section({
    "panel_type_id": _FK,
    "panel_size_id": _FK,
    "orientation_id": _FK,
    "structure_type_id": _FK,
    "digital": FieldSpec(ENUM, choices=YES_NO_TBC),
    "illuminated": FieldSpec(ENUM, choices=YES_NO_TBC),
    "sides": _INTEGER,
    "quantity": _INTEGER,
    "height": _METRES,
    "width": _METRES,
})

TENDER_OFFER_FIELDS = _section({
    "offer_amount": _DECIMAL,
    "offer_from": _text(200),
    "offer_date": _DATE,
})

NOTE_FIELDS = _section({
    "body": FieldSpec(TEXT, required=True),
    "author": _text(150),
    "note_date": _DATE,
})

TASK_FIELDS = _section({
    "description": FieldSpec(TEXT, required=True),
    "due_date": _DATE,
    "priority": _text(20),
    "assigned_to": _text(150),
    "assigned_by_id": _text(150),
    "task_type_id": _FK,
    "needs_review": FieldSpec(BOOLEAN),
})

# Sections that write columns on the development row itself
DEVELOPMENT_SECTIONS = MappingProxyType({
    "overview": OVERVIEW_FIELDS,
    "commercial": COMMERCIAL_FIELDS,
    "design": DESIGN_FIELDS,
    "planning": PLANNING_FIELDS,
    "marketing": MARKETING_FIELDS,
    "build": BUILD_FIELDS,
})
