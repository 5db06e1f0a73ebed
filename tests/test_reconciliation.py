"""
Development Tracker
Tests — partial-update reconciliation (service layer + section endpoints).

Covers:
    - allow-list isolation, blank-clears-field
    - every field error surfaced at once with zero writes
    - no-op payloads, unknown sections, missing developments
    - updated_at touched on success, storage failures kept opaque
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from devtracker.core.exceptions import NoOpError, NotFoundError, StorageError, ValidationError
from devtracker.models import db
from devtracker.models.development import Development
from devtracker.services import development_repository
from devtracker.services.reconciliation import apply_section_update, reconcile
from devtracker.services.sections import COMMERCIAL_FIELDS, DESIGN_FIELDS
from devtracker.utils.helpers import ensure_utc


def _reload(development_id):
    db.session.expire_all()
    return db.session.get(Development, development_id)


@pytest.fixture()
def count_writes(monkeypatch):
    """Count calls to the repository's field update."""
    calls = []
    original = development_repository.update_development_fields

    def _counting(development_id, delta):
        calls.append(delta)
        return original(development_id, delta)

    monkeypatch.setattr(development_repository, "update_development_fields", _counting)
    return calls


# ═════════════════════════════════════════════════════════════════════════════
# reconcile(), pure
# ═════════════════════════════════════════════════════════════════════════════


class TestReconcile:
    def test_unknown_keys_are_dropped(self):
        delta, errors = reconcile(DESIGN_FIELDS, {"design_url": "http://x", "lease_per_annum": "900"})
        assert delta == {"design_url": "http://x"}
        assert errors == {}

    def test_all_errors_collected(self):
        delta, errors = reconcile(COMMERCIAL_FIELDS, {
            "probability": "150",
            "offer_agreed": "not a date",
            "lease_per_annum": "abc",
            "matter_no": "M-1",
        })
        assert set(errors) == {"probability", "offer_agreed", "lease_per_annum"}
        assert errors["probability"] == "Probability must be between 0 and 100"
        assert errors["offer_agreed"] == "Must be a valid date"
        assert errors["lease_per_annum"] == "Must be a valid number"
        assert delta == {"matter_no": "M-1"}

    def test_blank_becomes_none(self):
        delta, _ = reconcile(COMMERCIAL_FIELDS, {"offer_agreed": ""})
        assert delta == {"offer_agreed": None}


# ═════════════════════════════════════════════════════════════════════════════
# apply_section_update(), service layer
# ═════════════════════════════════════════════════════════════════════════════


class TestApplySectionUpdate:
    def test_design_update_leaves_commercial_field_alone(self, make_development, now, count_writes):
        dev = make_development(lease_per_annum=Decimal("1000.00"))
        apply_section_update(dev.id, "design", {"design_signed_off": "Yes", "lease_per_annum": "5"}, now=now)

        dev = _reload(dev.id)
        assert dev.design_signed_off == "Yes"
        assert dev.lease_per_annum == Decimal("1000.00")
        assert len(count_writes) == 1
        assert "lease_per_annum" not in count_writes[0]

    def test_success_touches_updated_at(self, make_development, now):
        dev = make_development(updated_at=now - timedelta(days=60))
        later = now + timedelta(hours=1)
        apply_section_update(dev.id, "commercial", {"probability": "80"}, now=later)

        dev = _reload(dev.id)
        assert dev.probability == 80
        assert ensure_utc(dev.updated_at) == later

    def test_blank_clears_field(self, make_development, now):
        dev = make_development(build_contractor="Acme Signs", build_start_date=date(2024, 1, 1))
        apply_section_update(dev.id, "build", {"build_contractor": "", "build_start_date": None}, now=now)

        dev = _reload(dev.id)
        assert dev.build_contractor is None
        assert dev.build_start_date is None

    def test_three_invalid_fields_three_errors_zero_writes(self, make_development, now, count_writes):
        old = now - timedelta(days=10)
        dev = make_development(updated_at=old, probability=20)
        with pytest.raises(ValidationError) as exc:
            apply_section_update(dev.id, "commercial", {
                "probability": "150",
                "offer_agreed": "31/02/2024",
                "lease_per_annum": "lots",
            }, now=now)

        assert len(exc.value.details) == 3
        assert count_writes == []
        dev = _reload(dev.id)
        assert dev.probability == 20
        assert ensure_utc(dev.updated_at) == old

    def test_valid_fields_not_applied_when_another_fails(self, make_development, now):
        dev = make_development()
        with pytest.raises(ValidationError):
            apply_section_update(dev.id, "commercial", {"matter_no": "M-9", "probability": "x"}, now=now)
        assert _reload(dev.id).matter_no is None

    @pytest.mark.parametrize("payload", [{}, {"not_a_field": 1, "lease_per_annum": "5"}])
    def test_nothing_to_update(self, make_development, now, payload, count_writes):
        dev = make_development()
        section = "design" if payload else "build"
        with pytest.raises(NoOpError):
            apply_section_update(dev.id, section, payload, now=now)
        assert count_writes == []

    def test_missing_development_checked_before_payload(self):
        with pytest.raises(NotFoundError):
            apply_section_update(999, "commercial", "not even a mapping")

    def test_unknown_section(self, development):
        with pytest.raises(NotFoundError):
            apply_section_update(development.id, "panel-configuration", {"sides": 2})

    def test_storage_failure_is_opaque(self, development, now, monkeypatch):
        def _boom():
            raise OperationalError("UPDATE developments", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db.session, "commit", _boom)
        with pytest.raises(StorageError) as exc:
            apply_section_update(development.id, "build", {"build_contractor": "X"}, now=now)
        assert str(exc.value) == "Database error"


# ═════════════════════════════════════════════════════════════════════════════
# PATCH /developments/<id>/<section>
# ═════════════════════════════════════════════════════════════════════════════


class TestSectionEndpoints:
    def test_patch_commercial(self, client, development):
        res = client.patch(
            f"/api/v1/developments/{development.id}/commercial",
            json={"probability": "75", "lease_per_annum": "12000.50", "offer_agreed": "01/03/2024"},
        )
        assert res.status_code == 200
        data = res.get_json()
        assert data["probability"] == 75
        assert data["lease_per_annum"] == 12000.5
        assert data["offer_agreed"] == "2024-03-01"

    def test_validation_errors_by_field(self, client, development):
        res = client.patch(
            f"/api/v1/developments/{development.id}/commercial",
            json={"probability": "150", "offer_agreed": "nope", "lease_per_annum": "abc"},
        )
        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == "ERR_VALIDATION_INVALID"
        assert set(body["details"]) == {"probability", "offer_agreed", "lease_per_annum"}

    def test_empty_payload_is_nothing_to_update(self, client, development):
        res = client.patch(f"/api/v1/developments/{development.id}/design", json={})
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_NOTHING_TO_UPDATE"

    def test_missing_development(self, client):
        res = client.patch("/api/v1/developments/404/design", json={"design_url": "x"})
        assert res.status_code == 404
        assert res.get_json()["code"] == "ERR_NOT_FOUND"

    def test_unknown_section(self, client, development):
        res = client.patch(f"/api/v1/developments/{development.id}/finance", json={"x": 1})
        assert res.status_code == 404

    def test_non_object_body(self, client, development):
        res = client.patch(f"/api/v1/developments/{development.id}/design", json=["design_url"])
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"

    def test_storage_failure_returns_generic_500(self, client, development, monkeypatch):
        def _boom():
            raise OperationalError("UPDATE developments", {}, Exception("secret detail"))

        monkeypatch.setattr(db.session, "commit", _boom)
        res = client.patch(f"/api/v1/developments/{development.id}/build", json={"build_notes": "x"})
        assert res.status_code == 500
        body = res.get_json()
        assert body == {"error": "Database error", "code": "ERR_DATABASE"}

    def test_marketing_update_moves_stage(self, client, development, lookups):
        res = client.patch(
            f"/api/v1/developments/{development.id}/marketing",
            json={"media_owner_id": str(lookups["media_owner"].id)},
        )
        assert res.status_code == 200
        detail = client.get(f"/api/v1/developments/{development.id}").get_json()
        assert detail["stage"] == "marketing"
