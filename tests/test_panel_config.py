"""
Development Tracker
Tests — panel-configuration set editor.

Covers:
    - single-record create / update / delete endpoints
    - batch ordering (delete → update → create)
    - per-item errors without rollback of committed items
    - parent updated_at touched by each successful operation
"""

from datetime import timedelta

import pytest

from devtracker.core.exceptions import NoOpError, NotFoundError, ValidationError
from devtracker.models import db
from devtracker.models.development import Development, PanelConfiguration
from devtracker.services.panel_config_service import (
    apply_panel_batch, create_panel_config, delete_panel_config, update_panel_config,
)
from devtracker.utils.helpers import ensure_utc


def _panels(development_id):
    db.session.expire_all()
    return (
        PanelConfiguration.query.filter_by(development_id=development_id)
        .order_by(PanelConfiguration.id).all()
    )


@pytest.fixture()
def stale_development(make_development, now):
    return make_development(updated_at=now - timedelta(days=45))


class TestSingleRecord:
    def test_create_coerces_fields(self, stale_development, lookups, now):
        panel = create_panel_config(stale_development.id, {
            "panel_type_id": str(lookups["panel_type"].id),
            "digital": "yes",
            "sides": "2",
            "height": "3.05",
            "unknown": "ignored",
        }, now=now)
        assert panel.digital == "Yes"
        assert panel.sides == 2
        assert panel.panel_type_id == lookups["panel_type"].id
        dev = db.session.get(Development, stale_development.id)
        assert ensure_utc(dev.updated_at) == now

    def test_empty_create_adds_blank_panel(self, stale_development, now):
        panel = create_panel_config(stale_development.id, {}, now=now)
        assert panel.id is not None
        assert panel.sides is None
        assert [p.id for p in _panels(stale_development.id)] == [panel.id]
        dev = db.session.get(Development, stale_development.id)
        assert ensure_utc(dev.updated_at) == now

    def test_empty_update_is_nothing_to_update(self, development, now):
        panel = create_panel_config(development.id, {"sides": 1}, now=now)
        with pytest.raises(NoOpError):
            update_panel_config(development.id, panel.id, {"colour": "red"}, now=now)

    def test_update_and_delete(self, development, now):
        panel = create_panel_config(development.id, {"quantity": 1}, now=now)
        update_panel_config(development.id, panel.id, {"quantity": "4", "illuminated": "No"}, now=now)
        assert _panels(development.id)[0].quantity == 4

        delete_panel_config(development.id, str(panel.id), now=now)
        assert _panels(development.id) == []

    def test_panel_of_another_development_is_not_found(self, make_development, now):
        first = make_development(name="A")
        second = make_development(name="B")
        panel = create_panel_config(first.id, {"sides": 1}, now=now)
        with pytest.raises(NotFoundError):
            update_panel_config(second.id, panel.id, {"sides": 2}, now=now)

    def test_invalid_detail_id(self, development):
        with pytest.raises(ValidationError) as exc:
            delete_panel_config(development.id, "abc")
        assert "detail_id" in exc.value.details


class TestBatch:
    def test_one_invalid_update_among_three_valid_creates(self, development, now):
        existing = create_panel_config(development.id, {"sides": 1}, now=now)
        result = apply_panel_batch(development.id, {
            "update": [{"detail_id": existing.id, "digital": "Maybe"}],
            "create": [{"sides": 1}, {"sides": 2}, {"quantity": "3", "width": "6.1"}],
        }, now=now)

        assert result["succeeded"] == 3
        assert result["failed"] == 1
        failures = [r for r in result["results"] if not r["ok"]]
        assert failures[0]["operation"] == "update"
        assert failures[0]["details"] == {"digital": "Must be one of: Yes, No, TBC"}
        assert len(_panels(development.id)) == 4
        assert _panels(development.id)[0].digital is None

    def test_deletes_run_before_updates(self, development, now):
        doomed = create_panel_config(development.id, {"sides": 1}, now=now)
        kept = create_panel_config(development.id, {"sides": 1}, now=now)
        result = apply_panel_batch(development.id, {
            "update": [
                {"detail_id": doomed.id, "sides": 9},
                {"detail_id": kept.id, "fields": {"sides": 2}},
            ],
            "delete": [doomed.id],
        }, now=now)

        ops = [(r["operation"], r["ok"]) for r in result["results"]]
        assert ops == [("delete", True), ("update", False), ("update", True)]
        assert result["results"][1]["code"] == "skipped"
        panels = _panels(development.id)
        assert [(p.id, p.sides) for p in panels] == [(kept.id, 2)]

    def test_failure_does_not_roll_back_earlier_items(self, development, now):
        panel = create_panel_config(development.id, {"sides": 1}, now=now)
        result = apply_panel_batch(development.id, {
            "delete": [panel.id, 999],
            "create": [{"sides": "two"}],
        }, now=now)

        assert [r["ok"] for r in result["results"]] == [True, False, False]
        assert result["results"][1]["code"] == "not_found"
        assert result["results"][2]["code"] == "validation"
        assert _panels(development.id) == []

    def test_batch_creates_blank_panels(self, development, now):
        result = apply_panel_batch(development.id, {"create": [{}, {}]}, now=now)
        assert result["succeeded"] == 2
        assert len(_panels(development.id)) == 2

    def test_successful_items_touch_parent(self, stale_development, now):
        later = now + timedelta(minutes=5)
        apply_panel_batch(stale_development.id, {"create": [{"sides": 2}]}, now=later)
        db.session.expire_all()
        dev = db.session.get(Development, stale_development.id)
        assert ensure_utc(dev.updated_at) == later

    def test_all_failed_batch_leaves_parent_untouched(self, stale_development, now):
        before = ensure_utc(stale_development.updated_at)
        apply_panel_batch(stale_development.id, {"create": [{"sides": "two"}]}, now=now)
        db.session.expire_all()
        dev = db.session.get(Development, stale_development.id)
        assert ensure_utc(dev.updated_at) == before

    def test_malformed_envelope(self, development):
        with pytest.raises(ValidationError) as exc:
            apply_panel_batch(development.id, {"create": {"sides": 1}})
        assert exc.value.details == {"create": "Must be a list"}

    def test_missing_development(self):
        with pytest.raises(NotFoundError):
            apply_panel_batch(404, {"create": [{"sides": 1}]})


class TestPanelEndpoints:
    def test_crud_round(self, client, development):
        base = f"/api/v1/developments/{development.id}/details"
        res = client.post(base, json={"sides": "2", "digital": "tbc"})
        assert res.status_code == 201
        detail_id = res.get_json()["id"]
        assert res.get_json()["digital"] == "TBC"

        res = client.patch(base, json={"detail_id": detail_id, "quantity": 3})
        assert res.status_code == 200
        assert res.get_json()["quantity"] == 3

        res = client.get(base)
        assert res.get_json()["total"] == 1

        res = client.delete(f"{base}?detail_id={detail_id}")
        assert res.status_code == 200
        assert client.get(base).get_json()["total"] == 0

    def test_post_empty_body_creates_blank_panel(self, client, development):
        res = client.post(f"/api/v1/developments/{development.id}/details", json={})
        assert res.status_code == 201
        assert res.get_json()["sides"] is None

    def test_patch_without_detail_id(self, client, development):
        res = client.patch(f"/api/v1/developments/{development.id}/details", json={"sides": 1})
        assert res.status_code == 400
        assert "detail_id" in res.get_json()["details"]

    def test_delete_unknown_detail(self, client, development):
        res = client.delete(f"/api/v1/developments/{development.id}/details", json={"detail_id": 77})
        assert res.status_code == 404

    def test_batch_endpoint_reports_partial_success(self, client, development):
        res = client.post(
            f"/api/v1/developments/{development.id}/details/batch",
            json={"create": [{"sides": 1}, {"height": "tall"}]},
        )
        assert res.status_code == 200
        body = res.get_json()
        assert body["succeeded"] == 1
        assert body["failed"] == 1
        assert len(body["panel_configurations"]) == 1
