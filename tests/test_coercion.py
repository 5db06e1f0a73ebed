"""
Development Tracker
Tests — field coercion library.

Covers:
    - blank clears optional fields, fails required ones
    - integer / decimal / foreign key / date / enum / text kinds
    - range checks with field-specific messages
    - huge magnitudes rejected before conversion, column widths and text limits
    - boolean flags
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from devtracker.services.coercion import (
    BOOLEAN, DATE, DECIMAL, ENUM, FOREIGN_KEY, INTEGER, INVALID_BOOLEAN, INVALID_DATE,
    INVALID_ID, INVALID_NUMBER, MAX_INTEGER, OUT_OF_RANGE, REQUIRED, TEXT, TOO_LARGE,
    TOO_LONG, YES_NO_TBC,
    CoercionError, FieldSpec, coerce_value,
)
from devtracker.services.sections import COMMERCIAL_FIELDS, DESIGN_FIELDS, PLANNING_FIELDS


class TestBlankValues:
    @pytest.mark.parametrize("kind", [TEXT, INTEGER, DECIMAL, DATE, FOREIGN_KEY])
    @pytest.mark.parametrize("blank", [None, "", "   "])
    def test_blank_clears_optional_field(self, kind, blank):
        assert coerce_value(blank, FieldSpec(kind)) is None

    def test_blank_on_required_field_fails(self):
        with pytest.raises(CoercionError) as exc:
            coerce_value("", FieldSpec(TEXT, required=True))
        assert exc.value.code == REQUIRED


class TestNumbers:
    def test_integer_from_string(self):
        assert coerce_value(" 42 ", FieldSpec(INTEGER)) == 42

    def test_integer_accepts_integral_decimal_text(self):
        assert coerce_value("7.0", FieldSpec(INTEGER)) == 7

    def test_integer_rejects_fraction(self):
        with pytest.raises(CoercionError) as exc:
            coerce_value("7.5", FieldSpec(INTEGER))
        assert exc.value.code == INVALID_NUMBER
        assert exc.value.message == "Must be a whole number"

    @pytest.mark.parametrize("raw", ["abc", "12abc", "NaN", "Infinity", True, [1]])
    def test_decimal_rejects_non_numbers(self, raw):
        with pytest.raises(CoercionError) as exc:
            coerce_value(raw, FieldSpec(DECIMAL))
        assert exc.value.code == INVALID_NUMBER
        assert exc.value.message == "Must be a valid number"

    def test_decimal_keeps_precision(self):
        assert coerce_value("12500.50", FieldSpec(DECIMAL)) == Decimal("12500.50")
        assert coerce_value(0.1, FieldSpec(DECIMAL)) == Decimal("0.1")

    def test_decimal_rounds_to_cents(self):
        assert coerce_value("1.005", FieldSpec(DECIMAL)) == Decimal("1.01")
        assert coerce_value("1e-2000000", FieldSpec(DECIMAL)) == Decimal("0.00")


class TestRanges:
    def test_probability_bounds_are_inclusive(self):
        spec = COMMERCIAL_FIELDS["probability"]
        assert coerce_value("0", spec) == 0
        assert coerce_value("100", spec) == 100

    def test_probability_out_of_range_has_own_message(self):
        with pytest.raises(CoercionError) as exc:
            coerce_value("150", COMMERCIAL_FIELDS["probability"])
        assert exc.value.code == OUT_OF_RANGE
        assert exc.value.message == "Probability must be between 0 and 100"

    def test_planning_score_range(self):
        spec = PLANNING_FIELDS["planning_score"]
        assert coerce_value(3, spec) == 3
        with pytest.raises(CoercionError) as exc:
            coerce_value("0", spec)
        assert exc.value.message == "Planning score must be between 1 and 5"

    def test_type_error_wins_over_range(self):
        with pytest.raises(CoercionError) as exc:
            coerce_value("lots", COMMERCIAL_FIELDS["probability"])
        assert exc.value.code == INVALID_NUMBER


class TestMagnitudes:
    @pytest.mark.parametrize("raw", ["1e2000000", "-1e20000000", "9" * 5000])
    def test_huge_value_hits_field_range(self, raw):
        with pytest.raises(CoercionError) as exc:
            coerce_value(raw, COMMERCIAL_FIELDS["probability"])
        assert exc.value.code == OUT_OF_RANGE

    @pytest.mark.parametrize("raw", ["1e2000000", str(MAX_INTEGER + 1), -MAX_INTEGER - 1])
    def test_integer_column_capacity(self, raw):
        with pytest.raises(CoercionError) as exc:
            coerce_value(raw, FieldSpec(INTEGER))
        assert exc.value.code == TOO_LARGE
        assert exc.value.message == "Number is too large"

    def test_integer_at_capacity(self):
        assert coerce_value(str(MAX_INTEGER), FieldSpec(INTEGER)) == MAX_INTEGER

    def test_zero_with_huge_exponent(self):
        assert coerce_value("0e999999999", FieldSpec(INTEGER)) == 0

    def test_decimal_column_capacity(self):
        assert coerce_value("9999999999.99", COMMERCIAL_FIELDS["lease_per_annum"]) == Decimal("9999999999.99")
        for raw in ("10000000000", "1e2000000"):
            with pytest.raises(CoercionError) as exc:
                coerce_value(raw, COMMERCIAL_FIELDS["lease_per_annum"])
            assert exc.value.code == TOO_LARGE

    def test_narrow_decimal_columns(self):
        assert coerce_value("25", COMMERCIAL_FIELDS["term"]) == Decimal("25")
        with pytest.raises(CoercionError) as exc:
            coerce_value("10000", COMMERCIAL_FIELDS["term"])
        assert exc.value.code == TOO_LARGE

    @pytest.mark.parametrize("raw", ["1e2000000", str(MAX_INTEGER + 1)])
    def test_huge_foreign_key(self, raw):
        with pytest.raises(CoercionError) as exc:
            coerce_value(raw, FieldSpec(FOREIGN_KEY))
        assert exc.value.code == INVALID_ID


class TestForeignKeys:
    def test_id_from_string(self):
        assert coerce_value("12", FieldSpec(FOREIGN_KEY)) == 12

    @pytest.mark.parametrize("raw", ["x", "0", "-3", "1.5"])
    def test_invalid_ids(self, raw):
        with pytest.raises(CoercionError) as exc:
            coerce_value(raw, FieldSpec(FOREIGN_KEY))
        assert exc.value.code == INVALID_ID
        assert exc.value.message == "Must be a valid ID"


class TestDates:
    @pytest.mark.parametrize("raw", [
        "2024-03-01", "2024-03-01T10:30:00", "2024-03-01T10:30:00Z", "01.03.2024", "01/03/2024",
    ])
    def test_accepted_formats(self, raw):
        assert coerce_value(raw, FieldSpec(DATE)) == date(2024, 3, 1)

    def test_date_objects_pass_through(self):
        assert coerce_value(date(2024, 1, 2), FieldSpec(DATE)) == date(2024, 1, 2)
        assert coerce_value(datetime(2024, 1, 2, 8), FieldSpec(DATE)) == date(2024, 1, 2)

    @pytest.mark.parametrize("raw", ["2024-02-30", "next week", "13/13/2024", 20240301])
    def test_invalid_dates(self, raw):
        with pytest.raises(CoercionError) as exc:
            coerce_value(raw, FieldSpec(DATE))
        assert exc.value.code == INVALID_DATE
        assert exc.value.message == "Must be a valid date"


class TestEnumsAndText:
    def test_enum_returns_canonical_choice(self):
        spec = FieldSpec(ENUM, choices=YES_NO_TBC)
        assert coerce_value("yes", spec) == "Yes"
        assert coerce_value("TBC", spec) == "TBC"

    def test_enum_rejects_unknown(self):
        with pytest.raises(CoercionError) as exc:
            coerce_value("Maybe", FieldSpec(ENUM, choices=YES_NO_TBC))
        assert exc.value.message == "Must be one of: Yes, No, TBC"

    def test_text_accepts_numbers(self):
        assert coerce_value(12, FieldSpec(TEXT)) == "12"

    def test_text_rejects_objects(self):
        with pytest.raises(CoercionError):
            coerce_value({"a": 1}, FieldSpec(TEXT))

    def test_enum_spec_requires_choices(self):
        with pytest.raises(ValueError):
            FieldSpec(ENUM)

    def test_text_longer_than_column(self):
        spec = DESIGN_FIELDS["design_signed_off"]
        assert coerce_value("Yes", spec) == "Yes"
        with pytest.raises(CoercionError) as exc:
            coerce_value("Signed off by the client", spec)
        assert exc.value.code == TOO_LONG
        assert exc.value.message == "Must be at most 10 characters"

    def test_unbounded_text(self):
        assert len(coerce_value("x" * 10000, FieldSpec(TEXT))) == 10000


class TestBooleans:
    @pytest.mark.parametrize("raw", [True, False])
    def test_json_booleans(self, raw):
        assert coerce_value(raw, FieldSpec(BOOLEAN)) is raw

    @pytest.mark.parametrize("raw", ["yes", "true", 1, 0])
    def test_other_values_rejected(self, raw):
        with pytest.raises(CoercionError) as exc:
            coerce_value(raw, FieldSpec(BOOLEAN))
        assert exc.value.code == INVALID_BOOLEAN
        assert exc.value.message == "Must be true or false"
