"""Field coercion library.

Turns raw payload values (usually strings from a form) into typed values.
Every section editor and the panel-configuration batch editor go through
``coerce_value``; no endpoint parses a field by itself.

Rules:
  - ``None`` and blank strings clear the field (coerce to ``None``) unless
    the field is required.
  - Numbers: non-numeric input fails with ``invalid_number``; integer
    fields also reject fractional input. Magnitudes are checked on the
    parsed Decimal, before any conversion to ``int``, against the field's
    own range and then the column's capacity. Decimals are rounded to
    two places like their columns.
  - Dates: ISO date, ISO datetime (time part dropped), DD.MM.YYYY or
    DD/MM/YYYY. No timezone normalisation.
  - Foreign keys become positive integers. Whether the referenced row
    exists is left to the database constraint.
  - Text longer than the column allows fails with ``too_long``.
  - Booleans must be JSON ``true``/``false``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

# ── Field kinds ──────────────────────────────────────────────────────────────

TEXT = "text"
INTEGER = "integer"
DECIMAL = "decimal"
DATE = "date"
FOREIGN_KEY = "foreign_key"
ENUM = "enum"
BOOLEAN = "boolean"

FIELD_KINDS = {TEXT, INTEGER, DECIMAL, DATE, FOREIGN_KEY, ENUM, BOOLEAN}

YES_NO_TBC = ("Yes", "No", "TBC")

_DATE_FORMATS = ("%d.%m.%Y", "%d/%m/%Y")

# Integer columns are 32-bit; Numeric(p, 2) columns hold p - 2 integer digits
MAX_INTEGER = 2_147_483_647
DEFAULT_INTEGER_DIGITS = 10
_CENTS = Decimal("0.01")

# ── Error codes / default messages ───────────────────────────────────────────

REQUIRED = "required"
INVALID_NUMBER = "invalid_number"
INVALID_DATE = "invalid_date"
INVALID_ID = "invalid_id"
INVALID_CHOICE = "invalid_choice"
INVALID_TEXT = "invalid_text"
INVALID_BOOLEAN = "invalid_boolean"
OUT_OF_RANGE = "out_of_range"
TOO_LARGE = "too_large"
TOO_LONG = "too_long"

MESSAGES = {
    REQUIRED: "This field is required",
    INVALID_NUMBER: "Must be a valid number",
    INVALID_DATE: "Must be a valid date",
    INVALID_ID: "Must be a valid ID",
    INVALID_TEXT: "Must be text",
    INVALID_BOOLEAN: "Must be true or false",
    TOO_LARGE: "Number is too large",
}


class CoercionError(Exception):
    """A single value could not be coerced. ``code`` is machine-readable."""

    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        self.message = message or MESSAGES.get(code, "Invalid value")
        super().__init__(self.message)


@dataclass(frozen=True)
class FieldSpec:
    """How one field is coerced and constrained."""

    kind: str
    required: bool = False
    minimum: int | float | None = None
    maximum: int | float | None = None
    range_message: str | None = None
    choices: tuple[str, ...] = ()
    max_length: int | None = None
    integer_digits: int = DEFAULT_INTEGER_DIGITS

    def __post_init__(self):
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"Unknown field kind: {self.kind!r}")
        if self.kind == ENUM and not self.choices:
            raise ValueError("enum fields need choices")


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# ── Kind handlers ────────────────────────────────────────────────────────────


def _to_decimal(value) -> Decimal:
    if isinstance(value, bool):
        raise CoercionError(INVALID_NUMBER)
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            raise CoercionError(INVALID_NUMBER) from None
    else:
        raise CoercionError(INVALID_NUMBER)
    if not number.is_finite():
        raise CoercionError(INVALID_NUMBER)
    # "0e999999" is zero with a huge exponent
    return number if number else Decimal(0)


def _whole_number(value, code: str = INVALID_NUMBER) -> Decimal:
    try:
        number = _to_decimal(value)
    except CoercionError:
        raise CoercionError(code) from None
    if number != number.to_integral_value():
        message = "Must be a whole number" if code == INVALID_NUMBER else None
        raise CoercionError(code, message)
    return number


def _to_foreign_key(value) -> int:
    key = _whole_number(value, code=INVALID_ID)
    if key <= 0 or key > MAX_INTEGER:
        raise CoercionError(INVALID_ID)
    return int(key)


def _to_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise CoercionError(INVALID_DATE)
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise CoercionError(INVALID_DATE)


def _to_choice(value, choices: tuple[str, ...]) -> str:
    if isinstance(value, str):
        wanted = value.strip().lower()
        for choice in choices:
            if choice.lower() == wanted:
                return choice
    raise CoercionError(INVALID_CHOICE, f"Must be one of: {', '.join(choices)}")


def _to_text(value, max_length: int | None) -> str:
    if isinstance(value, str):
        text = value
    elif isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        text = str(value)
    else:
        raise CoercionError(INVALID_TEXT)
    if max_length is not None and len(text) > max_length:
        raise CoercionError(TOO_LONG, f"Must be at most {max_length} characters")
    return text


def _to_boolean(value) -> bool:
    if not isinstance(value, bool):
        raise CoercionError(INVALID_BOOLEAN)
    return value


def _check_range(number: Decimal, spec: FieldSpec):
    too_low = spec.minimum is not None and number < spec.minimum
    too_high = spec.maximum is not None and number > spec.maximum
    if too_low or too_high:
        message = spec.range_message or f"Must be between {spec.minimum} and {spec.maximum}"
        raise CoercionError(OUT_OF_RANGE, message)


def _check_capacity(number: Decimal, spec: FieldSpec):
    # Comparisons only; arithmetic on the raw Decimal could overflow the context
    if spec.kind == INTEGER:
        too_large = number > MAX_INTEGER or number < -MAX_INTEGER
    else:
        limit = Decimal(10) ** spec.integer_digits
        too_large = number >= limit or number <= -limit
    if too_large:
        raise CoercionError(TOO_LARGE)


# ── Public API ───────────────────────────────────────────────────────────────


def coerce_value(value, spec: FieldSpec):
    """Coerce ``value`` according to ``spec``.

    Returns the typed value (``None`` for a cleared field).

    Raises:
        CoercionError: the value cannot be represented as ``spec.kind`` or
            violates its constraints.
    """
    if is_blank(value):
        if spec.required:
            raise CoercionError(REQUIRED)
        return None

    if spec.kind == INTEGER:
        number = _whole_number(value)
    elif spec.kind == DECIMAL:
        number = _to_decimal(value)
    elif spec.kind == FOREIGN_KEY:
        return _to_foreign_key(value)
    elif spec.kind == DATE:
        return _to_date(value)
    elif spec.kind == ENUM:
        return _to_choice(value, spec.choices)
    elif spec.kind == BOOLEAN:
        return _to_boolean(value)
    else:
        return _to_text(value, spec.max_length)

    _check_range(number, spec)
    _check_capacity(number, spec)
    if spec.kind == INTEGER:
        return int(number)
    return number.quantize(_CENTS, rounding=ROUND_HALF_UP)
