"""Household input, defaults resolution and raw payload coercion."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationInput:
    """One household's answers. None means the question was not answered."""

    # Required
    age: float
    own_income: float            # 本人年収（万円）
    own_loan_payment: float      # 本人の既存借入返済（万円/月）
    down_payment: float          # 頭金（万円）
    wish_monthly_payment: float  # 希望月額返済（万円/月）
    wish_payment_years: float    # 希望返済年数

    # Household
    has_spouse: bool | None = None
    spouse_age: float | None = None
    spouse_income: float | None = None
    spouse_loan_payment: float | None = None

    # Bonus repayment (年2回)
    uses_bonus: bool | None = None
    bonus_payment: float | None = None  # 1回あたり（万円）

    # Land / construction
    has_land: bool | None = None
    has_existing_building: bool | None = None
    has_land_budget: bool | None = None
    land_budget: float | None = None
    uses_technostructure: bool | None = None
    uses_additional_insulation: bool | None = None

    # Carried to reports only
    name: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class ResolvedInput:
    """SimulationInput with every default applied."""

    age: float
    spouse_age: float
    has_spouse: bool
    own_income: float
    spouse_income: float
    own_loan_payment: float
    spouse_loan_payment: float
    down_payment: float
    wish_monthly_payment: float
    wish_payment_years: float
    uses_bonus: bool
    bonus_payment: float
    has_land: bool
    has_existing_building: bool
    has_land_budget: bool
    land_budget: float
    uses_technostructure: bool
    uses_additional_insulation: bool

    @property
    def total_income(self) -> float:
        return self.own_income + self.spouse_income

    @property
    def existing_monthly_payment(self) -> float:
        return self.own_loan_payment + self.spouse_loan_payment


REQUIRED_NUMBER_FIELDS = (
    "age",
    "own_income",
    "own_loan_payment",
    "down_payment",
    "wish_monthly_payment",
    "wish_payment_years",
)
OPTIONAL_NUMBER_FIELDS = (
    "spouse_age",
    "spouse_income",
    "spouse_loan_payment",
    "bonus_payment",
    "land_budget",
)
OPTIONAL_BOOL_FIELDS = (
    "has_spouse",
    "uses_bonus",
    "has_land",
    "has_existing_building",
    "has_land_budget",
    "uses_technostructure",
    "uses_additional_insulation",
)


def _or(value, default):
    return default if value is None else value


def resolve_input(inp: SimulationInput) -> ResolvedInput:
    """Apply defaults for unanswered questions.

    spouse_age falls back to age; amounts fall back to 0; flags to False.
    The bonus amount only counts when uses_bonus is True, so a stale
    bonus_payment left over from an earlier form step is ignored.
    """
    uses_bonus = inp.uses_bonus is True
    return ResolvedInput(
        age=inp.age,
        spouse_age=_or(inp.spouse_age, inp.age),
        has_spouse=_or(inp.has_spouse, False),
        own_income=inp.own_income,
        spouse_income=_or(inp.spouse_income, 0.0),
        own_loan_payment=inp.own_loan_payment,
        spouse_loan_payment=_or(inp.spouse_loan_payment, 0.0),
        down_payment=inp.down_payment,
        wish_monthly_payment=inp.wish_monthly_payment,
        wish_payment_years=inp.wish_payment_years,
        uses_bonus=uses_bonus,
        bonus_payment=_or(inp.bonus_payment, 0.0) if uses_bonus else 0.0,
        has_land=_or(inp.has_land, False),
        has_existing_building=_or(inp.has_existing_building, False),
        has_land_budget=_or(inp.has_land_budget, False),
        land_budget=_or(inp.land_budget, 0.0),
        uses_technostructure=_or(inp.uses_technostructure, False),
        uses_additional_insulation=_or(inp.uses_additional_insulation, False),
    )


def _is_finite_number(value) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def validate_input(inp: SimulationInput) -> None:
    """Validate numeric fields. Raises ValueError naming the first bad field.

    Only finiteness is checked; ranges (negative income etc.) are the form's job.
    """
    for name in REQUIRED_NUMBER_FIELDS:
        value = getattr(inp, name)
        if not _is_finite_number(value):
            raise ValueError(f"{name} must be a finite number (got {value!r})")
    for name in OPTIONAL_NUMBER_FIELDS:
        value = getattr(inp, name)
        if value is None:
            continue
        if not _is_finite_number(value):
            raise ValueError(f"{name} must be a finite number or None (got {value!r})")


# ---------------------------------------------------------------------------
# Raw payload coercion (form/API layer)
# ---------------------------------------------------------------------------

def _parse_number(value) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if _is_finite_number(value):
        return value
    return None


def to_required_number(value, field_name: str) -> float:
    """Coerce a payload value to a finite number or raise ValueError."""
    parsed = _parse_number(value)
    if parsed is None:
        raise ValueError(f"{field_name} must be a valid number")
    return parsed


def to_optional_number(value) -> float | None:
    """Coerce to a finite number; empty or unparseable values become None."""
    if value is None or value == "":
        return None
    return _parse_number(value)


def to_optional_bool(value) -> bool | None:
    """Only genuine booleans count as answers."""
    return value if isinstance(value, bool) else None


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def normalize_payload(payload: dict) -> SimulationInput:
    """Build SimulationInput from a form payload (camelCase or snake_case keys).

    Unknown keys are ignored.
    """
    def get(name: str):
        if name in payload:
            return payload[name]
        return payload.get(_camel(name))

    values = {}
    for name in REQUIRED_NUMBER_FIELDS:
        values[name] = to_required_number(get(name), _camel(name))
    for name in OPTIONAL_NUMBER_FIELDS:
        values[name] = to_optional_number(get(name))
    for name in OPTIONAL_BOOL_FIELDS:
        values[name] = to_optional_bool(get(name))
    for name in ("name", "email"):
        v = get(name)
        if isinstance(v, str) and v.strip():
            values[name] = v.strip()
        else:
            values[name] = None
    return SimulationInput(**values)
