"""Core affordability and budget engine."""

import dataclasses
from dataclasses import dataclass

from house_budget_jp.household import (
    ResolvedInput,
    SimulationInput,
    resolve_input,
    validate_input,
)
from house_budget_jp.params import SimulationConfig, UnitPriceTier, _calc_loan_amount

SQM_PER_TSUBO = 3.305785  # 1坪 = 3.305785㎡

# Loan term constants (住宅ローンの慣行)
LOAN_END_AGE = 80          # 完済時年齢の上限
MAX_LOAN_TERM_YEARS = 50   # 返済期間の上限

BONUS_PAYMENTS_PER_YEAR = 2  # ボーナス返済は年2回（夏・冬）
MAX_DTI_RESULT = 1000        # 表示用返済比率の上限（%）

EMPTY_TIER = UnitPriceTier(0, 0)


@dataclass(frozen=True)
class SimulationWarnings:
    exceeds_max_loan: bool  # 希望借入額 > 借入可能額
    exceeds_max_term: bool  # 希望返済年数 > 年齢上限の返済年数


@dataclass(frozen=True)
class SimulationResult:
    # Loan amounts and budget (万円)
    max_loan_amount: float
    wish_loan_amount: float
    total_budget: float
    building_budget: float
    land_cost: float
    demolition_cost: float
    misc_cost: float

    # Floor area
    estimated_tsubo: float
    estimated_square_meters: float
    unit_price_per_tsubo: float  # 選択された区分の基本坪単価（オプション上乗せ前）

    # Ratios
    monthly_payment_capacity: float
    dti_ratio: float   # 既存+希望返済の年収比（%）
    loan_ratio: float  # 希望借入額 / 借入可能額

    # Repayment summaries
    total_payment: float
    total_interest: float
    max_loan_total_payment: float
    max_loan_total_interest: float

    # Echoed parameters
    screening_interest_rate: float
    repayment_interest_rate: float
    loan_term: float
    max_term_years: float

    warnings: SimulationWarnings

    def as_record(self) -> dict:
        """Flat dict of all fields (warnings inlined) for storage."""
        record = dataclasses.asdict(self)
        warnings = record.pop("warnings")
        record.update(warnings)
        return record


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def calc_monthly_payment_capacity(
    total_income: float, existing_annual_payment: float, dti_ratio: float,
) -> float:
    """Monthly amount available for a new loan under the DTI ceiling (万円/月).

    Clamped at 0 when existing debt already exceeds the ceiling.
    """
    max_annual_payment = total_income * (dti_ratio / 100)
    return max(0.0, max_annual_payment - existing_annual_payment) / 12


def calc_max_term_years(age: float, spouse_age: float) -> float:
    """Longest loan term allowed for the older of the couple (年).

    Loans must be repaid by LOAN_END_AGE, capped at MAX_LOAN_TERM_YEARS.
    """
    oldest = max(age, spouse_age)
    return max(0, min(MAX_LOAN_TERM_YEARS, LOAN_END_AGE - oldest))


def calc_land_and_demolition(
    inp: ResolvedInput, config: SimulationConfig,
) -> tuple[float, float]:
    """Return (land_cost, demolition_cost) based on land ownership.

    - 土地あり・既存建物あり: 土地代0, 解体費あり
    - 土地あり・既存建物なし: 0, 0
    - 土地なし・土地予算あり: 入力された土地予算
    - 土地なし・土地予算なし: 土地代デフォルト
    """
    if inp.has_land:
        demolition = config.demolition_cost if inp.has_existing_building else 0
        return 0, demolition
    if inp.has_land_budget:
        return inp.land_budget, 0
    return config.default_land_cost, 0


def select_unit_price_tier(
    building_budget: float, tiers: tuple[UnitPriceTier, ...] | list[UnitPriceTier],
) -> UnitPriceTier:
    """Pick the unit price tier for a building budget.

    First tier (ascending max_tsubo) whose budget ceiling max_tsubo × unit_price
    covers the budget; saturates at the largest tier. Empty table → EMPTY_TIER.
    """
    if not tiers:
        return EMPTY_TIER
    ordered = sorted(tiers, key=lambda t: t.max_tsubo)
    for tier in ordered:
        if building_budget <= tier.max_tsubo * tier.unit_price:
            return tier
    return ordered[-1]


def _unit_price_adjustment(inp: ResolvedInput, config: SimulationConfig) -> float:
    adjustment = 0.0
    if inp.uses_technostructure:
        adjustment += config.technostructure_unit_price_increase
    if inp.uses_additional_insulation:
        adjustment += config.insulation_unit_price_increase
    return adjustment


def _clamp(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def calculate_simulation(inp: SimulationInput, config: SimulationConfig) -> SimulationResult:
    """Compute loan capacity, budget and floor area for one household.

    Raises ValueError for non-finite numeric input. Requests beyond the
    household's capacity are not errors: they come back flagged in `warnings`.
    """
    validate_input(inp)
    h = resolve_input(inp)

    # 1. Repayment capacity
    total_income = h.total_income
    existing_annual_payment = h.existing_monthly_payment * 12
    monthly_payment_capacity = calc_monthly_payment_capacity(
        total_income, existing_annual_payment, config.dti_ratio,
    )

    # 2. Max loan (審査金利 × 年齢上限の返済期間)
    max_term_years = calc_max_term_years(h.age, h.spouse_age)
    max_loan_amount = _calc_loan_amount(
        monthly_payment_capacity, config.screening_monthly_rate, max_term_years * 12,
    )

    # 3. Wish loan (返済金利 × 希望返済期間、ボーナス分は月額換算)
    bonus_annual = h.bonus_payment * BONUS_PAYMENTS_PER_YEAR
    bonus_monthly_equivalent = bonus_annual / 12
    wish_monthly_total = h.wish_monthly_payment + bonus_monthly_equivalent
    wish_loan_amount = _calc_loan_amount(
        wish_monthly_total, config.repayment_monthly_rate, h.wish_payment_years * 12,
    )
    total_budget = wish_loan_amount + h.down_payment

    # 4. Budget decomposition
    land_cost, demolition_cost = calc_land_and_demolition(h, config)
    misc_cost = config.misc_cost
    building_budget = max(0.0, total_budget - land_cost - demolition_cost - misc_cost)

    # 5. Floor area (base price is reported, adjusted price divides)
    tier = select_unit_price_tier(building_budget, config.unit_price_tiers)
    effective_unit_price = tier.unit_price + _unit_price_adjustment(h, config)
    estimated_tsubo = building_budget / effective_unit_price if effective_unit_price > 0 else 0.0
    estimated_square_meters = estimated_tsubo * SQM_PER_TSUBO

    # Result assembly
    desired_annual_payment = h.wish_monthly_payment * 12 + bonus_annual
    if total_income > 0:
        dti_ratio = (existing_annual_payment + desired_annual_payment) / total_income * 100
    else:
        dti_ratio = 0.0
    loan_ratio = wish_loan_amount / max_loan_amount if max_loan_amount > 0 else 0.0

    total_payment = (
        h.wish_monthly_payment * 12 * h.wish_payment_years
        + bonus_annual * h.wish_payment_years
    )
    max_loan_total_payment = monthly_payment_capacity * max_term_years * 12

    return SimulationResult(
        max_loan_amount=max_loan_amount,
        wish_loan_amount=wish_loan_amount,
        total_budget=total_budget,
        building_budget=building_budget,
        land_cost=land_cost,
        demolition_cost=demolition_cost,
        misc_cost=misc_cost,
        estimated_tsubo=estimated_tsubo,
        estimated_square_meters=estimated_square_meters,
        unit_price_per_tsubo=tier.unit_price,
        monthly_payment_capacity=monthly_payment_capacity,
        dti_ratio=_clamp(dti_ratio, 0, MAX_DTI_RESULT),
        loan_ratio=max(0.0, loan_ratio),
        total_payment=total_payment,
        total_interest=total_payment - wish_loan_amount,
        max_loan_total_payment=max_loan_total_payment,
        max_loan_total_interest=max_loan_total_payment - max_loan_amount,
        screening_interest_rate=config.screening_interest_rate,
        repayment_interest_rate=config.repayment_interest_rate,
        loan_term=h.wish_payment_years,
        max_term_years=max_term_years,
        warnings=SimulationWarnings(
            exceeds_max_loan=wish_loan_amount > max_loan_amount,
            exceeds_max_term=h.wish_payment_years > max_term_years,
        ),
    )


# ---------------------------------------------------------------------------
# Local recompute (slider feedback)
# ---------------------------------------------------------------------------

DEFAULT_LOCAL_INTEREST_RATE = 1.5  # %


@dataclass(frozen=True)
class LocalSimulationResult:
    wish_loan_amount: float
    total_payment: float
    total_interest: float
    monthly_payment: float
    payment_years: float


def calculate_local_simulation(
    monthly_payment: float,
    payment_years: float,
    interest_rate: float = DEFAULT_LOCAL_INTEREST_RATE,
) -> LocalSimulationResult:
    """Recompute only the desired-loan figures while a slider is moving.

    Bonus repayment is not considered; budget and floor area stay as last computed.
    """
    months = payment_years * 12
    wish_loan_amount = _calc_loan_amount(monthly_payment, interest_rate / 100 / 12, months)
    total_payment = monthly_payment * months
    return LocalSimulationResult(
        wish_loan_amount=wish_loan_amount,
        total_payment=total_payment,
        total_interest=total_payment - wish_loan_amount,
        monthly_payment=monthly_payment,
        payment_years=payment_years,
    )


def merge_with_local_calculation(
    result: SimulationResult, local: LocalSimulationResult,
) -> SimulationResult:
    """Overlay slider figures onto a full result, keeping budget/floor area."""
    return dataclasses.replace(
        result,
        wish_loan_amount=local.wish_loan_amount,
        total_payment=local.total_payment,
        total_interest=local.total_interest,
        loan_term=local.payment_years,
    )
