"""Simulation configuration and loan calculation helpers."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class UnitPriceTier:
    """One step of the construction unit price table (坪単価テーブル)."""

    max_tsubo: float   # 施工面積の上限（坪）
    unit_price: float  # 坪単価（万円/坪）

    @property
    def budget_ceiling(self) -> float:
        """Building budget up to which this tier applies (万円)."""
        return self.max_tsubo * self.unit_price


# 坪単価テーブル初期値（施工面積が小さいほど割高）
DEFAULT_UNIT_PRICE_TIERS: tuple[UnitPriceTier, ...] = (
    UnitPriceTier(20, 105),
    UnitPriceTier(25, 100),
    UnitPriceTier(30, 90),
    UnitPriceTier(35, 87),
    UnitPriceTier(40, 84),
    UnitPriceTier(45, 81),
    UnitPriceTier(50, 78),
    UnitPriceTier(55, 75),
)


@dataclass(frozen=True)
class SimulationConfig:

    # Interest rates (年利, %)
    screening_interest_rate: float = 3.0   # 審査金利（借入可能額の上限計算用）
    repayment_interest_rate: float = 0.8   # 返済金利（希望借入額の算出用）

    # 返済比率上限（年収に対する年間返済額, %）
    dti_ratio: float = 35.0

    # Construction unit price (万円/坪)
    unit_price_tiers: tuple[UnitPriceTier, ...] = field(
        default_factory=lambda: DEFAULT_UNIT_PRICE_TIERS
    )
    technostructure_unit_price_increase: float = 4.5  # テクノストラクチャー上乗せ
    insulation_unit_price_increase: float = 3.0       # 付加断熱上乗せ

    # Flat costs (万円)
    demolition_cost: float = 250    # 解体費（土地あり・既存建物ありの場合）
    default_land_cost: float = 1000  # 土地代デフォルト（土地なし・予算未定）
    misc_cost: float = 100           # 諸経費

    @property
    def screening_monthly_rate(self) -> float:
        return self.screening_interest_rate / 100 / 12

    @property
    def repayment_monthly_rate(self) -> float:
        return self.repayment_interest_rate / 100 / 12


def _calc_loan_amount(monthly_payment: float, monthly_rate: float, months: float) -> float:
    """Calculate principal repaid by a fixed monthly payment (元利均等返済の借入額).

    Present value of an annuity. Returns 0 when nothing can be borrowed.
    """
    if monthly_payment <= 0 or months <= 0:
        return 0.0
    if monthly_rate == 0:
        return monthly_payment * months
    r = monthly_rate
    n = months
    return monthly_payment * (1 - (1 + r) ** -n) / r


def _calc_remaining_balance(
    principal: float, monthly_payment: float, monthly_rate: float, months_paid: int,
) -> float:
    """Outstanding principal after `months_paid` equal payments (残高)."""
    if monthly_rate == 0:
        return max(0.0, principal - monthly_payment * months_paid)
    growth = (1 + monthly_rate) ** months_paid
    balance = principal * growth - monthly_payment * (growth - 1) / monthly_rate
    return max(0.0, balance)


def validate_config(config: SimulationConfig) -> list[str]:
    """Check configuration plausibility. Returns list of advisory messages.

    The engine tolerates every config (fallbacks and clamps); these messages are
    for whoever edits the config table.
    """
    errors = []

    for label, rate in [
        ("審査金利", config.screening_interest_rate),
        ("返済金利", config.repayment_interest_rate),
    ]:
        if rate < 0:
            errors.append(f"{label}{rate}%が負の値です")
    if config.dti_ratio <= 0:
        errors.append(f"DTI比率{config.dti_ratio}%では借入可能額が常に0になります")

    for label, amount in [
        ("テクノストラクチャー坪単価増加分", config.technostructure_unit_price_increase),
        ("付加断熱坪単価増加分", config.insulation_unit_price_increase),
        ("解体費", config.demolition_cost),
        ("土地代デフォルト", config.default_land_cost),
        ("諸経費", config.misc_cost),
    ]:
        if amount < 0:
            errors.append(f"{label}{amount}万円が負の値です")

    tiers = sorted(config.unit_price_tiers, key=lambda t: t.max_tsubo)
    if not tiers:
        errors.append("坪単価テーブルが空です（推定坪数は常に0になります）")
        return errors

    for tier in tiers:
        if tier.max_tsubo <= 0 or tier.unit_price <= 0:
            errors.append(
                f"坪単価テーブルの値が不正です（{tier.max_tsubo}坪 / {tier.unit_price}万円）"
            )

    # Tier selection compares the budget against max_tsubo × unit_price, so the
    # ceilings must grow with max_tsubo for the step function to be monotonic.
    for prev, cur in zip(tiers, tiers[1:]):
        if cur.max_tsubo == prev.max_tsubo:
            errors.append(f"坪単価テーブルに{cur.max_tsubo}坪が重複しています")
            continue
        if cur.unit_price > prev.unit_price:
            errors.append(
                f"〜{cur.max_tsubo}坪の坪単価{cur.unit_price}万円が"
                f"〜{prev.max_tsubo}坪の{prev.unit_price}万円より高くなっています"
            )
        if cur.budget_ceiling <= prev.budget_ceiling:
            errors.append(
                f"〜{cur.max_tsubo}坪の予算上限{cur.budget_ceiling:.0f}万円が"
                f"〜{prev.max_tsubo}坪の{prev.budget_ceiling:.0f}万円以下です"
                "（上位の区分が選ばれません）"
            )

    return errors
