"""CLI entry point for a single budget simulation."""

import sys

from house_budget_jp.config import parse_args
from house_budget_jp.household import SimulationInput, resolve_input
from house_budget_jp.params import SimulationConfig, validate_config
from house_budget_jp.report import fmt_man, fmt_man_with_oku, fmt_pct, warning_messages
from house_budget_jp.simulation import SimulationResult, calculate_simulation


def _print_header(inp: SimulationInput, config: SimulationConfig):
    h = resolve_input(inp)
    print("=" * 72)
    print("家づくりシミュレーション")
    household = f"本人{h.age:.0f}歳"
    if h.has_spouse:
        household += f"・配偶者{h.spouse_age:.0f}歳"
    print(f"  {household} / 世帯年収: {h.total_income:.0f}万円 / 既存返済: {h.existing_monthly_payment:.1f}万円/月")
    bonus = f"（ボーナス{h.bonus_payment:.0f}万×年2回）" if h.uses_bonus else ""
    print(f"  希望返済: {h.wish_monthly_payment:.1f}万円/月 × {h.wish_payment_years:.0f}年{bonus} / 頭金: {h.down_payment:.0f}万円")
    print(
        f"  審査金利: {config.screening_interest_rate:.2f}% / 返済金利: {config.repayment_interest_rate:.2f}%"
        f" / DTI上限: {config.dti_ratio:.0f}%"
    )
    print("=" * 72)


def _print_row(label: str, value: str):
    print(f"  {label:<18}{value:>20}")


def _print_result(result: SimulationResult):
    print("\n【借入額】")
    print("-" * 72)
    _print_row("返済可能月額", f"{result.monthly_payment_capacity:.2f}万円/月")
    _print_row("借入可能額", fmt_man_with_oku(result.max_loan_amount))
    _print_row("  返済期間上限", f"{result.max_term_years:.0f}年")
    _print_row("  総返済額", fmt_man(result.max_loan_total_payment))
    _print_row("希望借入額", fmt_man_with_oku(result.wish_loan_amount))
    _print_row("  総返済額", fmt_man(result.total_payment))
    _print_row("  利息総額", fmt_man(result.total_interest))
    _print_row("返済比率", fmt_pct(result.dti_ratio))
    _print_row("借入可能額比", f"{result.loan_ratio * 100:.1f}%")

    print("\n【予算】")
    print("-" * 72)
    _print_row("総予算", fmt_man_with_oku(result.total_budget))
    _print_row("土地代", fmt_man(result.land_cost))
    _print_row("解体費", fmt_man(result.demolition_cost))
    _print_row("諸経費", fmt_man(result.misc_cost))
    _print_row("建築予算", fmt_man_with_oku(result.building_budget))

    print("\n【広さ】")
    print("-" * 72)
    _print_row("坪単価（基本）", f"{result.unit_price_per_tsubo:g}万円/坪")
    _print_row("推定坪数", f"{result.estimated_tsubo:.1f}坪")
    _print_row("推定面積", f"{result.estimated_square_meters:.1f}㎡")

    messages = warning_messages(result)
    if messages:
        print()
        for m in messages:
            print(f"  ⚠ {m}")


def main():
    """Execute a single simulation and print the result."""
    try:
        inp, config, _ = parse_args("家づくり予算シミュレーション")
    except ValueError as e:
        print(f"設定エラー: {e}", file=sys.stderr)
        raise SystemExit(1)

    for message in validate_config(config):
        print(f"  設定の確認: {message}", file=sys.stderr)

    try:
        result = calculate_simulation(inp, config)
    except ValueError as e:
        print(f"計算できませんでした: {e}", file=sys.stderr)
        raise SystemExit(1)

    _print_header(inp, config)
    _print_result(result)


if __name__ == "__main__":
    main()
