"""Chart generation for budget simulation results."""

import platform
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from house_budget_jp.params import _calc_remaining_balance
from house_budget_jp.simulation import SimulationResult

# Budget component color mapping
BUDGET_COLORS = {
    "土地代": "#8c564b",   # brown
    "解体費": "#7f7f7f",   # gray
    "諸経費": "#bcbd22",   # olive
    "建築予算": "#2ca02c",  # green
}

WISH_LOAN_COLOR = "#1f77b4"  # blue
MAX_LOAN_COLOR = "#d62728"   # red


def _setup_japanese_font():
    """Configure matplotlib to use a Japanese font."""
    system = platform.system()
    if system == "Darwin":
        font_family = "Hiragino Sans"
    elif system == "Linux":
        font_family = "Noto Sans CJK JP"
    else:
        font_family = "sans-serif"
    plt.rcParams["font.family"] = font_family
    plt.rcParams["axes.unicode_minus"] = False


def _format_man_axis(ax: plt.Axes):
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    )


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_budget_breakdown(result: SimulationResult, output_path: Path, name: str = "") -> Path:
    """Stacked bar of the total budget split into land, demolition, misc and building.

    Returns:
        Path to the generated PNG file.
    """
    _setup_japanese_font()

    fig, ax = plt.subplots(figsize=(8, 6))

    components = [
        ("土地代", result.land_cost),
        ("解体費", result.demolition_cost),
        ("諸経費", result.misc_cost),
        ("建築予算", result.building_budget),
    ]
    bottom = 0.0
    for label, amount in components:
        if amount <= 0:
            continue
        ax.bar(["総予算"], [amount], bottom=bottom, label=label,
               color=BUDGET_COLORS[label], width=0.5)
        ax.annotate(
            f"{label} {amount:,.0f}万",
            xy=(0, bottom + amount / 2),
            ha="center", va="center", fontsize=11, color="white",
        )
        bottom += amount

    # Costs can exceed the budget (building budget clamped at 0)
    ax.axhline(result.total_budget, color="#333333", linestyle="--", linewidth=1)
    ax.annotate(
        f"総予算 {result.total_budget:,.0f}万",
        xy=(0.3, result.total_budget),
        ha="left", va="bottom", fontsize=10,
    )

    ax.set_ylabel("金額（万円）")
    ax.set_title(f"予算の内訳（推定 {result.estimated_tsubo:.1f}坪）")
    ax.legend(loc="upper right")
    ax.grid(True, axis="y", alpha=0.3)
    _format_man_axis(ax)

    return _save(fig, output_path, "budget", name)


def _balance_curve(
    principal: float, monthly_payment: float, monthly_rate: float, years: int,
) -> tuple[list[int], list[float]]:
    xs = list(range(years + 1))
    ys = [
        _calc_remaining_balance(principal, monthly_payment, monthly_rate, y * 12)
        for y in xs
    ]
    return xs, ys


def plot_loan_balance(result: SimulationResult, output_path: Path, name: str = "") -> Path:
    """Line chart of outstanding principal per year for the desired and max loans.

    Returns:
        Path to the generated PNG file.
    """
    _setup_japanese_font()

    fig, ax = plt.subplots(figsize=(12, 7))

    wish_years = int(result.loan_term)
    if result.wish_loan_amount > 0 and wish_years > 0:
        # Bonus installments folded into the monthly equivalent
        wish_monthly = result.total_payment / (wish_years * 12)
        xs, ys = _balance_curve(
            result.wish_loan_amount, wish_monthly,
            result.repayment_interest_rate / 100 / 12, wish_years,
        )
        ax.plot(xs, ys, label=f"希望借入額（{result.repayment_interest_rate:.2f}%）",
                color=WISH_LOAN_COLOR, linewidth=2)

    max_years = int(result.max_term_years)
    if result.max_loan_amount > 0 and max_years > 0:
        xs, ys = _balance_curve(
            result.max_loan_amount, result.monthly_payment_capacity,
            result.screening_interest_rate / 100 / 12, max_years,
        )
        ax.plot(xs, ys, label=f"借入可能額（審査金利{result.screening_interest_rate:.2f}%）",
                color=MAX_LOAN_COLOR, linewidth=2, linestyle="--")

    ax.set_xlabel("経過年数")
    ax.set_ylabel("ローン残高（万円）")
    ax.set_title("ローン残高の推移")
    ax.grid(True, alpha=0.3)
    if ax.get_lines():
        ax.legend(loc="upper right")
    _format_man_axis(ax)

    return _save(fig, output_path, "loan-balance", name)
