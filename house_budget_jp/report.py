"""Report generation for simulation results.

Renders a Markdown report with Python f-strings and builds the flat payloads
handed to PDF/email and storage collaborators.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from house_budget_jp.config import CONFIG_METADATA, config_to_store
from house_budget_jp.household import SimulationInput, resolve_input
from house_budget_jp.params import SimulationConfig
from house_budget_jp.simulation import SimulationResult

# ---------------------------------------------------------------------------
# Format helpers
# ---------------------------------------------------------------------------

def fmt_man(v: float) -> str:
    """万円 → "X,XXX万円" """
    return f"{v:,.0f}万円"


def fmt_man_with_oku(v: float) -> str:
    """万円 → "1億2,345万円" (億 only when ≥ 1億)"""
    total = round(v)
    if abs(total) < 10000:
        return f"{total:,}万円"
    sign = "-" if total < 0 else ""
    oku, man = divmod(abs(total), 10000)
    if man == 0:
        return f"{sign}{oku}億円"
    return f"{sign}{oku}億{man:,}万円"


def fmt_tsubo(v: float) -> str:
    return f"{v:.1f}坪"


def fmt_sqm(v: float) -> str:
    return f"{v:.1f}㎡"


def fmt_pct(v: float) -> str:
    """Percentage value → "24.0%" (input already in %)"""
    return f"{v:.1f}%"


def _yes_no(flag: bool) -> str:
    return "あり" if flag else "なし"


# ---------------------------------------------------------------------------
# Payloads for downstream collaborators
# ---------------------------------------------------------------------------

def build_report_data(inp: SimulationInput, result: SimulationResult) -> dict:
    """Flat payload consumed by the PDF/email renderer."""
    h = resolve_input(inp)
    return {
        "customer_name": inp.name or "",
        "email": inp.email or "",
        "age": h.age,
        "own_income": h.own_income,
        "spouse_income": h.spouse_income,
        "own_loan_payment": h.own_loan_payment,
        "spouse_loan_payment": h.spouse_loan_payment,
        "down_payment": h.down_payment,
        "wish_monthly_payment": h.wish_monthly_payment,
        "wish_payment_years": h.wish_payment_years,
        "has_spouse": h.has_spouse,
        "uses_bonus": h.uses_bonus,
        "bonus_payment": h.bonus_payment,
        "has_land": h.has_land,
        "has_existing_building": h.has_existing_building,
        "has_land_budget": h.has_land_budget,
        "land_budget": h.land_budget,
        "uses_technostructure": h.uses_technostructure,
        "uses_additional_insulation": h.uses_additional_insulation,
        "result": result.as_record(),
    }


def build_simulation_record(result: SimulationResult) -> dict:
    """Subset of the result stored on a simulation record."""
    return {
        "max_loan_amount": result.max_loan_amount,
        "wish_loan_amount": result.wish_loan_amount,
        "total_budget": result.total_budget,
        "building_budget": result.building_budget,
        "estimated_tsubo": result.estimated_tsubo,
        "estimated_square_meters": result.estimated_square_meters,
        "interest_rate": result.repayment_interest_rate,
        "dti_ratio": result.dti_ratio,
        "unit_price_per_tsubo": round(result.unit_price_per_tsubo),
    }


# ---------------------------------------------------------------------------
# Markdown rendering
# ---------------------------------------------------------------------------

def warning_messages(result: SimulationResult) -> list[str]:
    messages = []
    if result.warnings.exceeds_max_loan:
        messages.append(
            f"希望借入額{fmt_man_with_oku(result.wish_loan_amount)}が"
            f"借入可能額{fmt_man_with_oku(result.max_loan_amount)}を超えています"
        )
    if result.warnings.exceeds_max_term:
        messages.append(
            f"希望返済期間{result.loan_term:.0f}年が"
            f"年齢上限の{result.max_term_years:.0f}年を超えています（80歳完済）"
        )
    return messages


def _render_title(inp: SimulationInput, today: date) -> str:
    customer = f"{inp.name} 様" if inp.name else ""
    lines = ["# 家づくりシミュレーション結果", "", "住宅ローン試算レポート", ""]
    if customer:
        lines.append(f"お客様: {customer}  ")
    lines.append(f"作成日: {today.isoformat()}")
    return "\n".join(lines)


def _render_conditions(inp: SimulationInput) -> str:
    h = resolve_input(inp)
    rows = [
        ("年齢", f"{h.age:.0f}歳" + (f"（配偶者 {h.spouse_age:.0f}歳）" if h.has_spouse else "")),
        ("世帯年収", fmt_man(h.total_income)),
        ("既存借入返済", f"{h.existing_monthly_payment:.1f}万円/月"),
        ("頭金", fmt_man(h.down_payment)),
        ("希望月額返済", f"{h.wish_monthly_payment:.1f}万円/月"),
        ("希望返済期間", f"{h.wish_payment_years:.0f}年"),
        ("ボーナス返済", f"{h.bonus_payment:.0f}万円 × 年2回" if h.uses_bonus else "なし"),
        ("土地", _yes_no(h.has_land)),
    ]
    if h.has_land:
        rows.append(("既存建物", _yes_no(h.has_existing_building)))
    elif h.has_land_budget:
        rows.append(("土地の予算", fmt_man(h.land_budget)))
    rows.append(("テクノストラクチャー", _yes_no(h.uses_technostructure)))
    rows.append(("付加断熱", _yes_no(h.uses_additional_insulation)))

    body = "\n".join(f"| {label} | {value} |" for label, value in rows)
    return f"## 1. ご入力内容\n\n| 項目 | 内容 |\n|------|------|\n{body}"


def _render_loan(result: SimulationResult) -> str:
    return f"""## 2. 借入額の試算

| 項目 | 借入可能額（審査金利） | 希望借入額（返済金利） |
|------|------:|------:|
| 金利 | {result.screening_interest_rate:.2f}% | {result.repayment_interest_rate:.2f}% |
| 返済期間 | {result.max_term_years:.0f}年 | {result.loan_term:.0f}年 |
| 借入額 | {fmt_man_with_oku(result.max_loan_amount)} | {fmt_man_with_oku(result.wish_loan_amount)} |
| 総返済額 | {fmt_man(result.max_loan_total_payment)} | {fmt_man(result.total_payment)} |
| 利息総額 | {fmt_man(result.max_loan_total_interest)} | {fmt_man(result.total_interest)} |

- 返済に充てられる月額: {result.monthly_payment_capacity:.2f}万円/月
- 返済比率（既存借入＋希望返済）: {fmt_pct(result.dti_ratio)}
- 借入可能額に対する希望借入額: {result.loan_ratio * 100:.1f}%"""


def _render_budget(result: SimulationResult) -> str:
    return f"""## 3. 予算の内訳

| 項目 | 金額 |
|------|------:|
| 総予算（希望借入額＋頭金） | {fmt_man_with_oku(result.total_budget)} |
| 土地代 | {fmt_man(result.land_cost)} |
| 解体費 | {fmt_man(result.demolition_cost)} |
| 諸経費 | {fmt_man(result.misc_cost)} |
| **建築予算** | **{fmt_man_with_oku(result.building_budget)}** |"""


def _render_floor_area(result: SimulationResult) -> str:
    return f"""## 4. 建てられる家の広さ

- 坪単価（基本）: {result.unit_price_per_tsubo:g}万円/坪
- 推定延床面積: **{fmt_tsubo(result.estimated_tsubo)}**（{fmt_sqm(result.estimated_square_meters)}）"""


def _render_warnings(result: SimulationResult) -> str:
    messages = warning_messages(result)
    if not messages:
        return "## 5. 注意事項\n\n借入可能額・返済期間ともに範囲内です。"
    body = "\n".join(f"- ⚠ {m}" for m in messages)
    return f"## 5. 注意事項\n\n{body}"


def _render_config(config: SimulationConfig) -> str:
    store = config_to_store(config)
    labels = {key: desc for key, _, desc, _ in CONFIG_METADATA}
    rows = [f"| {labels.get(key, key)} | {value} |" for key, value in store.items()]
    return "## 付録: 試算条件\n\n| 設定 | 値 |\n|------|------:|\n" + "\n".join(rows)


def _render_charts(chart_paths: list[Path], base_dir: Path | None) -> str:
    lines = ["## 付録: チャート", ""]
    for p in chart_paths:
        rel = p.relative_to(base_dir) if base_dir and p.is_relative_to(base_dir) else p
        lines.append(f"![{p.stem}]({rel.as_posix()})")
        lines.append("")
    return "\n".join(lines).rstrip()


def render_report(
    inp: SimulationInput,
    config: SimulationConfig,
    result: SimulationResult,
    chart_paths: list[Path] | None = None,
    base_dir: Path | None = None,
    today: date | None = None,
) -> str:
    """Render the full Markdown report."""
    sections = [
        _render_title(inp, today or date.today()),
        _render_conditions(inp),
        _render_loan(result),
        _render_budget(result),
        _render_floor_area(result),
        _render_warnings(result),
        _render_config(config),
    ]
    if chart_paths:
        sections.append(_render_charts(chart_paths, base_dir))
    sections.append(
        "---\n\n※ この試算は概算であり、実際の融資条件とは異なる場合があります。"
    )
    return "\n\n".join(sections) + "\n"
