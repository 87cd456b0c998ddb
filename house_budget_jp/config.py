"""Config store parsing and TOML/CLI loader with CLI > config > default resolution."""

import argparse
import math
import re
import sys
import tomllib
from collections.abc import Callable
from pathlib import Path

from house_budget_jp.household import SimulationInput
from house_budget_jp.params import SimulationConfig, UnitPriceTier

DEFAULT_CONFIG_PATH = Path("config.toml")

# 設定テーブル（key, 初期値, 説明, 単位）。値は文字列で保存される
CONFIG_METADATA: tuple[tuple[str, str, str, str], ...] = (
    ("annual_interest_rate", "3", "審査金利（%）", "%"),
    ("repayment_interest_rate", "0.8", "返済金利（%）", "%"),
    ("dti_ratio", "35", "DTI比率（%）", "%"),
    ("technostructure_unit_price_increase", "4.5", "テクノストラクチャー坪単価増加分（万円）", "万円"),
    ("insulation_unit_price_increase", "3", "付加断熱坪単価増加分（万円）", "万円"),
    ("demolition_cost", "250", "解体費（万円）", "万円"),
    ("default_land_cost", "1000", "土地代デフォルト（万円）", "万円"),
    ("misc_cost", "100", "諸経費（万円）", "万円"),
    ("unit_price_per_tsubo_upto_20", "105", "〜20坪 坪単価（万円）", "万円"),
    ("unit_price_per_tsubo_upto_25", "100", "〜25坪 坪単価（万円）", "万円"),
    ("unit_price_per_tsubo_upto_30", "90", "〜30坪 坪単価（万円）", "万円"),
    ("unit_price_per_tsubo_upto_35", "87", "〜35坪 坪単価（万円）", "万円"),
    ("unit_price_per_tsubo_upto_40", "84", "〜40坪 坪単価（万円）", "万円"),
    ("unit_price_per_tsubo_upto_45", "81", "〜45坪 坪単価（万円）", "万円"),
    ("unit_price_per_tsubo_upto_50", "78", "〜50坪 坪単価（万円）", "万円"),
    ("unit_price_per_tsubo_upto_55", "75", "〜55坪 坪単価（万円）", "万円"),
)

CONFIG_DEFAULTS = {key: default for key, default, _, _ in CONFIG_METADATA}

_TIER_KEY = re.compile(r"^unit_price_per_tsubo_upto_(\d+(?:\.\d+)?)$")

# 旧設定: 単一坪単価（unit_price_per_tsubo）を全面積に適用
LEGACY_UNIT_PRICE_KEY = "unit_price_per_tsubo"
LEGACY_MAX_TSUBO = 999

# Config store key → SimulationConfig field
_SCALAR_FIELDS = {
    "annual_interest_rate": "screening_interest_rate",
    "repayment_interest_rate": "repayment_interest_rate",
    "dti_ratio": "dti_ratio",
    "technostructure_unit_price_increase": "technostructure_unit_price_increase",
    "insulation_unit_price_increase": "insulation_unit_price_increase",
    "demolition_cost": "demolition_cost",
    "default_land_cost": "default_land_cost",
    "misc_cost": "misc_cost",
}


def _parse_float(key: str, value) -> float:
    if isinstance(value, bool):
        raise ValueError(f"設定値 {key} が数値ではありません: {value!r}")
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"設定値 {key} が数値ではありません: {value!r}") from None
    if not math.isfinite(parsed):
        raise ValueError(f"設定値 {key} が数値ではありません: {value!r}")
    return parsed


def is_unit_price_tier_key(key: str) -> bool:
    return _TIER_KEY.match(key) is not None


def _parse_tiers(store: dict) -> tuple[UnitPriceTier, ...]:
    # Explicit TOML array: unit_price_tiers = [[20, 105], [25, 100], ...]
    if "unit_price_tiers" in store:
        entries = store["unit_price_tiers"]
        if not isinstance(entries, (list, tuple)):
            raise ValueError(f"設定値 unit_price_tiers は [[坪数, 坪単価], ...] の配列です: {entries!r}")
        tiers = []
        for pair in entries:
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise ValueError(f"設定値 unit_price_tiers の要素は [坪数, 坪単価] です: {pair!r}")
            max_tsubo = _parse_float("unit_price_tiers", pair[0])
            unit_price = _parse_float("unit_price_tiers", pair[1])
            tiers.append(UnitPriceTier(max_tsubo, unit_price))
        return tuple(sorted(tiers, key=lambda t: t.max_tsubo))

    tier_keys = [k for k in store if is_unit_price_tier_key(k)]
    if not tier_keys and LEGACY_UNIT_PRICE_KEY in store:
        price = _parse_float(LEGACY_UNIT_PRICE_KEY, store[LEGACY_UNIT_PRICE_KEY])
        return (UnitPriceTier(LEGACY_MAX_TSUBO, price),)

    # Stored tier keys are the whole table; defaults only fill an empty one
    if tier_keys:
        table = {k: store[k] for k in tier_keys}
    else:
        table = {k: v for k, v in CONFIG_DEFAULTS.items() if is_unit_price_tier_key(k)}
    tiers = [
        UnitPriceTier(float(_TIER_KEY.match(k).group(1)), _parse_float(k, v))
        for k, v in table.items()
    ]
    return tuple(sorted(tiers, key=lambda t: t.max_tsubo))


def build_config(store: dict) -> SimulationConfig:
    """Build SimulationConfig from a key-value config store.

    Values may be strings (as stored) or numbers (as read from TOML).
    Missing keys take their CONFIG_DEFAULTS value; unparseable ones raise ValueError.
    Tier keys replace the default tier table as a whole.
    """
    values = {}
    for key, field_name in _SCALAR_FIELDS.items():
        values[field_name] = _parse_float(key, store.get(key, CONFIG_DEFAULTS[key]))
    return SimulationConfig(unit_price_tiers=_parse_tiers(store), **values)


def config_to_store(config: SimulationConfig) -> dict[str, str]:
    """Inverse of build_config: serialize to string values for the config store."""
    store = {key: f"{getattr(config, field_name):g}" for key, field_name in _SCALAR_FIELDS.items()}
    for tier in config.unit_price_tiers:
        store[f"unit_price_per_tsubo_upto_{tier.max_tsubo:g}"] = f"{tier.unit_price:g}"
    return store


# ---------------------------------------------------------------------------
# TOML file + CLI
# ---------------------------------------------------------------------------

HOUSEHOLD_DEFAULTS = {
    "age": 35,
    "spouse_age": None,
    "has_spouse": False,
    "own_income": 600.0,
    "spouse_income": 0.0,
    "own_loan_payment": 0.0,
    "spouse_loan_payment": 0.0,
    "down_payment": 300.0,
    "wish_monthly_payment": 10.0,
    "wish_payment_years": 35,
    "uses_bonus": False,
    "bonus_payment": 0.0,
    "has_land": False,
    "has_existing_building": False,
    "has_land_budget": False,
    "land_budget": 0.0,
    "uses_technostructure": False,
    "uses_additional_insulation": False,
    "name": None,
    "email": None,
}

SPOUSE_FIELDS = ("spouse_age", "spouse_income", "spouse_loan_payment")


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist.

    Top-level keys are config store entries; the optional [household] table
    holds input answers.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"設定ファイルの読み込みに失敗: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    # Migrate legacy key screening_interest_rate → annual_interest_rate
    if "screening_interest_rate" in raw:
        v = raw.pop("screening_interest_rate")
        raw.setdefault("annual_interest_rate", v)
    household = raw.get("household", {})
    # Absent spouse: clear spouse answers so spouse_age cannot outlive the flag
    if household.get("has_spouse") is False:
        for key in SPOUSE_FIELDS:
            household.pop(key, None)
    return raw


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared household flags."""
    d = HOUSEHOLD_DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="設定ファイルパス (default: config.toml)")
    parser.add_argument("--age", type=int, default=None, help=f"本人の年齢 (default: {d['age']})")
    parser.add_argument("--spouse", action="store_true", dest="has_spouse", default=None, help="配偶者あり")
    parser.add_argument("--spouse-age", type=int, default=None, help="配偶者の年齢 (default: 本人と同じ)")
    parser.add_argument("--own-income", type=float, default=None, help=f"本人の年収・万円 (default: {d['own_income']:.0f})")
    parser.add_argument("--spouse-income", type=float, default=None, help="配偶者の年収・万円 (default: 0)")
    parser.add_argument("--own-loan-payment", type=float, default=None, help="本人の既存借入返済・万円/月 (default: 0)")
    parser.add_argument("--spouse-loan-payment", type=float, default=None, help="配偶者の既存借入返済・万円/月 (default: 0)")
    parser.add_argument("--down-payment", type=float, default=None, help=f"頭金・万円 (default: {d['down_payment']:.0f})")
    parser.add_argument("--wish-monthly-payment", type=float, default=None, help=f"希望月額返済・万円 (default: {d['wish_monthly_payment']})")
    parser.add_argument("--wish-payment-years", type=int, default=None, help=f"希望返済年数 (default: {d['wish_payment_years']})")
    parser.add_argument("--uses-bonus", action="store_true", dest="uses_bonus", default=None, help="ボーナス返済あり")
    parser.add_argument("--bonus-payment", type=float, default=None, help="ボーナス返済額（1回あたり・万円、年2回）。指定するとボーナス返済あり")
    parser.add_argument("--has-land", action="store_true", default=None, help="土地あり")
    parser.add_argument("--existing-building", action="store_true", dest="has_existing_building", default=None, help="既存建物あり（解体費を計上）")
    parser.add_argument("--land-budget", type=float, default=None, help="土地の予算・万円。指定すると土地予算あり（土地なしの場合）")
    parser.add_argument("--technostructure", action="store_true", dest="uses_technostructure", default=None, help="テクノストラクチャー採用")
    parser.add_argument("--insulation", action="store_true", dest="uses_additional_insulation", default=None, help="付加断熱採用")
    parser.add_argument("--name", type=str, default=None, help="お客様名（レポート表示用）")
    parser.add_argument("--email", type=str, default=None, help="お客様メールアドレス（レポート送付用）")
    return parser


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve household values with priority: CLI flag > config.toml [household] > default."""
    household = config.get("household", {})
    cli = vars(args)
    # Amount flags imply their switch
    if cli.get("bonus_payment") is not None and cli.get("uses_bonus") is None:
        cli = {**cli, "uses_bonus": True}
    if cli.get("land_budget") is not None and cli.get("has_land_budget") is None:
        cli = {**cli, "has_land_budget": True}
    if any(cli.get(k) is not None for k in SPOUSE_FIELDS) and cli.get("has_spouse") is None:
        cli = {**cli, "has_spouse": True}
    resolved = {}
    for key, default in HOUSEHOLD_DEFAULTS.items():
        cli_val = cli.get(key)
        resolved[key] = cli_val if cli_val is not None else household.get(key, default)
    # No spouse: spouse answers must not reach the engine
    if not resolved["has_spouse"]:
        for key in SPOUSE_FIELDS:
            resolved[key] = HOUSEHOLD_DEFAULTS[key]
    return resolved


def build_input(r: dict) -> SimulationInput:
    """Build SimulationInput from resolved household dict."""
    return SimulationInput(
        age=r["age"],
        spouse_age=r["spouse_age"],
        has_spouse=r["has_spouse"],
        own_income=r["own_income"],
        spouse_income=r["spouse_income"],
        own_loan_payment=r["own_loan_payment"],
        spouse_loan_payment=r["spouse_loan_payment"],
        down_payment=r["down_payment"],
        wish_monthly_payment=r["wish_monthly_payment"],
        wish_payment_years=r["wish_payment_years"],
        uses_bonus=r["uses_bonus"],
        bonus_payment=r["bonus_payment"],
        has_land=r["has_land"],
        has_existing_building=r["has_existing_building"],
        has_land_budget=r["has_land_budget"],
        land_budget=r["land_budget"],
        uses_technostructure=r["uses_technostructure"],
        uses_additional_insulation=r["uses_additional_insulation"],
        name=r["name"],
        email=r["email"],
    )


def parse_args(
    description: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
) -> tuple[SimulationInput, SimulationConfig, argparse.Namespace]:
    """Parse CLI args, load config file, resolve values.

    Returns (input, config, namespace). namespace carries any extra CLI args
    added via add_args_fn.
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args()
    raw = load_config(args.config)
    r = resolve(args, raw)
    store = {k: v for k, v in raw.items() if k != "household"}
    return build_input(r), build_config(store), args
