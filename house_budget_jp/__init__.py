"""Homebuilder Loan Affordability & Budget Simulation Package."""

from house_budget_jp.params import (
    SimulationConfig,
    UnitPriceTier,
    DEFAULT_UNIT_PRICE_TIERS,
    validate_config,
)
from house_budget_jp.household import (
    SimulationInput,
    ResolvedInput,
    resolve_input,
    validate_input,
    normalize_payload,
)
from house_budget_jp.simulation import (
    SimulationResult,
    SimulationWarnings,
    LocalSimulationResult,
    calculate_simulation,
    calculate_local_simulation,
    merge_with_local_calculation,
    select_unit_price_tier,
    SQM_PER_TSUBO,
    LOAN_END_AGE,
    MAX_LOAN_TERM_YEARS,
    BONUS_PAYMENTS_PER_YEAR,
)
from house_budget_jp.config import build_config, load_config, config_to_store

__all__ = [
    "SimulationConfig",
    "UnitPriceTier",
    "DEFAULT_UNIT_PRICE_TIERS",
    "validate_config",
    "SimulationInput",
    "ResolvedInput",
    "resolve_input",
    "validate_input",
    "normalize_payload",
    "SimulationResult",
    "SimulationWarnings",
    "LocalSimulationResult",
    "calculate_simulation",
    "calculate_local_simulation",
    "merge_with_local_calculation",
    "select_unit_price_tier",
    "SQM_PER_TSUBO",
    "LOAN_END_AGE",
    "MAX_LOAN_TERM_YEARS",
    "BONUS_PAYMENTS_PER_YEAR",
    "build_config",
    "load_config",
    "config_to_store",
]
