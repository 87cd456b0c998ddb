"""Tests for SimulationConfig and loan helpers."""

import pytest
from house_budget_jp import SimulationConfig, UnitPriceTier, DEFAULT_UNIT_PRICE_TIERS, validate_config
from house_budget_jp.params import _calc_loan_amount, _calc_remaining_balance


class TestCalcLoanAmount:
    def test_zero_rate(self):
        assert _calc_loan_amount(10, 0, 120) == pytest.approx(1200)

    def test_normal_rate(self):
        # 月6万円, 月利0.5%, 360ヶ月 → 約1000万円
        assert _calc_loan_amount(5.995505, 0.005, 360) == pytest.approx(1000, rel=1e-5)

    def test_single_month(self):
        assert _calc_loan_amount(101, 0.01, 1) == pytest.approx(100)

    def test_zero_payment(self):
        assert _calc_loan_amount(0, 0.005, 360) == 0

    def test_negative_payment(self):
        assert _calc_loan_amount(-5, 0.005, 360) == 0

    def test_zero_term(self):
        assert _calc_loan_amount(10, 0.005, 0) == 0

    def test_higher_rate_borrows_less(self):
        low = _calc_loan_amount(10, 0.008 / 12, 420)
        high = _calc_loan_amount(10, 0.03 / 12, 420)
        assert high < low < 10 * 420


class TestCalcRemainingBalance:
    def test_start(self):
        assert _calc_remaining_balance(1000, 5.995505, 0.005, 0) == pytest.approx(1000)

    def test_fully_repaid(self):
        principal = _calc_loan_amount(10, 0.0025, 240)
        assert _calc_remaining_balance(principal, 10, 0.0025, 240) == pytest.approx(0, abs=1e-6)

    def test_zero_rate_linear(self):
        assert _calc_remaining_balance(1200, 10, 0, 60) == pytest.approx(600)

    def test_never_negative(self):
        assert _calc_remaining_balance(100, 10, 0, 60) == 0


class TestSimulationConfig:
    def test_monthly_rates(self):
        c = SimulationConfig(screening_interest_rate=3, repayment_interest_rate=0.6)
        assert c.screening_monthly_rate == pytest.approx(0.0025)
        assert c.repayment_monthly_rate == pytest.approx(0.0005)

    def test_default_tiers(self):
        assert SimulationConfig().unit_price_tiers == DEFAULT_UNIT_PRICE_TIERS
        assert len(DEFAULT_UNIT_PRICE_TIERS) == 8

    def test_budget_ceiling(self):
        assert UnitPriceTier(25, 100).budget_ceiling == 2500

    def test_frozen(self):
        c = SimulationConfig()
        with pytest.raises(AttributeError):
            c.dti_ratio = 40


class TestValidateConfig:
    def test_defaults_valid(self):
        assert validate_config(SimulationConfig()) == []

    def test_default_tiers_monotonic(self):
        """Smaller houses cost more per tsubo, but the budget ceiling still grows."""
        tiers = sorted(DEFAULT_UNIT_PRICE_TIERS, key=lambda t: t.max_tsubo)
        for prev, cur in zip(tiers, tiers[1:]):
            assert cur.max_tsubo > prev.max_tsubo
            assert cur.unit_price <= prev.unit_price
            assert cur.budget_ceiling > prev.budget_ceiling

    def test_empty_tiers(self):
        errors = validate_config(SimulationConfig(unit_price_tiers=()))
        assert any("空" in e for e in errors)

    def test_non_increasing_ceiling(self):
        """25坪×80 = 2000 < 20坪×105 = 2100: the 25坪 tier could never be selected."""
        config = SimulationConfig(unit_price_tiers=(UnitPriceTier(20, 105), UnitPriceTier(25, 80)))
        errors = validate_config(config)
        assert any("予算上限" in e for e in errors)

    def test_price_increasing_with_area(self):
        config = SimulationConfig(unit_price_tiers=(UnitPriceTier(20, 80), UnitPriceTier(30, 90)))
        errors = validate_config(config)
        assert any("高くなっています" in e for e in errors)

    def test_duplicate_max_tsubo(self):
        config = SimulationConfig(unit_price_tiers=(UnitPriceTier(30, 90), UnitPriceTier(30, 85)))
        errors = validate_config(config)
        assert any("重複" in e for e in errors)

    def test_unsorted_tiers_checked_in_order(self):
        config = SimulationConfig(unit_price_tiers=tuple(reversed(DEFAULT_UNIT_PRICE_TIERS)))
        assert validate_config(config) == []

    def test_zero_dti(self):
        errors = validate_config(SimulationConfig(dti_ratio=0))
        assert any("DTI" in e for e in errors)

    def test_negative_cost(self):
        errors = validate_config(SimulationConfig(misc_cost=-1))
        assert any("諸経費" in e for e in errors)
