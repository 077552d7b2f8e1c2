"""
Tests for the operation commission calculator.

Pure domain tests. No IO required.
"""

from decimal import Decimal

import pytest

from app.domain.commissions.entities import (
    CommissionConfig,
    OperationFeeConfig,
    OperationType,
)
from app.domain.commissions.errors import InvalidParameterError
from app.domain.commissions.operation_commission import OperationCommissionCalculator

calculator = OperationCommissionCalculator()


class TestCalculate:
    """Tests for OperationCommissionCalculator.calculate."""

    def test_buy_below_minimum_uses_minimum(self, galicia) -> None:
        result = calculator.calculate(OperationType.BUY, 10000, galicia)

        assert result.base_commission == Decimal("150")
        assert result.iva_amount == Decimal("31.5")
        assert result.total_commission == Decimal("181.5")
        assert result.net_amount == Decimal("10181.5")
        assert result.breakdown.minimum_applied is True

    def test_buy_above_minimum_uses_percentage(self, galicia) -> None:
        result = calculator.calculate(OperationType.BUY, 100000, galicia)

        assert result.base_commission == Decimal("500")
        assert result.iva_amount == Decimal("105")
        assert result.total_commission == Decimal("605")
        assert result.net_amount == Decimal("100605")
        assert result.breakdown.minimum_applied is False

    def test_sell_subtracts_commission(self, galicia) -> None:
        result = calculator.calculate(OperationType.SELL, 100000, galicia)

        assert result.total_commission == Decimal("605")
        assert result.net_amount == Decimal("99395")
        assert result.breakdown.operation_type is OperationType.SELL

    @pytest.mark.parametrize("amount", [0, 1000, 10000, 29999, 30000, 100000, "123456.78", 10**7])
    def test_buy_and_sell_are_symmetric(self, galicia, amount) -> None:
        """Buy adds and sell subtracts the same total commission."""
        buy = calculator.calculate(OperationType.BUY, amount, galicia)
        sell = calculator.calculate(OperationType.SELL, amount, galicia)
        value = Decimal(str(amount))

        assert buy.total_commission == sell.total_commission
        assert buy.net_amount - value == buy.total_commission
        assert value - sell.net_amount == sell.total_commission

    def test_exactly_at_minimum_is_not_flagged(self, galicia) -> None:
        # 30000 * 0.005 == 150, so the percentage fee is not below the minimum
        result = calculator.calculate(OperationType.BUY, 30000, galicia)

        assert result.base_commission == Decimal("150")
        assert result.breakdown.minimum_applied is False

    def test_zero_amount_still_pays_minimum(self, galicia) -> None:
        result = calculator.calculate(OperationType.BUY, 0, galicia)

        assert result.base_commission == Decimal("150")
        assert result.net_amount == Decimal("181.5")
        assert result.breakdown.minimum_applied is True

    def test_negative_amount_is_clamped(self, galicia) -> None:
        result = calculator.calculate(OperationType.BUY, -5000, galicia)

        assert result.breakdown.total_amount == Decimal("0")
        assert result.base_commission == Decimal("150")

    def test_breakdown_echoes_rates(self, galicia) -> None:
        result = calculator.calculate(OperationType.BUY, 50000, galicia)

        assert result.breakdown.commission_rate == Decimal("0.005")
        assert result.breakdown.iva_rate == Decimal("0.21")
        assert result.breakdown.total_amount == Decimal("50000")

    def test_float_input_has_no_binary_artifacts(self, galicia) -> None:
        result = calculator.calculate(OperationType.BUY, 100000.1, galicia)

        assert result.breakdown.total_amount == Decimal("100000.1")

    def test_zero_iva(self, make_config) -> None:
        config = make_config(iva="0")
        result = calculator.calculate(OperationType.BUY, 100000, config)

        assert result.iva_amount == Decimal("0")
        assert result.total_commission == result.base_commission

    def test_separate_sell_schedule(self, make_config) -> None:
        base = make_config()
        config = CommissionConfig(
            broker=base.broker,
            name=base.name,
            buy=base.buy,
            sell=OperationFeeConfig(
                percentage=Decimal("0.01"), minimum=Decimal("0"), iva=Decimal("0")
            ),
            custody=base.custody,
        )

        sell = calculator.calculate(OperationType.SELL, 100000, config)
        buy = calculator.calculate(OperationType.BUY, 100000, config)

        assert sell.total_commission == Decimal("1000")
        assert buy.total_commission == Decimal("605")

    @pytest.mark.parametrize("amount", [0, 1, 1000, 29999, 30000, 30001, 10**7])
    def test_total_is_base_plus_iva_and_at_least_minimum(self, galicia, amount) -> None:
        result = calculator.calculate(OperationType.BUY, amount, galicia)

        assert result.total_commission == result.base_commission + result.iva_amount
        assert result.base_commission >= galicia.buy.minimum

    def test_commission_is_monotonic_in_amount(self, galicia) -> None:
        totals = [
            calculator.calculate(OperationType.BUY, amount, galicia).total_commission
            for amount in (0, 10000, 30000, 60000, 120000, 1000000)
        ]

        assert totals == sorted(totals)


class TestMinimumInvestment:
    """Tests for minimum_investment_for_threshold."""

    def test_one_percent_threshold(self, galicia) -> None:
        result = calculator.minimum_investment_for_threshold(1, galicia)

        assert result.minimum_amount == Decimal("18150")
        assert float(result.commission_percentage) == pytest.approx(1.0)
        assert "under control" in result.recommendation

    def test_small_threshold_recommends_cheaper_broker(self, galicia) -> None:
        result = calculator.minimum_investment_for_threshold(Decimal("0.1"), galicia)

        assert result.minimum_amount == Decimal("181500")
        assert "lower minimum commissions" in result.recommendation

    def test_large_threshold_flags_low_amount(self, galicia) -> None:
        result = calculator.minimum_investment_for_threshold(5, galicia)

        assert result.minimum_amount == Decimal("3630")
        assert "Very low minimum amount" in result.recommendation

    @pytest.mark.parametrize("threshold", [0, -1])
    def test_non_positive_threshold_raises(self, galicia, threshold) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            calculator.minimum_investment_for_threshold(threshold, galicia)

        assert exc_info.value.name == "threshold_percentage"
