"""
Tests for holding costs and break-even analysis.
"""

from datetime import date
from decimal import Decimal

import pytest

from app.domain.commissions.break_even import (
    BreakEvenCalculator,
    inflation_factor,
    months_between,
)
from app.domain.commissions.entities import OperationType, ScenarioType, Trade
from app.domain.commissions.errors import InvalidParameterError, InvalidTradeTypeError

calculator = BreakEvenCalculator()


def _buy_trade(trade_date: date = date(2024, 3, 5), **overrides) -> Trade:
    values = dict(
        id=1,
        symbol="AAPL",
        trade_type=OperationType.BUY,
        quantity=Decimal("100"),
        price=Decimal("1000"),
        total_amount=Decimal("100000"),
        commission=Decimal("500"),
        taxes=Decimal("105"),
        trade_date=trade_date,
        broker="galicia",
    )
    values.update(overrides)
    return Trade(**values)


class TestHelpers:
    """Tests for calendar and inflation helpers."""

    def test_months_between_ignores_day(self) -> None:
        assert months_between(date(2024, 1, 31), date(2024, 2, 1)) == 1
        assert months_between(date(2023, 11, 15), date(2024, 2, 10)) == 3
        assert months_between(date(2024, 5, 1), date(2024, 5, 31)) == 0

    def test_inflation_factor(self) -> None:
        assert inflation_factor(Decimal("0.3"), 0) == Decimal("0")
        assert float(inflation_factor(Decimal("0.12"), 12)) == pytest.approx(1.01**12 - 1)


class TestHoldingCost:
    """Tests for project_holding_cost."""

    def test_exempt_position_only_pays_entry(self, galicia) -> None:
        result = calculator.project_holding_cost(100000, 12, galicia)

        assert result.entry.total_commission == Decimal("605")
        assert result.total_custody == Decimal("0")
        assert result.total_cost == Decimal("605")
        assert float(result.required_return_pct) == pytest.approx(0.605)
        assert len(result.monthly) == 12
        assert result.exit is None

    def test_portfolio_value_drives_custody(self, galicia) -> None:
        result = calculator.project_holding_cost(100000, 12, galicia, portfolio_value=2000000)

        assert result.total_custody == Decimal("36300")
        assert result.total_cost == Decimal("36905")
        assert float(result.required_return_pct) == pytest.approx(36.905)
        assert result.monthly[-1].cumulative_custody == Decimal("36300")

    def test_include_exit_adds_sell_commission(self, galicia) -> None:
        result = calculator.project_holding_cost(100000, 12, galicia, include_exit=True)

        assert result.exit is not None
        assert result.exit.total_commission == Decimal("605")
        assert result.total_cost == Decimal("1210")

    def test_zero_amount_has_no_required_return(self, galicia) -> None:
        result = calculator.project_holding_cost(0, 6, galicia)

        assert result.required_return_pct is None
        assert result.total_cost == Decimal("181.5")

    def test_growth_compounds_monthly(self, galicia) -> None:
        result = calculator.project_holding_cost(100000, 2, galicia, monthly_growth_rate="0.1")

        assert result.monthly[0].portfolio_value == Decimal("110000")
        assert result.monthly[1].portfolio_value == Decimal("121000")

    def test_zero_months(self, galicia) -> None:
        result = calculator.project_holding_cost(100000, 0, galicia)

        assert result.monthly == []
        assert result.total_cost == Decimal("605")

    def test_negative_months_raises(self, galicia) -> None:
        with pytest.raises(InvalidParameterError):
            calculator.project_holding_cost(100000, -1, galicia)


class TestAnalyzeTrade:
    """Tests for analyze_trade."""

    def test_same_month_break_even(self, galicia) -> None:
        result = calculator.analyze_trade(
            _buy_trade(), galicia, as_of=date(2024, 3, 20), inflation_rate="0.3", tax_rate="0.15"
        )

        c = result.components
        assert result.months_held == 0
        assert c.buy_commission == Decimal("605")
        assert c.sell_commission == Decimal("605")
        assert c.custody_impact == Decimal("0")
        assert c.inflation_impact == Decimal("0")
        assert c.tax_impact == Decimal("0")
        assert c.total_costs == Decimal("1210")
        assert c.break_even_price == Decimal("1012.1")
        assert result.current_price == Decimal("1000")
        assert result.distance_to_break_even == Decimal("-12.1")
        assert result.days_to_break_even == 4

    def test_price_above_break_even_has_no_wait(self, galicia) -> None:
        result = calculator.analyze_trade(
            _buy_trade(),
            galicia,
            as_of=date(2024, 3, 20),
            inflation_rate="0.3",
            tax_rate="0.15",
            current_price=1100,
        )

        assert result.distance_to_break_even == Decimal("87.9")
        assert result.distance_percentage > 0
        assert result.days_to_break_even == 0

    def test_long_holding_adds_inflation_and_tax(self, galicia) -> None:
        result = calculator.analyze_trade(
            _buy_trade(trade_date=date(2023, 1, 15)),
            galicia,
            as_of=date(2024, 2, 10),
            inflation_rate="0.3",
            tax_rate="0.15",
        )

        assert result.months_held == 13
        assert result.components.tax_impact == Decimal("750")
        assert result.components.inflation_impact > 0
        assert result.components.break_even_price > Decimal("1012.1")

    def test_custody_counts_for_large_positions(self, galicia) -> None:
        trade = _buy_trade(
            trade_date=date(2024, 1, 10),
            quantity=Decimal("2000"),
            total_amount=Decimal("2000000"),
            commission=Decimal("10000"),
            taxes=Decimal("2100"),
        )
        result = calculator.analyze_trade(
            trade, galicia, as_of=date(2024, 3, 1), inflation_rate="0", tax_rate="0"
        )

        assert result.months_held == 2
        assert result.components.custody_impact == Decimal("6050")

    def test_sell_trade_rejected(self, galicia) -> None:
        with pytest.raises(InvalidTradeTypeError):
            calculator.analyze_trade(
                _buy_trade(trade_type=OperationType.SELL),
                galicia,
                as_of=date(2024, 3, 20),
                inflation_rate="0.3",
                tax_rate="0.15",
            )

    def test_zero_quantity_rejected(self, galicia) -> None:
        with pytest.raises(InvalidParameterError):
            calculator.analyze_trade(
                _buy_trade(quantity=Decimal("0")),
                galicia,
                as_of=date(2024, 3, 20),
                inflation_rate="0.3",
                tax_rate="0.15",
            )


class TestScenariosAndSuggestions:
    """Tests for project_scenarios and suggest."""

    @pytest.fixture
    def analysis(self, galicia):
        return calculator.analyze_trade(
            _buy_trade(), galicia, as_of=date(2024, 3, 20), inflation_rate="0.3", tax_rate="0.15"
        )

    def test_three_scenarios_per_quarter(self, analysis) -> None:
        projections = calculator.project_scenarios(analysis, 12, "0.3")

        assert len(projections) == 12
        assert {p.months_ahead for p in projections} == {3, 6, 9, 12}
        by_scenario = {
            p.scenario: p for p in projections if p.months_ahead == 12
        }
        assert (
            by_scenario[ScenarioType.OPTIMISTIC].projected_break_even
            < by_scenario[ScenarioType.BASE].projected_break_even
            < by_scenario[ScenarioType.PESSIMISTIC].projected_break_even
        )
        assert by_scenario[ScenarioType.BASE].probability == Decimal("0.5")

    def test_short_horizon_has_no_projections(self, analysis) -> None:
        assert calculator.project_scenarios(analysis, 2, "0.3") == []

    def test_commission_heavy_position(self, analysis) -> None:
        suggestions = calculator.suggest(analysis)

        assert [s.suggestion_type for s in suggestions] == ["COMMISSION_OPTIMIZATION"]
        assert suggestions[0].potential_savings == Decimal("242")

    def test_suggestions_sorted_by_priority(self, galicia) -> None:
        analysis = calculator.analyze_trade(
            _buy_trade(trade_date=date(2022, 1, 1)),
            galicia,
            as_of=date(2024, 1, 1),
            inflation_rate="0.5",
            tax_rate="0.15",
        )
        suggestions = calculator.suggest(analysis)

        assert suggestions[0].suggestion_type == "TIMING_OPTIMIZATION"
        assert "INFLATION_HEDGE" in {s.suggestion_type for s in suggestions}
        priorities = [s.priority for s in suggestions]
        assert priorities == sorted(priorities)


class TestMatrix:
    """Tests for the break-even sensitivity matrix."""

    def test_cells_for_every_pair(self, galicia) -> None:
        cells = calculator.matrix(1000, 100, [0, "0.3"], [0, 12], galicia)

        assert len(cells) == 4
        assert cells[0].break_even_price == Decimal("1012.1")
        assert cells[0].days_to_break_even == 0
        assert cells[1].break_even_price == Decimal("1012.1")
        assert cells[1].days_to_break_even == 360
        assert cells[2].break_even_price == Decimal("1012.1")
        assert float(cells[3].break_even_price) == pytest.approx(
            1000 + (1210 + 100000 * (1.025**12 - 1)) / 100
        )

    def test_zero_quantity_rejected(self, galicia) -> None:
        with pytest.raises(InvalidParameterError):
            calculator.matrix(1000, 0, [0], [0], galicia)

    def test_negative_horizon_rejected(self, galicia) -> None:
        with pytest.raises(InvalidParameterError):
            calculator.matrix(1000, 100, [0], [12, -24], galicia)
