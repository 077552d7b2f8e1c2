"""
Domain service: holding costs and break-even analysis.

Composes the operation and custody calculators over a time horizon:
- Holding-cost projection (entry commission + monthly custody)
- Break-even price of a recorded buy trade
- Inflation scenario projections and improvement suggestions
- Sensitivity matrix over inflation rates and horizons
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from app.domain.commissions.custody_commission import CustodyCommissionCalculator
from app.domain.commissions.entities import (
    ZERO,
    BreakEvenAnalysis,
    BreakEvenComponents,
    BreakEvenMatrixCell,
    BreakEvenScenarioProjection,
    BreakEvenSuggestion,
    CommissionConfig,
    HoldingCostProjection,
    HoldingMonth,
    Number,
    OperationType,
    ScenarioType,
    Trade,
    to_decimal,
)
from app.domain.commissions.errors import InvalidParameterError, InvalidTradeTypeError
from app.domain.commissions.operation_commission import OperationCommissionCalculator

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30
MONTHS_PER_YEAR = 12
PROJECTION_STEP_MONTHS = 3
TAXABLE_AFTER_MONTHS = 12
ESTIMATED_TAXABLE_GAIN = Decimal("0.05")

# (scenario, inflation multiplier, probability)
SCENARIOS = (
    (ScenarioType.OPTIMISTIC, Decimal("0.7"), Decimal("0.25")),
    (ScenarioType.BASE, Decimal("1"), Decimal("0.5")),
    (ScenarioType.PESSIMISTIC, Decimal("1.3"), Decimal("0.25")),
)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end`` (day of month ignored)."""
    return (end.year - start.year) * MONTHS_PER_YEAR + (end.month - start.month)


def inflation_factor(annual_rate: Decimal, months: int) -> Decimal:
    """Monthly-compounded growth factor minus one for ``months`` months."""
    if months <= 0:
        return ZERO
    return (1 + annual_rate / MONTHS_PER_YEAR) ** months - 1


class BreakEvenCalculator:
    """Projects holding costs and break-even prices."""

    def __init__(
        self,
        operation_calculator: Optional[OperationCommissionCalculator] = None,
        custody_calculator: Optional[CustodyCommissionCalculator] = None,
    ) -> None:
        self._operation = operation_calculator or OperationCommissionCalculator()
        self._custody = custody_calculator or CustodyCommissionCalculator()

    def project_holding_cost(
        self,
        amount: Number,
        months: int,
        config: CommissionConfig,
        monthly_growth_rate: Number = ZERO,
        portfolio_value: Optional[Number] = None,
        include_exit: bool = False,
    ) -> HoldingCostProjection:
        """Project the cost of buying ``amount`` and holding it for ``months``.

        The entry commission is charged once. Custody is charged every month
        on ``base * (1 + growth) ** month`` where ``base`` is
        ``portfolio_value`` when given, else the operation amount. With
        ``include_exit`` a sell commission on the final value is added.

        Raises:
            InvalidParameterError: If ``months`` is negative.
        """
        if months < 0:
            raise InvalidParameterError("months", months, "must not be negative")

        entry = self._operation.calculate(OperationType.BUY, amount, config)
        principal = entry.breakdown.total_amount
        base = max(
            to_decimal(portfolio_value) if portfolio_value is not None else principal,
            ZERO,
        )
        growth = to_decimal(monthly_growth_rate)

        monthly = []
        cumulative = ZERO
        value = base
        for month in range(1, months + 1):
            value = base * (1 + growth) ** month
            custody = self._custody.calculate(value, config)
            cumulative += custody.total_monthly_cost
            monthly.append(
                HoldingMonth(
                    month=month,
                    portfolio_value=value,
                    custody=custody,
                    cumulative_custody=cumulative,
                )
            )

        exit_commission = None
        total_cost = entry.total_commission + cumulative
        if include_exit:
            exit_commission = self._operation.calculate(OperationType.SELL, value, config)
            total_cost += exit_commission.total_commission

        required_return = (
            total_cost / principal * HUNDRED if principal > ZERO else None
        )

        logger.debug(
            "Holding cost: amount=%s months=%d total_cost=%s required_return=%s",
            principal,
            months,
            total_cost,
            required_return,
        )

        return HoldingCostProjection(
            amount=principal,
            months=months,
            entry=entry,
            exit=exit_commission,
            monthly=monthly,
            total_custody=cumulative,
            total_cost=total_cost,
            required_return_pct=required_return,
        )

    def analyze_trade(
        self,
        trade: Trade,
        config: CommissionConfig,
        as_of: date,
        inflation_rate: Number,
        tax_rate: Number,
        current_price: Optional[Number] = None,
    ) -> BreakEvenAnalysis:
        """Compute the break-even price of a buy trade.

        Args:
            trade: The recorded BUY trade.
            config: Broker configuration used to estimate exit and custody.
            as_of: Date the analysis refers to.
            inflation_rate: Annual inflation rate as a fraction.
            tax_rate: Tax rate applied to the estimated gain.
            current_price: Market price; defaults to the trade price.

        Raises:
            InvalidTradeTypeError: If the trade is not a BUY.
            InvalidParameterError: If the trade quantity is not positive.
        """
        if trade.trade_type is not OperationType.BUY:
            raise InvalidTradeTypeError(trade.id or 0, OperationType.BUY.value)
        if trade.quantity <= ZERO:
            raise InvalidParameterError("quantity", trade.quantity, "must be positive")

        months_held = max(months_between(trade.trade_date, as_of), 0)
        total = trade.total_amount

        buy_commission = trade.commission + trade.taxes
        sell_commission = self._operation.calculate(
            OperationType.SELL, total, config
        ).total_commission

        custody_impact = ZERO
        if months_held > 0:
            custody_impact = (
                self._custody.calculate(total, config).total_monthly_cost * months_held
            )

        inflation_impact = total * inflation_factor(to_decimal(inflation_rate), months_held)

        tax_impact = ZERO
        if months_held >= TAXABLE_AFTER_MONTHS:
            tax_impact = total * ESTIMATED_TAXABLE_GAIN * to_decimal(tax_rate)

        total_costs = (
            buy_commission + sell_commission + custody_impact + inflation_impact + tax_impact
        )
        break_even_price = (trade.price * trade.quantity + total_costs) / trade.quantity

        price = to_decimal(current_price) if current_price is not None else trade.price
        distance = price - break_even_price
        distance_pct = distance / break_even_price * HUNDRED
        days = 0
        if distance <= ZERO:
            days = int(round(abs(distance / break_even_price * DAYS_PER_YEAR)))

        logger.info(
            "Break-even for trade %s: price=%s break_even=%s distance=%s%%",
            trade.id,
            price,
            break_even_price,
            round(distance_pct, 2),
        )

        return BreakEvenAnalysis(
            trade_id=trade.id,
            symbol=trade.symbol,
            components=BreakEvenComponents(
                purchase_price=trade.price,
                break_even_price=break_even_price,
                total_costs=total_costs,
                buy_commission=buy_commission,
                sell_commission=sell_commission,
                custody_impact=custody_impact,
                inflation_impact=inflation_impact,
                tax_impact=tax_impact,
            ),
            current_price=price,
            distance_to_break_even=distance,
            distance_percentage=distance_pct,
            days_to_break_even=days,
            months_held=months_held,
        )

    @staticmethod
    def project_scenarios(
        analysis: BreakEvenAnalysis, max_months: int, inflation_rate: Number
    ) -> list[BreakEvenScenarioProjection]:
        """Project the break-even price every quarter under three scenarios."""
        rate = to_decimal(inflation_rate)
        break_even = analysis.components.break_even_price
        projections = []
        for scenario, multiplier, probability in SCENARIOS:
            scenario_rate = rate * multiplier
            for months in range(PROJECTION_STEP_MONTHS, max_months + 1, PROJECTION_STEP_MONTHS):
                projections.append(
                    BreakEvenScenarioProjection(
                        scenario=scenario,
                        months_ahead=months,
                        inflation_rate=scenario_rate,
                        projected_break_even=(
                            break_even * (1 + scenario_rate / MONTHS_PER_YEAR) ** months
                        ),
                        probability=probability,
                    )
                )
        return projections

    @staticmethod
    def suggest(analysis: BreakEvenAnalysis) -> list[BreakEvenSuggestion]:
        """Suggest actions based on which costs dominate the break-even."""
        c = analysis.components
        commissions = c.buy_commission + c.sell_commission
        suggestions = []

        if commissions > c.total_costs * Decimal("0.3"):
            suggestions.append(
                BreakEvenSuggestion(
                    suggestion_type="COMMISSION_OPTIMIZATION",
                    title="Optimize commissions",
                    description=(
                        "Commissions are a large share of the costs. Consider "
                        "switching brokers or negotiating better rates."
                    ),
                    potential_savings=commissions * Decimal("0.2"),
                    potential_time_reduction=30,
                    difficulty="MEDIUM",
                    priority=2,
                )
            )

        if c.custody_impact > ZERO:
            suggestions.append(
                BreakEvenSuggestion(
                    suggestion_type="CUSTODY_OPTIMIZATION",
                    title="Optimize custody",
                    description=(
                        "Monthly custody is pushing the break-even up. Consider "
                        "splitting across brokers or holding smaller positions."
                    ),
                    potential_savings=c.custody_impact * Decimal("0.5"),
                    potential_time_reduction=60,
                    difficulty="HIGH",
                    priority=3,
                )
            )

        if analysis.distance_percentage < -5:
            suggestions.append(
                BreakEvenSuggestion(
                    suggestion_type="TIMING_OPTIMIZATION",
                    title="Review sell timing",
                    description=(
                        "The position is well below break-even. Consider holding "
                        "longer or setting a stop-loss."
                    ),
                    potential_savings=None,
                    potential_time_reduction=int(analysis.days_to_break_even * 0.15),
                    difficulty="LOW",
                    priority=1,
                )
            )

        if c.inflation_impact > c.total_costs * Decimal("0.2"):
            suggestions.append(
                BreakEvenSuggestion(
                    suggestion_type="INFLATION_HEDGE",
                    title="Inflation hedge",
                    description=(
                        "Inflation weighs heavily on this position. Consider "
                        "inflation-linked instruments."
                    ),
                    potential_savings=c.inflation_impact * Decimal("0.3"),
                    potential_time_reduction=None,
                    difficulty="MEDIUM",
                    priority=2,
                )
            )

        return sorted(suggestions, key=lambda s: s.priority)

    def matrix(
        self,
        purchase_price: Number,
        quantity: Number,
        inflation_rates: Iterable[Number],
        time_horizons: Iterable[int],
        config: CommissionConfig,
    ) -> list[BreakEvenMatrixCell]:
        """Break-even price for every inflation rate and horizon pair.

        Raises:
            InvalidParameterError: If ``quantity`` is not positive or a
                horizon is negative.
        """
        price = to_decimal(purchase_price)
        qty = to_decimal(quantity)
        if qty <= ZERO:
            raise InvalidParameterError("quantity", quantity, "must be positive")
        horizons = list(time_horizons)
        for horizon in horizons:
            if horizon < 0:
                raise InvalidParameterError("time_horizons", horizon, "must not be negative")

        amount = price * qty
        buy = self._operation.calculate(OperationType.BUY, amount, config)
        sell = self._operation.calculate(OperationType.SELL, amount, config)
        monthly_custody = self._custody.calculate(amount, config).total_monthly_cost

        cells = []
        for raw_rate in inflation_rates:
            rate = to_decimal(raw_rate)
            for horizon in horizons:
                total_costs = (
                    buy.total_commission
                    + sell.total_commission
                    + monthly_custody * horizon
                    + amount * inflation_factor(rate, horizon)
                )
                cells.append(
                    BreakEvenMatrixCell(
                        inflation_rate=rate,
                        time_horizon=horizon,
                        break_even_price=price + total_costs / qty,
                        total_costs=total_costs,
                        days_to_break_even=horizon * DAYS_PER_MONTH,
                    )
                )
        return cells
