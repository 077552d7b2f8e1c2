"""
Domain service: broker comparison and commission analysis.

Compares brokers for a given operation, measures the drag of
commissions on a holding period, and aggregates commissions paid.
"""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from app.domain.commissions.custody_commission import CustodyCommissionCalculator
from app.domain.commissions.entities import (
    ZERO,
    BrokerComparison,
    CommissionConfig,
    CommissionHistory,
    CommissionImpact,
    MonthlyCommissions,
    Number,
    OperationType,
    Trade,
    TypeTotals,
    to_decimal,
)
from app.domain.commissions.operation_commission import OperationCommissionCalculator

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


class CommissionAnalyzer:
    """Aggregates operation and custody costs across brokers and trades."""

    def __init__(
        self,
        operation_calculator: Optional[OperationCommissionCalculator] = None,
        custody_calculator: Optional[CustodyCommissionCalculator] = None,
    ) -> None:
        self._operation = operation_calculator or OperationCommissionCalculator()
        self._custody = custody_calculator or CustodyCommissionCalculator()

    def compare_brokers(
        self,
        operation_type: OperationType,
        amount: Number,
        portfolio_value: Number,
        configs: Iterable[CommissionConfig],
    ) -> list[BrokerComparison]:
        """Rank active brokers by first-year cost (operation + custody)."""
        rows = []
        for config in configs:
            if not config.is_active:
                continue
            operation = self._operation.calculate(operation_type, amount, config)
            custody = self._custody.calculate(portfolio_value, config)
            rows.append(
                (
                    config,
                    operation,
                    custody,
                    operation.total_commission + custody.annual_fee,
                )
            )

        rows.sort(key=lambda row: row[3])
        comparisons = [
            BrokerComparison(
                broker=config.broker,
                name=config.name,
                operation=operation,
                custody=custody,
                total_first_year_cost=total,
                ranking=rank,
            )
            for rank, (config, operation, custody, total) in enumerate(rows, start=1)
        ]

        logger.info(
            "Broker comparison: operation=%s amount=%s cheapest=%s",
            operation_type.value,
            amount,
            comparisons[0].name if comparisons else None,
        )
        return comparisons

    def analyze_commission_impact(
        self,
        initial_investment: Number,
        expected_annual_return: Number,
        holding_period_years: Number,
        config: CommissionConfig,
    ) -> CommissionImpact:
        """Measure how commissions and custody erode a holding-period return.

        Args:
            initial_investment: Amount bought at the start, in ARS.
            expected_annual_return: Expected annual return in percent.
            holding_period_years: Years held before selling.
            config: Broker configuration.
        """
        initial = to_decimal(initial_investment)
        years = to_decimal(holding_period_years)
        annual_rate = to_decimal(expected_annual_return) / HUNDRED

        future_value = initial * _compound(annual_rate, years)
        gross_return = future_value - initial

        buy = self._operation.calculate(OperationType.BUY, initial, config).total_commission
        sell = self._operation.calculate(
            OperationType.SELL, future_value, config
        ).total_commission

        average_value = (initial + future_value) / 2
        custody = self._custody.calculate(average_value, config).annual_fee * years

        total_costs = buy + sell + custody
        return_impact = total_costs / gross_return * HUNDRED if gross_return != ZERO else ZERO
        break_even_return = total_costs / initial * HUNDRED if initial != ZERO else ZERO

        logger.info(
            "Commission impact: years=%s impact=%s%% break_even=%s%%",
            years,
            round(return_impact, 2),
            round(break_even_return, 2),
        )

        return CommissionImpact(
            gross_return=gross_return,
            buy_commission=buy,
            sell_commission=sell,
            total_custody_fees=custody,
            net_return=gross_return - total_costs,
            return_impact=return_impact,
            break_even_return=break_even_return,
        )

    @staticmethod
    def summarize_trades(trades: Iterable[Trade]) -> CommissionHistory:
        """Aggregate commissions and taxes paid, by type and by month."""
        total_commissions = ZERO
        total_taxes = ZERO
        count = 0
        by_type = {
            OperationType.BUY: [0, ZERO],
            OperationType.SELL: [0, ZERO],
        }
        monthly: dict[str, list] = defaultdict(lambda: [ZERO, ZERO, 0])

        for trade in trades:
            count += 1
            total_commissions += trade.commission
            total_taxes += trade.taxes

            by_type[trade.trade_type][0] += 1
            by_type[trade.trade_type][1] += trade.commission

            bucket = monthly[trade.trade_date.strftime("%Y-%m")]
            bucket[0] += trade.commission
            bucket[1] += trade.taxes
            bucket[2] += 1

        breakdown = [
            MonthlyCommissions(month=month, commissions=c, taxes=t, trades=n)
            for month, (c, t, n) in sorted(monthly.items(), reverse=True)
        ]

        return CommissionHistory(
            total_commissions_paid=total_commissions,
            total_taxes_paid=total_taxes,
            average_commission_per_trade=total_commissions / count if count else ZERO,
            buy=TypeTotals(*by_type[OperationType.BUY]),
            sell=TypeTotals(*by_type[OperationType.SELL]),
            monthly_breakdown=breakdown,
        )


def _compound(rate: Decimal, years: Decimal) -> Decimal:
    """``(1 + rate) ** years`` for whole or fractional years."""
    if years == years.to_integral_value():
        return (1 + rate) ** int(years)
    return (1 + rate) ** years
