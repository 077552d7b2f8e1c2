"""
Use cases: Broker comparison, minimum investment, commission impact
and commission history.

Side effects: None (read-only).
Failure cases: BrokerNotFoundError, InvalidParameterError.
"""

import logging

from app.application.commissions.config_resolver import ConfigResolver
from app.application.commissions.dtos import (
    CommissionHistoryQuery,
    CommissionImpactQuery,
    CompareBrokersCommand,
    MinimumInvestmentQuery,
)
from app.domain.commissions.analysis import CommissionAnalyzer
from app.domain.commissions.entities import (
    BrokerComparison,
    CommissionHistory,
    CommissionImpact,
    MinimumInvestment,
)
from app.domain.commissions.operation_commission import OperationCommissionCalculator
from app.domain.commissions.ports import CommissionConfigRepository, TradeRepository

logger = logging.getLogger(__name__)


class CompareBrokersUseCase:
    """Ranks every active broker by the first-year cost of an operation."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._config_repo = config_repo
        self._analyzer = CommissionAnalyzer()

    def execute(self, command: CompareBrokersCommand) -> list[BrokerComparison]:
        """Run the comparison."""
        return self._analyzer.compare_brokers(
            command.operation_type,
            command.amount,
            command.portfolio_value,
            self._config_repo.list_all(),
        )


class MinimumInvestmentUseCase:
    """Finds the smallest buy keeping the commission under a threshold."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._calculator = OperationCommissionCalculator()

    def execute(self, query: MinimumInvestmentQuery) -> MinimumInvestment:
        """Run the search.

        Raises:
            InvalidParameterError: If the threshold is not positive.
        """
        config = self._resolver.resolve(query.broker)
        return self._calculator.minimum_investment_for_threshold(
            query.threshold_percentage, config
        )


class CommissionImpactUseCase:
    """Measures how commissions erode the return of a holding period."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._analyzer = CommissionAnalyzer()

    def execute(self, query: CommissionImpactQuery) -> CommissionImpact:
        """Run the impact analysis."""
        config = self._resolver.resolve(query.broker)
        return self._analyzer.analyze_commission_impact(
            query.initial_investment,
            query.expected_annual_return,
            query.holding_period_years,
            config,
        )


class CommissionHistoryUseCase:
    """Aggregates the commissions paid on recorded trades."""

    def __init__(self, trade_repo: TradeRepository) -> None:
        self._trade_repo = trade_repo

    def execute(self, query: CommissionHistoryQuery) -> CommissionHistory:
        """Run the aggregation over trades matching the filters."""
        trades = self._trade_repo.list(
            from_date=query.from_date,
            to_date=query.to_date,
            symbol=query.symbol,
        )
        history = CommissionAnalyzer.summarize_trades(trades)
        logger.info(
            "Commission history: trades=%d commissions=%s taxes=%s",
            len(trades),
            history.total_commissions_paid,
            history.total_taxes_paid,
        )
        return history
