"""
Use cases: Custody fee calculation, projections and optimization.

Side effects: None (read-only).
Failure cases: BrokerNotFoundError, InvalidParameterError.
"""

import logging

from app.application.commissions.config_resolver import ConfigResolver
from app.application.commissions.dtos import (
    BrokerCustodyImpact,
    CalculateCustodyCommand,
    CustodyGrowthQuery,
    CustodyImpactResult,
    CustodyOptimizationQuery,
    CustodyOptimizationResult,
    CustodyProjectionQuery,
    CustodyProjectionResult,
)
from app.domain.commissions.custody_commission import CustodyCommissionCalculator
from app.domain.commissions.entities import (
    CustodyCalculation,
    CustodyThreshold,
    GrowthCustodyProjection,
)
from app.domain.commissions.ports import CommissionConfigRepository

logger = logging.getLogger(__name__)


class CalculateCustodyUseCase:
    """Calculates the monthly custody fee on a portfolio value."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._calculator = CustodyCommissionCalculator()

    def execute(self, command: CalculateCustodyCommand) -> CustodyCalculation:
        """Run the custody calculation."""
        config = self._resolver.resolve(command.broker)
        logger.info(
            "Calculating custody: value=%s broker=%s",
            command.portfolio_value,
            config.broker,
        )
        return self._calculator.calculate(command.portfolio_value, config)


class CustodyThresholdUseCase:
    """Describes where custody starts for a broker."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._calculator = CustodyCommissionCalculator()

    def execute(self, broker: str | None = None) -> CustodyThreshold:
        """Return the custody threshold of the broker."""
        return self._calculator.threshold(self._resolver.resolve(broker))


class ProjectCustodyUseCase:
    """Projects custody month by month with compounded growth."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._calculator = CustodyCommissionCalculator()

    def execute(self, query: CustodyProjectionQuery) -> CustodyProjectionResult:
        """Run the projection.

        Raises:
            InvalidParameterError: If ``months`` is negative.
        """
        config = self._resolver.resolve(query.broker)
        projections = self._calculator.project_future(
            query.portfolio_value,
            config,
            months=query.months,
            monthly_growth_rate=query.monthly_growth_rate,
        )
        return CustodyProjectionResult(
            projections=projections,
            summary=self._calculator.summarize_projection(
                projections, query.portfolio_value
            ),
            broker=config.broker,
        )


class ProjectCustodyGrowthUseCase:
    """Computes custody at several portfolio growth percentages."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._calculator = CustodyCommissionCalculator()

    def execute(self, query: CustodyGrowthQuery) -> list[GrowthCustodyProjection]:
        """Run the growth projection."""
        config = self._resolver.resolve(query.broker)
        return self._calculator.project_for_growth(
            query.portfolio_value, query.growth_percentages, config
        )


class OptimizeCustodyUseCase:
    """Recommends a portfolio size and reports custody's return impact."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._calculator = CustodyCommissionCalculator()

    def execute(self, query: CustodyOptimizationQuery) -> CustodyOptimizationResult:
        """Run the optimization."""
        config = self._resolver.resolve(query.broker)
        return CustodyOptimizationResult(
            optimization=self._calculator.optimize_portfolio_size(
                query.portfolio_value, query.target_annual_return, config
            ),
            impact=self._calculator.analyze_impact_on_returns(
                query.portfolio_value, query.target_annual_return, config
            ),
            broker=config.broker,
        )


class CustodyImpactUseCase:
    """Reports custody's return impact and how other brokers compare."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._config_repo = config_repo
        self._resolver = ConfigResolver(config_repo)
        self._calculator = CustodyCommissionCalculator()

    def execute(self, query: CustodyOptimizationQuery) -> CustodyImpactResult:
        """Run the impact analysis.

        Active brokers are ranked by annual custody fee, cheapest first.
        """
        config = self._resolver.resolve(query.broker)
        impact = self._calculator.analyze_impact_on_returns(
            query.portfolio_value, query.target_annual_return, config
        )

        comparisons = []
        for other in self._config_repo.list_all():
            if not other.is_active:
                continue
            other_impact = self._calculator.analyze_impact_on_returns(
                query.portfolio_value, query.target_annual_return, other
            )
            comparisons.append(
                BrokerCustodyImpact(
                    broker=other.broker,
                    custody_fee=other_impact.annual_custody_fee,
                    impact_percentage=other_impact.impact_percentage,
                    net_return=other_impact.net_return,
                )
            )
        comparisons.sort(key=lambda c: c.custody_fee)

        return CustodyImpactResult(
            impact=impact,
            broker_comparisons=comparisons,
            broker=config.broker,
        )
