"""
Domain service: monthly custody fees.

Custody is charged on the portfolio value above the broker's exempt
amount, at a monthly percentage with a monthly minimum, plus IVA.
Also provides growth projections, return-impact analysis and a
portfolio-size optimizer built on the same calculation.
"""

import logging
from decimal import Decimal
from typing import Iterable

from app.domain.commissions.entities import (
    MONTHS_PER_YEAR,
    ZERO,
    CommissionConfig,
    CustodyCalculation,
    CustodyImpact,
    CustodyProjectionSummary,
    CustodyStrategy,
    CustodyThreshold,
    GrowthCustodyProjection,
    MonthlyCustodyProjection,
    Number,
    PortfolioAlternative,
    PortfolioOptimization,
    to_decimal,
)
from app.domain.commissions.errors import InvalidParameterError

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
DEFAULT_MONTHLY_GROWTH_RATE = Decimal("0.015")
NEAR_OPTIMAL_TOLERANCE = Decimal("0.1")
LARGER_PORTFOLIO_FACTOR = Decimal("1.5")


class CustodyCommissionCalculator:
    """Computes custody fees and the analyses derived from them."""

    def calculate(
        self, portfolio_value: Number, config: CommissionConfig
    ) -> CustodyCalculation:
        """Calculate the monthly custody fee for a portfolio value.

        Values at or below the exempt amount (negative values included)
        pay nothing.
        """
        value = to_decimal(portfolio_value)
        custody = config.custody

        is_exempt = value <= custody.exempt_amount
        applicable_amount = max(ZERO, value - custody.exempt_amount)

        monthly_fee = ZERO
        if not is_exempt and applicable_amount > ZERO:
            monthly_fee = max(
                applicable_amount * custody.monthly_percentage,
                custody.monthly_minimum,
            )

        iva_amount = monthly_fee * custody.iva
        total_monthly_cost = monthly_fee + iva_amount

        return CustodyCalculation(
            applicable_amount=applicable_amount,
            monthly_fee=monthly_fee,
            annual_fee=total_monthly_cost * MONTHS_PER_YEAR,
            iva_amount=iva_amount,
            total_monthly_cost=total_monthly_cost,
            is_exempt=is_exempt,
        )

    def project_for_growth(
        self,
        portfolio_value: Number,
        growth_percentages: Iterable[Number],
        config: CommissionConfig,
    ) -> list[GrowthCustodyProjection]:
        """Project custody for the portfolio grown by each percentage."""
        value = to_decimal(portfolio_value)
        current = self.calculate(value, config)

        projections = []
        for growth in growth_percentages:
            growth_pct = to_decimal(growth)
            future_value = value * (1 + growth_pct / HUNDRED)
            future = self.calculate(future_value, config)
            projections.append(
                GrowthCustodyProjection(
                    portfolio_value=future_value,
                    growth_percentage=growth_pct,
                    custody=future,
                    threshold_crossed=current.is_exempt and not future.is_exempt,
                )
            )
        return projections

    def threshold(self, config: CommissionConfig) -> CustodyThreshold:
        """Describe where custody starts and its minimum cost."""
        custody = config.custody
        minimum_monthly_fee = custody.monthly_minimum * (1 + custody.iva)
        minimum_annual_fee = minimum_monthly_fee * MONTHS_PER_YEAR

        strategies = []
        if custody.exempt_amount >= Decimal("500000"):
            strategies.append(
                f"Keep the portfolio below ${custody.exempt_amount:,.0f} to avoid custody"
            )
        if minimum_annual_fee > Decimal("10000"):
            strategies.append(
                "Consider consolidating positions to reduce the impact of the minimum fee"
            )
        strategies.append("Weigh portfolio growth against the extra custody cost")

        return CustodyThreshold(
            exempt_amount=custody.exempt_amount,
            minimum_monthly_fee=minimum_monthly_fee,
            minimum_annual_fee=minimum_annual_fee,
            recommended_strategy=". ".join(strategies),
        )

    def project_future(
        self,
        portfolio_value: Number,
        config: CommissionConfig,
        months: int = MONTHS_PER_YEAR,
        monthly_growth_rate: Number = DEFAULT_MONTHLY_GROWTH_RATE,
    ) -> list[MonthlyCustodyProjection]:
        """Project custody month by month with compounded portfolio growth.

        Raises:
            InvalidParameterError: If ``months`` is negative.
        """
        if months < 0:
            raise InvalidParameterError("months", months, "must not be negative")

        value = to_decimal(portfolio_value)
        rate = to_decimal(monthly_growth_rate)

        projections = []
        cumulative = ZERO
        previous = self.calculate(value, config)
        for month in range(1, months + 1):
            projected_value = value * (1 + rate) ** month
            custody = self.calculate(projected_value, config)
            cumulative += custody.total_monthly_cost
            projections.append(
                MonthlyCustodyProjection(
                    month=month,
                    portfolio_value=projected_value,
                    custody=custody,
                    cumulative_custody=cumulative,
                    threshold_crossed=previous.is_exempt and not custody.is_exempt,
                )
            )
            previous = custody

        logger.debug(
            "Projected custody: value=%s months=%d rate=%s total=%s",
            value,
            months,
            rate,
            cumulative,
        )
        return projections

    @staticmethod
    def summarize_projection(
        projections: list[MonthlyCustodyProjection], portfolio_value: Number
    ) -> CustodyProjectionSummary:
        """Aggregate a monthly projection into totals."""
        total = sum((p.custody.total_monthly_cost for p in projections), ZERO)
        months = len(projections)
        return CustodyProjectionSummary(
            total_months=months,
            total_projected_custody=total,
            average_monthly=total / months if months else ZERO,
            threshold_crossings=sum(1 for p in projections if p.threshold_crossed),
            final_portfolio_value=(
                projections[-1].portfolio_value
                if projections
                else to_decimal(portfolio_value)
            ),
        )

    def analyze_impact_on_returns(
        self,
        portfolio_value: Number,
        expected_annual_return: Number,
        config: CommissionConfig,
    ) -> CustodyImpact:
        """Measure how much of the expected annual return custody consumes.

        Args:
            portfolio_value: Portfolio value in ARS.
            expected_annual_return: Expected return in percent.
            config: Broker configuration.
        """
        value = to_decimal(portfolio_value)
        custody = self.calculate(value, config)

        gross_return = value * (to_decimal(expected_annual_return) / HUNDRED)
        annual_fee = custody.annual_fee
        impact_percentage = (
            annual_fee / gross_return * HUNDRED if gross_return != ZERO else ZERO
        )

        return CustodyImpact(
            gross_return=gross_return,
            custody_impact=annual_fee,
            net_return=gross_return - annual_fee,
            annual_custody_fee=annual_fee,
            impact_percentage=impact_percentage,
            recommendations=_impact_recommendations(
                impact_percentage,
                custody.is_exempt,
                value,
                config.custody.exempt_amount,
            ),
        )

    def optimize_portfolio_size(
        self,
        portfolio_value: Number,
        target_annual_return: Number,
        config: CommissionConfig,
    ) -> PortfolioOptimization:
        """Recommend a portfolio size that keeps custody costs reasonable."""
        value = to_decimal(portfolio_value)
        target = to_decimal(target_annual_return)
        exempt_amount = config.custody.exempt_amount
        current = self.calculate(value, config)

        if value <= exempt_amount:
            strategy = CustodyStrategy.MAINTAIN_EXEMPT
            optimized_size = exempt_amount
            recommendation = (
                f"Keep the portfolio below ${exempt_amount:,.0f} to avoid custody entirely"
            )
        elif current.total_monthly_cost <= current.monthly_fee * 2:
            strategy = CustodyStrategy.MINIMIZE_CUSTODY
            optimized_size = self._optimal_size_above_threshold(value, config)
            recommendation = (
                f"Adjust the portfolio to ${optimized_size:,.0f} "
                "to optimize the custody/value ratio"
            )
        else:
            strategy = CustodyStrategy.ACCEPT_CUSTODY
            optimized_size = value
            recommendation = "Accept the current custody and focus on maximizing returns"

        optimized = self.calculate(optimized_size, config)
        savings = current.annual_fee - optimized.annual_fee

        logger.info(
            "Portfolio size optimization: current=%s optimized=%s strategy=%s savings=%s",
            value,
            optimized_size,
            strategy.value,
            savings,
        )

        return PortfolioOptimization(
            optimized_size=optimized_size,
            current_custody=current.annual_fee,
            optimized_custody=optimized.annual_fee,
            savings_annual=savings,
            recommendation=recommendation,
            strategy=strategy,
            alternatives=self._alternatives(value, target, config),
        )

    def _optimal_size_above_threshold(
        self, value: Decimal, config: CommissionConfig
    ) -> Decimal:
        """Size where the percentage fee matches the tax-inclusive minimum."""
        custody = config.custody
        if custody.monthly_percentage == ZERO:
            return value

        minimum_fee = custody.monthly_minimum * (1 + custody.iva)
        optimal_total = custody.exempt_amount + minimum_fee / custody.monthly_percentage
        if optimal_total == ZERO:
            return value

        if abs(value - optimal_total) / optimal_total < NEAR_OPTIMAL_TOLERANCE:
            return value
        return optimal_total

    def _alternatives(
        self, value: Decimal, target: Decimal, config: CommissionConfig
    ) -> list[PortfolioAlternative]:
        exempt_amount = config.custody.exempt_amount
        rate = target / HUNDRED
        alternatives = []

        if value > exempt_amount:
            exempt = self.calculate(exempt_amount, config)
            alternatives.append(
                PortfolioAlternative(
                    portfolio_size=exempt_amount,
                    custody_fee=exempt.annual_fee,
                    net_return=exempt_amount * rate,
                    description="Keep the portfolio exempt from custody",
                )
            )

        optimal_size = self._optimal_size_above_threshold(value, config)
        if optimal_size != value:
            optimal = self.calculate(optimal_size, config)
            alternatives.append(
                PortfolioAlternative(
                    portfolio_size=optimal_size,
                    custody_fee=optimal.annual_fee,
                    net_return=optimal_size * rate - optimal.annual_fee,
                    description="Optimal size to minimize the custody/value ratio",
                )
            )

        larger_size = value * LARGER_PORTFOLIO_FACTOR
        larger = self.calculate(larger_size, config)
        alternatives.append(
            PortfolioAlternative(
                portfolio_size=larger_size,
                custody_fee=larger.annual_fee,
                net_return=larger_size * rate - larger.annual_fee,
                description="Portfolio 50% larger (greater scale)",
            )
        )

        return sorted(alternatives, key=lambda a: a.net_return, reverse=True)


def _impact_recommendations(
    impact_percentage: Decimal,
    is_exempt: bool,
    portfolio_value: Decimal,
    exempt_amount: Decimal,
) -> list[str]:
    recommendations = []

    if is_exempt:
        recommendations.append("Your portfolio is currently exempt from custody")
        if portfolio_value > exempt_amount * Decimal("0.8"):
            recommendations.append(
                "You are approaching the exemption limit; plan your growth strategy"
            )
    elif impact_percentage > 15:
        recommendations.append("High custody impact on returns (>15%)")
        recommendations.append(
            "Consider reducing the portfolio or splitting it across brokers"
        )
    elif impact_percentage > 5:
        recommendations.append("Moderate custody impact on returns (5-15%)")
        recommendations.append("Check whether growth compensates for custody")
    else:
        recommendations.append("Low custody impact on returns (<5%)")
        recommendations.append("Custody is acceptable; focus on maximizing returns")

    if not is_exempt and portfolio_value < exempt_amount * Decimal("1.2"):
        recommendations.append("Consider keeping the portfolio below the exemption limit")

    return recommendations
