"""
Data Transfer Objects for the commissions application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior. Calculation results are
returned as the domain's own frozen records.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from app.domain.commissions.entities import (
    BreakEvenAnalysis,
    BreakEvenScenarioProjection,
    BreakEvenSuggestion,
    BrokerComparison,
    CommissionConfig,
    CustodyFeeRecord,
    CustodyImpact,
    CustodyProjectionSummary,
    MonthlyCustodyProjection,
    OperationType,
    PortfolioOptimization,
)


@dataclass(frozen=True)
class CalculateCommissionCommand:
    """Input DTO for an operation commission.

    Attributes:
        operation_type: BUY or SELL.
        amount: Operation total in ARS.
        broker: Broker slug; the active configuration when None.
    """

    operation_type: OperationType
    amount: Decimal
    broker: Optional[str] = None


@dataclass(frozen=True)
class CalculateCustodyCommand:
    """Input DTO for a monthly custody fee."""

    portfolio_value: Decimal
    broker: Optional[str] = None


@dataclass(frozen=True)
class ProjectCommissionCommand:
    """Input DTO for a first-year cost projection of an operation.

    Attributes:
        operation_type: BUY or SELL.
        amount: Operation total in ARS.
        portfolio_value: Portfolio value before the operation.
        broker: Broker slug; the active configuration when None.
    """

    operation_type: OperationType
    amount: Decimal
    portfolio_value: Decimal
    broker: Optional[str] = None


@dataclass(frozen=True)
class CompareBrokersCommand:
    """Input DTO for ranking brokers on an operation."""

    operation_type: OperationType
    amount: Decimal
    portfolio_value: Decimal


@dataclass(frozen=True)
class MinimumInvestmentQuery:
    """Input DTO for the minimum investment under a commission threshold.

    Attributes:
        threshold_percentage: Maximum acceptable commission, in percent.
        broker: Broker slug; the active configuration when None.
    """

    threshold_percentage: Decimal
    broker: Optional[str] = None


@dataclass(frozen=True)
class CommissionImpactQuery:
    """Input DTO for commission impact over a holding period."""

    initial_investment: Decimal
    expected_annual_return: Decimal
    holding_period_years: Decimal
    broker: Optional[str] = None


@dataclass(frozen=True)
class CommissionHistoryQuery:
    """Input DTO for the commissions paid over recorded trades."""

    from_date: Optional[date] = None
    to_date: Optional[date] = None
    symbol: Optional[str] = None


@dataclass(frozen=True)
class CustodyProjectionQuery:
    """Input DTO for a month-by-month custody projection.

    Attributes:
        portfolio_value: Current portfolio value in ARS.
        months: Number of months to project.
        monthly_growth_rate: Expected monthly growth as a fraction.
        broker: Broker slug; the active configuration when None.
    """

    portfolio_value: Decimal
    months: int = 12
    monthly_growth_rate: Decimal = Decimal("0.015")
    broker: Optional[str] = None


@dataclass(frozen=True)
class CustodyProjectionResult:
    """Output DTO for a custody projection."""

    projections: list[MonthlyCustodyProjection]
    summary: CustodyProjectionSummary
    broker: str


@dataclass(frozen=True)
class CustodyGrowthQuery:
    """Input DTO for custody at several growth percentages."""

    portfolio_value: Decimal
    growth_percentages: list[Decimal]
    broker: Optional[str] = None


@dataclass(frozen=True)
class CustodyOptimizationQuery:
    """Input DTO for portfolio-size optimization and return impact.

    Attributes:
        portfolio_value: Current portfolio value in ARS.
        target_annual_return: Expected annual return in percent.
        broker: Broker slug; the active configuration when None.
    """

    portfolio_value: Decimal
    target_annual_return: Decimal
    broker: Optional[str] = None


@dataclass(frozen=True)
class CustodyOptimizationResult:
    """Output DTO for a custody optimization."""

    optimization: PortfolioOptimization
    impact: CustodyImpact
    broker: str


@dataclass(frozen=True)
class BrokerCustodyImpact:
    """Custody drag of one broker on the same portfolio and return."""

    broker: str
    custody_fee: Decimal
    impact_percentage: Decimal
    net_return: Decimal


@dataclass(frozen=True)
class CustodyImpactResult:
    """Output DTO for custody impact with a cross-broker comparison."""

    impact: CustodyImpact
    broker_comparisons: list[BrokerCustodyImpact]
    broker: str


@dataclass(frozen=True)
class HoldingCostCommand:
    """Input DTO for a holding-cost projection.

    Attributes:
        amount: Amount bought in ARS.
        months: Holding horizon in months.
        monthly_growth_rate: Expected monthly growth as a fraction.
        portfolio_value: Value on which custody is charged; defaults to amount.
        include_exit: Whether to add the sell commission at the end.
        broker: Broker slug; the active configuration when None.
    """

    amount: Decimal
    months: int
    monthly_growth_rate: Decimal = Decimal("0")
    portfolio_value: Optional[Decimal] = None
    include_exit: bool = False
    broker: Optional[str] = None


@dataclass(frozen=True)
class TradeBreakEvenCommand:
    """Input DTO for the break-even of a recorded trade."""

    trade_id: int
    current_price: Optional[Decimal] = None
    projection_months: Optional[int] = None
    inflation_rate: Optional[Decimal] = None


@dataclass(frozen=True)
class TradeBreakEvenResult:
    """Output DTO for a trade break-even."""

    analysis: BreakEvenAnalysis
    projections: list[BreakEvenScenarioProjection]
    suggestions: list[BreakEvenSuggestion]


@dataclass(frozen=True)
class BreakEvenMatrixCommand:
    """Input DTO for a break-even sensitivity matrix."""

    purchase_price: Decimal
    quantity: Decimal
    inflation_rates: list[Decimal]
    time_horizons: list[int]
    broker: Optional[str] = None


@dataclass(frozen=True)
class RecordTradeCommand:
    """Input DTO for recording a trade.

    Commission and taxes are derived from the broker configuration.
    """

    symbol: str
    operation_type: OperationType
    quantity: Decimal
    price: Decimal
    trade_date: date
    broker: Optional[str] = None


@dataclass(frozen=True)
class ListTradesQuery:
    """Input DTO for listing trades."""

    from_date: Optional[date] = None
    to_date: Optional[date] = None
    symbol: Optional[str] = None


@dataclass(frozen=True)
class SaveBrokerConfigCommand:
    """Input DTO for adding or updating a broker configuration."""

    config: CommissionConfig


@dataclass(frozen=True)
class RecordMonthlyCustodyFeeCommand:
    """Input DTO for the monthly custody fee run.

    Attributes:
        month: Any date within the month to charge; the previous month when None.
        dry_run: Compute without persisting.
        broker: Broker slug; the active configuration when None.
    """

    month: Optional[date] = None
    dry_run: bool = False
    broker: Optional[str] = None


@dataclass(frozen=True)
class MonthlyCustodyFeeResult:
    """Output DTO for the monthly custody fee run."""

    month: date
    broker: str
    portfolio_value: Decimal
    custody_fee: Decimal
    is_exempt: bool
    already_recorded: bool = False
    record: Optional[CustodyFeeRecord] = None


@dataclass(frozen=True)
class ListCustodyFeesQuery:
    """Input DTO for the custody fee history."""

    start_month: Optional[date] = None
    end_month: Optional[date] = None
    broker: Optional[str] = None


@dataclass(frozen=True)
class SetPaymentDateCommand:
    """Input DTO for recording when a custody fee was charged."""

    fee_id: int
    payment_date: date


@dataclass(frozen=True)
class CustodyFeeHistory:
    """Output DTO for the custody fee history."""

    records: list[CustodyFeeRecord] = field(default_factory=list)
    total_charged: Decimal = Decimal("0")
