"""
Domain entities for the commissions bounded context.

Entities represent broker cost configurations, the calculations derived
from them, and the persisted ledgers (trades, custody fee charges).
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
MONTHS_PER_YEAR = 12


def to_decimal(value: Number) -> Decimal:
    """Convert a numeric value to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class OperationType(Enum):
    """Direction of a trade."""

    BUY = "BUY"
    SELL = "SELL"


class CustodyStrategy(Enum):
    """Outcome of the portfolio-size optimization."""

    MAINTAIN_EXEMPT = "MAINTAIN_EXEMPT"
    MINIMIZE_CUSTODY = "MINIMIZE_CUSTODY"
    ACCEPT_CUSTODY = "ACCEPT_CUSTODY"


class ScenarioType(Enum):
    """Inflation scenario for break-even projections."""

    OPTIMISTIC = "OPTIMISTIC"
    BASE = "BASE"
    PESSIMISTIC = "PESSIMISTIC"


@dataclass(frozen=True)
class OperationFeeConfig:
    """Fee schedule for one side of a trade.

    Attributes:
        percentage: Commission rate as a fraction (0.005 = 0.5%).
        minimum: Minimum commission in ARS.
        iva: IVA rate applied to the commission (0.21 = 21%).
    """

    percentage: Decimal
    minimum: Decimal
    iva: Decimal


@dataclass(frozen=True)
class CustodyFeeConfig:
    """Monthly custody fee schedule.

    Attributes:
        exempt_amount: Portfolio value (ARS) up to which no custody is charged.
        monthly_percentage: Monthly rate applied to the excess over the exemption.
        monthly_minimum: Minimum monthly fee in ARS once custody applies.
        iva: IVA rate applied to the fee.
    """

    exempt_amount: Decimal
    monthly_percentage: Decimal
    monthly_minimum: Decimal
    iva: Decimal


@dataclass(frozen=True)
class CommissionConfig:
    """A broker's full commission configuration."""

    broker: str
    name: str
    buy: OperationFeeConfig
    sell: OperationFeeConfig
    custody: CustodyFeeConfig
    is_active: bool = True

    def for_operation(self, operation_type: OperationType) -> OperationFeeConfig:
        """Return the fee schedule that applies to the given operation."""
        return self.buy if operation_type is OperationType.BUY else self.sell


@dataclass(frozen=True)
class CommissionBreakdown:
    """How an operation commission was derived."""

    operation_type: OperationType
    total_amount: Decimal
    commission_rate: Decimal
    minimum_applied: bool
    iva_rate: Decimal


@dataclass(frozen=True)
class CommissionCalculation:
    """Commission charged on a single buy or sell operation."""

    base_commission: Decimal
    iva_amount: Decimal
    total_commission: Decimal
    net_amount: Decimal
    breakdown: CommissionBreakdown


@dataclass(frozen=True)
class CustodyCalculation:
    """Custody fee charged for one month on a portfolio value."""

    applicable_amount: Decimal
    monthly_fee: Decimal
    annual_fee: Decimal
    iva_amount: Decimal
    total_monthly_cost: Decimal
    is_exempt: bool


@dataclass(frozen=True)
class CommissionProjection:
    """First-year cost of an operation including the resulting custody."""

    operation: CommissionCalculation
    custody: CustodyCalculation
    total_first_year_cost: Decimal
    break_even_impact: Decimal


@dataclass(frozen=True)
class MinimumInvestment:
    """Smallest operation keeping the commission under a threshold."""

    minimum_amount: Decimal
    commission_percentage: Decimal
    recommendation: str


@dataclass(frozen=True)
class CustodyThreshold:
    """Where custody starts and what it costs at the minimum."""

    exempt_amount: Decimal
    minimum_monthly_fee: Decimal
    minimum_annual_fee: Decimal
    recommended_strategy: str


@dataclass(frozen=True)
class GrowthCustodyProjection:
    """Custody for a portfolio grown by a given percentage."""

    portfolio_value: Decimal
    growth_percentage: Decimal
    custody: CustodyCalculation
    threshold_crossed: bool


@dataclass(frozen=True)
class MonthlyCustodyProjection:
    """Custody for one projected month."""

    month: int
    portfolio_value: Decimal
    custody: CustodyCalculation
    cumulative_custody: Decimal
    threshold_crossed: bool


@dataclass(frozen=True)
class CustodyProjectionSummary:
    """Aggregate of a monthly custody projection."""

    total_months: int
    total_projected_custody: Decimal
    average_monthly: Decimal
    threshold_crossings: int
    final_portfolio_value: Decimal


@dataclass(frozen=True)
class CustodyImpact:
    """Effect of custody fees on an expected annual return."""

    gross_return: Decimal
    custody_impact: Decimal
    net_return: Decimal
    annual_custody_fee: Decimal
    impact_percentage: Decimal
    recommendations: list[str]


@dataclass(frozen=True)
class PortfolioAlternative:
    """A candidate portfolio size and its net outcome."""

    portfolio_size: Decimal
    custody_fee: Decimal
    net_return: Decimal
    description: str


@dataclass(frozen=True)
class PortfolioOptimization:
    """Recommended portfolio size to keep custody under control."""

    optimized_size: Decimal
    current_custody: Decimal
    optimized_custody: Decimal
    savings_annual: Decimal
    recommendation: str
    strategy: CustodyStrategy
    alternatives: list[PortfolioAlternative]


@dataclass(frozen=True)
class HoldingMonth:
    """One month of a holding-cost projection."""

    month: int
    portfolio_value: Decimal
    custody: CustodyCalculation
    cumulative_custody: Decimal


@dataclass(frozen=True)
class HoldingCostProjection:
    """Entry commission plus custody over a horizon.

    ``required_return_pct`` is the return on ``amount`` needed to offset
    ``total_cost``; it is None when ``amount`` is zero.
    """

    amount: Decimal
    months: int
    entry: CommissionCalculation
    exit: Optional[CommissionCalculation]
    monthly: list[HoldingMonth]
    total_custody: Decimal
    total_cost: Decimal
    required_return_pct: Optional[Decimal]


@dataclass(frozen=True)
class BrokerComparison:
    """One broker's cost for an operation, ranked against others."""

    broker: str
    name: str
    operation: CommissionCalculation
    custody: CustodyCalculation
    total_first_year_cost: Decimal
    ranking: int


@dataclass(frozen=True)
class CommissionImpact:
    """Effect of commissions and custody over a holding period."""

    gross_return: Decimal
    buy_commission: Decimal
    sell_commission: Decimal
    total_custody_fees: Decimal
    net_return: Decimal
    return_impact: Decimal
    break_even_return: Decimal


@dataclass(frozen=True)
class Trade:
    """A recorded buy or sell operation."""

    id: Optional[int]
    symbol: str
    trade_type: OperationType
    quantity: Decimal
    price: Decimal
    total_amount: Decimal
    commission: Decimal
    taxes: Decimal
    trade_date: date
    broker: str


@dataclass(frozen=True)
class TypeTotals:
    """Trade count and commission total for one operation type."""

    count: int = 0
    total: Decimal = ZERO


@dataclass(frozen=True)
class MonthlyCommissions:
    """Commissions and taxes paid in a calendar month (``YYYY-MM``)."""

    month: str
    commissions: Decimal
    taxes: Decimal
    trades: int


@dataclass(frozen=True)
class CommissionHistory:
    """Aggregate of commissions paid over a set of trades."""

    total_commissions_paid: Decimal
    total_taxes_paid: Decimal
    average_commission_per_trade: Decimal
    buy: TypeTotals
    sell: TypeTotals
    monthly_breakdown: list[MonthlyCommissions] = field(default_factory=list)


@dataclass(frozen=True)
class CustodyFeeRecord:
    """Custody fee charged by a broker for a calendar month."""

    id: Optional[int]
    month: date
    portfolio_value: Decimal
    fee_percentage: Decimal
    fee_amount: Decimal
    iva_amount: Decimal
    total_charged: Decimal
    broker: str
    is_exempt: bool
    applicable_amount: Decimal
    payment_date: Optional[date] = None


@dataclass(frozen=True)
class BreakEvenComponents:
    """Costs that a position must recover before it is profitable."""

    purchase_price: Decimal
    break_even_price: Decimal
    total_costs: Decimal
    buy_commission: Decimal
    sell_commission: Decimal
    custody_impact: Decimal
    inflation_impact: Decimal
    tax_impact: Decimal


@dataclass(frozen=True)
class BreakEvenAnalysis:
    """Break-even of a position against its current price."""

    trade_id: Optional[int]
    symbol: str
    components: BreakEvenComponents
    current_price: Decimal
    distance_to_break_even: Decimal
    distance_percentage: Decimal
    days_to_break_even: int
    months_held: int


@dataclass(frozen=True)
class BreakEvenScenarioProjection:
    """Break-even price projected under an inflation scenario."""

    scenario: ScenarioType
    months_ahead: int
    inflation_rate: Decimal
    projected_break_even: Decimal
    probability: Decimal


@dataclass(frozen=True)
class BreakEvenSuggestion:
    """An action that would bring the break-even closer."""

    suggestion_type: str
    title: str
    description: str
    potential_savings: Optional[Decimal]
    potential_time_reduction: Optional[int]
    difficulty: str
    priority: int


@dataclass(frozen=True)
class BreakEvenMatrixCell:
    """Break-even for one (inflation rate, horizon) pair."""

    inflation_rate: Decimal
    time_horizon: int
    break_even_price: Decimal
    total_costs: Decimal
    days_to_break_even: int
