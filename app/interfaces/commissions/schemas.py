"""
Pydantic schemas for commissions API request/response validation.

These schemas enforce input validation and define the API contract.
Amounts are in ARS and rates are fractions (0.005 = 0.5%) unless a
field says it is a percentage.
No business logic belongs here.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, Field

from app.domain.commissions.entities import CustodyStrategy, OperationType, ScenarioType

BROKER_DESCRIPTION = "Broker code; the active broker when omitted"
BROKER_PATTERN = r"^[a-z0-9_-]+$"
BROKER_MAX_LEN = 50
SYMBOL_PATTERN = r"^[A-Za-z0-9.]+$"

GrowthPercentage = Annotated[Decimal, Field(ge=-100, le=10000)]
InflationRate = Annotated[Decimal, Field(ge=0, le=10)]
HorizonMonths = Annotated[int, Field(ge=0, le=600)]


def _broker_field():
    return Field(
        default=None,
        min_length=1,
        max_length=BROKER_MAX_LEN,
        pattern=BROKER_PATTERN,
        description=BROKER_DESCRIPTION,
    )


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    detail: str | None = None


# ------------------------------------------------------------------
# Broker configurations
# ------------------------------------------------------------------


class OperationFeeSchema(BaseModel):
    """Fee schedule for buys or sells. Ranges are checked by the catalog."""

    percentage: Decimal
    minimum: Decimal
    iva: Decimal


class CustodyFeeSchema(BaseModel):
    """Monthly custody fee schedule."""

    exempt_amount: Decimal
    monthly_percentage: Decimal
    monthly_minimum: Decimal
    iva: Decimal


class CommissionConfigSchema(BaseModel):
    """A broker's full commission configuration."""

    broker: str = Field(..., max_length=BROKER_MAX_LEN)
    name: str = Field(..., max_length=100)
    buy: OperationFeeSchema
    sell: OperationFeeSchema
    custody: CustodyFeeSchema
    is_active: bool = True


class CommissionConfigUpdateRequest(BaseModel):
    """Replacement configuration for an existing broker."""

    name: str = Field(..., max_length=100)
    buy: OperationFeeSchema
    sell: OperationFeeSchema
    custody: CustodyFeeSchema
    is_active: bool = True


class CommissionConfigListResponse(BaseModel):
    configs: list[CommissionConfigSchema]


class SetActiveBrokerRequest(BaseModel):
    broker: str = Field(
        ..., min_length=1, max_length=BROKER_MAX_LEN, pattern=BROKER_PATTERN
    )


class CatalogStatsResponse(BaseModel):
    total_configs: int
    active_configs: int
    average_commission_rate: Decimal
    lowest_commission_broker: str
    highest_exempt_amount: Decimal


# ------------------------------------------------------------------
# Operation commissions
# ------------------------------------------------------------------


class CalculateCommissionRequest(BaseModel):
    """Request schema for an operation commission.

    Attributes:
        operation_type: BUY or SELL.
        amount: Operation total in ARS.
        broker: Optional broker code.
    """

    operation_type: OperationType
    amount: Decimal = Field(..., ge=0, description="Operation total in ARS")
    broker: Optional[str] = _broker_field()


class CommissionBreakdownSchema(BaseModel):
    operation_type: OperationType
    total_amount: Decimal
    commission_rate: Decimal
    minimum_applied: bool
    iva_rate: Decimal


class CommissionCalculationResponse(BaseModel):
    """Commission charged on one operation."""

    base_commission: Decimal
    iva_amount: Decimal
    total_commission: Decimal
    net_amount: Decimal
    breakdown: CommissionBreakdownSchema


class CustodyCalculationResponse(BaseModel):
    """Custody charged for one month."""

    applicable_amount: Decimal
    monthly_fee: Decimal
    annual_fee: Decimal
    iva_amount: Decimal
    total_monthly_cost: Decimal
    is_exempt: bool


class CommissionProjectionRequest(BaseModel):
    """Request schema for the first-year cost of an operation.

    Attributes:
        portfolio_value: Portfolio value before the operation.
    """

    operation_type: OperationType
    amount: Decimal = Field(..., ge=0)
    portfolio_value: Decimal = Field(default=Decimal("0"), ge=0)
    broker: Optional[str] = _broker_field()


class CommissionProjectionResponse(BaseModel):
    operation: CommissionCalculationResponse
    custody: CustodyCalculationResponse
    total_first_year_cost: Decimal
    break_even_impact: Decimal = Field(
        ..., description="First-year cost as a percentage of the operation"
    )


class CompareBrokersRequest(BaseModel):
    operation_type: OperationType
    amount: Decimal = Field(..., ge=0)
    portfolio_value: Decimal = Field(default=Decimal("0"), ge=0)


class BrokerComparisonItem(BaseModel):
    broker: str
    name: str
    operation: CommissionCalculationResponse
    custody: CustodyCalculationResponse
    total_first_year_cost: Decimal
    ranking: int


class CompareBrokersResponse(BaseModel):
    """Active brokers ranked by first-year cost, cheapest first."""

    comparisons: list[BrokerComparisonItem]


class MinimumInvestmentRequest(BaseModel):
    threshold_percentage: Decimal = Field(
        ..., gt=0, le=100, description="Maximum acceptable commission, in percent"
    )
    broker: Optional[str] = _broker_field()


class MinimumInvestmentResponse(BaseModel):
    minimum_amount: Decimal
    commission_percentage: Decimal
    recommendation: str


class CommissionImpactRequest(BaseModel):
    """Request schema for commission impact over a holding period.

    Attributes:
        expected_annual_return: Expected annual return, in percent.
        holding_period_years: Holding period, fractional years allowed.
    """

    initial_investment: Decimal = Field(..., gt=0)
    expected_annual_return: Decimal = Field(..., ge=-100, le=1000)
    holding_period_years: Decimal = Field(..., gt=0, le=50)
    broker: Optional[str] = _broker_field()


class CommissionImpactResponse(BaseModel):
    gross_return: Decimal
    buy_commission: Decimal
    sell_commission: Decimal
    total_custody_fees: Decimal
    net_return: Decimal
    return_impact: Decimal
    break_even_return: Decimal


class TypeTotalsSchema(BaseModel):
    count: int
    total: Decimal


class MonthlyCommissionsSchema(BaseModel):
    month: str
    commissions: Decimal
    taxes: Decimal
    trades: int


class CommissionHistoryResponse(BaseModel):
    """Commissions paid on recorded trades."""

    total_commissions_paid: Decimal
    total_taxes_paid: Decimal
    average_commission_per_trade: Decimal
    buy: TypeTotalsSchema
    sell: TypeTotalsSchema
    monthly_breakdown: list[MonthlyCommissionsSchema]


# ------------------------------------------------------------------
# Custody
# ------------------------------------------------------------------


class CalculateCustodyRequest(BaseModel):
    portfolio_value: Decimal = Field(..., ge=0, description="Portfolio value in ARS")
    broker: Optional[str] = _broker_field()


class CustodyThresholdResponse(BaseModel):
    exempt_amount: Decimal
    minimum_monthly_fee: Decimal
    minimum_annual_fee: Decimal
    recommended_strategy: str


class CustodyProjectionRequest(BaseModel):
    """Request schema for a month-by-month custody projection.

    Attributes:
        months: Number of months to project (0-120).
        monthly_growth_rate: Expected monthly growth as a fraction.
    """

    portfolio_value: Decimal = Field(..., ge=0)
    months: int = Field(default=12, ge=0, le=120)
    monthly_growth_rate: Decimal = Field(default=Decimal("0.015"), ge=-1, le=1)
    broker: Optional[str] = _broker_field()


class MonthlyCustodyProjectionSchema(BaseModel):
    month: int
    portfolio_value: Decimal
    custody: CustodyCalculationResponse
    cumulative_custody: Decimal
    threshold_crossed: bool


class CustodyProjectionSummarySchema(BaseModel):
    total_months: int
    total_projected_custody: Decimal
    average_monthly: Decimal
    threshold_crossings: int
    final_portfolio_value: Decimal


class CustodyProjectionResponse(BaseModel):
    projections: list[MonthlyCustodyProjectionSchema]
    summary: CustodyProjectionSummarySchema
    broker: str


class GrowthProjectionRequest(BaseModel):
    portfolio_value: Decimal = Field(..., ge=0)
    growth_percentages: list[GrowthPercentage] = Field(
        ..., min_length=1, max_length=20, description="Growth scenarios, in percent"
    )
    broker: Optional[str] = _broker_field()


class GrowthCustodyProjectionSchema(BaseModel):
    portfolio_value: Decimal
    growth_percentage: Decimal
    custody: CustodyCalculationResponse
    threshold_crossed: bool


class GrowthProjectionResponse(BaseModel):
    projections: list[GrowthCustodyProjectionSchema]


class CustodyOptimizationRequest(BaseModel):
    portfolio_value: Decimal = Field(..., ge=0)
    target_annual_return: Decimal = Field(
        ..., ge=-100, le=1000, description="Expected annual return, in percent"
    )
    broker: Optional[str] = _broker_field()


class PortfolioAlternativeSchema(BaseModel):
    portfolio_size: Decimal
    custody_fee: Decimal
    net_return: Decimal
    description: str


class PortfolioOptimizationSchema(BaseModel):
    optimized_size: Decimal
    current_custody: Decimal
    optimized_custody: Decimal
    savings_annual: Decimal
    recommendation: str
    strategy: CustodyStrategy
    alternatives: list[PortfolioAlternativeSchema]


class CustodyImpactSchema(BaseModel):
    gross_return: Decimal
    custody_impact: Decimal
    net_return: Decimal
    annual_custody_fee: Decimal
    impact_percentage: Decimal
    recommendations: list[str]


class CustodyOptimizationResponse(BaseModel):
    optimization: PortfolioOptimizationSchema
    impact: CustodyImpactSchema
    broker: str


class BrokerCustodyImpactSchema(BaseModel):
    broker: str
    custody_fee: Decimal
    impact_percentage: Decimal
    net_return: Decimal


class CustodyImpactResponse(BaseModel):
    impact: CustodyImpactSchema
    broker_comparisons: list[BrokerCustodyImpactSchema]
    broker: str


class CustodyFeeRecordSchema(BaseModel):
    id: int
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


class CustodyFeeHistoryResponse(BaseModel):
    records: list[CustodyFeeRecordSchema]
    total_charged: Decimal


class PaymentDateRequest(BaseModel):
    payment_date: date


class RunCustodyJobRequest(BaseModel):
    """Request schema for a manual custody fee run.

    Attributes:
        month: Any date within the month; the previous month when omitted.
        dry_run: Compute without recording; the configured default when omitted.
    """

    month: Optional[date] = None
    dry_run: Optional[bool] = None
    broker: Optional[str] = _broker_field()


class RunCustodyJobResponse(BaseModel):
    status: str
    started_at: str
    finished_at: Optional[str] = None
    duration_seconds: float
    details: dict
    error: Optional[str] = None


class CustodyJobStatusResponse(BaseModel):
    is_running: bool
    total_executions: int
    successful_executions: int
    failed_executions: int
    last_execution: Optional[str] = None
    last_error: Optional[str] = None
    last_custody_fee: Optional[Decimal] = None
    last_portfolio_value: Optional[Decimal] = None
    next_run_time: Optional[str] = None
    dry_run: bool


# ------------------------------------------------------------------
# Break-even
# ------------------------------------------------------------------


class HoldingCostRequest(BaseModel):
    """Request schema for a holding-cost projection.

    Attributes:
        amount: Amount bought in ARS.
        months: Holding horizon in months.
        portfolio_value: Value custody is charged on; defaults to amount.
        include_exit: Add the sell commission on the final value.
    """

    amount: Decimal = Field(..., ge=0)
    months: int = Field(..., ge=0, le=600)
    monthly_growth_rate: Decimal = Field(default=Decimal("0"), ge=-1, le=1)
    portfolio_value: Optional[Decimal] = Field(default=None, ge=0)
    include_exit: bool = False
    broker: Optional[str] = _broker_field()


class HoldingMonthSchema(BaseModel):
    month: int
    portfolio_value: Decimal
    custody: CustodyCalculationResponse
    cumulative_custody: Decimal


class HoldingCostResponse(BaseModel):
    amount: Decimal
    months: int
    entry: CommissionCalculationResponse
    exit: Optional[CommissionCalculationResponse] = None
    monthly: list[HoldingMonthSchema]
    total_custody: Decimal
    total_cost: Decimal
    required_return_pct: Optional[Decimal] = Field(
        None, description="Return needed to cover the costs; null for a zero amount"
    )


class TradeBreakEvenRequest(BaseModel):
    """Request schema for a trade break-even.

    Attributes:
        current_price: Market price; the purchase price when omitted.
        projection_months: Horizon of the scenario projections.
        inflation_rate: Annual inflation as a fraction; the configured default
            when omitted.
    """

    current_price: Optional[Decimal] = Field(default=None, gt=0)
    projection_months: Optional[int] = Field(default=None, ge=0, le=120)
    inflation_rate: Optional[Decimal] = Field(default=None, ge=0, le=10)


class BreakEvenComponentsSchema(BaseModel):
    purchase_price: Decimal
    break_even_price: Decimal
    total_costs: Decimal
    buy_commission: Decimal
    sell_commission: Decimal
    custody_impact: Decimal
    inflation_impact: Decimal
    tax_impact: Decimal


class BreakEvenAnalysisSchema(BaseModel):
    trade_id: Optional[int]
    symbol: str
    components: BreakEvenComponentsSchema
    current_price: Decimal
    distance_to_break_even: Decimal
    distance_percentage: Decimal
    days_to_break_even: int
    months_held: int


class BreakEvenScenarioSchema(BaseModel):
    scenario: ScenarioType
    months_ahead: int
    inflation_rate: Decimal
    projected_break_even: Decimal
    probability: Decimal


class BreakEvenSuggestionSchema(BaseModel):
    suggestion_type: str
    title: str
    description: str
    potential_savings: Optional[Decimal] = None
    potential_time_reduction: Optional[int] = None
    difficulty: str
    priority: int


class TradeBreakEvenResponse(BaseModel):
    analysis: BreakEvenAnalysisSchema
    projections: list[BreakEvenScenarioSchema]
    suggestions: list[BreakEvenSuggestionSchema]


class BreakEvenMatrixRequest(BaseModel):
    purchase_price: Decimal = Field(..., gt=0)
    quantity: Decimal = Field(..., gt=0)
    inflation_rates: list[InflationRate] = Field(..., min_length=1, max_length=20)
    time_horizons: list[HorizonMonths] = Field(..., min_length=1, max_length=20)
    broker: Optional[str] = _broker_field()


class BreakEvenMatrixCellSchema(BaseModel):
    inflation_rate: Decimal
    time_horizon: int
    break_even_price: Decimal
    total_costs: Decimal
    days_to_break_even: int


class BreakEvenMatrixResponse(BaseModel):
    cells: list[BreakEvenMatrixCellSchema]


# ------------------------------------------------------------------
# Trades
# ------------------------------------------------------------------


class TradeCreateRequest(BaseModel):
    """Request schema for recording a trade.

    Commission and taxes are computed from the broker configuration.
    """

    symbol: str = Field(..., min_length=1, max_length=10, pattern=SYMBOL_PATTERN)
    operation_type: OperationType
    quantity: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., gt=0)
    trade_date: date
    broker: Optional[str] = _broker_field()


class TradeResponse(BaseModel):
    id: int
    symbol: str
    trade_type: OperationType
    quantity: Decimal
    price: Decimal
    total_amount: Decimal
    commission: Decimal
    taxes: Decimal
    trade_date: date
    broker: str


class TradeListResponse(BaseModel):
    trades: list[TradeResponse]
