"""
Dependency injection for the commissions bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the commissions context.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from sqlalchemy.engine import Engine

from app.application.commissions.break_even import (
    AnalyzeTradeBreakEvenUseCase,
    BreakEvenMatrixUseCase,
    ProjectHoldingCostUseCase,
)
from app.application.commissions.broker_configs import (
    AddBrokerConfigUseCase,
    CatalogStatsUseCase,
    GetActiveBrokerConfigUseCase,
    GetBrokerConfigUseCase,
    ListBrokerConfigsUseCase,
    SetActiveBrokerUseCase,
    UpdateBrokerConfigUseCase,
)
from app.application.commissions.calculate_commission import (
    CalculateCommissionUseCase,
    ProjectCommissionUseCase,
)
from app.application.commissions.commission_analysis import (
    CommissionHistoryUseCase,
    CommissionImpactUseCase,
    CompareBrokersUseCase,
    MinimumInvestmentUseCase,
)
from app.application.commissions.custody_analysis import (
    CalculateCustodyUseCase,
    CustodyImpactUseCase,
    CustodyThresholdUseCase,
    OptimizeCustodyUseCase,
    ProjectCustodyGrowthUseCase,
    ProjectCustodyUseCase,
)
from app.application.commissions.custody_fees import (
    ListCustodyFeesUseCase,
    RecordMonthlyCustodyFeeUseCase,
    SetCustodyFeePaymentDateUseCase,
)
from app.application.commissions.trades import (
    GetTradeUseCase,
    ListTradesUseCase,
    RecordTradeUseCase,
)
from app.core.config import settings
from app.infrastructure.commissions.commission_config_repository import (
    SqlCommissionConfigRepository,
)
from app.infrastructure.commissions.custody_fee_repository import SqlCustodyFeeRepository
from app.infrastructure.commissions.database import build_engine, initialize_database
from app.infrastructure.commissions.trade_repository import SqlTradeRepository
from app.jobs.custody_fee_scheduler import CustodyFeeScheduler

_scheduler: Optional[CustodyFeeScheduler] = None


@lru_cache
def get_engine() -> Engine:
    """Build the SQLAlchemy engine once and make sure the schema exists."""
    engine = build_engine(settings.database_url)
    initialize_database(engine, default_broker=settings.default_broker)
    return engine


def build_custody_fee_scheduler(engine: Engine) -> CustodyFeeScheduler:
    """Build a CustodyFeeScheduler whose runs use ``engine``."""

    def use_case_factory() -> RecordMonthlyCustodyFeeUseCase:
        return RecordMonthlyCustodyFeeUseCase(
            trade_repo=SqlTradeRepository(engine),
            fee_repo=SqlCustodyFeeRepository(engine),
            config_repo=SqlCommissionConfigRepository(engine),
        )

    return CustodyFeeScheduler(
        use_case_factory,
        cron=settings.custody_job_cron,
        timezone_name=settings.custody_job_timezone,
        dry_run=settings.custody_job_dry_run,
    )


def set_custody_fee_scheduler(scheduler: Optional[CustodyFeeScheduler]) -> None:
    """Register the scheduler started by the application lifespan."""
    global _scheduler
    _scheduler = scheduler


def get_custody_fee_scheduler() -> CustodyFeeScheduler:
    """Return the running scheduler, or an idle one for manual runs."""
    global _scheduler
    if _scheduler is None:
        _scheduler = build_custody_fee_scheduler(get_engine())
    return _scheduler


# ------------------------------------------------------------------
# Broker configurations
# ------------------------------------------------------------------


def get_list_broker_configs_use_case(
    engine: Engine = Depends(get_engine),
) -> ListBrokerConfigsUseCase:
    return ListBrokerConfigsUseCase(SqlCommissionConfigRepository(engine))


def get_broker_config_use_case(
    engine: Engine = Depends(get_engine),
) -> GetBrokerConfigUseCase:
    return GetBrokerConfigUseCase(SqlCommissionConfigRepository(engine))


def get_active_broker_config_use_case(
    engine: Engine = Depends(get_engine),
) -> GetActiveBrokerConfigUseCase:
    return GetActiveBrokerConfigUseCase(SqlCommissionConfigRepository(engine))


def get_set_active_broker_use_case(
    engine: Engine = Depends(get_engine),
) -> SetActiveBrokerUseCase:
    return SetActiveBrokerUseCase(SqlCommissionConfigRepository(engine))


def get_add_broker_config_use_case(
    engine: Engine = Depends(get_engine),
) -> AddBrokerConfigUseCase:
    return AddBrokerConfigUseCase(SqlCommissionConfigRepository(engine))


def get_update_broker_config_use_case(
    engine: Engine = Depends(get_engine),
) -> UpdateBrokerConfigUseCase:
    return UpdateBrokerConfigUseCase(SqlCommissionConfigRepository(engine))


def get_catalog_stats_use_case(
    engine: Engine = Depends(get_engine),
) -> CatalogStatsUseCase:
    return CatalogStatsUseCase(SqlCommissionConfigRepository(engine))


# ------------------------------------------------------------------
# Commissions
# ------------------------------------------------------------------


def get_calculate_commission_use_case(
    engine: Engine = Depends(get_engine),
) -> CalculateCommissionUseCase:
    """Build CalculateCommissionUseCase with its infrastructure dependencies."""
    return CalculateCommissionUseCase(SqlCommissionConfigRepository(engine))


def get_project_commission_use_case(
    engine: Engine = Depends(get_engine),
) -> ProjectCommissionUseCase:
    return ProjectCommissionUseCase(SqlCommissionConfigRepository(engine))


def get_compare_brokers_use_case(
    engine: Engine = Depends(get_engine),
) -> CompareBrokersUseCase:
    return CompareBrokersUseCase(SqlCommissionConfigRepository(engine))


def get_minimum_investment_use_case(
    engine: Engine = Depends(get_engine),
) -> MinimumInvestmentUseCase:
    return MinimumInvestmentUseCase(SqlCommissionConfigRepository(engine))


def get_commission_impact_use_case(
    engine: Engine = Depends(get_engine),
) -> CommissionImpactUseCase:
    return CommissionImpactUseCase(SqlCommissionConfigRepository(engine))


def get_commission_history_use_case(
    engine: Engine = Depends(get_engine),
) -> CommissionHistoryUseCase:
    return CommissionHistoryUseCase(SqlTradeRepository(engine))


# ------------------------------------------------------------------
# Custody
# ------------------------------------------------------------------


def get_calculate_custody_use_case(
    engine: Engine = Depends(get_engine),
) -> CalculateCustodyUseCase:
    """Build CalculateCustodyUseCase with its infrastructure dependencies."""
    return CalculateCustodyUseCase(SqlCommissionConfigRepository(engine))


def get_custody_threshold_use_case(
    engine: Engine = Depends(get_engine),
) -> CustodyThresholdUseCase:
    return CustodyThresholdUseCase(SqlCommissionConfigRepository(engine))


def get_project_custody_use_case(
    engine: Engine = Depends(get_engine),
) -> ProjectCustodyUseCase:
    return ProjectCustodyUseCase(SqlCommissionConfigRepository(engine))


def get_project_custody_growth_use_case(
    engine: Engine = Depends(get_engine),
) -> ProjectCustodyGrowthUseCase:
    return ProjectCustodyGrowthUseCase(SqlCommissionConfigRepository(engine))


def get_optimize_custody_use_case(
    engine: Engine = Depends(get_engine),
) -> OptimizeCustodyUseCase:
    return OptimizeCustodyUseCase(SqlCommissionConfigRepository(engine))


def get_custody_impact_use_case(
    engine: Engine = Depends(get_engine),
) -> CustodyImpactUseCase:
    return CustodyImpactUseCase(SqlCommissionConfigRepository(engine))


def get_list_custody_fees_use_case(
    engine: Engine = Depends(get_engine),
) -> ListCustodyFeesUseCase:
    return ListCustodyFeesUseCase(SqlCustodyFeeRepository(engine))


def get_set_payment_date_use_case(
    engine: Engine = Depends(get_engine),
) -> SetCustodyFeePaymentDateUseCase:
    return SetCustodyFeePaymentDateUseCase(SqlCustodyFeeRepository(engine))


# ------------------------------------------------------------------
# Break-even
# ------------------------------------------------------------------


def get_holding_cost_use_case(
    engine: Engine = Depends(get_engine),
) -> ProjectHoldingCostUseCase:
    return ProjectHoldingCostUseCase(SqlCommissionConfigRepository(engine))


def get_trade_break_even_use_case(
    engine: Engine = Depends(get_engine),
) -> AnalyzeTradeBreakEvenUseCase:
    """Build AnalyzeTradeBreakEvenUseCase with configured inflation and tax rates."""
    return AnalyzeTradeBreakEvenUseCase(
        trade_repo=SqlTradeRepository(engine),
        config_repo=SqlCommissionConfigRepository(engine),
        default_inflation_rate=settings.default_inflation_rate,
        tax_rate=settings.tax_rate,
        projection_months=settings.projection_months,
    )


def get_break_even_matrix_use_case(
    engine: Engine = Depends(get_engine),
) -> BreakEvenMatrixUseCase:
    return BreakEvenMatrixUseCase(SqlCommissionConfigRepository(engine))


# ------------------------------------------------------------------
# Trades
# ------------------------------------------------------------------


def get_record_trade_use_case(
    engine: Engine = Depends(get_engine),
) -> RecordTradeUseCase:
    """Build RecordTradeUseCase with its infrastructure dependencies."""
    return RecordTradeUseCase(
        trade_repo=SqlTradeRepository(engine),
        config_repo=SqlCommissionConfigRepository(engine),
    )


def get_trade_use_case(engine: Engine = Depends(get_engine)) -> GetTradeUseCase:
    return GetTradeUseCase(SqlTradeRepository(engine))


def get_list_trades_use_case(engine: Engine = Depends(get_engine)) -> ListTradesUseCase:
    return ListTradesUseCase(SqlTradeRepository(engine))
