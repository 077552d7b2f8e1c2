"""
FastAPI router for broker configurations and operation commissions.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
"""

from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

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
from app.application.commissions.dtos import (
    CalculateCommissionCommand,
    CommissionHistoryQuery,
    CommissionImpactQuery,
    CompareBrokersCommand,
    MinimumInvestmentQuery,
    ProjectCommissionCommand,
    SaveBrokerConfigCommand,
)
from app.domain.commissions.entities import (
    CommissionConfig,
    CustodyFeeConfig,
    OperationFeeConfig,
)
from app.interfaces.commissions.dependencies import (
    get_active_broker_config_use_case,
    get_add_broker_config_use_case,
    get_broker_config_use_case,
    get_calculate_commission_use_case,
    get_catalog_stats_use_case,
    get_commission_history_use_case,
    get_commission_impact_use_case,
    get_compare_brokers_use_case,
    get_list_broker_configs_use_case,
    get_minimum_investment_use_case,
    get_project_commission_use_case,
    get_set_active_broker_use_case,
    get_update_broker_config_use_case,
)
from app.interfaces.commissions.schemas import (
    CalculateCommissionRequest,
    CatalogStatsResponse,
    CommissionCalculationResponse,
    CommissionConfigListResponse,
    CommissionConfigSchema,
    CommissionConfigUpdateRequest,
    CommissionHistoryResponse,
    CommissionImpactRequest,
    CommissionImpactResponse,
    CommissionProjectionRequest,
    CommissionProjectionResponse,
    CompareBrokersRequest,
    CompareBrokersResponse,
    ErrorResponse,
    MinimumInvestmentRequest,
    MinimumInvestmentResponse,
    SetActiveBrokerRequest,
)
from app.shared.security.rate_limiting import HEAVY_RATE_LIMIT, limiter

router = APIRouter(prefix="/commissions", tags=["commissions"])


def _to_config(
    broker: str, request: CommissionConfigSchema | CommissionConfigUpdateRequest
) -> CommissionConfig:
    """Translate a configuration schema into the domain record."""
    return CommissionConfig(
        broker=broker,
        name=request.name,
        buy=OperationFeeConfig(**request.buy.model_dump()),
        sell=OperationFeeConfig(**request.sell.model_dump()),
        custody=CustodyFeeConfig(**request.custody.model_dump()),
        is_active=request.is_active,
    )


def _config_schema(config: CommissionConfig) -> CommissionConfigSchema:
    return CommissionConfigSchema.model_validate(asdict(config))


# ------------------------------------------------------------------
# Broker configurations
# ------------------------------------------------------------------


@router.get(
    "/configs",
    response_model=CommissionConfigListResponse,
    summary="List broker configurations",
    description="List the active broker commission configurations.",
)
def list_configs(
    use_case: ListBrokerConfigsUseCase = Depends(get_list_broker_configs_use_case),
) -> CommissionConfigListResponse:
    return CommissionConfigListResponse(
        configs=[_config_schema(c) for c in use_case.execute()]
    )


@router.get(
    "/configs/stats",
    response_model=CatalogStatsResponse,
    summary="Broker configuration statistics",
)
def config_stats(
    use_case: CatalogStatsUseCase = Depends(get_catalog_stats_use_case),
) -> CatalogStatsResponse:
    return CatalogStatsResponse.model_validate(asdict(use_case.execute()))


@router.get(
    "/configs/{broker}",
    response_model=CommissionConfigSchema,
    responses={404: {"model": ErrorResponse}},
    summary="Get a broker configuration",
)
def get_config(
    broker: str,
    use_case: GetBrokerConfigUseCase = Depends(get_broker_config_use_case),
) -> CommissionConfigSchema:
    return _config_schema(use_case.execute(broker))


@router.post(
    "/configs",
    response_model=CommissionConfigSchema,
    status_code=201,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Add a broker configuration",
)
def add_config(
    request: CommissionConfigSchema,
    use_case: AddBrokerConfigUseCase = Depends(get_add_broker_config_use_case),
) -> CommissionConfigSchema:
    config = use_case.execute(
        SaveBrokerConfigCommand(config=_to_config(request.broker, request))
    )
    return _config_schema(config)


@router.put(
    "/configs/{broker}",
    response_model=CommissionConfigSchema,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Update a broker configuration",
)
def update_config(
    broker: str,
    request: CommissionConfigUpdateRequest,
    use_case: UpdateBrokerConfigUseCase = Depends(get_update_broker_config_use_case),
) -> CommissionConfigSchema:
    config = use_case.execute(SaveBrokerConfigCommand(config=_to_config(broker, request)))
    return _config_schema(config)


@router.get(
    "/active",
    response_model=CommissionConfigSchema,
    summary="Get the active broker configuration",
)
def get_active_config(
    use_case: GetActiveBrokerConfigUseCase = Depends(get_active_broker_config_use_case),
) -> CommissionConfigSchema:
    return _config_schema(use_case.execute())


@router.put(
    "/active",
    response_model=CommissionConfigSchema,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Select the active broker",
)
def set_active_config(
    request: SetActiveBrokerRequest,
    use_case: SetActiveBrokerUseCase = Depends(get_set_active_broker_use_case),
) -> CommissionConfigSchema:
    return _config_schema(use_case.execute(request.broker))


# ------------------------------------------------------------------
# Calculations
# ------------------------------------------------------------------


@router.post(
    "/calculate",
    response_model=CommissionCalculationResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Calculate an operation commission",
    description="Commission, IVA and net amount of a BUY or SELL operation.",
)
def calculate_commission(
    request: CalculateCommissionRequest,
    use_case: CalculateCommissionUseCase = Depends(get_calculate_commission_use_case),
) -> CommissionCalculationResponse:
    """Calculate the commission of a single operation."""
    result = use_case.execute(
        CalculateCommissionCommand(
            operation_type=request.operation_type,
            amount=request.amount,
            broker=request.broker,
        )
    )
    return CommissionCalculationResponse.model_validate(asdict(result))


@router.post(
    "/projection",
    response_model=CommissionProjectionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Project the first-year cost of an operation",
)
def project_commission(
    request: CommissionProjectionRequest,
    use_case: ProjectCommissionUseCase = Depends(get_project_commission_use_case),
) -> CommissionProjectionResponse:
    result = use_case.execute(
        ProjectCommissionCommand(
            operation_type=request.operation_type,
            amount=request.amount,
            portfolio_value=request.portfolio_value,
            broker=request.broker,
        )
    )
    return CommissionProjectionResponse.model_validate(asdict(result))


@router.post(
    "/compare",
    response_model=CompareBrokersResponse,
    summary="Compare brokers",
    description="Rank active brokers by operation commission plus a year of custody.",
)
@limiter.limit(HEAVY_RATE_LIMIT)
def compare_brokers(
    request: Request,
    payload: CompareBrokersRequest,
    use_case: CompareBrokersUseCase = Depends(get_compare_brokers_use_case),
) -> CompareBrokersResponse:
    results = use_case.execute(
        CompareBrokersCommand(
            operation_type=payload.operation_type,
            amount=payload.amount,
            portfolio_value=payload.portfolio_value,
        )
    )
    return CompareBrokersResponse.model_validate({"comparisons": [asdict(r) for r in results]})


@router.post(
    "/minimum-investment",
    response_model=MinimumInvestmentResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Minimum investment under a commission threshold",
)
def minimum_investment(
    request: MinimumInvestmentRequest,
    use_case: MinimumInvestmentUseCase = Depends(get_minimum_investment_use_case),
) -> MinimumInvestmentResponse:
    result = use_case.execute(
        MinimumInvestmentQuery(
            threshold_percentage=request.threshold_percentage,
            broker=request.broker,
        )
    )
    return MinimumInvestmentResponse.model_validate(asdict(result))


@router.post(
    "/impact-analysis",
    response_model=CommissionImpactResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Commission impact on returns",
    description="How commissions and custody erode the return of a holding period.",
)
@limiter.limit(HEAVY_RATE_LIMIT)
def commission_impact(
    request: Request,
    payload: CommissionImpactRequest,
    use_case: CommissionImpactUseCase = Depends(get_commission_impact_use_case),
) -> CommissionImpactResponse:
    result = use_case.execute(
        CommissionImpactQuery(
            initial_investment=payload.initial_investment,
            expected_annual_return=payload.expected_annual_return,
            holding_period_years=payload.holding_period_years,
            broker=payload.broker,
        )
    )
    return CommissionImpactResponse.model_validate(asdict(result))


@router.get(
    "/history",
    response_model=CommissionHistoryResponse,
    summary="Commissions paid",
    description="Commissions and taxes paid on recorded trades.",
)
def commission_history(
    from_date: Optional[date] = Query(default=None),
    to_date: Optional[date] = Query(default=None),
    symbol: Optional[str] = Query(default=None, max_length=10),
    use_case: CommissionHistoryUseCase = Depends(get_commission_history_use_case),
) -> CommissionHistoryResponse:
    result = use_case.execute(
        CommissionHistoryQuery(
            from_date=from_date,
            to_date=to_date,
            symbol=symbol.upper() if symbol else None,
        )
    )
    return CommissionHistoryResponse.model_validate(asdict(result))
