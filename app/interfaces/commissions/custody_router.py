"""
FastAPI router for custody fees.

Covers custody calculations and projections, the ledger of recorded
monthly charges and the monthly custody fee job.
All routes delegate to use cases or the job scheduler. No business logic here.
"""

from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

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
    SetCustodyFeePaymentDateUseCase,
)
from app.application.commissions.dtos import (
    CalculateCustodyCommand,
    CustodyGrowthQuery,
    CustodyOptimizationQuery,
    CustodyProjectionQuery,
    ListCustodyFeesQuery,
    SetPaymentDateCommand,
)
from app.interfaces.commissions.dependencies import (
    get_calculate_custody_use_case,
    get_custody_fee_scheduler,
    get_custody_impact_use_case,
    get_custody_threshold_use_case,
    get_list_custody_fees_use_case,
    get_optimize_custody_use_case,
    get_project_custody_growth_use_case,
    get_project_custody_use_case,
    get_set_payment_date_use_case,
)
from app.interfaces.commissions.schemas import (
    CalculateCustodyRequest,
    CustodyCalculationResponse,
    CustodyFeeHistoryResponse,
    CustodyFeeRecordSchema,
    CustodyImpactResponse,
    CustodyJobStatusResponse,
    CustodyOptimizationRequest,
    CustodyOptimizationResponse,
    CustodyProjectionRequest,
    CustodyProjectionResponse,
    CustodyThresholdResponse,
    ErrorResponse,
    GrowthProjectionRequest,
    GrowthProjectionResponse,
    PaymentDateRequest,
    RunCustodyJobRequest,
    RunCustodyJobResponse,
)
from app.jobs.custody_fee_scheduler import CustodyFeeScheduler
from app.shared.security.rate_limiting import HEAVY_RATE_LIMIT, limiter

router = APIRouter(prefix="/custody", tags=["custody"])


@router.post(
    "/calculate",
    response_model=CustodyCalculationResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Calculate the monthly custody fee",
)
def calculate_custody(
    request: CalculateCustodyRequest,
    use_case: CalculateCustodyUseCase = Depends(get_calculate_custody_use_case),
) -> CustodyCalculationResponse:
    """Calculate custody for a portfolio value."""
    result = use_case.execute(
        CalculateCustodyCommand(
            portfolio_value=request.portfolio_value,
            broker=request.broker,
        )
    )
    return CustodyCalculationResponse.model_validate(asdict(result))


@router.get(
    "/threshold",
    response_model=CustodyThresholdResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Custody exemption threshold",
)
def custody_threshold(
    broker: Optional[str] = Query(default=None, max_length=50),
    use_case: CustodyThresholdUseCase = Depends(get_custody_threshold_use_case),
) -> CustodyThresholdResponse:
    return CustodyThresholdResponse.model_validate(asdict(use_case.execute(broker)))


@router.post(
    "/projection",
    response_model=CustodyProjectionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Project custody month by month",
)
@limiter.limit(HEAVY_RATE_LIMIT)
def project_custody(
    request: Request,
    payload: CustodyProjectionRequest,
    use_case: ProjectCustodyUseCase = Depends(get_project_custody_use_case),
) -> CustodyProjectionResponse:
    result = use_case.execute(
        CustodyProjectionQuery(
            portfolio_value=payload.portfolio_value,
            months=payload.months,
            monthly_growth_rate=payload.monthly_growth_rate,
            broker=payload.broker,
        )
    )
    return CustodyProjectionResponse.model_validate(asdict(result))


@router.post(
    "/growth-projection",
    response_model=GrowthProjectionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Custody at several growth scenarios",
)
def project_custody_growth(
    request: GrowthProjectionRequest,
    use_case: ProjectCustodyGrowthUseCase = Depends(get_project_custody_growth_use_case),
) -> GrowthProjectionResponse:
    results = use_case.execute(
        CustodyGrowthQuery(
            portfolio_value=request.portfolio_value,
            growth_percentages=request.growth_percentages,
            broker=request.broker,
        )
    )
    return GrowthProjectionResponse.model_validate(
        {"projections": [asdict(r) for r in results]}
    )


@router.post(
    "/optimization",
    response_model=CustodyOptimizationResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Optimize portfolio size for custody",
)
@limiter.limit(HEAVY_RATE_LIMIT)
def optimize_custody(
    request: Request,
    payload: CustodyOptimizationRequest,
    use_case: OptimizeCustodyUseCase = Depends(get_optimize_custody_use_case),
) -> CustodyOptimizationResponse:
    result = use_case.execute(
        CustodyOptimizationQuery(
            portfolio_value=payload.portfolio_value,
            target_annual_return=payload.target_annual_return,
            broker=payload.broker,
        )
    )
    return CustodyOptimizationResponse.model_validate(asdict(result))


@router.post(
    "/impact-analysis",
    response_model=CustodyImpactResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Custody impact on returns",
    description="Custody drag on an expected return, compared across active brokers.",
)
@limiter.limit(HEAVY_RATE_LIMIT)
def custody_impact(
    request: Request,
    payload: CustodyOptimizationRequest,
    use_case: CustodyImpactUseCase = Depends(get_custody_impact_use_case),
) -> CustodyImpactResponse:
    result = use_case.execute(
        CustodyOptimizationQuery(
            portfolio_value=payload.portfolio_value,
            target_annual_return=payload.target_annual_return,
            broker=payload.broker,
        )
    )
    return CustodyImpactResponse.model_validate(asdict(result))


# ------------------------------------------------------------------
# Ledger and monthly job
# ------------------------------------------------------------------


@router.get(
    "/history",
    response_model=CustodyFeeHistoryResponse,
    summary="Recorded custody fees",
    description="Monthly custody fees recorded by the job, newest first.",
)
def custody_history(
    start_month: Optional[date] = Query(default=None),
    end_month: Optional[date] = Query(default=None),
    broker: Optional[str] = Query(default=None, max_length=50),
    use_case: ListCustodyFeesUseCase = Depends(get_list_custody_fees_use_case),
) -> CustodyFeeHistoryResponse:
    result = use_case.execute(
        ListCustodyFeesQuery(start_month=start_month, end_month=end_month, broker=broker)
    )
    return CustodyFeeHistoryResponse.model_validate(asdict(result))


@router.post(
    "/run-monthly-job",
    response_model=RunCustodyJobResponse,
    summary="Run the monthly custody fee job now",
    description="Record the custody fee of a month (the previous one by default).",
)
@limiter.limit(HEAVY_RATE_LIMIT)
def run_monthly_job(
    request: Request,
    payload: RunCustodyJobRequest,
    scheduler: CustodyFeeScheduler = Depends(get_custody_fee_scheduler),
) -> RunCustodyJobResponse:
    result = scheduler.run_now(
        month=payload.month, dry_run=payload.dry_run, broker=payload.broker
    )
    return RunCustodyJobResponse(
        status=result.status.value,
        started_at=result.started_at,
        finished_at=result.finished_at,
        duration_seconds=result.duration_seconds,
        details=result.details,
        error=result.error,
    )


@router.get(
    "/job/status",
    response_model=CustodyJobStatusResponse,
    summary="Monthly custody fee job status",
)
def job_status(
    scheduler: CustodyFeeScheduler = Depends(get_custody_fee_scheduler),
) -> CustodyJobStatusResponse:
    return CustodyJobStatusResponse.model_validate(asdict(scheduler.stats()))


@router.put(
    "/fees/{fee_id}/payment-date",
    response_model=CustodyFeeRecordSchema,
    responses={404: {"model": ErrorResponse}},
    summary="Record when a custody fee was charged",
)
def set_payment_date(
    fee_id: int,
    request: PaymentDateRequest,
    use_case: SetCustodyFeePaymentDateUseCase = Depends(get_set_payment_date_use_case),
) -> CustodyFeeRecordSchema:
    record = use_case.execute(
        SetPaymentDateCommand(fee_id=fee_id, payment_date=request.payment_date)
    )
    return CustodyFeeRecordSchema.model_validate(asdict(record))
