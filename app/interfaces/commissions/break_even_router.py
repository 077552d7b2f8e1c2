"""
FastAPI router for holding costs and break-even analysis.

All routes delegate to use cases. No business logic here.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Request

from app.application.commissions.break_even import (
    AnalyzeTradeBreakEvenUseCase,
    BreakEvenMatrixUseCase,
    ProjectHoldingCostUseCase,
)
from app.application.commissions.dtos import (
    BreakEvenMatrixCommand,
    HoldingCostCommand,
    TradeBreakEvenCommand,
)
from app.interfaces.commissions.dependencies import (
    get_break_even_matrix_use_case,
    get_holding_cost_use_case,
    get_trade_break_even_use_case,
)
from app.interfaces.commissions.schemas import (
    BreakEvenMatrixRequest,
    BreakEvenMatrixResponse,
    ErrorResponse,
    HoldingCostRequest,
    HoldingCostResponse,
    TradeBreakEvenRequest,
    TradeBreakEvenResponse,
)
from app.shared.security.rate_limiting import HEAVY_RATE_LIMIT, limiter

router = APIRouter(prefix="/break-even", tags=["break-even"])


@router.post(
    "/holding-cost",
    response_model=HoldingCostResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Project the cost of holding a position",
    description="Entry commission plus monthly custody over a horizon.",
)
def holding_cost(
    request: HoldingCostRequest,
    use_case: ProjectHoldingCostUseCase = Depends(get_holding_cost_use_case),
) -> HoldingCostResponse:
    result = use_case.execute(
        HoldingCostCommand(
            amount=request.amount,
            months=request.months,
            monthly_growth_rate=request.monthly_growth_rate,
            portfolio_value=request.portfolio_value,
            include_exit=request.include_exit,
            broker=request.broker,
        )
    )
    return HoldingCostResponse.model_validate(asdict(result))


@router.post(
    "/trades/{trade_id}",
    response_model=TradeBreakEvenResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Break-even of a recorded trade",
    description=(
        "Break-even price of a BUY trade with inflation scenarios and "
        "improvement suggestions. Not stored."
    ),
)
@limiter.limit(HEAVY_RATE_LIMIT)
def trade_break_even(
    request: Request,
    trade_id: int,
    payload: TradeBreakEvenRequest,
    use_case: AnalyzeTradeBreakEvenUseCase = Depends(get_trade_break_even_use_case),
) -> TradeBreakEvenResponse:
    result = use_case.execute(
        TradeBreakEvenCommand(
            trade_id=trade_id,
            current_price=payload.current_price,
            projection_months=payload.projection_months,
            inflation_rate=payload.inflation_rate,
        )
    )
    return TradeBreakEvenResponse.model_validate(asdict(result))


@router.post(
    "/matrix",
    response_model=BreakEvenMatrixResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Break-even sensitivity matrix",
)
@limiter.limit(HEAVY_RATE_LIMIT)
def break_even_matrix(
    request: Request,
    payload: BreakEvenMatrixRequest,
    use_case: BreakEvenMatrixUseCase = Depends(get_break_even_matrix_use_case),
) -> BreakEvenMatrixResponse:
    cells = use_case.execute(
        BreakEvenMatrixCommand(
            purchase_price=payload.purchase_price,
            quantity=payload.quantity,
            inflation_rates=payload.inflation_rates,
            time_horizons=payload.time_horizons,
            broker=payload.broker,
        )
    )
    return BreakEvenMatrixResponse.model_validate({"cells": [asdict(c) for c in cells]})
