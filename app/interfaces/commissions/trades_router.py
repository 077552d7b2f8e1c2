"""
FastAPI router for the trade ledger.

All routes delegate to use cases. No business logic here.
"""

from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.application.commissions.dtos import ListTradesQuery, RecordTradeCommand
from app.application.commissions.trades import (
    GetTradeUseCase,
    ListTradesUseCase,
    RecordTradeUseCase,
)
from app.interfaces.commissions.dependencies import (
    get_list_trades_use_case,
    get_record_trade_use_case,
    get_trade_use_case,
)
from app.interfaces.commissions.schemas import (
    ErrorResponse,
    TradeCreateRequest,
    TradeListResponse,
    TradeResponse,
)

router = APIRouter(prefix="/trades", tags=["trades"])


@router.post(
    "",
    response_model=TradeResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
    summary="Record a trade",
    description="Record a trade; commission and taxes come from the broker configuration.",
)
def record_trade(
    request: TradeCreateRequest,
    use_case: RecordTradeUseCase = Depends(get_record_trade_use_case),
) -> TradeResponse:
    trade = use_case.execute(
        RecordTradeCommand(
            symbol=request.symbol,
            operation_type=request.operation_type,
            quantity=request.quantity,
            price=request.price,
            trade_date=request.trade_date,
            broker=request.broker,
        )
    )
    return TradeResponse.model_validate(asdict(trade))


@router.get(
    "",
    response_model=TradeListResponse,
    summary="List trades",
)
def list_trades(
    from_date: Optional[date] = Query(default=None),
    to_date: Optional[date] = Query(default=None),
    symbol: Optional[str] = Query(default=None, max_length=10),
    use_case: ListTradesUseCase = Depends(get_list_trades_use_case),
) -> TradeListResponse:
    trades = use_case.execute(
        ListTradesQuery(from_date=from_date, to_date=to_date, symbol=symbol)
    )
    return TradeListResponse.model_validate({"trades": [asdict(t) for t in trades]})


@router.get(
    "/{trade_id}",
    response_model=TradeResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a trade",
)
def get_trade(
    trade_id: int,
    use_case: GetTradeUseCase = Depends(get_trade_use_case),
) -> TradeResponse:
    return TradeResponse.model_validate(asdict(use_case.execute(trade_id)))
