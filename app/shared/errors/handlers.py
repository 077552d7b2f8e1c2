"""
Centralized error handlers for FastAPI.

Maps commissions domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.commissions.errors import (
    BrokerAlreadyExistsError,
    BrokerNotFoundError,
    CommissionDomainError,
    CustodyFeeAlreadyRecordedError,
    CustodyFeeNotFoundError,
    InactiveBrokerError,
    InvalidCommissionConfigError,
    InvalidParameterError,
    InvalidTradeTypeError,
    TradeNotFoundError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_404 = 404
HTTP_409 = 409
HTTP_422 = 422
HTTP_500 = 500


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(BrokerNotFoundError)
    async def handle_broker_not_found(
        _request: Request, exc: BrokerNotFoundError
    ) -> JSONResponse:
        logger.warning("Broker not found: %s", exc.broker)
        return _error_response(HTTP_404, "Broker not found", exc.message)

    @app.exception_handler(TradeNotFoundError)
    async def handle_trade_not_found(
        _request: Request, exc: TradeNotFoundError
    ) -> JSONResponse:
        logger.warning("Trade not found: %d", exc.trade_id)
        return _error_response(HTTP_404, "Trade not found", exc.message)

    @app.exception_handler(CustodyFeeNotFoundError)
    async def handle_custody_fee_not_found(
        _request: Request, exc: CustodyFeeNotFoundError
    ) -> JSONResponse:
        logger.warning("Custody fee not found: %d", exc.fee_id)
        return _error_response(HTTP_404, "Custody fee not found", exc.message)

    @app.exception_handler(BrokerAlreadyExistsError)
    async def handle_broker_exists(
        _request: Request, exc: BrokerAlreadyExistsError
    ) -> JSONResponse:
        logger.warning("Broker already exists: %s", exc.broker)
        return _error_response(HTTP_409, "Broker already exists", exc.message)

    @app.exception_handler(CustodyFeeAlreadyRecordedError)
    async def handle_custody_fee_recorded(
        _request: Request, exc: CustodyFeeAlreadyRecordedError
    ) -> JSONResponse:
        logger.warning("Custody fee already recorded: %s %s", exc.month, exc.broker)
        return _error_response(HTTP_409, "Custody fee already recorded", exc.message)

    @app.exception_handler(InactiveBrokerError)
    async def handle_inactive_broker(
        _request: Request, exc: InactiveBrokerError
    ) -> JSONResponse:
        logger.warning("Inactive broker selected: %s", exc.broker)
        return _error_response(HTTP_409, "Broker is inactive", exc.message)

    @app.exception_handler(InvalidCommissionConfigError)
    async def handle_invalid_config(
        _request: Request, exc: InvalidCommissionConfigError
    ) -> JSONResponse:
        logger.warning("Invalid commission config: %s", exc.errors)
        return _error_response(
            HTTP_422, "Invalid commission configuration", "; ".join(exc.errors)
        )

    @app.exception_handler(InvalidParameterError)
    async def handle_invalid_parameter(
        _request: Request, exc: InvalidParameterError
    ) -> JSONResponse:
        logger.warning("Invalid parameter %s: %s", exc.name, exc.reason)
        return _error_response(HTTP_422, "Invalid parameter", exc.message)

    @app.exception_handler(InvalidTradeTypeError)
    async def handle_invalid_trade_type(
        _request: Request, exc: InvalidTradeTypeError
    ) -> JSONResponse:
        logger.warning("Trade %d is not a %s trade", exc.trade_id, exc.expected)
        return _error_response(HTTP_400, "Invalid trade type", exc.message)

    @app.exception_handler(CommissionDomainError)
    async def handle_commission_domain(
        _request: Request, exc: CommissionDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled commissions domain errors."""
        logger.error("Unhandled commissions domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
