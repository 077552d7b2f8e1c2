"""
Use cases: Holding cost, trade break-even and break-even matrix.

Input: HoldingCostCommand / TradeBreakEvenCommand / BreakEvenMatrixCommand
Output: HoldingCostProjection / TradeBreakEvenResult / list[BreakEvenMatrixCell]
Side effects: None (analyses are computed on demand, never stored).
Failure cases: BrokerNotFoundError, TradeNotFoundError, InvalidTradeTypeError,
               InvalidParameterError.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Callable

from app.application.commissions.config_resolver import ConfigResolver
from app.application.commissions.dtos import (
    BreakEvenMatrixCommand,
    HoldingCostCommand,
    TradeBreakEvenCommand,
    TradeBreakEvenResult,
)
from app.domain.commissions.break_even import BreakEvenCalculator
from app.domain.commissions.entities import BreakEvenMatrixCell, HoldingCostProjection
from app.domain.commissions.errors import TradeNotFoundError
from app.domain.commissions.ports import CommissionConfigRepository, TradeRepository

logger = logging.getLogger(__name__)


class ProjectHoldingCostUseCase:
    """Projects entry commission plus monthly custody over a horizon."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._calculator = BreakEvenCalculator()

    def execute(self, command: HoldingCostCommand) -> HoldingCostProjection:
        """Run the projection.

        Raises:
            InvalidParameterError: If ``months`` is negative.
        """
        config = self._resolver.resolve(command.broker)
        projection = self._calculator.project_holding_cost(
            command.amount,
            command.months,
            config,
            monthly_growth_rate=command.monthly_growth_rate,
            portfolio_value=command.portfolio_value,
            include_exit=command.include_exit,
        )
        logger.info(
            "Holding cost: amount=%s months=%d broker=%s total=%s",
            projection.amount,
            projection.months,
            config.broker,
            projection.total_cost,
        )
        return projection


class AnalyzeTradeBreakEvenUseCase:
    """Computes the break-even price of a recorded buy trade.

    The broker of the trade is used to estimate exit commission and custody.
    When no current price is given the purchase price is used.
    """

    def __init__(
        self,
        trade_repo: TradeRepository,
        config_repo: CommissionConfigRepository,
        default_inflation_rate: Decimal,
        tax_rate: Decimal,
        projection_months: int = 12,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._trade_repo = trade_repo
        self._resolver = ConfigResolver(config_repo)
        self._calculator = BreakEvenCalculator()
        self._default_inflation_rate = default_inflation_rate
        self._tax_rate = tax_rate
        self._projection_months = projection_months
        self._today = today

    def execute(self, command: TradeBreakEvenCommand) -> TradeBreakEvenResult:
        """Run the break-even analysis.

        Raises:
            TradeNotFoundError: If the trade does not exist.
            InvalidTradeTypeError: If the trade is not a BUY.
        """
        trade = self._trade_repo.get_by_id(command.trade_id)
        if trade is None:
            raise TradeNotFoundError(command.trade_id)

        config = self._resolver.resolve(trade.broker)
        inflation_rate = (
            command.inflation_rate
            if command.inflation_rate is not None
            else self._default_inflation_rate
        )
        months = (
            command.projection_months
            if command.projection_months is not None
            else self._projection_months
        )

        analysis = self._calculator.analyze_trade(
            trade,
            config,
            as_of=self._today(),
            inflation_rate=inflation_rate,
            tax_rate=self._tax_rate,
            current_price=command.current_price,
        )
        return TradeBreakEvenResult(
            analysis=analysis,
            projections=self._calculator.project_scenarios(
                analysis, months, inflation_rate
            ),
            suggestions=self._calculator.suggest(analysis),
        )


class BreakEvenMatrixUseCase:
    """Builds a break-even sensitivity matrix over inflation and horizon."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._calculator = BreakEvenCalculator()

    def execute(self, command: BreakEvenMatrixCommand) -> list[BreakEvenMatrixCell]:
        config = self._resolver.resolve(command.broker)
        return self._calculator.matrix(
            command.purchase_price,
            command.quantity,
            command.inflation_rates,
            command.time_horizons,
            config,
        )
