"""
Use cases: Record, fetch and list trades.

Input: RecordTradeCommand / trade id / ListTradesQuery
Output: Trade / list[Trade]
Side effects: RecordTradeUseCase inserts a row in the trade ledger.
Failure cases: BrokerNotFoundError, TradeNotFoundError.
"""

import logging

from app.application.commissions.config_resolver import ConfigResolver
from app.application.commissions.dtos import ListTradesQuery, RecordTradeCommand
from app.domain.commissions.entities import Trade, to_decimal
from app.domain.commissions.errors import TradeNotFoundError
from app.domain.commissions.operation_commission import OperationCommissionCalculator
from app.domain.commissions.ports import CommissionConfigRepository, TradeRepository

logger = logging.getLogger(__name__)


class RecordTradeUseCase:
    """Records a trade, deriving commission and taxes from the broker config.

    ``commission`` stores the base commission and ``taxes`` its IVA.
    """

    def __init__(
        self,
        trade_repo: TradeRepository,
        config_repo: CommissionConfigRepository,
    ) -> None:
        self._trade_repo = trade_repo
        self._resolver = ConfigResolver(config_repo)
        self._calculator = OperationCommissionCalculator()

    def execute(self, command: RecordTradeCommand) -> Trade:
        """Persist the trade.

        Raises:
            BrokerNotFoundError: If the requested broker is unknown.
        """
        config = self._resolver.resolve(command.broker)
        quantity = to_decimal(command.quantity)
        price = to_decimal(command.price)
        total = quantity * price
        commission = self._calculator.calculate(command.operation_type, total, config)

        trade = self._trade_repo.add(
            Trade(
                id=None,
                symbol=command.symbol.upper(),
                trade_type=command.operation_type,
                quantity=quantity,
                price=price,
                total_amount=total,
                commission=commission.base_commission,
                taxes=commission.iva_amount,
                trade_date=command.trade_date,
                broker=config.broker,
            )
        )
        logger.info(
            "Trade recorded: id=%s %s %s x %s @ %s broker=%s",
            trade.id,
            trade.trade_type.value,
            trade.symbol,
            trade.quantity,
            trade.price,
            trade.broker,
        )
        return trade


class GetTradeUseCase:
    """Fetches a single trade."""

    def __init__(self, trade_repo: TradeRepository) -> None:
        self._trade_repo = trade_repo

    def execute(self, trade_id: int) -> Trade:
        """Return the trade.

        Raises:
            TradeNotFoundError: If no trade has that id.
        """
        trade = self._trade_repo.get_by_id(trade_id)
        if trade is None:
            raise TradeNotFoundError(trade_id)
        return trade


class ListTradesUseCase:
    """Lists trades ordered by date."""

    def __init__(self, trade_repo: TradeRepository) -> None:
        self._trade_repo = trade_repo

    def execute(self, query: ListTradesQuery) -> list[Trade]:
        symbol = query.symbol.upper() if query.symbol else None
        return self._trade_repo.list(
            from_date=query.from_date, to_date=query.to_date, symbol=symbol
        )
