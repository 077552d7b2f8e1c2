"""
Adapter: Trade ledger repository.

Implements TradeRepository port.
Reads and writes the trades table.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from app.domain.commissions.entities import ZERO, OperationType, Trade
from app.domain.commissions.ports import TradeRepository

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT id, symbol, trade_type, quantity, price, total_amount,
           commission, taxes, trade_date, broker
    FROM trades
"""


def _from_row(row) -> Trade:
    return Trade(
        id=row.id,
        symbol=row.symbol,
        trade_type=OperationType(row.trade_type),
        quantity=Decimal(str(row.quantity)),
        price=Decimal(str(row.price)),
        total_amount=Decimal(str(row.total_amount)),
        commission=Decimal(str(row.commission)),
        taxes=Decimal(str(row.taxes)),
        trade_date=date.fromisoformat(row.trade_date),
        broker=row.broker,
    )


class SqlTradeRepository(TradeRepository):
    """SQLite adapter for the trade ledger."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, trade: Trade) -> Trade:
        """Insert a trade and return it with its generated id."""
        query = text(
            """
            INSERT INTO trades
                (symbol, trade_type, quantity, price, total_amount,
                 commission, taxes, trade_date, broker)
            VALUES
                (:symbol, :trade_type, :quantity, :price, :total_amount,
                 :commission, :taxes, :trade_date, :broker)
            """
        )
        with self._engine.begin() as conn:
            result = conn.execute(
                query,
                {
                    "symbol": trade.symbol,
                    "trade_type": trade.trade_type.value,
                    "quantity": str(trade.quantity),
                    "price": str(trade.price),
                    "total_amount": str(trade.total_amount),
                    "commission": str(trade.commission),
                    "taxes": str(trade.taxes),
                    "trade_date": trade.trade_date.isoformat(),
                    "broker": trade.broker,
                },
            )
            trade_id = result.lastrowid

        logger.debug("Inserted trade id=%d symbol=%s", trade_id, trade.symbol)
        return Trade(
            id=trade_id,
            symbol=trade.symbol,
            trade_type=trade.trade_type,
            quantity=trade.quantity,
            price=trade.price,
            total_amount=trade.total_amount,
            commission=trade.commission,
            taxes=trade.taxes,
            trade_date=trade.trade_date,
            broker=trade.broker,
        )

    def get_by_id(self, trade_id: int) -> Optional[Trade]:
        with self._engine.connect() as conn:
            row = conn.execute(text(_SELECT + " WHERE id = :id"), {"id": trade_id}).fetchone()
        return _from_row(row) if row is not None else None

    def list(
        self,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        symbol: Optional[str] = None,
    ) -> list[Trade]:
        """Return trades matching the filters, oldest first.

        Args:
            from_date: Start date (inclusive).
            to_date: End date (inclusive).
            symbol: Optional ticker filter.
        """
        conditions = []
        params: dict = {}

        if from_date is not None:
            conditions.append("trade_date >= :from_date")
            params["from_date"] = from_date.isoformat()
        if to_date is not None:
            conditions.append("trade_date <= :to_date")
            params["to_date"] = to_date.isoformat()
        if symbol:
            conditions.append("symbol = :symbol")
            params["symbol"] = symbol

        where = ""
        if conditions:
            where = " WHERE " + " AND ".join(conditions)

        query = text(_SELECT + where + " ORDER BY trade_date ASC, id ASC")
        with self._engine.connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_from_row(r) for r in rows]

    def net_invested(self, until: date) -> Decimal:
        """Return buys minus sells up to ``until``, never below zero.

        Amounts are stored as decimal strings and summed as ``Decimal``.
        """
        query = text(
            """
            SELECT trade_type, total_amount
            FROM trades
            WHERE trade_date <= :until
            """
        )
        with self._engine.connect() as conn:
            rows = conn.execute(query, {"until": until.isoformat()}).fetchall()

        net = ZERO
        for trade_type, total_amount in rows:
            amount = Decimal(str(total_amount))
            net += amount if trade_type == OperationType.BUY.value else -amount
        return max(net, ZERO)
