"""
Adapter: Custody fee ledger repository.

Implements CustodyFeeRepository port.
One row per (month, broker) in the custody_fees table; the unique
constraint is what rejects a second charge for the same month.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from app.domain.commissions.entities import CustodyFeeRecord
from app.domain.commissions.errors import (
    CustodyFeeAlreadyRecordedError,
    CustodyFeeNotFoundError,
)
from app.domain.commissions.ports import CustodyFeeRepository

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT id, month, portfolio_value, fee_percentage, fee_amount, iva_amount,
           total_charged, payment_date, broker, is_exempt, applicable_amount
    FROM custody_fees
"""


def _from_row(row) -> CustodyFeeRecord:
    return CustodyFeeRecord(
        id=row.id,
        month=date.fromisoformat(row.month),
        portfolio_value=Decimal(str(row.portfolio_value)),
        fee_percentage=Decimal(str(row.fee_percentage)),
        fee_amount=Decimal(str(row.fee_amount)),
        iva_amount=Decimal(str(row.iva_amount)),
        total_charged=Decimal(str(row.total_charged)),
        broker=row.broker,
        is_exempt=bool(row.is_exempt),
        applicable_amount=Decimal(str(row.applicable_amount)),
        payment_date=date.fromisoformat(row.payment_date) if row.payment_date else None,
    )


class SqlCustodyFeeRepository(CustodyFeeRepository):
    """SQLite adapter for the custody fee ledger."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, record: CustodyFeeRecord) -> CustodyFeeRecord:
        """Insert a custody fee record.

        Raises:
            CustodyFeeAlreadyRecordedError: If the month/broker pair exists.
        """
        query = text(
            """
            INSERT INTO custody_fees
                (month, portfolio_value, fee_percentage, fee_amount, iva_amount,
                 total_charged, payment_date, broker, is_exempt, applicable_amount)
            VALUES
                (:month, :portfolio_value, :fee_percentage, :fee_amount, :iva_amount,
                 :total_charged, :payment_date, :broker, :is_exempt, :applicable_amount)
            """
        )
        params = {
            "month": record.month.isoformat(),
            "portfolio_value": str(record.portfolio_value),
            "fee_percentage": str(record.fee_percentage),
            "fee_amount": str(record.fee_amount),
            "iva_amount": str(record.iva_amount),
            "total_charged": str(record.total_charged),
            "payment_date": record.payment_date.isoformat() if record.payment_date else None,
            "broker": record.broker,
            "is_exempt": record.is_exempt,
            "applicable_amount": str(record.applicable_amount),
        }

        try:
            with self._engine.begin() as conn:
                fee_id = conn.execute(query, params).lastrowid
        except IntegrityError as exc:
            raise CustodyFeeAlreadyRecordedError(
                record.month.strftime("%Y-%m"), record.broker
            ) from exc

        logger.info(
            "Custody fee recorded: id=%d month=%s broker=%s total=%s",
            fee_id,
            record.month.strftime("%Y-%m"),
            record.broker,
            record.total_charged,
        )
        return CustodyFeeRecord(
            id=fee_id,
            month=record.month,
            portfolio_value=record.portfolio_value,
            fee_percentage=record.fee_percentage,
            fee_amount=record.fee_amount,
            iva_amount=record.iva_amount,
            total_charged=record.total_charged,
            broker=record.broker,
            is_exempt=record.is_exempt,
            applicable_amount=record.applicable_amount,
            payment_date=record.payment_date,
        )

    def find_by_month_and_broker(
        self, month: date, broker: str
    ) -> Optional[CustodyFeeRecord]:
        query = text(_SELECT + " WHERE month = :month AND broker = :broker")
        with self._engine.connect() as conn:
            row = conn.execute(
                query, {"month": month.isoformat(), "broker": broker}
            ).fetchone()
        return _from_row(row) if row is not None else None

    def list(
        self,
        start_month: Optional[date] = None,
        end_month: Optional[date] = None,
        broker: Optional[str] = None,
    ) -> list[CustodyFeeRecord]:
        """Return records matching the filters, newest month first."""
        conditions = []
        params: dict = {}

        if start_month is not None:
            conditions.append("month >= :start_month")
            params["start_month"] = start_month.isoformat()
        if end_month is not None:
            conditions.append("month <= :end_month")
            params["end_month"] = end_month.isoformat()
        if broker:
            conditions.append("broker = :broker")
            params["broker"] = broker

        where = ""
        if conditions:
            where = " WHERE " + " AND ".join(conditions)

        query = text(_SELECT + where + " ORDER BY month DESC, broker ASC")
        with self._engine.connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_from_row(r) for r in rows]

    def set_payment_date(self, fee_id: int, payment_date: date) -> CustodyFeeRecord:
        """Set the payment date of a record.

        Raises:
            CustodyFeeNotFoundError: If no record has that id.
        """
        with self._engine.begin() as conn:
            result = conn.execute(
                text("UPDATE custody_fees SET payment_date = :payment_date WHERE id = :id"),
                {"payment_date": payment_date.isoformat(), "id": fee_id},
            )
            if result.rowcount == 0:
                raise CustodyFeeNotFoundError(fee_id)
            row = conn.execute(text(_SELECT + " WHERE id = :id"), {"id": fee_id}).fetchone()
        return _from_row(row)
