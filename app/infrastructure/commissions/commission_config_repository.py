"""
Adapter: Broker commission configuration repository.

Implements CommissionConfigRepository port.
Stores one row per broker in commission_configs and the selected
default broker in app_settings.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from app.domain.commissions.entities import (
    CommissionConfig,
    CustodyFeeConfig,
    OperationFeeConfig,
)
from app.domain.commissions.ports import CommissionConfigRepository

logger = logging.getLogger(__name__)

DEFAULT_BROKER_KEY = "default_broker"

_COLUMNS = """
    broker, name,
    buy_percentage, buy_minimum, buy_iva,
    sell_percentage, sell_minimum, sell_iva,
    custody_exempt_amount, custody_monthly_percentage,
    custody_monthly_minimum, custody_iva,
    is_active
"""


def _dec(value) -> Decimal:
    return Decimal(str(value))


def _to_row(config: CommissionConfig) -> dict:
    return {
        "broker": config.broker,
        "name": config.name,
        "buy_percentage": str(config.buy.percentage),
        "buy_minimum": str(config.buy.minimum),
        "buy_iva": str(config.buy.iva),
        "sell_percentage": str(config.sell.percentage),
        "sell_minimum": str(config.sell.minimum),
        "sell_iva": str(config.sell.iva),
        "custody_exempt_amount": str(config.custody.exempt_amount),
        "custody_monthly_percentage": str(config.custody.monthly_percentage),
        "custody_monthly_minimum": str(config.custody.monthly_minimum),
        "custody_iva": str(config.custody.iva),
        "is_active": bool(config.is_active),
    }


def _from_row(row) -> CommissionConfig:
    return CommissionConfig(
        broker=row.broker,
        name=row.name,
        buy=OperationFeeConfig(
            percentage=_dec(row.buy_percentage),
            minimum=_dec(row.buy_minimum),
            iva=_dec(row.buy_iva),
        ),
        sell=OperationFeeConfig(
            percentage=_dec(row.sell_percentage),
            minimum=_dec(row.sell_minimum),
            iva=_dec(row.sell_iva),
        ),
        custody=CustodyFeeConfig(
            exempt_amount=_dec(row.custody_exempt_amount),
            monthly_percentage=_dec(row.custody_monthly_percentage),
            monthly_minimum=_dec(row.custody_monthly_minimum),
            iva=_dec(row.custody_iva),
        ),
        is_active=bool(row.is_active),
    )


class SqlCommissionConfigRepository(CommissionConfigRepository):
    """SQLite adapter for broker commission configurations."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_all(self) -> list[CommissionConfig]:
        query = text(f"SELECT {_COLUMNS} FROM commission_configs ORDER BY broker")
        with self._engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_from_row(r) for r in rows]

    def get(self, broker: str) -> Optional[CommissionConfig]:
        query = text(f"SELECT {_COLUMNS} FROM commission_configs WHERE broker = :broker")
        with self._engine.connect() as conn:
            row = conn.execute(query, {"broker": broker}).fetchone()
        return _from_row(row) if row is not None else None

    def add(self, config: CommissionConfig) -> None:
        query = text(
            """
            INSERT INTO commission_configs (
                broker, name,
                buy_percentage, buy_minimum, buy_iva,
                sell_percentage, sell_minimum, sell_iva,
                custody_exempt_amount, custody_monthly_percentage,
                custody_monthly_minimum, custody_iva,
                is_active
            ) VALUES (
                :broker, :name,
                :buy_percentage, :buy_minimum, :buy_iva,
                :sell_percentage, :sell_minimum, :sell_iva,
                :custody_exempt_amount, :custody_monthly_percentage,
                :custody_monthly_minimum, :custody_iva,
                :is_active
            )
            """
        )
        with self._engine.begin() as conn:
            conn.execute(query, _to_row(config))
        logger.debug("Inserted commission config for broker=%s", config.broker)

    def update(self, config: CommissionConfig) -> None:
        query = text(
            """
            UPDATE commission_configs SET
                name = :name,
                buy_percentage = :buy_percentage,
                buy_minimum = :buy_minimum,
                buy_iva = :buy_iva,
                sell_percentage = :sell_percentage,
                sell_minimum = :sell_minimum,
                sell_iva = :sell_iva,
                custody_exempt_amount = :custody_exempt_amount,
                custody_monthly_percentage = :custody_monthly_percentage,
                custody_monthly_minimum = :custody_monthly_minimum,
                custody_iva = :custody_iva,
                is_active = :is_active
            WHERE broker = :broker
            """
        )
        with self._engine.begin() as conn:
            conn.execute(query, _to_row(config))
        logger.debug("Updated commission config for broker=%s", config.broker)

    def get_default_broker(self) -> Optional[str]:
        query = text("SELECT value FROM app_settings WHERE key = :key")
        with self._engine.connect() as conn:
            row = conn.execute(query, {"key": DEFAULT_BROKER_KEY}).fetchone()
        return row[0] if row is not None else None

    def set_default_broker(self, broker: str) -> None:
        query = text(
            """
            INSERT INTO app_settings (key, value) VALUES (:key, :value)
            ON CONFLICT (key) DO UPDATE SET value = excluded.value
            """
        )
        with self._engine.begin() as conn:
            conn.execute(query, {"key": DEFAULT_BROKER_KEY, "value": broker})
