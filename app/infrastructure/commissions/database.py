"""
Database engine, schema and initial data.

Tables are declared with SQLAlchemy Core ``MetaData`` and created on
startup. Dates are stored as ISO-8601 strings and amounts as decimal strings;
repositories convert them back to ``date`` and ``Decimal``.
"""

import logging

from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from app.domain.commissions.broker_catalog import PRESET_CONFIGS
from app.infrastructure.commissions.commission_config_repository import (
    SqlCommissionConfigRepository,
)

logger = logging.getLogger(__name__)

metadata = MetaData()

# Decimal amounts are kept as their exact string form
Amount = String(40)

commission_configs = Table(
    "commission_configs",
    metadata,
    Column("broker", String(50), primary_key=True),
    Column("name", String(100), nullable=False),
    Column("buy_percentage", Amount, nullable=False),
    Column("buy_minimum", Amount, nullable=False),
    Column("buy_iva", Amount, nullable=False),
    Column("sell_percentage", Amount, nullable=False),
    Column("sell_minimum", Amount, nullable=False),
    Column("sell_iva", Amount, nullable=False),
    Column("custody_exempt_amount", Amount, nullable=False),
    Column("custody_monthly_percentage", Amount, nullable=False),
    Column("custody_monthly_minimum", Amount, nullable=False),
    Column("custody_iva", Amount, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
)

app_settings = Table(
    "app_settings",
    metadata,
    Column("key", String(50), primary_key=True),
    Column("value", String(255), nullable=False),
)

trades = Table(
    "trades",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("symbol", String(20), nullable=False, index=True),
    Column("trade_type", String(4), nullable=False),
    Column("quantity", Amount, nullable=False),
    Column("price", Amount, nullable=False),
    Column("total_amount", Amount, nullable=False),
    Column("commission", Amount, nullable=False, default="0"),
    Column("taxes", Amount, nullable=False, default="0"),
    Column("trade_date", String(10), nullable=False, index=True),
    Column("broker", String(50), nullable=False),
)

custody_fees = Table(
    "custody_fees",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("month", String(10), nullable=False),
    Column("portfolio_value", Amount, nullable=False),
    Column("fee_percentage", Amount, nullable=False),
    Column("fee_amount", Amount, nullable=False),
    Column("iva_amount", Amount, nullable=False),
    Column("total_charged", Amount, nullable=False),
    Column("payment_date", String(10), nullable=True),
    Column("broker", String(50), nullable=False),
    Column("is_exempt", Boolean, nullable=False),
    Column("applicable_amount", Amount, nullable=False),
    UniqueConstraint("month", "broker", name="uq_custody_fees_month_broker"),
)


def build_engine(database_url: str) -> Engine:
    """Create a SQLAlchemy engine for the given URL.

    In-memory SQLite databases share a single connection so that every
    session sees the same data.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


def create_schema(engine: Engine) -> None:
    """Create every table that does not exist yet."""
    metadata.create_all(engine)


def initialize_database(engine: Engine, default_broker: str | None = None) -> None:
    """Create the schema and seed the preset broker configurations.

    Presets already stored are left untouched. The default broker is only
    set when none has been selected yet.

    Args:
        engine: Engine to initialize.
        default_broker: Broker slug to select when no default exists.
    """
    create_schema(engine)
    repo = SqlCommissionConfigRepository(engine)

    seeded = 0
    for preset in PRESET_CONFIGS:
        if repo.get(preset.broker) is None:
            repo.add(preset)
            seeded += 1

    if default_broker and repo.get_default_broker() is None:
        repo.set_default_broker(default_broker)

    logger.info("Database initialized: %d preset broker(s) seeded", seeded)
