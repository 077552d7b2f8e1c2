"""
Shared fixtures.

API tests run against an in-memory SQLite database seeded with the
preset brokers. The TestClient is not used as a context manager, so the
lifespan (and with it the cron scheduler) never starts.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.domain.commissions.broker_catalog import PRESET_CONFIGS
from app.domain.commissions.entities import (
    CommissionConfig,
    CustodyFeeConfig,
    OperationFeeConfig,
)
from app.infrastructure.commissions.database import build_engine, initialize_database
from app.interfaces.commissions.dependencies import (
    build_custody_fee_scheduler,
    get_custody_fee_scheduler,
    get_engine,
)
from app.main import app
from app.shared.security.rate_limiting import limiter


@pytest.fixture
def galicia() -> CommissionConfig:
    """0.5% / min 150 per operation; custody 0.25% over 1M, min 500; IVA 21%."""
    return next(c for c in PRESET_CONFIGS if c.broker == "galicia")


@pytest.fixture
def santander() -> CommissionConfig:
    return next(c for c in PRESET_CONFIGS if c.broker == "santander")


@pytest.fixture
def macro() -> CommissionConfig:
    return next(c for c in PRESET_CONFIGS if c.broker == "macro")


def build_config(
    broker: str = "custom",
    percentage: str = "0.005",
    minimum: str = "150",
    iva: str = "0.21",
    exempt_amount: str = "1000000",
    monthly_percentage: str = "0.0025",
    monthly_minimum: str = "500",
    is_active: bool = True,
    name: str = "Custom Broker",
) -> CommissionConfig:
    fees = OperationFeeConfig(
        percentage=Decimal(percentage), minimum=Decimal(minimum), iva=Decimal(iva)
    )
    return CommissionConfig(
        broker=broker,
        name=name,
        buy=fees,
        sell=fees,
        custody=CustodyFeeConfig(
            exempt_amount=Decimal(exempt_amount),
            monthly_percentage=Decimal(monthly_percentage),
            monthly_minimum=Decimal(monthly_minimum),
            iva=Decimal(iva),
        ),
        is_active=is_active,
    )


@pytest.fixture
def make_config():
    """Factory for ad-hoc broker configurations."""
    return build_config


@pytest.fixture
def engine():
    """In-memory database with the schema and preset brokers."""
    engine = build_engine("sqlite://")
    initialize_database(engine, default_broker="galicia")
    yield engine
    engine.dispose()


@pytest.fixture
def client(engine) -> TestClient:
    """TestClient wired to the in-memory database, rate limits off."""
    scheduler = build_custody_fee_scheduler(engine)
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_custody_fee_scheduler] = lambda: scheduler
    limiter.enabled = False
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True
    limiter.reset()
