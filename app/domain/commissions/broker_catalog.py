"""
Broker configuration presets and validation rules.

Presets are the fee schedules published by the supported banks and are
used to seed an empty configuration store.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from app.domain.commissions.entities import (
    ZERO,
    CommissionConfig,
    CustodyFeeConfig,
    OperationFeeConfig,
)
from app.domain.commissions.errors import InvalidCommissionConfigError

ONE = Decimal("1")
DEFAULT_BROKER = "galicia"


def _operation(percentage: str, minimum: str, iva: str = "0.21") -> OperationFeeConfig:
    return OperationFeeConfig(
        percentage=Decimal(percentage), minimum=Decimal(minimum), iva=Decimal(iva)
    )


def _custody(
    exempt_amount: str, monthly_percentage: str, monthly_minimum: str, iva: str = "0.21"
) -> CustodyFeeConfig:
    return CustodyFeeConfig(
        exempt_amount=Decimal(exempt_amount),
        monthly_percentage=Decimal(monthly_percentage),
        monthly_minimum=Decimal(monthly_minimum),
        iva=Decimal(iva),
    )


PRESET_CONFIGS: tuple[CommissionConfig, ...] = (
    CommissionConfig(
        broker="galicia",
        name="Banco Galicia",
        buy=_operation("0.005", "150"),
        sell=_operation("0.005", "150"),
        custody=_custody("1000000", "0.0025", "500"),
    ),
    CommissionConfig(
        broker="santander",
        name="Banco Santander",
        buy=_operation("0.006", "200"),
        sell=_operation("0.006", "200"),
        custody=_custody("500000", "0.003", "600"),
    ),
    CommissionConfig(
        broker="macro",
        name="Banco Macro",
        buy=_operation("0.0055", "180"),
        sell=_operation("0.0055", "180"),
        custody=_custody("800000", "0.0028", "450"),
    ),
)


@dataclass(frozen=True)
class CatalogStats:
    """Summary of the configured brokers."""

    total_configs: int
    active_configs: int
    average_commission_rate: Decimal
    lowest_commission_broker: str
    highest_exempt_amount: Decimal


def _is_rate(value: Decimal) -> bool:
    return ZERO <= value <= ONE


def validate_config(config: CommissionConfig) -> list[str]:
    """Return every validation problem found in a configuration."""
    errors = []

    if not config.name or not config.name.strip():
        errors.append("Broker name is required")
    if not config.broker or not config.broker.strip():
        errors.append("Broker code is required")

    for label, fees in (("buy", config.buy), ("sell", config.sell)):
        if not (_is_rate(fees.percentage) and fees.minimum >= ZERO and _is_rate(fees.iva)):
            errors.append(f"Invalid {label} configuration")

    custody = config.custody
    if not (
        custody.exempt_amount >= ZERO
        and _is_rate(custody.monthly_percentage)
        and custody.monthly_minimum >= ZERO
        and _is_rate(custody.iva)
    ):
        errors.append("Invalid custody configuration")

    return errors


def ensure_valid(config: CommissionConfig) -> None:
    """Raise if a configuration is invalid.

    Raises:
        InvalidCommissionConfigError: Listing every problem found.
    """
    errors = validate_config(config)
    if errors:
        raise InvalidCommissionConfigError(errors)


def catalog_stats(configs: Iterable[CommissionConfig]) -> CatalogStats:
    """Compute statistics over all configurations (active ones for rates)."""
    all_configs = list(configs)
    active = [c for c in all_configs if c.is_active]

    if not active:
        return CatalogStats(
            total_configs=len(all_configs),
            active_configs=0,
            average_commission_rate=ZERO,
            lowest_commission_broker="",
            highest_exempt_amount=ZERO,
        )

    return CatalogStats(
        total_configs=len(all_configs),
        active_configs=len(active),
        average_commission_rate=sum((c.buy.percentage for c in active), ZERO) / len(active),
        lowest_commission_broker=min(active, key=lambda c: c.buy.percentage).name,
        highest_exempt_amount=max(c.custody.exempt_amount for c in active),
    )
