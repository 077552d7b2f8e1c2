"""
Port interfaces (ABCs) for the commissions bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional

from app.domain.commissions.entities import CommissionConfig, CustodyFeeRecord, Trade


class CommissionConfigRepository(ABC):
    """Port for the catalog of broker commission configurations."""

    @abstractmethod
    def list_all(self) -> list[CommissionConfig]:
        """Return every configuration, active or not, ordered by broker."""
        raise NotImplementedError

    @abstractmethod
    def get(self, broker: str) -> Optional[CommissionConfig]:
        """Return the configuration for a broker, or None."""
        raise NotImplementedError

    @abstractmethod
    def add(self, config: CommissionConfig) -> None:
        """Insert a new configuration."""
        raise NotImplementedError

    @abstractmethod
    def update(self, config: CommissionConfig) -> None:
        """Replace the stored configuration of ``config.broker``."""
        raise NotImplementedError

    @abstractmethod
    def get_default_broker(self) -> Optional[str]:
        """Return the broker slug selected as default, if any."""
        raise NotImplementedError

    @abstractmethod
    def set_default_broker(self, broker: str) -> None:
        """Persist the broker slug selected as default."""
        raise NotImplementedError


class TradeRepository(ABC):
    """Port for the trade ledger."""

    @abstractmethod
    def add(self, trade: Trade) -> Trade:
        """Persist a trade and return it with its assigned id."""
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, trade_id: int) -> Optional[Trade]:
        """Return a trade by id, or None."""
        raise NotImplementedError

    @abstractmethod
    def list(
        self,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        symbol: Optional[str] = None,
    ) -> list[Trade]:
        """Return trades matching the filters ordered by date ascending."""
        raise NotImplementedError

    @abstractmethod
    def net_invested(self, until: date) -> Decimal:
        """Return buys minus sells up to ``until`` (inclusive), floored at zero."""
        raise NotImplementedError


class CustodyFeeRepository(ABC):
    """Port for the ledger of monthly custody fee charges."""

    @abstractmethod
    def add(self, record: CustodyFeeRecord) -> CustodyFeeRecord:
        """Persist a record and return it with its assigned id.

        Raises:
            CustodyFeeAlreadyRecordedError: If the month/broker pair exists.
        """
        raise NotImplementedError

    @abstractmethod
    def find_by_month_and_broker(
        self, month: date, broker: str
    ) -> Optional[CustodyFeeRecord]:
        """Return the record charged for a month by a broker, or None."""
        raise NotImplementedError

    @abstractmethod
    def list(
        self,
        start_month: Optional[date] = None,
        end_month: Optional[date] = None,
        broker: Optional[str] = None,
    ) -> list[CustodyFeeRecord]:
        """Return records matching the filters ordered by month descending."""
        raise NotImplementedError

    @abstractmethod
    def set_payment_date(self, fee_id: int, payment_date: date) -> CustodyFeeRecord:
        """Record when a fee was actually charged.

        Raises:
            CustodyFeeNotFoundError: If no record has that id.
        """
        raise NotImplementedError
