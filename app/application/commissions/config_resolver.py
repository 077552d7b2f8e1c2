"""
Resolves which broker configuration a request refers to.

Shared by every use case that accepts an optional broker: an explicit
broker must exist; otherwise the active (default) broker is used.
"""

from typing import Optional

from app.domain.commissions.broker_catalog import DEFAULT_BROKER
from app.domain.commissions.entities import CommissionConfig
from app.domain.commissions.errors import BrokerNotFoundError
from app.domain.commissions.ports import CommissionConfigRepository


class ConfigResolver:
    """Looks up a broker configuration, falling back to the active one."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._config_repo = config_repo

    def resolve(self, broker: Optional[str] = None) -> CommissionConfig:
        """Return the configuration for ``broker`` or the active broker.

        Raises:
            BrokerNotFoundError: If the broker has no configuration.
        """
        slug = broker or self._config_repo.get_default_broker() or DEFAULT_BROKER
        config = self._config_repo.get(slug)
        if config is None:
            raise BrokerNotFoundError(slug)
        return config
