"""
Use cases: Broker commission configuration catalog.

Input: broker slug / SaveBrokerConfigCommand
Output: CommissionConfig / list[CommissionConfig] / CatalogStats
Side effects: Add, update and set-active write to the configuration store.
Failure cases: BrokerNotFoundError, BrokerAlreadyExistsError,
               InactiveBrokerError, InvalidCommissionConfigError.
"""

import logging

from app.application.commissions.config_resolver import ConfigResolver
from app.application.commissions.dtos import SaveBrokerConfigCommand
from app.domain.commissions.broker_catalog import CatalogStats, catalog_stats, ensure_valid
from app.domain.commissions.entities import CommissionConfig
from app.domain.commissions.errors import (
    BrokerAlreadyExistsError,
    BrokerNotFoundError,
    InactiveBrokerError,
)
from app.domain.commissions.ports import CommissionConfigRepository

logger = logging.getLogger(__name__)


class ListBrokerConfigsUseCase:
    """Lists the active broker configurations."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._config_repo = config_repo

    def execute(self) -> list[CommissionConfig]:
        return [c for c in self._config_repo.list_all() if c.is_active]


class GetBrokerConfigUseCase:
    """Fetches one broker configuration, active or not."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._config_repo = config_repo

    def execute(self, broker: str) -> CommissionConfig:
        """Return the configuration.

        Raises:
            BrokerNotFoundError: If the broker has no configuration.
        """
        config = self._config_repo.get(broker)
        if config is None:
            raise BrokerNotFoundError(broker)
        return config


class GetActiveBrokerConfigUseCase:
    """Returns the configuration currently used by default."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)

    def execute(self) -> CommissionConfig:
        return self._resolver.resolve()


class SetActiveBrokerUseCase:
    """Selects the broker used when a request does not name one."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._config_repo = config_repo

    def execute(self, broker: str) -> CommissionConfig:
        """Make ``broker`` the default.

        Raises:
            BrokerNotFoundError: If the broker has no configuration.
            InactiveBrokerError: If the configuration is inactive.
        """
        config = self._config_repo.get(broker)
        if config is None:
            raise BrokerNotFoundError(broker)
        if not config.is_active:
            raise InactiveBrokerError(broker)

        self._config_repo.set_default_broker(broker)
        logger.info("Default broker set to %s", broker)
        return config


class AddBrokerConfigUseCase:
    """Adds a configuration for a new broker."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._config_repo = config_repo

    def execute(self, command: SaveBrokerConfigCommand) -> CommissionConfig:
        """Validate and store the configuration.

        Raises:
            InvalidCommissionConfigError: If the configuration is invalid.
            BrokerAlreadyExistsError: If the broker already has one.
        """
        config = command.config
        ensure_valid(config)
        if self._config_repo.get(config.broker) is not None:
            raise BrokerAlreadyExistsError(config.broker)

        self._config_repo.add(config)
        logger.info("Broker configuration added: %s", config.broker)
        return config


class UpdateBrokerConfigUseCase:
    """Replaces the configuration of an existing broker."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._config_repo = config_repo

    def execute(self, command: SaveBrokerConfigCommand) -> CommissionConfig:
        """Validate and replace the configuration.

        Raises:
            InvalidCommissionConfigError: If the configuration is invalid.
            BrokerNotFoundError: If the broker has no configuration.
        """
        config = command.config
        ensure_valid(config)
        if self._config_repo.get(config.broker) is None:
            raise BrokerNotFoundError(config.broker)

        self._config_repo.update(config)
        logger.info("Broker configuration updated: %s", config.broker)
        return config


class CatalogStatsUseCase:
    """Summarizes the configuration catalog."""

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._config_repo = config_repo

    def execute(self) -> CatalogStats:
        return catalog_stats(self._config_repo.list_all())
