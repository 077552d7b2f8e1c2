"""
Use cases: Operation commission and first-year cost projection.

Input: CalculateCommissionCommand / ProjectCommissionCommand
Output: CommissionCalculation / CommissionProjection
Side effects: None.
Failure cases: BrokerNotFoundError.
"""

import logging
from decimal import Decimal

from app.application.commissions.config_resolver import ConfigResolver
from app.application.commissions.dtos import (
    CalculateCommissionCommand,
    ProjectCommissionCommand,
)
from app.domain.commissions.custody_commission import CustodyCommissionCalculator
from app.domain.commissions.entities import (
    ZERO,
    CommissionCalculation,
    CommissionProjection,
    OperationType,
)
from app.domain.commissions.operation_commission import OperationCommissionCalculator
from app.domain.commissions.ports import CommissionConfigRepository

logger = logging.getLogger(__name__)


class CalculateCommissionUseCase:
    """Calculates the commission of a single buy or sell operation."""

    def __init__(
        self,
        config_repo: CommissionConfigRepository,
        calculator: OperationCommissionCalculator | None = None,
    ) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._calculator = calculator or OperationCommissionCalculator()

    def execute(self, command: CalculateCommissionCommand) -> CommissionCalculation:
        """Run the commission calculation.

        Raises:
            BrokerNotFoundError: If the requested broker is unknown.
        """
        config = self._resolver.resolve(command.broker)
        logger.info(
            "Calculating commission: type=%s amount=%s broker=%s",
            command.operation_type.value,
            command.amount,
            config.broker,
        )
        return self._calculator.calculate(command.operation_type, command.amount, config)


class ProjectCommissionUseCase:
    """Projects the first-year cost of an operation including custody.

    Custody is evaluated on the portfolio after the operation: a buy adds
    its amount to the portfolio; a sell leaves the given value as is.
    """

    def __init__(self, config_repo: CommissionConfigRepository) -> None:
        self._resolver = ConfigResolver(config_repo)
        self._operation = OperationCommissionCalculator()
        self._custody = CustodyCommissionCalculator()

    def execute(self, command: ProjectCommissionCommand) -> CommissionProjection:
        """Run the projection.

        Raises:
            BrokerNotFoundError: If the requested broker is unknown.
        """
        config = self._resolver.resolve(command.broker)
        operation = self._operation.calculate(
            command.operation_type, command.amount, config
        )

        portfolio_value = command.portfolio_value
        if command.operation_type is OperationType.BUY:
            portfolio_value += operation.breakdown.total_amount

        custody = self._custody.calculate(portfolio_value, config)
        total_first_year_cost = operation.total_commission + custody.annual_fee

        amount = operation.breakdown.total_amount
        break_even_impact = (
            total_first_year_cost / amount * Decimal("100") if amount > ZERO else ZERO
        )

        logger.info(
            "Commission projection: type=%s amount=%s first_year_cost=%s impact=%s%%",
            command.operation_type.value,
            amount,
            total_first_year_cost,
            round(break_even_impact, 2),
        )

        return CommissionProjection(
            operation=operation,
            custody=custody,
            total_first_year_cost=total_first_year_cost,
            break_even_impact=break_even_impact,
        )
