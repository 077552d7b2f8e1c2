"""
Domain service: commissions on buy and sell operations.

The commission is the greater of the percentage fee and the broker
minimum, plus IVA on top. Pure functions over plain records; no IO.
"""

import logging
from decimal import Decimal

from app.domain.commissions.entities import (
    ZERO,
    CommissionBreakdown,
    CommissionCalculation,
    CommissionConfig,
    MinimumInvestment,
    Number,
    OperationType,
    to_decimal,
)
from app.domain.commissions.errors import InvalidParameterError

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
LOW_MINIMUM_AMOUNT = Decimal("10000")
HIGH_MINIMUM_AMOUNT = Decimal("100000")


class OperationCommissionCalculator:
    """Computes buy/sell commissions for a broker configuration."""

    def calculate(
        self,
        operation_type: OperationType,
        amount: Number,
        config: CommissionConfig,
    ) -> CommissionCalculation:
        """Calculate the commission charged on an operation.

        Args:
            operation_type: BUY or SELL.
            amount: Operation total in ARS. Negative values are clamped to zero.
            config: Broker configuration supplying the fee schedule.

        Returns:
            The commission breakdown. BUY adds the commission to the net
            amount; SELL subtracts it.
        """
        total_amount = max(to_decimal(amount), ZERO)
        fees = config.for_operation(operation_type)

        percentage_commission = total_amount * fees.percentage
        base_commission = max(percentage_commission, fees.minimum)
        minimum_applied = percentage_commission < fees.minimum

        iva_amount = base_commission * fees.iva
        total_commission = base_commission + iva_amount

        if operation_type is OperationType.BUY:
            net_amount = total_amount + total_commission
        else:
            net_amount = total_amount - total_commission

        logger.debug(
            "Calculated %s commission: amount=%s base=%s total=%s minimum_applied=%s",
            operation_type.value,
            total_amount,
            base_commission,
            total_commission,
            minimum_applied,
        )

        return CommissionCalculation(
            base_commission=base_commission,
            iva_amount=iva_amount,
            total_commission=total_commission,
            net_amount=net_amount,
            breakdown=CommissionBreakdown(
                operation_type=operation_type,
                total_amount=total_amount,
                commission_rate=fees.percentage,
                minimum_applied=minimum_applied,
                iva_rate=fees.iva,
            ),
        )

    def minimum_investment_for_threshold(
        self, threshold_percentage: Number, config: CommissionConfig
    ) -> MinimumInvestment:
        """Find the smallest buy whose minimum commission stays under a threshold.

        Args:
            threshold_percentage: Maximum acceptable commission, in percent.
            config: Broker configuration; the buy schedule is used.

        Raises:
            InvalidParameterError: If the threshold is not positive.
        """
        threshold = to_decimal(threshold_percentage)
        if threshold <= ZERO:
            raise InvalidParameterError(
                "threshold_percentage", threshold_percentage, "must be greater than 0"
            )

        minimum_commission = config.buy.minimum * (1 + config.buy.iva)
        minimum_amount = minimum_commission / (threshold / HUNDRED)

        actual = self.calculate(OperationType.BUY, minimum_amount, config)
        commission_percentage = actual.total_commission / minimum_amount * HUNDRED

        logger.info(
            "Calculated minimum investment: threshold=%s%% amount=%s actual=%s%%",
            threshold,
            minimum_amount,
            round(commission_percentage, 2),
        )

        return MinimumInvestment(
            minimum_amount=minimum_amount,
            commission_percentage=commission_percentage,
            recommendation=_investment_recommendation(minimum_amount),
        )


def _investment_recommendation(minimum_amount: Decimal) -> str:
    if minimum_amount < LOW_MINIMUM_AMOUNT:
        return (
            "Very low minimum amount; consider larger operations "
            "for better cost efficiency"
        )
    if minimum_amount > HIGH_MINIMUM_AMOUNT:
        return (
            "High minimum amount due to fixed commissions; consider a broker "
            "with lower minimum commissions"
        )
    return "Recommended amount keeps costs under control"
