"""
Use cases: Monthly custody fee recording and the custody fee ledger.

Input: RecordMonthlyCustodyFeeCommand / ListCustodyFeesQuery / SetPaymentDateCommand
Output: MonthlyCustodyFeeResult / CustodyFeeHistory / CustodyFeeRecord
Side effects: RecordMonthlyCustodyFeeUseCase inserts one ledger row per
              month and broker; SetCustodyFeePaymentDateUseCase updates one.
Failure cases: BrokerNotFoundError, CustodyFeeAlreadyRecordedError,
               CustodyFeeNotFoundError.
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Callable

from app.application.commissions.config_resolver import ConfigResolver
from app.application.commissions.dtos import (
    CustodyFeeHistory,
    ListCustodyFeesQuery,
    MonthlyCustodyFeeResult,
    RecordMonthlyCustodyFeeCommand,
    SetPaymentDateCommand,
)
from app.domain.commissions.custody_commission import CustodyCommissionCalculator
from app.domain.commissions.entities import ZERO, CustodyFeeRecord
from app.domain.commissions.ports import (
    CommissionConfigRepository,
    CustodyFeeRepository,
    TradeRepository,
)

logger = logging.getLogger(__name__)


def first_day_of_month(day: date) -> date:
    return day.replace(day=1)


def last_day_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def previous_month(today: date) -> date:
    """First day of the month before ``today``."""
    return first_day_of_month(first_day_of_month(today) - timedelta(days=1))


class RecordMonthlyCustodyFeeUseCase:
    """Computes and records the custody fee charged for one month.

    The portfolio value is the net amount invested through the trade ledger
    up to the last day of the month. A month is recorded at most once per
    broker; exempt months and dry runs are computed but not stored.
    """

    def __init__(
        self,
        trade_repo: TradeRepository,
        fee_repo: CustodyFeeRepository,
        config_repo: CommissionConfigRepository,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._trade_repo = trade_repo
        self._fee_repo = fee_repo
        self._resolver = ConfigResolver(config_repo)
        self._calculator = CustodyCommissionCalculator()
        self._today = today

    def execute(self, command: RecordMonthlyCustodyFeeCommand) -> MonthlyCustodyFeeResult:
        """Run the monthly custody fee calculation.

        Raises:
            BrokerNotFoundError: If the requested broker is unknown.
            CustodyFeeAlreadyRecordedError: If another run stored the month first.
        """
        month = (
            first_day_of_month(command.month)
            if command.month is not None
            else previous_month(self._today())
        )
        config = self._resolver.resolve(command.broker)

        existing = self._fee_repo.find_by_month_and_broker(month, config.broker)
        if existing is not None:
            logger.info(
                "Custody fee for %s already recorded for %s", month.isoformat(), config.broker
            )
            return MonthlyCustodyFeeResult(
                month=month,
                broker=config.broker,
                portfolio_value=existing.portfolio_value,
                custody_fee=existing.total_charged,
                is_exempt=existing.is_exempt,
                already_recorded=True,
                record=existing,
            )

        portfolio_value = self._trade_repo.net_invested(last_day_of_month(month))
        if portfolio_value <= ZERO:
            logger.info("No portfolio value for %s, nothing to charge", month.isoformat())
            return MonthlyCustodyFeeResult(
                month=month,
                broker=config.broker,
                portfolio_value=ZERO,
                custody_fee=ZERO,
                is_exempt=True,
            )

        custody = self._calculator.calculate(portfolio_value, config)
        logger.info(
            "Custody fee for %s: value=%s fee=%s exempt=%s broker=%s",
            month.isoformat(),
            portfolio_value,
            custody.total_monthly_cost,
            custody.is_exempt,
            config.broker,
        )

        record = None
        if command.dry_run:
            logger.info("Dry run, custody fee not recorded")
        elif custody.total_monthly_cost > ZERO:
            record = self._fee_repo.add(
                CustodyFeeRecord(
                    id=None,
                    month=month,
                    portfolio_value=portfolio_value,
                    fee_percentage=(
                        ZERO if custody.is_exempt else config.custody.monthly_percentage
                    ),
                    fee_amount=custody.monthly_fee,
                    iva_amount=custody.iva_amount,
                    total_charged=custody.total_monthly_cost,
                    broker=config.broker,
                    is_exempt=custody.is_exempt,
                    applicable_amount=custody.applicable_amount,
                )
            )

        return MonthlyCustodyFeeResult(
            month=month,
            broker=config.broker,
            portfolio_value=portfolio_value,
            custody_fee=custody.total_monthly_cost,
            is_exempt=custody.is_exempt,
            record=record,
        )


class ListCustodyFeesUseCase:
    """Lists recorded custody fees, newest month first."""

    def __init__(self, fee_repo: CustodyFeeRepository) -> None:
        self._fee_repo = fee_repo

    def execute(self, query: ListCustodyFeesQuery) -> CustodyFeeHistory:
        records = self._fee_repo.list(
            start_month=first_day_of_month(query.start_month) if query.start_month else None,
            end_month=first_day_of_month(query.end_month) if query.end_month else None,
            broker=query.broker,
        )
        return CustodyFeeHistory(
            records=records,
            total_charged=sum((r.total_charged for r in records), ZERO),
        )


class SetCustodyFeePaymentDateUseCase:
    """Records the date on which a custody fee was actually charged."""

    def __init__(self, fee_repo: CustodyFeeRepository) -> None:
        self._fee_repo = fee_repo

    def execute(self, command: SetPaymentDateCommand) -> CustodyFeeRecord:
        """Update the record.

        Raises:
            CustodyFeeNotFoundError: If no record has that id.
        """
        record = self._fee_repo.set_payment_date(command.fee_id, command.payment_date)
        logger.info("Custody fee %d paid on %s", command.fee_id, command.payment_date)
        return record
