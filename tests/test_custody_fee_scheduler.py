"""
Tests for the monthly custody fee scheduler.

run_now is exercised against the in-memory database; the cron schedule
is started and stopped without waiting for a real run.
"""

from datetime import date
from decimal import Decimal

import pytest

from app.domain.commissions.entities import OperationType, Trade
from app.infrastructure.commissions.trade_repository import SqlTradeRepository
from app.interfaces.commissions.dependencies import build_custody_fee_scheduler
from app.jobs.custody_fee_scheduler import MAX_HISTORY, TaskStatus


@pytest.fixture
def scheduler(engine):
    SqlTradeRepository(engine).add(
        Trade(
            id=None,
            symbol="AAPL",
            trade_type=OperationType.BUY,
            quantity=Decimal("2000"),
            price=Decimal("1000"),
            total_amount=Decimal("2000000"),
            commission=Decimal("10000"),
            taxes=Decimal("2100"),
            trade_date=date(2024, 1, 10),
            broker="galicia",
        )
    )
    scheduler = build_custody_fee_scheduler(engine)
    yield scheduler
    scheduler.stop()


class TestRunNow:
    """Tests for on-demand runs."""

    def test_completed_run(self, scheduler) -> None:
        result = scheduler.run_now(month=date(2024, 1, 1))

        assert result.status is TaskStatus.COMPLETED
        assert result.error is None
        assert result.finished_at is not None
        assert result.details["month"] == "2024-01-01"
        assert float(result.details["custody_fee"]) == 3025
        assert result.details["is_exempt"] is False
        assert result.details["record_id"] is not None

    def test_dry_run_override(self, scheduler) -> None:
        result = scheduler.run_now(month=date(2024, 1, 1), dry_run=True)

        assert result.details["dry_run"] is True
        assert result.details["record_id"] is None

    def test_failed_run_is_captured(self, scheduler) -> None:
        result = scheduler.run_now(month=date(2024, 1, 1), broker="nope")

        assert result.status is TaskStatus.FAILED
        assert "nope" in result.error
        assert result.details == {}

    def test_history_is_kept(self, scheduler) -> None:
        scheduler.run_now(month=date(2024, 1, 1))
        scheduler.run_now(month=date(2024, 1, 1))

        history = scheduler.task_history
        assert len(history) == 2
        assert history[1].details["already_recorded"] is True

    def test_history_is_bounded(self, scheduler) -> None:
        for _ in range(MAX_HISTORY + 5):
            scheduler.run_now(month=date(2023, 6, 1))

        assert len(scheduler.task_history) == MAX_HISTORY


class TestStats:
    """Tests for the execution counters."""

    def test_initial_stats(self, scheduler) -> None:
        stats = scheduler.stats()

        assert stats.is_running is False
        assert stats.total_executions == 0
        assert stats.last_execution is None
        assert stats.next_run_time is None
        assert stats.dry_run is False

    def test_counters_after_runs(self, scheduler) -> None:
        scheduler.run_now(month=date(2024, 1, 1))
        scheduler.run_now(month=date(2024, 1, 1), broker="nope")

        stats = scheduler.stats()
        assert stats.total_executions == 2
        assert stats.successful_executions == 1
        assert stats.failed_executions == 1
        assert stats.last_error is not None
        assert stats.last_custody_fee == Decimal("3025")
        assert stats.last_portfolio_value == Decimal("2000000")

    def test_success_clears_last_error(self, scheduler) -> None:
        scheduler.run_now(month=date(2024, 1, 1), broker="nope")
        scheduler.run_now(month=date(2024, 1, 1))

        assert scheduler.stats().last_error is None


class TestLifecycle:
    """Tests for start/stop of the cron schedule."""

    def test_start_schedules_job(self, scheduler) -> None:
        scheduler.start()

        assert scheduler.is_running is True
        assert scheduler.next_run_time() is not None

    def test_start_twice_is_harmless(self, scheduler) -> None:
        scheduler.start()
        scheduler.start()

        assert scheduler.is_running is True

    def test_stop(self, scheduler) -> None:
        scheduler.start()
        scheduler.stop()

        assert scheduler.is_running is False
        assert scheduler.next_run_time() is None
