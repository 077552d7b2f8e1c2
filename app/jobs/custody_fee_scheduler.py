"""
Monthly custody fee scheduler.

Uses APScheduler to record the custody fee charged for the previous
month. By default it runs at 09:00 on the 1st of every month,
Buenos Aires time, and can also be triggered on demand from the API.

Each run builds a fresh RecordMonthlyCustodyFeeUseCase through the
factory it was given, so the job shares the API's repositories and
configuration without holding connections between runs.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from app.application.commissions.custody_fees import RecordMonthlyCustodyFeeUseCase
from app.application.commissions.dtos import RecordMonthlyCustodyFeeCommand

logger = logging.getLogger(__name__)

JOB_ID = "monthly_custody_fee"
MAX_HISTORY = 100


class TaskStatus(Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TaskResult:
    """Result of one custody fee run."""

    status: TaskStatus
    started_at: str
    finished_at: str | None = None
    duration_seconds: float = 0.0
    details: dict = field(default_factory=dict)
    error: str | None = None


@dataclass
class JobStats:
    """Execution counters of the custody fee job."""

    is_running: bool
    total_executions: int
    successful_executions: int
    failed_executions: int
    last_execution: Optional[str]
    last_error: Optional[str]
    last_custody_fee: Optional[Decimal]
    last_portfolio_value: Optional[Decimal]
    next_run_time: Optional[str]
    dry_run: bool


class CustodyFeeScheduler:
    """Runs the monthly custody fee calculation on a cron schedule.

    Usage:
        scheduler = CustodyFeeScheduler(use_case_factory)
        scheduler.start()     # schedule the monthly run
        scheduler.run_now()   # record a month immediately
        scheduler.stop()      # graceful shutdown
    """

    def __init__(
        self,
        use_case_factory: Callable[[], RecordMonthlyCustodyFeeUseCase],
        cron: str = "0 9 1 * *",
        timezone_name: str = "America/Argentina/Buenos_Aires",
        dry_run: bool = False,
    ) -> None:
        self._use_case_factory = use_case_factory
        self._cron = cron
        self._timezone = timezone_name
        self._dry_run = dry_run
        self._scheduler: BackgroundScheduler | None = None
        self._lock = threading.Lock()
        self._history: list[TaskResult] = []

        self._total = 0
        self._successes = 0
        self._failures = 0
        self._last_execution: str | None = None
        self._last_error: str | None = None
        self._last_fee: Decimal | None = None
        self._last_value: Decimal | None = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def task_history(self) -> list[TaskResult]:
        with self._lock:
            return list(self._history)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Schedule the monthly run."""
        if self.is_running:
            logger.warning("Custody fee scheduler already running.")
            return

        self._scheduler = BackgroundScheduler(
            timezone=self._timezone,
            job_defaults={"coalesce": True, "max_instances": 1},
        )
        self._scheduler.add_job(
            self._scheduled_run,
            CronTrigger.from_crontab(self._cron, timezone=self._timezone),
            id=JOB_ID,
            name="Monthly custody fee",
        )
        self._scheduler.start()
        logger.info(
            "Custody fee scheduler started: cron='%s' tz=%s next=%s",
            self._cron,
            self._timezone,
            self.next_run_time(),
        )

    def stop(self) -> None:
        """Stop the scheduler without waiting for a running job."""
        if self._scheduler is not None:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
            self._scheduler = None
        logger.info("Custody fee scheduler stopped.")

    def next_run_time(self) -> Optional[str]:
        """ISO timestamp of the next scheduled run, if scheduled."""
        if self._scheduler is None:
            return None
        job = self._scheduler.get_job(JOB_ID)
        if job is None or job.next_run_time is None:
            return None
        return job.next_run_time.isoformat()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run_now(
        self,
        month: Optional[date] = None,
        dry_run: Optional[bool] = None,
        broker: Optional[str] = None,
    ) -> TaskResult:
        """Record a month's custody fee immediately (blocking).

        Args:
            month: Any date within the month; the previous month when None.
            dry_run: Overrides the scheduler's dry-run setting.
            broker: Broker slug; the active configuration when None.

        Returns:
            TaskResult with execution details.
        """
        command = RecordMonthlyCustodyFeeCommand(
            month=month,
            dry_run=self._dry_run if dry_run is None else dry_run,
            broker=broker,
        )
        return self._execute(command)

    def stats(self) -> JobStats:
        with self._lock:
            return JobStats(
                is_running=self.is_running,
                total_executions=self._total,
                successful_executions=self._successes,
                failed_executions=self._failures,
                last_execution=self._last_execution,
                last_error=self._last_error,
                last_custody_fee=self._last_fee,
                last_portfolio_value=self._last_value,
                next_run_time=self.next_run_time(),
                dry_run=self._dry_run,
            )

    def _scheduled_run(self) -> None:
        self._execute(RecordMonthlyCustodyFeeCommand(dry_run=self._dry_run))

    def _execute(self, command: RecordMonthlyCustodyFeeCommand) -> TaskResult:
        start = time.monotonic()
        started_at = datetime.now(timezone.utc).isoformat()
        try:
            result = self._use_case_factory().execute(command)
            task_result = TaskResult(
                status=TaskStatus.COMPLETED,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc).isoformat(),
                duration_seconds=round(time.monotonic() - start, 2),
                details={
                    "month": result.month.isoformat(),
                    "broker": result.broker,
                    "portfolio_value": str(result.portfolio_value),
                    "custody_fee": str(result.custody_fee),
                    "is_exempt": result.is_exempt,
                    "already_recorded": result.already_recorded,
                    "record_id": result.record.id if result.record else None,
                    "dry_run": command.dry_run,
                },
            )
            with self._lock:
                self._last_fee = result.custody_fee
                self._last_value = result.portfolio_value
        except Exception as exc:
            task_result = TaskResult(
                status=TaskStatus.FAILED,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc).isoformat(),
                duration_seconds=round(time.monotonic() - start, 2),
                error=str(exc),
            )
            logger.exception("Custody fee job failed.")

        self._record_result(task_result)
        return task_result

    def _record_result(self, result: TaskResult) -> None:
        with self._lock:
            self._total += 1
            self._last_execution = result.finished_at
            if result.status is TaskStatus.COMPLETED:
                self._successes += 1
                self._last_error = None
            else:
                self._failures += 1
                self._last_error = result.error
            self._history.append(result)
            if len(self._history) > MAX_HISTORY:
                self._history = self._history[-MAX_HISTORY:]
