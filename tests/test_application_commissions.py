"""
Tests for the commissions application layer (use cases).

Tests use cases with in-memory ports. No real infrastructure needed.
Each test verifies orchestration logic, not business rules.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from app.application.commissions.break_even import (
    AnalyzeTradeBreakEvenUseCase,
    BreakEvenMatrixUseCase,
    ProjectHoldingCostUseCase,
)
from app.application.commissions.broker_configs import (
    AddBrokerConfigUseCase,
    CatalogStatsUseCase,
    GetActiveBrokerConfigUseCase,
    ListBrokerConfigsUseCase,
    SetActiveBrokerUseCase,
    UpdateBrokerConfigUseCase,
)
from app.application.commissions.calculate_commission import (
    CalculateCommissionUseCase,
    ProjectCommissionUseCase,
)
from app.application.commissions.commission_analysis import CommissionHistoryUseCase
from app.application.commissions.config_resolver import ConfigResolver
from app.application.commissions.custody_analysis import (
    CustodyImpactUseCase,
    OptimizeCustodyUseCase,
)
from app.application.commissions.custody_fees import (
    ListCustodyFeesUseCase,
    RecordMonthlyCustodyFeeUseCase,
    SetCustodyFeePaymentDateUseCase,
    last_day_of_month,
    previous_month,
)
from app.application.commissions.dtos import (
    BreakEvenMatrixCommand,
    CalculateCommissionCommand,
    CommissionHistoryQuery,
    CustodyOptimizationQuery,
    HoldingCostCommand,
    ListCustodyFeesQuery,
    ListTradesQuery,
    ProjectCommissionCommand,
    RecordMonthlyCustodyFeeCommand,
    RecordTradeCommand,
    SaveBrokerConfigCommand,
    SetPaymentDateCommand,
    TradeBreakEvenCommand,
)
from app.application.commissions.trades import (
    GetTradeUseCase,
    ListTradesUseCase,
    RecordTradeUseCase,
)
from app.domain.commissions.broker_catalog import PRESET_CONFIGS
from app.domain.commissions.entities import (
    ZERO,
    CommissionConfig,
    CustodyFeeRecord,
    OperationType,
    Trade,
)
from app.domain.commissions.errors import (
    BrokerAlreadyExistsError,
    BrokerNotFoundError,
    CustodyFeeAlreadyRecordedError,
    CustodyFeeNotFoundError,
    InactiveBrokerError,
    InvalidCommissionConfigError,
    InvalidTradeTypeError,
    TradeNotFoundError,
)
from app.domain.commissions.ports import (
    CommissionConfigRepository,
    CustodyFeeRepository,
    TradeRepository,
)


class InMemoryConfigRepository(CommissionConfigRepository):
    def __init__(self, configs=PRESET_CONFIGS, default: Optional[str] = "galicia") -> None:
        self.configs = {c.broker: c for c in configs}
        self.default = default

    def list_all(self) -> list[CommissionConfig]:
        return [self.configs[k] for k in sorted(self.configs)]

    def get(self, broker: str) -> Optional[CommissionConfig]:
        return self.configs.get(broker)

    def add(self, config: CommissionConfig) -> None:
        self.configs[config.broker] = config

    def update(self, config: CommissionConfig) -> None:
        self.configs[config.broker] = config

    def get_default_broker(self) -> Optional[str]:
        return self.default

    def set_default_broker(self, broker: str) -> None:
        self.default = broker


class InMemoryTradeRepository(TradeRepository):
    def __init__(self) -> None:
        self.trades: list[Trade] = []

    def add(self, trade: Trade) -> Trade:
        stored = replace(trade, id=len(self.trades) + 1)
        self.trades.append(stored)
        return stored

    def get_by_id(self, trade_id: int) -> Optional[Trade]:
        return next((t for t in self.trades if t.id == trade_id), None)

    def list(self, from_date=None, to_date=None, symbol=None) -> list[Trade]:
        return [
            t
            for t in sorted(self.trades, key=lambda t: (t.trade_date, t.id))
            if (from_date is None or t.trade_date >= from_date)
            and (to_date is None or t.trade_date <= to_date)
            and (symbol is None or t.symbol == symbol)
        ]

    def net_invested(self, until: date) -> Decimal:
        total = ZERO
        for t in self.trades:
            if t.trade_date <= until:
                sign = 1 if t.trade_type is OperationType.BUY else -1
                total += sign * t.total_amount
        return max(total, ZERO)


class InMemoryCustodyFeeRepository(CustodyFeeRepository):
    def __init__(self) -> None:
        self.records: list[CustodyFeeRecord] = []

    def add(self, record: CustodyFeeRecord) -> CustodyFeeRecord:
        if self.find_by_month_and_broker(record.month, record.broker):
            raise CustodyFeeAlreadyRecordedError(record.month.strftime("%Y-%m"), record.broker)
        stored = replace(record, id=len(self.records) + 1)
        self.records.append(stored)
        return stored

    def find_by_month_and_broker(self, month, broker) -> Optional[CustodyFeeRecord]:
        return next(
            (r for r in self.records if r.month == month and r.broker == broker), None
        )

    def list(self, start_month=None, end_month=None, broker=None) -> list[CustodyFeeRecord]:
        return sorted(
            (
                r
                for r in self.records
                if (start_month is None or r.month >= start_month)
                and (end_month is None or r.month <= end_month)
                and (broker is None or r.broker == broker)
            ),
            key=lambda r: r.month,
            reverse=True,
        )

    def set_payment_date(self, fee_id: int, payment_date: date) -> CustodyFeeRecord:
        for i, record in enumerate(self.records):
            if record.id == fee_id:
                self.records[i] = replace(record, payment_date=payment_date)
                return self.records[i]
        raise CustodyFeeNotFoundError(fee_id)


@pytest.fixture
def configs() -> InMemoryConfigRepository:
    return InMemoryConfigRepository()


@pytest.fixture
def trades() -> InMemoryTradeRepository:
    return InMemoryTradeRepository()


@pytest.fixture
def fees() -> InMemoryCustodyFeeRepository:
    return InMemoryCustodyFeeRepository()


def _record_buy(trades, configs, quantity: str, price: str, trade_date: date) -> Trade:
    return RecordTradeUseCase(trades, configs).execute(
        RecordTradeCommand(
            symbol="aapl",
            operation_type=OperationType.BUY,
            quantity=Decimal(quantity),
            price=Decimal(price),
            trade_date=trade_date,
        )
    )


class TestConfigResolver:
    """Tests for ConfigResolver."""

    def test_explicit_broker(self, configs) -> None:
        assert ConfigResolver(configs).resolve("macro").broker == "macro"

    def test_falls_back_to_default_broker(self, configs) -> None:
        configs.default = "santander"
        assert ConfigResolver(configs).resolve().broker == "santander"

    def test_falls_back_to_galicia_without_default(self, configs) -> None:
        configs.default = None
        assert ConfigResolver(configs).resolve().broker == "galicia"

    def test_unknown_broker_raises(self, configs) -> None:
        with pytest.raises(BrokerNotFoundError):
            ConfigResolver(configs).resolve("nope")


class TestCommissionUseCases:
    """Tests for commission calculation and projection use cases."""

    def test_calculate_uses_active_broker(self, configs) -> None:
        configs.default = "santander"
        result = CalculateCommissionUseCase(configs).execute(
            CalculateCommissionCommand(OperationType.BUY, Decimal("100000"))
        )

        assert result.total_commission == Decimal("726")

    def test_projection_adds_buy_to_portfolio(self, configs) -> None:
        result = ProjectCommissionUseCase(configs).execute(
            ProjectCommissionCommand(
                OperationType.BUY, Decimal("100000"), portfolio_value=Decimal("950000")
            )
        )

        assert result.custody.annual_fee == Decimal("7260")
        assert result.total_first_year_cost == Decimal("7865")
        assert float(result.break_even_impact) == pytest.approx(7.865)

    def test_projection_sell_keeps_portfolio(self, configs) -> None:
        result = ProjectCommissionUseCase(configs).execute(
            ProjectCommissionCommand(
                OperationType.SELL, Decimal("100000"), portfolio_value=Decimal("950000")
            )
        )

        assert result.custody.is_exempt is True
        assert result.total_first_year_cost == Decimal("605")

    def test_projection_zero_amount(self, configs) -> None:
        result = ProjectCommissionUseCase(configs).execute(
            ProjectCommissionCommand(OperationType.BUY, Decimal("0"), portfolio_value=ZERO)
        )

        assert result.break_even_impact == Decimal("0")


class TestCustodyUseCases:
    """Tests for custody optimization and impact use cases."""

    def test_optimization_reports_broker(self, configs) -> None:
        result = OptimizeCustodyUseCase(configs).execute(
            CustodyOptimizationQuery(Decimal("800000"), Decimal("20"))
        )

        assert result.broker == "galicia"
        assert result.optimization.optimized_size == Decimal("1000000")
        assert result.impact.annual_custody_fee == Decimal("0")

    def test_impact_compares_brokers_by_custody_fee(self, configs) -> None:
        result = CustodyImpactUseCase(configs).execute(
            CustodyOptimizationQuery(Decimal("2000000"), Decimal("20"))
        )

        assert float(result.impact.impact_percentage) == pytest.approx(9.075)
        assert [c.broker for c in result.broker_comparisons] == [
            "galicia",
            "macro",
            "santander",
        ]
        assert [c.custody_fee for c in result.broker_comparisons] == [
            Decimal("36300"),
            Decimal("48787.2"),
            Decimal("65340"),
        ]

    def test_impact_skips_inactive_brokers(self, configs) -> None:
        configs.configs["macro"] = replace(configs.configs["macro"], is_active=False)
        result = CustodyImpactUseCase(configs).execute(
            CustodyOptimizationQuery(Decimal("2000000"), Decimal("20"))
        )

        assert "macro" not in {c.broker for c in result.broker_comparisons}


class TestBrokerConfigUseCases:
    """Tests for the configuration catalog use cases."""

    def test_list_returns_active_only(self, configs) -> None:
        configs.configs["macro"] = replace(configs.configs["macro"], is_active=False)

        result = ListBrokerConfigsUseCase(configs).execute()

        assert [c.broker for c in result] == ["galicia", "santander"]

    def test_get_active(self, configs) -> None:
        assert GetActiveBrokerConfigUseCase(configs).execute().broker == "galicia"

    def test_set_active(self, configs) -> None:
        SetActiveBrokerUseCase(configs).execute("macro")

        assert configs.default == "macro"

    def test_set_active_unknown(self, configs) -> None:
        with pytest.raises(BrokerNotFoundError):
            SetActiveBrokerUseCase(configs).execute("nope")

    def test_set_active_inactive(self, configs) -> None:
        configs.configs["macro"] = replace(configs.configs["macro"], is_active=False)

        with pytest.raises(InactiveBrokerError):
            SetActiveBrokerUseCase(configs).execute("macro")
        assert configs.default == "galicia"

    def test_add(self, configs, make_config) -> None:
        AddBrokerConfigUseCase(configs).execute(SaveBrokerConfigCommand(make_config("bbva")))

        assert configs.get("bbva") is not None

    def test_add_existing(self, configs, make_config) -> None:
        with pytest.raises(BrokerAlreadyExistsError):
            AddBrokerConfigUseCase(configs).execute(
                SaveBrokerConfigCommand(make_config("galicia"))
            )

    def test_add_invalid_is_not_stored(self, configs, make_config) -> None:
        with pytest.raises(InvalidCommissionConfigError):
            AddBrokerConfigUseCase(configs).execute(
                SaveBrokerConfigCommand(make_config("bbva", percentage="2"))
            )
        assert configs.get("bbva") is None

    def test_update(self, configs, make_config) -> None:
        UpdateBrokerConfigUseCase(configs).execute(
            SaveBrokerConfigCommand(make_config("galicia", percentage="0.004"))
        )

        assert configs.get("galicia").buy.percentage == Decimal("0.004")

    def test_update_unknown(self, configs, make_config) -> None:
        with pytest.raises(BrokerNotFoundError):
            UpdateBrokerConfigUseCase(configs).execute(SaveBrokerConfigCommand(make_config("x")))

    def test_stats(self, configs) -> None:
        stats = CatalogStatsUseCase(configs).execute()

        assert stats.total_configs == 3
        assert stats.lowest_commission_broker == "Banco Galicia"


class TestTradeUseCases:
    """Tests for the trade ledger use cases."""

    def test_record_derives_commission(self, trades, configs) -> None:
        trade = _record_buy(trades, configs, "2000", "1000", date(2024, 1, 10))

        assert trade.id == 1
        assert trade.symbol == "AAPL"
        assert trade.total_amount == Decimal("2000000")
        assert trade.commission == Decimal("10000")
        assert trade.taxes == Decimal("2100")
        assert trade.broker == "galicia"

    def test_record_unknown_broker(self, trades, configs) -> None:
        with pytest.raises(BrokerNotFoundError):
            RecordTradeUseCase(trades, configs).execute(
                RecordTradeCommand(
                    symbol="AAPL",
                    operation_type=OperationType.BUY,
                    quantity=Decimal("1"),
                    price=Decimal("1"),
                    trade_date=date(2024, 1, 1),
                    broker="nope",
                )
            )
        assert trades.trades == []

    def test_get_missing(self, trades) -> None:
        with pytest.raises(TradeNotFoundError):
            GetTradeUseCase(trades).execute(99)

    def test_list_filters_case_insensitive_symbol(self, trades, configs) -> None:
        _record_buy(trades, configs, "10", "1000", date(2024, 1, 10))

        assert len(ListTradesUseCase(trades).execute(ListTradesQuery(symbol="aapl"))) == 1
        assert ListTradesUseCase(trades).execute(ListTradesQuery(symbol="msft")) == []

    def test_commission_history(self, trades, configs) -> None:
        _record_buy(trades, configs, "10", "1000", date(2024, 1, 10))
        _record_buy(trades, configs, "100", "1000", date(2024, 2, 10))

        history = CommissionHistoryUseCase(trades).execute(CommissionHistoryQuery())

        assert history.total_commissions_paid == Decimal("650")
        assert history.total_taxes_paid == Decimal("136.5")
        assert history.buy.count == 2


class TestBreakEvenUseCases:
    """Tests for holding cost, trade break-even and matrix use cases."""

    def test_holding_cost(self, configs) -> None:
        result = ProjectHoldingCostUseCase(configs).execute(
            HoldingCostCommand(amount=Decimal("100000"), months=12)
        )

        assert result.total_cost == Decimal("605")

    def test_trade_break_even(self, trades, configs) -> None:
        trade = _record_buy(trades, configs, "100", "1000", date(2024, 3, 5))
        use_case = AnalyzeTradeBreakEvenUseCase(
            trades,
            configs,
            default_inflation_rate=Decimal("0.3"),
            tax_rate=Decimal("0.15"),
            today=lambda: date(2024, 3, 20),
        )

        result = use_case.execute(TradeBreakEvenCommand(trade_id=trade.id))

        assert result.analysis.components.break_even_price == Decimal("1012.1")
        assert len(result.projections) == 12
        assert [s.suggestion_type for s in result.suggestions] == ["COMMISSION_OPTIMIZATION"]

    def test_trade_break_even_overrides(self, trades, configs) -> None:
        trade = _record_buy(trades, configs, "100", "1000", date(2024, 3, 5))
        use_case = AnalyzeTradeBreakEvenUseCase(
            trades,
            configs,
            default_inflation_rate=Decimal("0.3"),
            tax_rate=Decimal("0.15"),
            today=lambda: date(2024, 3, 20),
        )

        result = use_case.execute(
            TradeBreakEvenCommand(
                trade_id=trade.id,
                current_price=Decimal("1100"),
                projection_months=6,
                inflation_rate=Decimal("0.1"),
            )
        )

        assert result.analysis.current_price == Decimal("1100")
        assert len(result.projections) == 6
        assert result.projections[0].inflation_rate == Decimal("0.07")

    def test_trade_break_even_missing(self, trades, configs) -> None:
        use_case = AnalyzeTradeBreakEvenUseCase(trades, configs, Decimal("0.3"), Decimal("0.15"))

        with pytest.raises(TradeNotFoundError):
            use_case.execute(TradeBreakEvenCommand(trade_id=1))

    def test_trade_break_even_sell(self, trades, configs) -> None:
        trade = RecordTradeUseCase(trades, configs).execute(
            RecordTradeCommand(
                symbol="AAPL",
                operation_type=OperationType.SELL,
                quantity=Decimal("1"),
                price=Decimal("1000"),
                trade_date=date(2024, 1, 1),
            )
        )
        use_case = AnalyzeTradeBreakEvenUseCase(trades, configs, Decimal("0.3"), Decimal("0.15"))

        with pytest.raises(InvalidTradeTypeError):
            use_case.execute(TradeBreakEvenCommand(trade_id=trade.id))

    def test_matrix(self, configs) -> None:
        cells = BreakEvenMatrixUseCase(configs).execute(
            BreakEvenMatrixCommand(
                purchase_price=Decimal("1000"),
                quantity=Decimal("100"),
                inflation_rates=[Decimal("0"), Decimal("0.3")],
                time_horizons=[0, 12],
            )
        )

        assert len(cells) == 4


class TestMonthlyCustodyFee:
    """Tests for the monthly custody fee run and ledger."""

    def _use_case(self, trades, fees, configs, today=date(2024, 2, 5)):
        return RecordMonthlyCustodyFeeUseCase(trades, fees, configs, today=lambda: today)

    def test_month_helpers(self) -> None:
        assert previous_month(date(2024, 3, 15)) == date(2024, 2, 1)
        assert previous_month(date(2024, 1, 1)) == date(2023, 12, 1)
        assert last_day_of_month(date(2024, 2, 10)) == date(2024, 2, 29)

    def test_records_previous_month(self, trades, fees, configs) -> None:
        _record_buy(trades, configs, "2000", "1000", date(2024, 1, 10))

        result = self._use_case(trades, fees, configs).execute(RecordMonthlyCustodyFeeCommand())

        assert result.month == date(2024, 1, 1)
        assert result.portfolio_value == Decimal("2000000")
        assert result.custody_fee == Decimal("3025")
        assert result.is_exempt is False
        assert result.record is not None
        assert result.record.fee_percentage == Decimal("0.0025")
        assert result.record.applicable_amount == Decimal("1000000")

    def test_second_run_is_idempotent(self, trades, fees, configs) -> None:
        _record_buy(trades, configs, "2000", "1000", date(2024, 1, 10))
        use_case = self._use_case(trades, fees, configs)
        use_case.execute(RecordMonthlyCustodyFeeCommand())

        result = use_case.execute(RecordMonthlyCustodyFeeCommand())

        assert result.already_recorded is True
        assert result.custody_fee == Decimal("3025")
        assert len(fees.records) == 1

    def test_month_normalized_to_first_day(self, trades, fees, configs) -> None:
        _record_buy(trades, configs, "2000", "1000", date(2024, 1, 10))

        result = self._use_case(trades, fees, configs).execute(
            RecordMonthlyCustodyFeeCommand(month=date(2024, 1, 31))
        )

        assert result.month == date(2024, 1, 1)

    def test_month_before_any_trade(self, trades, fees, configs) -> None:
        _record_buy(trades, configs, "2000", "1000", date(2024, 1, 10))

        result = self._use_case(trades, fees, configs).execute(
            RecordMonthlyCustodyFeeCommand(month=date(2023, 12, 1))
        )

        assert result.portfolio_value == Decimal("0")
        assert result.is_exempt is True
        assert result.record is None
        assert fees.records == []

    def test_exempt_month_not_recorded(self, trades, fees, configs) -> None:
        _record_buy(trades, configs, "500", "1000", date(2024, 1, 10))

        result = self._use_case(trades, fees, configs).execute(RecordMonthlyCustodyFeeCommand())

        assert result.is_exempt is True
        assert result.custody_fee == Decimal("0")
        assert result.record is None

    def test_dry_run_not_recorded(self, trades, fees, configs) -> None:
        _record_buy(trades, configs, "2000", "1000", date(2024, 1, 10))

        result = self._use_case(trades, fees, configs).execute(
            RecordMonthlyCustodyFeeCommand(dry_run=True)
        )

        assert result.custody_fee == Decimal("3025")
        assert result.record is None
        assert fees.records == []

    def test_history_and_payment_date(self, trades, fees, configs) -> None:
        _record_buy(trades, configs, "2000", "1000", date(2024, 1, 10))
        use_case = self._use_case(trades, fees, configs)
        use_case.execute(RecordMonthlyCustodyFeeCommand(month=date(2024, 1, 1)))
        use_case.execute(RecordMonthlyCustodyFeeCommand(month=date(2024, 2, 1)))

        history = ListCustodyFeesUseCase(fees).execute(ListCustodyFeesQuery())
        assert [r.month for r in history.records] == [date(2024, 2, 1), date(2024, 1, 1)]
        assert history.total_charged == Decimal("6050")

        record = SetCustodyFeePaymentDateUseCase(fees).execute(
            SetPaymentDateCommand(fee_id=history.records[0].id, payment_date=date(2024, 3, 1))
        )
        assert record.payment_date == date(2024, 3, 1)

    def test_payment_date_missing_record(self, fees) -> None:
        with pytest.raises(CustodyFeeNotFoundError):
            SetCustodyFeePaymentDateUseCase(fees).execute(
                SetPaymentDateCommand(fee_id=5, payment_date=date(2024, 3, 1))
            )
