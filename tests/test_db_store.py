"""Property-based tests for the database store.

**Feature: prop-firm-tracking**
"""

import tempfile
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from deltalytix.db.store import DataStore
from deltalytix.models import AccountConfiguration, Payout, Trade


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield DataStore(db_path)


def make_trade(pnl="100", day=2, account="ACC1", **kwargs) -> Trade:
    entry = datetime(2024, 1, day, 14, 30, tzinfo=timezone.utc)
    return Trade(
        account_number=account,
        instrument=kwargs.pop("instrument", "MES"),
        side=kwargs.pop("side", "long"),
        quantity=kwargs.pop("quantity", 1),
        pnl=Decimal(pnl),
        commission=kwargs.pop("commission", Decimal("1.24")),
        entry_date=entry,
        close_date=entry.replace(minute=45),
        time_in_position=900,
        **kwargs,
    )


class TestDatabaseSchemaCompleteness:
    """
    *For any* fresh database, all required tables (accounts, trades,
    payouts) should exist.
    """

    def test_schema_completeness(self, temp_db: DataStore):
        tables = temp_db.get_tables()

        for table in DataStore.REQUIRED_TABLES:
            assert table in tables, f"Required table '{table}' is missing"

    def test_reopen_keeps_data(self, temp_db: DataStore):
        temp_db.log_trade(make_trade())

        reopened = DataStore(temp_db.db_path)

        assert len(reopened.get_trades()) == 1


class TestAccounts:
    def test_round_trip(self, temp_db: DataStore):
        account = AccountConfiguration(
            account_number="ACC1",
            starting_balance=Decimal("50000"),
            profit_target=Decimal("3000.50"),
            drawdown_threshold=Decimal("2500"),
            trailing_drawdown=True,
            trailing_stop_profit=Decimal("2600"),
            propfirm="Apex",
            reset_date=datetime(2024, 2, 1),
            buffer=Decimal("100"),
            consider_buffer=False,
            min_pnl_to_count_as_day=Decimal("50"),
        )

        temp_db.save_account(account)

        assert temp_db.get_account("ACC1") == account

    def test_save_replaces(self, temp_db: DataStore):
        temp_db.save_account(AccountConfiguration(account_number="ACC1", profit_target=Decimal("1")))
        temp_db.save_account(AccountConfiguration(account_number="ACC1", profit_target=Decimal("2")))

        accounts = temp_db.list_accounts()
        assert len(accounts) == 1
        assert accounts[0].profit_target == Decimal("2")

    def test_missing_account(self, temp_db: DataStore):
        assert temp_db.get_account("NOPE") is None
        assert not temp_db.delete_account("NOPE")

    def test_delete_cascades(self, temp_db: DataStore):
        temp_db.save_account(AccountConfiguration(account_number="ACC1"))
        temp_db.log_trade(make_trade())
        temp_db.log_trade(make_trade(account="ACC2"))
        temp_db.save_payout(
            Payout(account_number="ACC1", amount=Decimal("10"), date=datetime(2024, 1, 5))
        )

        assert temp_db.delete_account("ACC1")

        assert temp_db.get_trades("ACC1") == []
        assert temp_db.get_payouts("ACC1") == []
        assert len(temp_db.get_trades("ACC2")) == 1


class TestTrades:
    """
    *For any* set of trades, saving them twice stores each one once and
    reads back the same values.
    """

    @given(
        pnls=st.lists(
            st.decimals(min_value=Decimal("-5000"), max_value=Decimal("5000"), places=2),
            min_size=1,
            max_size=10,
            unique=True,
        )
    )
    @settings(max_examples=25, deadline=None)
    def test_save_trades_deduplicates(self, pnls):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = DataStore(Path(tmpdir) / "test.db")
            trades = [make_trade(str(p)) for p in pnls]

            assert store.save_trades(trades) == len(trades)
            assert store.save_trades(trades) == 0

            stored = store.get_trades("ACC1")
            assert sorted(t.pnl for t in stored) == sorted(pnls)

    def test_round_trip(self, temp_db: DataStore):
        trade = make_trade("-12.50", entry_price=Decimal("5000.25"), close_price=Decimal("4994"))

        trade_id = temp_db.log_trade(trade)
        stored = temp_db.get_trade(trade_id)

        assert stored.id == trade_id
        assert stored.model_copy(update={"id": None}) == trade
        assert stored.trade_hash == trade.trade_hash

    def test_duplicate_log_returns_none(self, temp_db: DataStore):
        assert temp_db.log_trade(make_trade()) is not None
        assert temp_db.log_trade(make_trade()) is None

    def test_date_filters(self, temp_db: DataStore):
        temp_db.save_trades([make_trade("1", day=2), make_trade("2", day=3), make_trade("3", day=4)])

        trades = temp_db.get_trades("ACC1", from_date=date(2024, 1, 3), to_date=date(2024, 1, 3))

        assert [t.pnl for t in trades] == [Decimal("2")]

    def test_ordered_by_entry_date(self, temp_db: DataStore):
        temp_db.save_trades([make_trade("1", day=5), make_trade("2", day=3)])

        assert [t.pnl for t in temp_db.get_trades()] == [Decimal("2"), Decimal("1")]

    def test_annotations(self, temp_db: DataStore):
        trade_id = temp_db.log_trade(make_trade())

        assert temp_db.update_trade_annotations(trade_id, tags=["fomo", "a+", "fomo"])
        assert temp_db.update_trade_annotations(trade_id, comment="chased the open")

        stored = temp_db.get_trade(trade_id)
        assert stored.tags == ["a+", "fomo"]
        assert stored.comment == "chased the open"

    def test_annotations_missing_trade(self, temp_db: DataStore):
        assert not temp_db.update_trade_annotations(999, tags=["x"])

    def test_delete_trade(self, temp_db: DataStore):
        trade_id = temp_db.log_trade(make_trade())

        assert temp_db.delete_trade(trade_id)
        assert temp_db.get_trade(trade_id) is None
        assert not temp_db.delete_trade(trade_id)


class TestPayouts:
    def test_round_trip_and_status(self, temp_db: DataStore):
        payout = Payout(account_number="ACC1", amount=Decimal("750.25"), date=datetime(2024, 1, 9))

        payout_id = temp_db.save_payout(payout)
        assert temp_db.update_payout_status(payout_id, "paid")

        stored = temp_db.get_payouts("ACC1")
        assert len(stored) == 1
        assert stored[0].amount == Decimal("750.25")
        assert stored[0].is_paid

    def test_missing_payout(self, temp_db: DataStore):
        assert not temp_db.update_payout_status(42, "PAID")
        assert not temp_db.delete_payout(42)

    def test_stats(self, temp_db: DataStore):
        temp_db.save_account(AccountConfiguration(account_number="ACC1"))
        temp_db.save_trades([make_trade("1"), make_trade("2")])

        assert temp_db.get_stats() == {"accounts": 1, "trades": 2, "payouts": 0}
