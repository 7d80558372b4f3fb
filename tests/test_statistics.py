"""Tests for trade statistics and chart aggregations.

**Feature: trade-analytics**
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from deltalytix.metrics.statistics import (
    calculate_statistics,
    calculate_trading_days,
    daily_calendar,
    format_position_time,
    pnl_by_hour,
    pnl_by_instrument,
    pnl_by_side,
    pnl_by_weekday,
)
from deltalytix.models import Payout, Trade


def trade(pnl, entry, instrument="MES", side="long", commission="0", seconds=0) -> Trade:
    return Trade(
        account_number="ACC1",
        instrument=instrument,
        side=side,
        quantity=1,
        pnl=Decimal(str(pnl)),
        commission=Decimal(commission),
        entry_date=entry,
        time_in_position=seconds,
    )


def trade_strategy():
    """Generate valid Trade objects for testing."""
    return st.builds(
        Trade,
        account_number=st.just("ACC1"),
        instrument=st.sampled_from(["MES", "ES", "NQ", "MNQ"]),
        side=st.sampled_from(["long", "short"]),
        quantity=st.integers(min_value=1, max_value=10),
        pnl=st.decimals(min_value=Decimal("-1000"), max_value=Decimal("1000"), places=2),
        commission=st.decimals(min_value=Decimal("0"), max_value=Decimal("10"), places=2),
        entry_date=st.datetimes(min_value=datetime(2023, 1, 1), max_value=datetime(2025, 12, 31)),
    )


MONDAY = datetime(2024, 3, 4, 9, 30)


class TestPositionTimeFormatting:
    def test_hours_minutes_seconds(self):
        assert format_position_time(3723) == "1h 2m 3s"

    def test_no_hours(self):
        assert format_position_time(75) == "1m 15s"

    def test_invalid(self):
        assert format_position_time(float("nan")) == "0"
        assert format_position_time(-5) == "0"


class TestStatistics:
    """Summary statistics over a set of trades."""

    def test_empty(self):
        stats = calculate_statistics([])

        assert stats["nb_trades"] == 0
        assert stats["win_rate"] == 0
        assert stats["profit_factor"] is None
        assert stats["average_position_time"] == "0s"

    def test_counts_and_totals(self):
        trades = [
            trade(200, MONDAY, commission="2", seconds=60),
            trade(-100, MONDAY + timedelta(minutes=5), commission="2", seconds=120),
            trade(0, MONDAY + timedelta(minutes=10), seconds=30),
            trade(50, MONDAY + timedelta(minutes=15), commission="1", seconds=90),
        ]
        payouts = [Payout(account_number="ACC1", amount=Decimal("300"), date=MONDAY, status="PAID")]

        stats = calculate_statistics(trades, payouts)

        assert stats["nb_trades"] == 4
        assert stats["nb_win"] == 2
        assert stats["nb_loss"] == 1
        assert stats["nb_be"] == 1
        assert abs(stats["win_rate"] - Decimal("66.67")) < Decimal("0.01")
        assert stats["cumulative_pnl"] == Decimal("150")
        assert stats["cumulative_fees"] == Decimal("5")
        assert stats["net_pnl"] == Decimal("145")
        assert stats["gross_win"] == Decimal("250")
        assert stats["gross_losses"] == Decimal("100")
        assert stats["profit_factor"] == Decimal("2.5")
        assert stats["winning_streak"] == 1
        assert stats["average_position_time"] == "1m 15s"
        assert stats["nb_payouts"] == 1
        assert stats["total_payouts"] == Decimal("300")

    def test_streak_follows_entry_order(self):
        trades = [
            trade(10, MONDAY + timedelta(minutes=2)),
            trade(-10, MONDAY),
            trade(10, MONDAY + timedelta(minutes=1)),
        ]

        assert calculate_statistics(trades)["winning_streak"] == 2

    @given(trades=st.lists(trade_strategy(), min_size=0, max_size=40))
    @settings(max_examples=100)
    def test_outcome_counts_add_up(self, trades):
        """
        *For any* trades, wins, losses and break-evens add up to the trade
        count and the win rate stays within 0-100.
        """
        stats = calculate_statistics(trades)

        assert stats["nb_win"] + stats["nb_loss"] + stats["nb_be"] == len(trades)
        assert 0 <= stats["win_rate"] <= 100
        assert stats["net_pnl"] == stats["cumulative_pnl"] - stats["cumulative_fees"]


class TestBreakdowns:
    """P&L buckets for the dashboard charts."""

    def test_by_hour(self):
        trades = [
            trade(100, MONDAY),
            trade(-40, MONDAY + timedelta(minutes=20)),
            trade(30, MONDAY + timedelta(hours=2)),
        ]

        buckets = pnl_by_hour(trades)

        assert list(buckets) == [9, 11]
        assert buckets[9]["trade_count"] == 2
        assert buckets[9]["net_pnl"] == Decimal("60")
        assert buckets[9]["win_rate"] == Decimal("50")
        assert buckets[9]["average_pnl"] == Decimal("30")

    def test_by_hour_in_timezone(self):
        utc_trade = trade(10, datetime(2024, 3, 4, 14, 0, tzinfo=timezone.utc))
        new_york = timezone(timedelta(hours=-5))

        assert list(pnl_by_hour([utc_trade], tz=new_york)) == [9]

    def test_by_weekday(self):
        trades = [trade(10, MONDAY), trade(20, MONDAY + timedelta(days=2))]

        buckets = pnl_by_weekday(trades)

        assert list(buckets) == [0, 2]
        assert buckets[2]["net_pnl"] == Decimal("20")

    def test_by_instrument_and_side(self):
        trades = [
            trade(10, MONDAY, instrument="ES", side="long"),
            trade(-5, MONDAY, instrument="NQ", side="short", commission="1"),
            trade(7, MONDAY, instrument="ES", side="short"),
        ]

        by_instrument = pnl_by_instrument(trades)
        by_side = pnl_by_side(trades)

        assert by_instrument["ES"]["net_pnl"] == Decimal("17")
        assert by_instrument["NQ"]["net_pnl"] == Decimal("-6")
        assert by_side["long"]["trade_count"] == 1
        assert by_side["short"]["net_pnl"] == Decimal("1")

    def test_undated_trades_skipped_in_time_buckets(self):
        undated = Trade(instrument="ES", side="long", quantity=1, pnl=Decimal("5"))

        assert pnl_by_hour([undated]) == {}
        assert pnl_by_instrument([undated])["ES"]["trade_count"] == 1

    @given(trades=st.lists(trade_strategy(), min_size=1, max_size=40))
    @settings(max_examples=50)
    def test_buckets_partition_trades(self, trades):
        """
        *For any* trades, the buckets of a breakdown hold every trade once
        and their net P&L sums to the total.
        """
        total = sum((t.net_pnl for t in trades), Decimal("0"))
        for buckets in (pnl_by_hour(trades), pnl_by_weekday(trades), pnl_by_instrument(trades)):
            assert sum(b["trade_count"] for b in buckets.values()) == len(trades)
            assert sum((b["net_pnl"] for b in buckets.values()), Decimal("0")) == total


class TestCalendar:
    def test_daily_calendar(self):
        trades = [
            trade(100, MONDAY, commission="2"),
            trade(-30, MONDAY + timedelta(hours=1), side="short"),
            trade(40, MONDAY + timedelta(days=1)),
        ]

        days = daily_calendar(trades)

        monday = MONDAY.date()
        assert list(days) == [monday, monday + timedelta(days=1)]
        assert days[monday] == {
            "net_pnl": Decimal("68"),
            "trade_count": 2,
            "long_count": 1,
            "short_count": 1,
        }

    def test_aware_timestamps_grouped_by_utc_day(self):
        late = datetime(2024, 3, 4, 23, 30, tzinfo=timezone(timedelta(hours=-2)))

        assert list(daily_calendar([trade(5, late)])) == [datetime(2024, 3, 5).date()]

    def test_trading_days(self):
        trades = [
            trade(100, MONDAY),
            trade(20, MONDAY + timedelta(days=1)),
            trade(-50, MONDAY + timedelta(days=2)),
        ]

        assert calculate_trading_days(trades)["valid_trading_days"] == 3
        result = calculate_trading_days(trades, Decimal("50"))
        assert result["total_trading_days"] == 3
        assert result["valid_trading_days"] == 1
