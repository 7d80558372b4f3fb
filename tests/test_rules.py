"""Tests for prop-firm evaluation rules.

**Feature: prop-firm-tracking**
"""

from datetime import datetime, timedelta
from decimal import Decimal

from deltalytix.metrics.rules import (
    apply_buffer,
    compute_account_metrics,
    daily_metrics,
    evaluate_consistency,
    filter_payouts_for_account,
    filter_trades_for_account,
)
from deltalytix.models import AccountConfiguration, Payout, Trade, RiskBucket

DAY = datetime(2024, 3, 4, 10, 0)


def trade(pnl, day_offset=0, account="ACC1", minutes=0) -> Trade:
    return Trade(
        account_number=account,
        instrument="MES",
        side="long",
        quantity=1,
        pnl=Decimal(str(pnl)),
        entry_date=DAY + timedelta(days=day_offset, minutes=minutes),
    )


def payout(amount, day_offset=0, status="PAID", account="ACC1") -> Payout:
    return Payout(
        account_number=account,
        amount=Decimal(str(amount)),
        date=DAY + timedelta(days=day_offset, hours=2),
        status=status,
    )


def account(**kwargs) -> AccountConfiguration:
    values = {
        "account_number": "ACC1",
        "starting_balance": Decimal("50000"),
        "profit_target": Decimal("3000"),
        "drawdown_threshold": Decimal("2000"),
    }
    values.update(kwargs)
    return AccountConfiguration(**values)


class TestAccountFilters:
    def test_other_accounts_and_undated_trades_dropped(self):
        undated = Trade(account_number="ACC1", instrument="ES", side="long", quantity=1, pnl=Decimal("1"))
        trades = [trade(10), trade(20, account="ACC2"), undated]

        assert filter_trades_for_account(trades, account()) == [trades[0]]

    def test_reset_date(self):
        acc = account(reset_date=DAY + timedelta(days=1))
        trades = [trade(10), trade(20, day_offset=1), trade(30, day_offset=2)]

        kept = filter_trades_for_account(trades, acc)

        assert [t.pnl for t in kept] == [Decimal("20"), Decimal("30")]

    def test_payouts_before_reset_dropped(self):
        acc = account(reset_date=DAY + timedelta(days=1))
        payouts = [payout(100), payout(200, day_offset=1), payout(300, account="ACC2")]

        assert [p.amount for p in filter_payouts_for_account(payouts, acc)] == [Decimal("200")]


class TestBuffer:
    """Trades only count once the profit buffer has been built."""

    def test_disabled_buffer_keeps_everything(self):
        trades = [trade(100), trade(200, 1)]

        kept, above = apply_buffer(trades, account(), [])

        assert kept == trades
        assert above == 0

    def test_ignored_buffer_keeps_everything(self):
        trades = [trade(100), trade(200, 1)]

        kept, _ = apply_buffer(trades, account(buffer=Decimal("150"), consider_buffer=False), [])

        assert kept == trades

    def test_crossing_trade_counts(self):
        trades = [trade(100), trade(100, 1), trade(50, 2)]

        kept, above = apply_buffer(trades, account(buffer=Decimal("150")), [])

        assert [t.entry_date for t in kept] == [trades[1].entry_date, trades[2].entry_date]
        assert above == Decimal("100")

    def test_payout_pushes_back_under_buffer(self):
        trades = [trade(300), trade(10, 2), trade(100, 3)]
        payouts = [payout(250, 1), payout(999, 1, status="PENDING")]

        kept, above = apply_buffer(trades, account(buffer=Decimal("200")), payouts)

        # 300 - 250 = 50, +10 = 60 stays under, +100 = 160 still under
        assert kept == [trades[0]]
        assert above == 0


class TestConsistency:
    def test_consistent_days(self):
        trades = [trade(400), trade(500, 1), trade(300, 2)]

        result = evaluate_consistency(trades, account())

        # base is the 3000 target while total profit (1200) is below it
        assert result["max_allowed_daily_profit"] == Decimal("900")
        assert result["highest_profit_day"] == Decimal("500")
        assert result["is_consistent"]
        assert result["total_profitable_days"] == 3

    def test_inconsistent_when_one_day_dominates(self):
        trades = [trade(3000), trade(500, 1)]

        result = evaluate_consistency(trades, account())

        # total profit 3500 exceeds target, 30% of it is 1050
        assert result["max_allowed_daily_profit"] == Decimal("1050")
        assert not result["is_consistent"]

    def test_no_profit_means_not_evaluated(self):
        result = evaluate_consistency([trade(-100)], account())

        assert result["max_allowed_daily_profit"] is None
        assert not result["has_profitable_data"]
        assert not result["is_consistent"]


class TestDailyMetrics:
    def test_running_balance_with_payouts(self):
        trades = [trade(500), trade(-200, 1), trade(300, 3)]
        payouts = [payout(100, 1), payout(50, 2, status="PENDING")]

        days = daily_metrics(trades, account(), payouts)

        assert [d["date"] for d in days] == [
            (DAY + timedelta(days=i)).date() for i in range(4)
        ]
        assert [d["total_balance"] for d in days] == [
            Decimal("50500"),
            Decimal("50200"),
            Decimal("50200"),
            Decimal("50500"),
        ]
        assert [p.status for p in days[2]["payouts"]] == ["PENDING"]
        assert days[2]["pnl"] == 0

    def test_every_paid_payout_of_a_day_is_deducted(self):
        trades = [trade(1000)]
        payouts = [
            payout(50, 1, status="PENDING"),
            payout(100, 1),
            payout(200, 1),
        ]

        days = daily_metrics(trades, account(), payouts)

        assert len(days[1]["payouts"]) == 3
        assert days[1]["total_balance"] == days[0]["total_balance"] - Decimal("300")


class TestAccountMetrics:
    def test_combined_metrics(self):
        acc = account(trailing_drawdown=True, trailing_stop_profit=Decimal("2100"))
        trades = [trade(1500), trade(800, 1), trade(-400, 2), trade(10, 3, account="ACC2")]
        payouts = [payout(500, 3)]

        result = compute_account_metrics(trades, acc, payouts)

        state = result["balance"]
        assert state.current_profits == Decimal("1900")
        assert state.stop_profit_locked
        assert state.max_drawdown_level == Decimal("50100")
        assert state.current_balance == Decimal("51400")
        # 1300 above the floor is about 2.5% of the balance
        assert result["progress"].risk_bucket == RiskBucket.WARNING
        assert result["total_trading_days"] == 3
        assert len(result["trades"]) == 3
