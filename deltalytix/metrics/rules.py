"""Prop-firm evaluation rules: reset date, profit buffer, consistency.

Also builds the combined per-account metrics used by the overview.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from deltalytix.metrics.balance import compute_balance_state, sort_trades
from deltalytix.metrics.progress import compute_progress_view
from deltalytix.metrics.statistics import calculate_trading_days, daily_pnl, trade_day
from deltalytix.models import AccountConfiguration, Payout, Trade

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def filter_trades_for_account(
    trades: Iterable[Trade], account: AccountConfiguration
) -> list[Trade]:
    """Keep the account's dated trades entered at or after its reset date."""
    reset = account.reset_date.timestamp() if account.reset_date else None
    kept = []
    for trade in trades:
        if trade.account_number != account.account_number or trade.entry_date is None:
            continue
        if reset is not None and trade.entry_date.timestamp() < reset:
            continue
        kept.append(trade)
    return sort_trades(kept)


def filter_payouts_for_account(
    payouts: Iterable[Payout], account: AccountConfiguration
) -> list[Payout]:
    """Keep the account's payouts dated at or after its reset date."""
    reset = account.reset_date.timestamp() if account.reset_date else None
    return [
        p
        for p in payouts
        if p.account_number == account.account_number
        and (reset is None or p.date.timestamp() >= reset)
    ]


def apply_buffer(
    trades: Iterable[Trade],
    account: AccountConfiguration,
    payouts: Iterable[Payout] = (),
) -> tuple[list[Trade], Decimal]:
    """Drop the trades taken before the account's profit buffer was built.

    Trades and PAID payouts are replayed in date order. A trade counts once
    accumulated profit is at or above the buffer, or when the trade itself
    crosses it. Payouts reduce accumulated profit and can push the account
    back under the buffer.

    Returns:
        The counted trades and the profit above the buffer at the end.
    """
    ordered = sort_trades(trades)
    threshold = account.buffer
    if not account.consider_buffer or threshold <= 0:
        return ordered, ZERO

    events = [(t.entry_date.timestamp(), 0, t) for t in ordered if t.entry_date]
    events += [(p.date.timestamp(), 1, p) for p in payouts if p.is_paid]
    # Trades sort before payouts on equal timestamps.
    events.sort(key=lambda e: (e[0], e[1]))

    counted = []
    accumulated = ZERO
    for _, kind, item in events:
        if kind == 1:
            accumulated -= item.amount
            continue
        following = accumulated + item.net_pnl
        if accumulated >= threshold or following >= threshold:
            counted.append(item)
        accumulated = following

    return counted, max(ZERO, accumulated - threshold)


def evaluate_consistency(trades: Iterable[Trade], account: AccountConfiguration) -> dict:
    """Check the consistency rule: no single day above a share of total profit.

    The reference amount is the profit target, or the total profit once the
    target has been exceeded.
    """
    per_day = daily_pnl(trades)
    total_profit = sum(per_day.values(), ZERO)
    highest_day = max(per_day.values()) if per_day else ZERO
    has_profit = total_profit > 0
    has_rules = account.profit_target > 0 or account.drawdown_threshold > 0

    max_allowed: Optional[Decimal] = None
    is_consistent = False
    if has_profit and has_rules and account.consistency_percentage > 0:
        base = account.profit_target if total_profit <= account.profit_target else total_profit
        max_allowed = base * account.consistency_percentage / HUNDRED
        is_consistent = highest_day <= max_allowed

    return {
        "total_profit": total_profit,
        "highest_profit_day": highest_day,
        "max_allowed_daily_profit": max_allowed,
        "is_consistent": is_consistent,
        "has_profitable_data": has_profit,
        "total_profitable_days": sum(1 for pnl in per_day.values() if pnl > 0),
    }


def daily_metrics(
    trades: Iterable[Trade],
    account: AccountConfiguration,
    payouts: Iterable[Payout] = (),
) -> list[dict]:
    """Per-day P&L and running balance, with the day's payouts.

    Every PAID payout is deducted from the running balance on its date. A day
    is consistent when its P&L stays within ``consistency_percentage`` of
    the total profit.
    """
    per_day = daily_pnl(trades)
    total_profit = sum(per_day.values(), ZERO)
    share = (account.consistency_percentage or Decimal("30")) / HUNDRED
    target = account.profit_target

    payouts_by_day: dict = defaultdict(list)
    for payout in payouts:
        payouts_by_day[trade_day(payout.date)].append(payout)

    running = account.starting_balance
    metrics = []
    for day in sorted(set(per_day) | set(payouts_by_day)):
        pnl = per_day.get(day, ZERO)
        running += pnl
        day_payouts = payouts_by_day.get(day, [])
        running -= sum((p.amount for p in day_payouts if p.is_paid), ZERO)
        metrics.append(
            {
                "date": day,
                "pnl": pnl,
                "total_balance": running,
                "percentage_of_target": (total_profit / target * HUNDRED) if target > 0 else ZERO,
                "is_consistent": total_profit <= 0 or pnl <= total_profit * share,
                "payouts": day_payouts,
            }
        )
    return metrics


def compute_account_metrics(
    trades: Iterable[Trade],
    account: AccountConfiguration,
    payouts: Iterable[Payout] = (),
) -> dict:
    """Everything the account overview shows, computed in one pass.

    Balance and drawdown use all trades since the reset date; consistency,
    trading days and the daily series use only the trades counted after the
    profit buffer.
    """
    relevant = filter_trades_for_account(trades, account)
    account_payouts = filter_payouts_for_account(payouts, account)

    state = compute_balance_state(relevant, account, account_payouts)
    progress = compute_progress_view(state, account)

    counted, above_buffer = apply_buffer(relevant, account, account_payouts)
    days = calculate_trading_days(counted, account.min_pnl_to_count_as_day)

    return {
        "balance": state,
        "progress": progress,
        "consistency": evaluate_consistency(counted, account),
        "total_trading_days": days["total_trading_days"],
        "valid_trading_days": days["valid_trading_days"],
        "daily_metrics": daily_metrics(counted, account, account_payouts),
        "trades": counted,
        "above_buffer": above_buffer,
    }
