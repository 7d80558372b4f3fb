"""Balance and drawdown calculation for prop-firm accounts."""

from decimal import Decimal
from typing import Iterable

from deltalytix.models import AccountConfiguration, DerivedBalanceState, Payout, Trade


def _entry_key(trade: Trade) -> float:
    if trade.entry_date is None:
        return float("-inf")
    return trade.entry_date.timestamp()


def sort_trades(trades: Iterable[Trade]) -> list[Trade]:
    """Return trades in chronological order of entry.

    The sort is stable; undated trades come first in their original order.
    """
    return sorted(trades, key=_entry_key)


def total_paid_payouts(payouts: Iterable[Payout]) -> Decimal:
    """Sum of the amounts of PAID payouts."""
    return sum((p.amount for p in payouts if p.is_paid), Decimal("0"))


def compute_balance_state(
    trades: Iterable[Trade],
    account: AccountConfiguration,
    payouts: Iterable[Payout] = (),
) -> DerivedBalanceState:
    """Fold trades and payouts into the account's balance and drawdown floor.

    The trailing floor is tracked with an incremental peak accumulator over
    the trades in entry order. Once running profit reaches
    ``trailing_stop_profit`` the floor locks at
    ``starting_balance + trailing_stop_profit - drawdown_threshold`` for good;
    before that it follows the highest balance seen and never moves down.

    Args:
        trades: Trades of the account, in any order.
        account: Account configuration.
        payouts: Payouts of the account. Only PAID ones count.

    Returns:
        The derived balance state.
    """
    start = account.starting_balance
    threshold = account.drawdown_threshold
    stop_profit = account.trailing_stop_profit

    profits = Decimal("0")
    peak = start
    locked = False

    for trade in sort_trades(trades):
        profits += trade.net_pnl
        balance = start + profits
        if balance > peak:
            peak = balance
        if (
            account.trailing_drawdown
            and not locked
            and stop_profit > 0
            and profits >= stop_profit
        ):
            locked = True

    if not account.trailing_drawdown:
        floor = start - threshold
    elif locked:
        floor = start + stop_profit - threshold
    else:
        floor = peak - threshold

    paid = total_paid_payouts(payouts)
    current_balance = start + profits - paid

    return DerivedBalanceState(
        current_balance=current_balance,
        max_drawdown_level=floor,
        distance_to_drawdown=current_balance - floor,
        current_profits=profits,
        highest_balance=peak,
        total_paid_payouts=paid,
        stop_profit_locked=locked,
    )
