"""Trade statistics and chart aggregations.

Buckets trades by hour, weekday, instrument, side and calendar day for
the dashboard cards and charts.
"""

from collections import defaultdict
from datetime import date, datetime, timezone, tzinfo
from decimal import Decimal
from typing import Callable, Hashable, Iterable, Optional

from deltalytix.metrics.balance import sort_trades
from deltalytix.models import Payout, Trade

ZERO = Decimal("0")
HUNDRED = Decimal("100")

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def format_position_time(seconds: float) -> str:
    """Format a duration in seconds as e.g. ``1h 2m 3s``.

    Hours are omitted when zero. Negative durations format as ``0``.
    """
    if seconds is None or seconds != seconds or seconds < 0:
        return "0"
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return " ".join(parts)


def trade_day(moment: datetime) -> date:
    """Calendar day of a timestamp, in UTC for timezone-aware values."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def is_winner(trade: Trade) -> bool:
    return trade.pnl > 0


def is_loser(trade: Trade) -> bool:
    return trade.pnl < 0


def calculate_statistics(
    trades: Iterable[Trade], payouts: Iterable[Payout] = ()
) -> dict:
    """Calculate summary statistics for a set of trades.

    Wins and losses are judged on gross P&L; break-even trades are counted
    separately and left out of the win rate.

    Args:
        trades: Trades to summarize.
        payouts: Payouts of the accounts the trades belong to.

    Returns:
        Dictionary of statistics.
    """
    ordered = sort_trades(trades)
    payouts = list(payouts)

    stats = {
        "nb_trades": len(ordered),
        "nb_win": 0,
        "nb_loss": 0,
        "nb_be": 0,
        "win_rate": ZERO,
        "cumulative_pnl": ZERO,
        "cumulative_fees": ZERO,
        "net_pnl": ZERO,
        "gross_win": ZERO,
        "gross_losses": ZERO,
        "profit_factor": None,
        "winning_streak": 0,
        "total_position_time": 0.0,
        "average_position_time": "0s",
        "total_payouts": sum((p.amount for p in payouts), ZERO),
        "nb_payouts": len(payouts),
    }

    for trade in ordered:
        stats["cumulative_pnl"] += trade.pnl
        stats["cumulative_fees"] += trade.commission
        stats["total_position_time"] += trade.time_in_position

        if is_winner(trade):
            stats["nb_win"] += 1
            stats["winning_streak"] += 1
            stats["gross_win"] += trade.pnl
        elif is_loser(trade):
            stats["nb_loss"] += 1
            stats["winning_streak"] = 0
            stats["gross_losses"] += abs(trade.pnl)
        else:
            stats["nb_be"] += 1

    decided = stats["nb_win"] + stats["nb_loss"]
    if decided:
        stats["win_rate"] = Decimal(stats["nb_win"]) / Decimal(decided) * HUNDRED
    if stats["gross_losses"] > 0:
        stats["profit_factor"] = stats["gross_win"] / stats["gross_losses"]
    stats["net_pnl"] = stats["cumulative_pnl"] - stats["cumulative_fees"]
    if ordered:
        average = round(stats["total_position_time"] / len(ordered))
        stats["average_position_time"] = format_position_time(average)

    return stats


def _bucket(trades: Iterable[Trade], key: Callable[[Trade], Optional[Hashable]]) -> dict:
    """Group trades by ``key`` and summarize each group.

    Trades for which ``key`` returns None are skipped.
    """
    groups: dict = defaultdict(list)
    for trade in trades:
        k = key(trade)
        if k is not None:
            groups[k].append(trade)

    result = {}
    for k in sorted(groups):
        group = groups[k]
        net = sum((t.net_pnl for t in group), ZERO)
        wins = sum(1 for t in group if is_winner(t))
        losses = sum(1 for t in group if is_loser(t))
        result[k] = {
            "trade_count": len(group),
            "net_pnl": net,
            "wins": wins,
            "losses": losses,
            "win_rate": (Decimal(wins) / Decimal(wins + losses) * HUNDRED) if wins + losses else ZERO,
            "average_pnl": net / len(group),
        }
    return result


def _local(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    if tz is not None and moment.tzinfo is not None:
        return moment.astimezone(tz)
    return moment


def pnl_by_hour(trades: Iterable[Trade], tz: Optional[tzinfo] = None) -> dict:
    """Net P&L per hour of entry (0-23)."""
    return _bucket(
        trades,
        lambda t: _local(t.entry_date, tz).hour if t.entry_date else None,
    )


def pnl_by_weekday(trades: Iterable[Trade], tz: Optional[tzinfo] = None) -> dict:
    """Net P&L per weekday of entry (0=Monday ... 6=Sunday)."""
    return _bucket(
        trades,
        lambda t: _local(t.entry_date, tz).weekday() if t.entry_date else None,
    )


def pnl_by_instrument(trades: Iterable[Trade]) -> dict:
    """Net P&L per instrument."""
    return _bucket(trades, lambda t: t.instrument)


def pnl_by_side(trades: Iterable[Trade]) -> dict:
    """Net P&L for long and short trades."""
    return _bucket(trades, lambda t: t.side)


def daily_calendar(trades: Iterable[Trade]) -> dict[date, dict]:
    """Aggregate trades per calendar day of entry (UTC).

    Returns:
        Mapping of date to net P&L, trade count and long/short counts.
    """
    days: dict[date, dict] = {}
    for trade in trades:
        if trade.entry_date is None:
            continue
        day = days.setdefault(
            trade_day(trade.entry_date),
            {"net_pnl": ZERO, "trade_count": 0, "long_count": 0, "short_count": 0},
        )
        day["net_pnl"] += trade.net_pnl
        day["trade_count"] += 1
        if trade.side == "long":
            day["long_count"] += 1
        else:
            day["short_count"] += 1
    return dict(sorted(days.items()))


def daily_pnl(trades: Iterable[Trade]) -> dict[date, Decimal]:
    """Net P&L per calendar day of entry (UTC)."""
    return {day: v["net_pnl"] for day, v in daily_calendar(trades).items()}


def calculate_trading_days(
    trades: Iterable[Trade], min_pnl_to_count_as_day: Optional[Decimal] = None
) -> dict:
    """Count trading days and the days that meet a minimum daily P&L.

    When no positive minimum is given, every trading day is valid.
    """
    per_day = daily_pnl(trades)
    total = len(per_day)
    valid = total
    if min_pnl_to_count_as_day is not None and min_pnl_to_count_as_day > 0:
        valid = sum(1 for pnl in per_day.values() if pnl >= min_pnl_to_count_as_day)
    return {
        "total_trading_days": total,
        "valid_trading_days": valid,
        "daily_pnl": per_day,
    }
