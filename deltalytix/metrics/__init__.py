"""Account and trade metrics.

Everything in this package is a pure function of the trades, payouts and
account configuration passed in.
"""

from deltalytix.metrics.balance import compute_balance_state, sort_trades
from deltalytix.metrics.progress import classify_risk, compute_progress_view

__all__ = [
    "compute_balance_state",
    "sort_trades",
    "compute_progress_view",
    "classify_risk",
]
