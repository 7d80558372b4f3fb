"""Data models for Deltalytix."""

from deltalytix.models.trade import Trade
from deltalytix.models.account import AccountConfiguration
from deltalytix.models.payout import Payout, PAID, PAYOUT_STATUSES
from deltalytix.models.balance import DerivedBalanceState, ProgressView, RiskBucket

__all__ = [
    "Trade",
    "AccountConfiguration",
    "Payout",
    "PAID",
    "PAYOUT_STATUSES",
    "DerivedBalanceState",
    "ProgressView",
    "RiskBucket",
]
