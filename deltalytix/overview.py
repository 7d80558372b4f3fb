"""Account overview: loads an account's data and runs the metrics on it."""

import logging
import sqlite3
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from deltalytix.errors import AccountNotFoundError, DataStoreError
from deltalytix.metrics.rules import compute_account_metrics
from deltalytix.models import AccountConfiguration, DerivedBalanceState, ProgressView

logger = logging.getLogger(__name__)


class OverviewStatus(str, Enum):
    """What the overview card can show."""

    OK = "ok"
    UNCONFIGURED = "unconfigured"
    UNAVAILABLE = "unavailable"


class AccountOverview(BaseModel):
    """Overview of one account.

    ``balance`` and ``progress`` are None when the data could not be loaded.
    """

    account: AccountConfiguration = Field(..., description="Account configuration")
    status: OverviewStatus = Field(..., description="Overview status")
    balance: Optional[DerivedBalanceState] = Field(default=None)
    progress: Optional[ProgressView] = Field(default=None)
    metrics: dict = Field(default_factory=dict, description="Consistency and trading days")
    error: Optional[str] = Field(default=None, description="Why data is unavailable")

    model_config = {"frozen": True}


def build_account_overview(store, account_number: str) -> AccountOverview:
    """Build the overview of an account from the data store.

    Args:
        store: DataStore to read from.
        account_number: Account to summarize.

    Returns:
        The overview. A failure to read trades or payouts yields status
        ``unavailable`` rather than a zeroed calculation.

    Raises:
        AccountNotFoundError: If the account does not exist.
        DataStoreError: If the account itself cannot be read.
    """
    try:
        account = store.get_account(account_number)
    except sqlite3.Error as e:
        raise DataStoreError(f"Could not read account '{account_number}': {e}") from e
    if account is None:
        raise AccountNotFoundError(account_number)

    try:
        trades = store.get_trades(account_number=account_number)
        payouts = store.get_payouts(account_number=account_number)
    except (sqlite3.Error, DataStoreError) as e:
        logger.error("Data unavailable for account %s: %s", account_number, e)
        return AccountOverview(
            account=account,
            status=OverviewStatus.UNAVAILABLE,
            error=str(e),
        )

    computed = compute_account_metrics(trades, account, payouts)
    progress = computed["progress"]
    status = OverviewStatus.OK if progress.is_configured else OverviewStatus.UNCONFIGURED

    return AccountOverview(
        account=account,
        status=status,
        balance=computed["balance"],
        progress=progress,
        metrics={
            "consistency": computed["consistency"],
            "total_trading_days": computed["total_trading_days"],
            "valid_trading_days": computed["valid_trading_days"],
            "above_buffer": computed["above_buffer"],
            "daily_metrics": computed["daily_metrics"],
        },
    )
