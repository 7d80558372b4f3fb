"""Derived balance and progress models.

These are computed on demand from trades, payouts and the account
configuration and are never persisted.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RiskBucket(str, Enum):
    """Visual risk classification of the distance to the drawdown floor."""

    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


class DerivedBalanceState(BaseModel):
    """Current equity of an account and its live drawdown floor."""

    current_balance: Decimal = Field(..., description="Balance after PAID payouts")
    max_drawdown_level: Decimal = Field(..., description="Balance that breaches the account")
    distance_to_drawdown: Decimal = Field(
        ..., description="current_balance - max_drawdown_level (negative = breached)"
    )
    current_profits: Decimal = Field(..., description="Net P&L of all trades")
    highest_balance: Decimal = Field(..., description="Peak balance before payouts")
    total_paid_payouts: Decimal = Field(..., description="Sum of PAID payouts")
    stop_profit_locked: bool = Field(
        default=False, description="Whether the trailing floor is locked"
    )

    model_config = {"frozen": True}

    @property
    def is_breached(self) -> bool:
        return self.distance_to_drawdown < 0


class ProgressView(BaseModel):
    """UI-ready signals derived from a DerivedBalanceState.

    Percentages and the risk bucket are ``None`` when the account is not
    configured.
    """

    is_configured: bool = Field(..., description="Profit target and drawdown are set")
    progress_percentage: Optional[Decimal] = Field(
        default=None, description="current_balance / profit_target * 100"
    )
    distance_percentage: Optional[Decimal] = Field(
        default=None, description="distance_to_drawdown / current_balance * 100"
    )
    risk_bucket: Optional[RiskBucket] = Field(default=None, description="safe/warning/danger")
    remaining_to_target: Optional[Decimal] = Field(
        default=None, description="Profit still needed to reach the target"
    )
    drawdown_progress: Optional[Decimal] = Field(
        default=None, description="Share of the drawdown allowance already used"
    )

    model_config = {"frozen": True}
