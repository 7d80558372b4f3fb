"""Account configuration data model."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class AccountConfiguration(BaseModel):
    """Risk parameters of a (prop-firm) trading account.

    A ``profit_target`` or ``drawdown_threshold`` of zero means the value
    has not been configured yet.
    """

    account_number: str = Field(..., min_length=1, description="Account number")
    starting_balance: Decimal = Field(
        default=Decimal("0"), allow_inf_nan=False, description="Balance at start/reset"
    )
    profit_target: Decimal = Field(
        default=Decimal("0"), allow_inf_nan=False, description="Profit target (0 = unset)"
    )
    drawdown_threshold: Decimal = Field(
        default=Decimal("0"), ge=0, allow_inf_nan=False, description="Max allowed drawdown"
    )
    trailing_drawdown: bool = Field(default=False, description="Trailing drawdown flag")
    trailing_stop_profit: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        allow_inf_nan=False,
        description="Profit at which the trailing floor locks (0 = never)",
    )
    propfirm: Optional[str] = Field(default=None, description="Prop firm name")
    consistency_percentage: Decimal = Field(
        default=Decimal("30"),
        ge=0,
        le=100,
        allow_inf_nan=False,
        description="Max share of total profit allowed on a single day",
    )
    reset_date: Optional[datetime] = Field(
        default=None, description="Trades before this date are ignored"
    )
    buffer: Decimal = Field(
        default=Decimal("0"), ge=0, allow_inf_nan=False, description="Profit buffer"
    )
    consider_buffer: bool = Field(default=True, description="Apply the profit buffer")
    min_pnl_to_count_as_day: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        allow_inf_nan=False,
        description="Minimum daily P&L for a day to count as a trading day",
    )

    model_config = {"frozen": True}

    @property
    def is_configured(self) -> bool:
        """Whether both profit target and drawdown threshold are set."""
        return self.profit_target > 0 and self.drawdown_threshold > 0
