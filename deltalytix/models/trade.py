"""Trade data model."""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class Trade(BaseModel):
    """Represents a closed, normalized trade."""

    id: Optional[int] = Field(default=None, description="Database ID")
    account_number: str = Field(default="", description="Trading account number")
    instrument: str = Field(..., min_length=1, description="Traded instrument (e.g., MES)")
    side: Literal["long", "short"] = Field(..., description="Trade direction")
    quantity: int = Field(..., gt=0, description="Number of contracts/units")
    entry_price: Optional[Decimal] = Field(
        default=None, allow_inf_nan=False, description="Entry price"
    )
    close_price: Optional[Decimal] = Field(
        default=None, allow_inf_nan=False, description="Close price"
    )
    pnl: Decimal = Field(..., allow_inf_nan=False, description="Gross profit/loss")
    commission: Decimal = Field(
        default=Decimal("0"), ge=0, allow_inf_nan=False, description="Fees charged"
    )
    entry_date: Optional[datetime] = Field(default=None, description="Entry timestamp")
    close_date: Optional[datetime] = Field(default=None, description="Close timestamp")
    time_in_position: float = Field(
        default=0, ge=0, allow_inf_nan=False, description="Seconds the position was held"
    )
    tags: list[str] = Field(default_factory=list, description="User tags")
    comment: Optional[str] = Field(default=None, description="User comment")

    model_config = {"frozen": True}

    @field_validator("side", mode="before")
    @classmethod
    def _lower_side(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _check_dates(self) -> "Trade":
        # Imports can mix naive and aware timestamps.
        if (
            self.entry_date
            and self.close_date
            and self.close_date.timestamp() < self.entry_date.timestamp()
        ):
            raise ValueError("close_date must not be earlier than entry_date")
        return self

    @property
    def net_pnl(self) -> Decimal:
        """P&L after commission."""
        return self.pnl - self.commission

    @property
    def trade_hash(self) -> str:
        """Identity used to skip duplicate imports."""
        parts = [
            self.account_number,
            self.instrument,
            self.entry_date.isoformat() if self.entry_date else "",
            self.close_date.isoformat() if self.close_date else "",
            str(self.quantity),
            self.side,
            str(self.pnl),
            str(self.time_in_position),
        ]
        return "-".join(parts)
