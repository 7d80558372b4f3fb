"""Payout data model."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

PENDING = "PENDING"
VALIDATED = "VALIDATED"
REFUSED = "REFUSED"
PAID = "PAID"

PAYOUT_STATUSES = [PENDING, VALIDATED, REFUSED, PAID]


class Payout(BaseModel):
    """A withdrawal from a trading account.

    ``status`` is an open set of strings; only ``PAID`` reduces the
    tracked balance.
    """

    id: Optional[int] = Field(default=None, description="Database ID")
    account_number: str = Field(default="", description="Account the payout belongs to")
    amount: Decimal = Field(..., ge=0, allow_inf_nan=False, description="Payout amount")
    date: datetime = Field(..., description="Payout date")
    status: str = Field(default=PENDING, min_length=1, description="Payout status")

    model_config = {"frozen": True}

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def is_paid(self) -> bool:
        return self.status == PAID
