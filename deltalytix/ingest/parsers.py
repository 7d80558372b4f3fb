"""Value parsers for imported trade data.

Every parser raises ``ValueError`` on malformed input; the CSV reader
turns that into an ``IngestionError`` carrying the row number.
"""

import math
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

_CURRENCY_CHARS = re.compile(r"[\s$€£¥,]")
_FUTURES_SUFFIX = re.compile(r"^([A-Z0-9]{1,4})[FGHJKMNQUVXZ]\d{1,2}$")
_DURATION_PARTS = re.compile(r"(?:(\d+)h)?\s*(?:(\d+)m)?\s*(?:(\d+)s)?$")

LONG_VALUES = {"long", "buy", "b", "bot", "bought"}
SHORT_VALUES = {"short", "sell", "s", "sld", "sold"}

TIMESTAMP_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y",
]


def parse_decimal(value) -> Decimal:
    """Parse a monetary or numeric value into a finite Decimal.

    Currency symbols, thousands separators and whitespace are dropped.
    Accounting negatives such as ``(12.50)`` are supported.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    else:
        text = _CURRENCY_CHARS.sub("", str(value or ""))
        negative = text.startswith("(") and text.endswith(")")
        if negative:
            text = text[1:-1]
        if not text:
            raise ValueError("empty numeric value")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"invalid number: {value!r}") from None
        if negative:
            result = -result
    if not result.is_finite():
        raise ValueError(f"number must be finite: {value!r}")
    return result


def parse_optional_decimal(value) -> Optional[Decimal]:
    if value is None or str(value).strip() == "":
        return None
    return parse_decimal(value)


def parse_quantity(value) -> int:
    """Parse a quantity; signed broker quantities are taken as absolute."""
    number = abs(parse_decimal(value))
    if number != number.to_integral_value():
        raise ValueError(f"quantity must be a whole number: {value!r}")
    if number == 0:
        raise ValueError("quantity must be positive")
    return int(number)


def parse_side(value) -> str:
    """Normalize a side/direction value to ``long`` or ``short``."""
    text = str(value or "").strip().lower()
    if text in LONG_VALUES:
        return "long"
    if text in SHORT_VALUES:
        return "short"
    raise ValueError(f"unknown trade side: {value!r}")


def infer_side(
    entry_price: Optional[Decimal], close_price: Optional[Decimal], pnl: Decimal
) -> str:
    """Guess the side when the export has no side column.

    A trade is long when its P&L has the same sign as the price move.
    Defaults to long when prices are missing or flat.
    """
    if entry_price is None or close_price is None or close_price == entry_price or pnl == 0:
        return "long"
    moved_up = close_price > entry_price
    return "long" if moved_up == (pnl > 0) else "short"


def clean_instrument(value) -> str:
    """Strip futures expiry codes: ``MESH5`` becomes ``MES``, ``ESZ25`` becomes ``ES``."""
    text = str(value or "").strip().upper()
    if not text:
        raise ValueError("instrument is empty")
    match = _FUTURES_SUFFIX.match(text)
    if match:
        return match.group(1)
    return text


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 or common broker timestamp; blank means None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text:
        return None
    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"unrecognized timestamp: {value!r}")


def parse_duration(value) -> float:
    """Parse a holding time: seconds, ``HH:MM:SS`` or ``1h 2m 3s``."""
    text = str(value or "").strip().lower()
    if not text:
        return 0.0
    if ":" in text:
        parts = [float(p) for p in text.split(":")]
        seconds = 0.0
        for part in parts:
            seconds = seconds * 60 + part
        if not math.isfinite(seconds):
            raise ValueError(f"duration must be finite: {value!r}")
        return seconds
    try:
        return float(parse_decimal(text))
    except ValueError:
        pass
    match = _DURATION_PARTS.match(text)
    if not match or not any(match.groups()):
        raise ValueError(f"unrecognized duration: {value!r}")
    hours, minutes, seconds = (int(g or 0) for g in match.groups())
    return float(hours * 3600 + minutes * 60 + seconds)
