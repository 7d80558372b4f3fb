"""Mapping of CSV headers to trade fields."""

import re
from typing import Optional

from deltalytix.errors import IngestionError

# Trade field -> normalized header aliases.
FIELD_ALIASES: dict[str, list[str]] = {
    "account_number": ["account", "accountnumber", "accountid", "accountname"],
    "instrument": ["instrument", "symbol", "ticker", "contract", "product"],
    "side": ["side", "direction", "type", "buysell", "position"],
    "quantity": ["quantity", "qty", "size", "contracts", "amount"],
    "entry_price": ["entryprice", "buyprice", "openprice", "avgentryprice"],
    "close_price": ["closeprice", "sellprice", "exitprice", "avgexitprice"],
    "entry_date": ["entrydate", "buydate", "opentime", "entrytime", "opendate", "boughttimestamp"],
    "close_date": ["closedate", "selldate", "exitdate", "closetime", "exittime", "soldtimestamp"],
    "pnl": ["pnl", "profit", "profitloss", "realizedpnl", "netpnl", "grosspnl"],
    "commission": ["commission", "commissions", "fee", "fees"],
    "time_in_position": ["timeinposition", "duration", "holdtime"],
}

REQUIRED_FIELDS = ["instrument", "quantity", "pnl", "entry_date"]

TRADE_FIELDS = list(FIELD_ALIASES)


def normalize_header(header: str) -> str:
    """Lower-case a header and drop everything but letters and digits."""
    return re.sub(r"[^a-z0-9]", "", header.lower())


def map_columns(
    headers: list[str], overrides: Optional[dict[str, str]] = None
) -> dict[str, str]:
    """Map trade fields to CSV headers.

    Explicit ``overrides`` win; remaining fields are matched on their aliases
    in alias order. A header is used for at most one field.

    Args:
        headers: Header row of the CSV file.
        overrides: Optional field -> header mapping.

    Returns:
        Mapping of trade field to header.

    Raises:
        IngestionError: If an override names an unknown field or header, or
            a required field cannot be mapped.
    """
    mapping: dict[str, str] = {}
    used: set[str] = set()

    for field, header in (overrides or {}).items():
        if field not in FIELD_ALIASES:
            raise IngestionError(f"Unknown trade field '{field}'")
        if header not in headers:
            raise IngestionError(f"Column '{header}' not found in file")
        mapping[field] = header
        used.add(header)

    by_normalized: dict[str, str] = {}
    for header in headers:
        by_normalized.setdefault(normalize_header(header), header)

    for field, aliases in FIELD_ALIASES.items():
        if field in mapping:
            continue
        for alias in aliases:
            header = by_normalized.get(alias)
            if header is not None and header not in used:
                mapping[field] = header
                used.add(header)
                break

    missing = [f for f in REQUIRED_FIELDS if f not in mapping]
    if missing:
        raise IngestionError(f"Missing required columns: {', '.join(missing)}")
    return mapping
