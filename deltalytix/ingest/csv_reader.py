"""Read broker CSV exports into validated trades."""

import csv
import io
import logging
from pathlib import Path
from typing import Optional, TextIO, Union

from pydantic import ValidationError

from deltalytix.errors import IngestionError
from deltalytix.ingest.columns import map_columns
from deltalytix.ingest.parsers import (
    clean_instrument,
    infer_side,
    parse_decimal,
    parse_duration,
    parse_optional_decimal,
    parse_quantity,
    parse_side,
    parse_timestamp,
)
from deltalytix.models import Trade

logger = logging.getLogger(__name__)


def _cell(row: dict, mapping: dict[str, str], field: str) -> Optional[str]:
    header = mapping.get(field)
    if header is None:
        return None
    value = row.get(header)
    if value is None:
        return None
    value = value.strip()
    return value or None


def row_to_trade(
    row: dict,
    mapping: dict[str, str],
    account_number: Optional[str] = None,
) -> Trade:
    """Convert one CSV row into a Trade.

    Raises:
        ValueError: If a value cannot be parsed or the trade is invalid.
    """
    pnl = parse_decimal(_cell(row, mapping, "pnl"))
    entry_price = parse_optional_decimal(_cell(row, mapping, "entry_price"))
    close_price = parse_optional_decimal(_cell(row, mapping, "close_price"))

    side_value = _cell(row, mapping, "side")
    side = parse_side(side_value) if side_value else infer_side(entry_price, close_price, pnl)

    commission = parse_optional_decimal(_cell(row, mapping, "commission"))
    entry_date = parse_timestamp(_cell(row, mapping, "entry_date"))
    if entry_date is None:
        raise ValueError("entry date is empty")

    return Trade(
        account_number=account_number or _cell(row, mapping, "account_number") or "",
        instrument=clean_instrument(_cell(row, mapping, "instrument")),
        side=side,
        quantity=parse_quantity(_cell(row, mapping, "quantity")),
        entry_price=entry_price,
        close_price=close_price,
        pnl=pnl,
        commission=abs(commission) if commission is not None else 0,
        entry_date=entry_date,
        close_date=parse_timestamp(_cell(row, mapping, "close_date")),
        time_in_position=parse_duration(_cell(row, mapping, "time_in_position")),
    )


def read_trades_csv(
    source: Union[str, Path, TextIO],
    account_number: Optional[str] = None,
    mappings: Optional[dict[str, str]] = None,
    delimiter: str = ",",
) -> list[Trade]:
    """Read trades from a CSV file or text stream.

    Args:
        source: Path to a CSV file or an open text stream.
        account_number: Account to assign to every trade. When omitted the
            account column of the file is used.
        mappings: Optional field -> header overrides.
        delimiter: Field delimiter.

    Returns:
        Parsed trades, in file order.

    Raises:
        IngestionError: On missing columns or the first malformed row.
    """
    if isinstance(source, (str, Path)):
        with open(source, newline="", encoding="utf-8-sig") as handle:
            return read_trades_csv(handle, account_number, mappings, delimiter)

    reader = csv.DictReader(source, delimiter=delimiter)
    if not reader.fieldnames:
        raise IngestionError("File has no header row")

    mapping = map_columns(list(reader.fieldnames), mappings)
    logger.debug("Column mapping: %s", mapping)

    trades = []
    for number, row in enumerate(reader, start=1):
        if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
            continue
        try:
            trades.append(row_to_trade(row, mapping, account_number))
        except ValidationError as e:
            first = e.errors()[0]
            where = ".".join(str(p) for p in first["loc"])
            message = f"{where}: {first['msg']}" if where else first["msg"]
            raise IngestionError(message, row=number) from e
        except ValueError as e:
            raise IngestionError(str(e), row=number) from e

    logger.info("Parsed %d trades", len(trades))
    return trades


def read_trades_text(text: str, **kwargs) -> list[Trade]:
    """Read trades from CSV text."""
    return read_trades_csv(io.StringIO(text), **kwargs)


def read_header(source: Union[str, Path], sample_size: int = 5) -> tuple[list[str], list[list[str]]]:
    """Return the header row and up to ``sample_size`` data rows of a CSV file."""
    with open(source, newline="", encoding="utf-8-sig") as handle:
        reader = csv.reader(handle)
        headers = next(reader, [])
        sample = []
        for row in reader:
            if len(sample) >= sample_size:
                break
            sample.append(row)
    return headers, sample
