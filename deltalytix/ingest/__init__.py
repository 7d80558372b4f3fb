"""Import of trade data from broker exports."""

from deltalytix.ingest.columns import FIELD_ALIASES, REQUIRED_FIELDS, map_columns
from deltalytix.ingest.csv_reader import read_header, read_trades_csv, read_trades_text, row_to_trade

__all__ = [
    "FIELD_ALIASES",
    "REQUIRED_FIELDS",
    "map_columns",
    "read_header",
    "read_trades_csv",
    "read_trades_text",
    "row_to_trade",
]
