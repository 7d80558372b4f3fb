"""Column Mapping Agent for CSV imports.

Asks a model which CSV header holds which trade field when the built-in
aliases do not recognize a broker's export.
"""

import json
import logging
import re
from typing import Optional

from deltalytix.agents.base import create_agent, run_agent_sync
from deltalytix.ingest.columns import FIELD_ALIASES

logger = logging.getLogger(__name__)


COLUMN_MAPPING_INSTRUCTIONS = """You map the columns of a trading CSV export to trade fields.

Trade fields:
- account_number: account identifier
- instrument: traded symbol or contract
- side: trade direction (long/short, buy/sell)
- quantity: number of contracts or units
- entry_price / close_price: prices at entry and exit
- entry_date / close_date: timestamps at entry and exit
- pnl: realized profit or loss of the trade
- commission: fees charged
- time_in_position: holding time

Answer with a single JSON object whose keys are trade fields and whose
values are header names copied exactly from the input. Leave out fields
you cannot find. Do not add any other text.
"""


def parse_mapping_response(text: str, headers: list[str]) -> dict[str, str]:
    """Extract a field -> header mapping from a model response.

    Unknown fields, headers not present in the file, and headers claimed
    by more than one field are dropped.
    """
    match = re.search(r"\{.*\}", text or "", re.DOTALL)
    if not match:
        return {}
    try:
        raw = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.warning("Could not decode mapping response: %s", text)
        return {}
    if not isinstance(raw, dict):
        return {}

    mapping: dict[str, str] = {}
    used: set[str] = set()
    for field, header in raw.items():
        if field in FIELD_ALIASES and isinstance(header, str) and header in headers and header not in used:
            mapping[field] = header
            used.add(header)
    return mapping


class ColumnMappingAgent:
    """Suggests CSV column mappings with an LLM."""

    def __init__(self, model: Optional[str] = None):
        self.agent = create_agent(
            name="ColumnMappingAgent",
            instructions=COLUMN_MAPPING_INSTRUCTIONS,
            model=model,
        )

    def build_prompt(self, headers: list[str], sample_rows: list[list[str]]) -> str:
        lines = [f"Headers: {', '.join(headers)}", "", "Sample rows:"]
        lines += [", ".join(row) for row in sample_rows]
        return "\n".join(lines)

    def suggest(self, headers: list[str], sample_rows: list[list[str]]) -> dict[str, str]:
        """Suggest a field -> header mapping for the given CSV header and sample."""
        response = run_agent_sync(self.agent, self.build_prompt(headers, sample_rows))
        mapping = parse_mapping_response(response, headers)
        logger.info("AI suggested mapping: %s", mapping)
        return mapping
