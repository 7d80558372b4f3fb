"""AI agents for Deltalytix.

- ColumnMappingAgent: suggests how CSV headers map to trade fields
"""

from deltalytix.agents.base import (
    create_agent,
    run_agent_sync,
    get_model,
    get_api_key,
)
from deltalytix.agents.mapper import ColumnMappingAgent, parse_mapping_response

__all__ = [
    "create_agent",
    "run_agent_sync",
    "get_model",
    "get_api_key",
    "ColumnMappingAgent",
    "parse_mapping_response",
]
