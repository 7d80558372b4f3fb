"""Helpers for running OpenAI Agents SDK agents.

Agents are optional: nothing outside ``deltalytix.agents`` and the
``import --ai`` command imports this module.
"""

import logging
import os
from typing import Optional

# Disable tracing to avoid noisy 503 errors from telemetry
os.environ.setdefault("OPENAI_AGENTS_DISABLE_TRACING", "1")

from agents import Agent, Runner
from rich.console import Console

from deltalytix.config import get_setting
from deltalytix.errors import AgentError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

_stderr = Console(stderr=True)


def get_model(config: Optional[dict] = None) -> str:
    """Model name from ``OPENAI_MODEL``, then ``[ai] model``, then the default."""
    return os.environ.get("OPENAI_MODEL") or get_setting("ai", "model", DEFAULT_MODEL, config)


def get_api_key() -> Optional[str]:
    return os.environ.get("OPENAI_API_KEY")


def create_agent(name: str, instructions: str, model: Optional[str] = None) -> Agent:
    """Create a tool-less agent with the given instructions.

    Args:
        name: Name of the agent.
        instructions: System instructions for the agent.
        model: Optional model override.
    """
    return Agent(name=name, instructions=instructions, model=model or get_model())


def run_agent_sync(agent: Agent, message: str) -> str:
    """Run an agent to completion and return its final text output.

    Raises:
        AgentError: If the agent run fails or produces no text.
    """
    _stderr.print(f"[dim]🤖 Agent: {agent.name} | Model: {agent.model}[/dim]")
    logger.debug("Running agent %s with %d character prompt", agent.name, len(message))
    try:
        result = Runner.run_sync(agent, message)
    except Exception as e:
        raise AgentError(f"{agent.name} failed: {e}") from e

    output = result.final_output
    if not isinstance(output, str) or not output.strip():
        raise AgentError(f"{agent.name} returned no answer")
    return output
