"""Base utilities for AI agents.

Common helpers for creating and running agents with the OpenAI Agents SDK.
"""

import logging
import os
from typing import Any, Callable, Optional

# Disable tracing to avoid noisy 503 errors from telemetry
os.environ.setdefault("OPENAI_AGENTS_DISABLE_TRACING", "1")

from agents import Agent, Runner

logger = logging.getLogger(__name__)


# Default model to use for agents
DEFAULT_MODEL = "gpt-5.2"


def get_model() -> str:
    """Get the model to use for agents.

    Checks OPENAI_MODEL environment variable, falls back to default.

    Returns:
        Model name string.
    """
    return os.environ.get("OPENAI_MODEL", DEFAULT_MODEL)


def get_api_key() -> Optional[str]:
    """Get the OpenAI API key.

    Returns:
        API key string or None if not configured.
    """
    return os.environ.get("OPENAI_API_KEY")


def create_agent(
    name: str,
    instructions: str,
    tools: Optional[list[Callable[..., Any]]] = None,
    model: Optional[str] = None,
    output_type: Optional[type] = None,
) -> Agent:
    """Create an AI agent with the specified configuration.

    Args:
        name: Name of the agent.
        instructions: System instructions for the agent.
        tools: Optional list of tool functions the agent can use.
        model: Optional model override. Uses default if not specified.
        output_type: Optional pydantic model the final output must match.

    Returns:
        Configured Agent instance.
    """
    return Agent(
        name=name,
        instructions=instructions,
        tools=tools or [],
        model=model or get_model(),
        output_type=output_type,
    )


def _log_agent_call(agent: Agent) -> None:
    logger.info("Agent: %s | Model: %s", agent.name, agent.model)


async def run_agent_async(
    agent: Agent,
    message: str,
    context: Optional[dict[str, Any]] = None,
) -> Any:
    """Run an agent asynchronously and return its final output.

    Args:
        agent: The agent to run.
        message: User message to send to the agent.
        context: Optional context dictionary to pass to the agent.

    Returns:
        The final output: a string, or an ``output_type`` instance.
    """
    _log_agent_call(agent)
    result = await Runner.run(agent, message, context=context)
    return result.final_output
