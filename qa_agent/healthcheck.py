"""Agent health checks. Ping each agent before starting a collaboration."""

import asyncio
import logging

from qa_agent.models import AgentSpec
from qa_agent.strategies import Caller

logger = logging.getLogger(__name__)

_PING_PROMPT = "Reply with the word OK only."


async def _check_one(caller: Caller, agent: AgentSpec) -> tuple[str, bool, str]:
    """Ping a single agent. Returns (label, ok, error_message)."""
    result = await caller.call(agent, _PING_PROMPT)
    if result.success:
        return agent.label, True, ""
    return agent.label, False, result.error or "unknown error"


async def run_health_checks(
    caller: Caller,
    agents: list[AgentSpec],
) -> dict[str, tuple[bool, str]]:
    """Ping all agents in parallel.

    Returns:
        Dict mapping agent label -> (ok, error_message).
        error_message is "" when ok is True.
    """
    results = await asyncio.gather(*(_check_one(caller, a) for a in agents))
    for label, ok, err in results:
        if not ok:
            logger.debug("Health check failed for %s: %s", label, err)
    return {label: (ok, err) for label, ok, err in results}
