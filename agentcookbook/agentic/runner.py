"""Session runner shared by the CLI recipes.

Picks an event source (agent service or simulator), runs a SessionConsumer
over it and returns the outcome with a frozen snapshot of the session.

Recipes:
- basic:            list files in a directory and describe them
- review:           free-text code review with Read/Glob/Grep
- review(advanced): structured review with a security-scanner sub-agent
"""

import asyncio
from dataclasses import dataclass
from typing import Any

from loguru import logger

from agentcookbook.agentic.schema import AgentOptions, SubAgentDefinition
from agentcookbook.agentic.source import query_agent
from agentcookbook.agentic.streaming.core import EventCallback, SessionConsumer
from agentcookbook.agentic.streaming.outcome import Outcome
from agentcookbook.agentic.streaming.simulator import stream_scenario
from agentcookbook.agentic.streaming.state import Delegation, ToolInvocation
from agentcookbook.models.review import REVIEW_SCHEMA

BASIC_PROMPT = "What files are in this directory? Briefly describe what you find."

SECURITY_SCANNER = SubAgentDefinition(
    description="Deep security analysis for vulnerabilities",
    prompt="""You are a security expert. Scan for:
- Injection vulnerabilities (SQL, XSS, command injection)
- Authentication and authorization flaws
- Sensitive data exposure (passwords, API keys in code)
- Insecure dependencies
- Missing input validation""",
    tools=["Read", "Grep", "Glob"],
    model="sonnet",
)


def review_prompt(directory: str, *, advanced: bool = False) -> str:
    """Prompt for the code review recipes."""
    if advanced:
        return f"""Perform a thorough code review of {directory}.

Analyze all source files for:
1. Bugs and potential runtime errors
2. Security vulnerabilities
3. Performance issues
4. Code quality and maintainability

Be specific with file paths and line numbers where possible."""

    return f"""Review the code in {directory} for:
1. Bugs and potential crashes
2. Security vulnerabilities
3. Performance issues
4. Code quality improvements

Be specific about file names and line numbers when you find issues."""


def basic_options(**overrides: Any) -> AgentOptions:
    """Options for the basic recipe: Glob and Read only."""
    return AgentOptions(**{"allowed_tools": ["Glob", "Read"], "permission_mode": None, **overrides})


def review_options(*, advanced: bool = False, **overrides: Any) -> AgentOptions:
    """Options for the code review recipes."""
    if not advanced:
        return AgentOptions(**{"allowed_tools": ["Read", "Glob", "Grep"], **overrides})
    return AgentOptions(**{
        "allowed_tools": ["Read", "Glob", "Grep", "Task"],
        "output_contract": REVIEW_SCHEMA,
        "agents": {"security-scanner": SECURITY_SCANNER},
        **overrides,
    })


@dataclass(frozen=True)
class SessionResult:
    """Outcome of a run plus what the consumer observed."""

    outcome: Outcome
    session_id: str | None
    tool_invocations: tuple[ToolInvocation, ...]
    subagent_delegations: tuple[Delegation, ...]
    warnings: tuple[str, ...]
    total_cost_usd: float
    turn_count: int
    text: str
    structured_output: Any = None


async def run_session(
    prompt: str,
    options: AgentOptions,
    *,
    simulate: str | None = None,
    directory: str = ".",
    on_event: EventCallback | None = None,
    cancel: asyncio.Event | None = None,
) -> SessionResult:
    """
    Run one agent session to completion.

    Args:
        prompt: Task for the agent
        options: Session options
        simulate: Simulator scenario name; None uses the agent service
        directory: Directory the simulator names in tool inputs
        on_event: Progress callback, called after each event is applied
        cancel: Optional event to abort between events

    Returns:
        SessionResult with a terminal outcome
    """
    if simulate:
        logger.info(f"Running simulated session: {simulate}")
        source = stream_scenario(simulate, directory)
    else:
        source = query_agent(prompt, options)

    consumer = SessionConsumer(options, on_event=on_event)
    outcome = await consumer.consume(source, cancel=cancel)
    state = consumer.state

    return SessionResult(
        outcome=outcome,
        session_id=state.session_id,
        tool_invocations=state.tracker.snapshot(),
        subagent_delegations=state.subagent_delegations.snapshot(),
        warnings=state.warnings.snapshot(),
        total_cost_usd=state.total_cost_usd,
        turn_count=state.turn_count,
        text=state.get_full_text(),
        structured_output=state.structured_output,
    )
