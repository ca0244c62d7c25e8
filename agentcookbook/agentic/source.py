"""Event source backed by the agent service.

Wraps ``claude_agent_sdk.query`` (install with ``pip install
agent-cookbook[sdk]``). The SDK runs the agent, executes its tools and
streams messages; the SessionConsumer only reads them.
"""

from typing import Any, AsyncIterator

from loguru import logger

from agentcookbook.agentic.schema import AgentOptions
from agentcookbook.exceptions import CookbookError


def build_sdk_options(options: AgentOptions) -> Any:
    """Map AgentOptions onto the SDK's ClaudeAgentOptions."""
    try:
        from claude_agent_sdk import AgentDefinition, ClaudeAgentOptions
    except ImportError as e:
        raise CookbookError(
            "claude-agent-sdk is not installed. "
            "Install it with: pip install 'agent-cookbook[sdk]' "
            "(or run with --simulate)"
        ) from e

    kwargs: dict[str, Any] = {
        "model": options.model,
        "allowed_tools": list(options.allowed_tools),
        "max_turns": options.max_turns,
    }
    if options.permission_mode:
        kwargs["permission_mode"] = options.permission_mode
    if options.cwd:
        kwargs["cwd"] = options.cwd
    if options.agents:
        kwargs["agents"] = {
            name: AgentDefinition(
                description=definition.description,
                prompt=definition.prompt,
                tools=list(definition.tools) or None,
                model=definition.model,
            )
            for name, definition in options.agents.items()
        }
    contract = options.contract()
    if contract is not None:
        kwargs["output_format"] = contract.to_output_format()

    return ClaudeAgentOptions(**kwargs)


def query_agent(prompt: str, options: AgentOptions) -> AsyncIterator[Any]:
    """Stream SDK messages for one session.

    Options are mapped eagerly so a missing SDK fails before streaming starts.

    Args:
        prompt: Task for the agent
        options: Session options

    Returns:
        Async iterator of SDK message objects (SystemMessage,
        AssistantMessage, ResultMessage, ...)
    """
    sdk_options = build_sdk_options(options)
    logger.debug(f"Starting agent session: model={options.model}, tools={options.allowed_tools}")
    return _stream(prompt, sdk_options)


async def _stream(prompt: str, sdk_options: Any) -> AsyncIterator[Any]:
    from claude_agent_sdk import query

    async for message in query(prompt=prompt, options=sdk_options):
        yield message
