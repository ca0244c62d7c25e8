"""Message normalization for streaming.

Handles:
- SDK messages (dicts or SDK message objects) -> flat session events
- Tool argument extraction
- Human-readable tool input summaries

SDK MESSAGE SHAPES
------------------
The agent service streams three kinds of messages we care about:

| Message            | Shape                                          | Events produced            |
|--------------------|------------------------------------------------|----------------------------|
| system / init      | session_id, tools (object form: .data dict)    | InitEvent                  |
| assistant          | message.content = [text | tool_use blocks]     | TextEvent, ToolCallEvent   |
| result             | subtype, total_cost_usd, result, structured... | ResultEvent                |

Everything else (user tool results, non-init system messages, thinking
blocks) produces no events.

DELEGATION
----------
A tool_use block naming the delegation primitive (``Task``) is decoded
once, here, into a DelegationEvent carrying ``subagent_type``.
"""

import json
from typing import Any

from loguru import logger
from pydantic import BaseModel, ValidationError

from agentcookbook.agentic.streaming.events import (
    DELEGATION_TOOL,
    DelegationEvent,
    InitEvent,
    ResultEvent,
    SessionEvent,
    TextEvent,
    ToolCallEvent,
    parse_event,
)

# Sub-agent the service uses when a delegation names none
DEFAULT_SUBAGENT = "general-purpose"

_FLAT_TYPES = {"init", "text", "tool_call", "delegation"}

_MESSAGE_CLASSES = {
    "SystemMessage": "system",
    "AssistantMessage": "assistant",
    "UserMessage": "user",
    "ResultMessage": "result",
}


def extract_tool_args(block_or_args: Any) -> dict:
    """Extract tool arguments from a tool_use block or raw input.

    Handles:
    - Block object with .input attribute
    - Plain dict
    - JSON string
    - None
    """
    args = getattr(block_or_args, "input", block_or_args)

    if args is None:
        return {}

    if isinstance(args, dict):
        return args

    if isinstance(args, str):
        if not args.strip():
            return {}
        try:
            parsed = json.loads(args)
        except json.JSONDecodeError:
            return {"raw": args}
        return parsed if isinstance(parsed, dict) else {"raw": parsed}

    return {}


def summarize_tool_input(tool_name: str, arguments: dict | None) -> str:
    """Human-readable context for a tool call (what the agent is doing)."""
    args = arguments or {}
    if tool_name == "Read":
        return args.get("file_path") or "file"
    if tool_name == "Glob":
        return args.get("pattern") or "pattern"
    if tool_name == "Grep":
        return f'"{args.get("pattern", "")}" in {args.get("path") or "."}'
    if tool_name == "Bash":
        return args.get("command") or args.get("cmd") or ""
    if tool_name == DELEGATION_TOOL:
        return args.get("subagent_type") or DEFAULT_SUBAGENT
    return ""


def classify_tool_call(
    tool_name: str,
    arguments: dict | None = None,
    tool_id: str | None = None,
) -> ToolCallEvent | DelegationEvent:
    """Build the tool call variant, decoding the delegation primitive."""
    args = arguments or {}
    if tool_name == DELEGATION_TOOL:
        return DelegationEvent(
            tool_name=tool_name,
            tool_id=tool_id,
            arguments=args,
            subagent_type=args.get("subagent_type") or DEFAULT_SUBAGENT,
        )
    return ToolCallEvent(tool_name=tool_name, tool_id=tool_id, arguments=args)


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _message_kind(message: Any) -> str | None:
    if isinstance(message, dict):
        return message.get("type")
    return _MESSAGE_CLASSES.get(type(message).__name__) or getattr(message, "type", None)


def _content_blocks(message: Any) -> list:
    # Dict form nests content under "message"; SDK objects expose .content
    inner = _get(message, "message")
    content = _get(inner, "content") if inner is not None else _get(message, "content")
    if isinstance(content, str):
        return [{"type": "text", "text": content}]
    return list(content or [])


def _block_to_event(block: Any) -> SessionEvent | None:
    block_type = _get(block, "type")
    if block_type is None and not isinstance(block, dict):
        block_type = {"TextBlock": "text", "ToolUseBlock": "tool_use"}.get(type(block).__name__)

    text = _get(block, "text")
    if block_type == "text" or (block_type is None and text is not None):
        return TextEvent(text=text or "")

    name = _get(block, "name")
    if block_type == "tool_use" or (block_type is None and name is not None):
        return classify_tool_call(name, extract_tool_args(_get(block, "input")), _get(block, "id"))

    return None


def _init_event(message: Any) -> InitEvent:
    # SDK objects carry init fields in .data
    data = _get(message, "data")
    source = data if isinstance(data, dict) else message
    return InitEvent(
        session_id=str(_get(source, "session_id") or ""),
        tools=list(_get(source, "tools") or []),
        model=_get(source, "model"),
    )


def _result_event(message: Any) -> ResultEvent:
    return ResultEvent(
        subtype=_get(message, "subtype") or "success",
        is_error=bool(_get(message, "is_error", False)),
        result=_get(message, "result"),
        structured_output=_get(message, "structured_output"),
        total_cost_usd=_get(message, "total_cost_usd") or 0.0,
        num_turns=_get(message, "num_turns"),
        session_id=_get(message, "session_id"),
    )


def normalize_message(message: Any) -> list[SessionEvent]:
    """Convert one streamed message into zero or more session events.

    Accepts SDK-shaped dicts, SDK message objects, already-flat event
    dicts, and event models (passed through unchanged).

    Raises:
        ValueError: if a message claims a known type but is malformed
    """
    if isinstance(message, BaseModel) and getattr(message, "type", None) in _FLAT_TYPES | {"result"}:
        return [message]  # type: ignore[list-item]

    kind = _message_kind(message)

    if kind == "tool_call" and isinstance(message, dict):
        return [classify_tool_call(
            message.get("tool_name", ""),
            extract_tool_args(message.get("arguments")),
            message.get("tool_id"),
        )]

    if kind in _FLAT_TYPES and isinstance(message, dict):
        try:
            return [parse_event(message)]
        except ValidationError as e:
            raise ValueError(f"Malformed {kind} event: {e}") from e

    if kind == "system":
        if _get(message, "subtype") == "init":
            return [_init_event(message)]
        logger.debug(f"Ignoring system message: {_get(message, 'subtype')}")
        return []

    if kind == "assistant":
        events = []
        for block in _content_blocks(message):
            event = _block_to_event(block)
            if event is not None:
                events.append(event)
        return events

    if kind == "result":
        try:
            return [_result_event(message)]
        except ValidationError as e:
            raise ValueError(f"Malformed result message: {e}") from e

    logger.debug(f"Ignoring message of type {kind!r}")
    return []
