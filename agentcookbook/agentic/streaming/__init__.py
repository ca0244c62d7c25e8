"""Streaming module for agent sessions.

Components:
- events.py: Session event variants (Pydantic models)
- handlers.py: SDK message normalization, tool input summaries
- state.py: SessionState, tool usage tracker, cost accumulator
- outcome.py: Outcome values
- finalizer.py: Terminal result -> Outcome
- core.py: SessionConsumer (classifier and streaming loop)
- formatters.py: Console formatting
- simulator.py: Scripted messages for offline runs
"""

from agentcookbook.agentic.streaming.core import SessionConsumer
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
from agentcookbook.agentic.streaming.finalizer import finalize
from agentcookbook.agentic.streaming.handlers import (
    extract_tool_args,
    normalize_message,
    summarize_tool_input,
)
from agentcookbook.agentic.streaming.outcome import FailureKind, Outcome, OutcomeStatus
from agentcookbook.agentic.streaming.state import (
    AppendOnlyLog,
    CostAccumulator,
    Delegation,
    SessionState,
    ToolInvocation,
    ToolUsageTracker,
)

__all__ = [
    # Consumer
    "SessionConsumer",
    "finalize",
    # Event types
    "DELEGATION_TOOL",
    "InitEvent",
    "TextEvent",
    "ToolCallEvent",
    "DelegationEvent",
    "ResultEvent",
    "SessionEvent",
    "parse_event",
    # Normalization
    "normalize_message",
    "extract_tool_args",
    "summarize_tool_input",
    # Outcome
    "Outcome",
    "OutcomeStatus",
    "FailureKind",
    # State
    "SessionState",
    "AppendOnlyLog",
    "ToolUsageTracker",
    "CostAccumulator",
    "ToolInvocation",
    "Delegation",
]
