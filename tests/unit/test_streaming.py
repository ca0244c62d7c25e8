"""
Unit tests for streaming utilities.

Tests SDK message normalization, tool argument extraction and the
session state containers.

MESSAGE FORMATS
---------------
The agent service streams messages as dicts or SDK dataclass objects:
- system/init   -> InitEvent
- assistant     -> TextEvent / ToolCallEvent / DelegationEvent per block
- result        -> ResultEvent
- anything else -> no events
"""

from dataclasses import dataclass, field
from typing import Any

import pytest

from agentcookbook.agentic.streaming.events import (
    DelegationEvent,
    InitEvent,
    ResultEvent,
    TextEvent,
    ToolCallEvent,
    parse_event,
)
from agentcookbook.agentic.streaming.handlers import (
    extract_tool_args,
    normalize_message,
    summarize_tool_input,
)
from agentcookbook.agentic.streaming.outcome import FailureKind, Outcome
from agentcookbook.agentic.streaming.state import (
    AppendOnlyLog,
    CostAccumulator,
    SessionState,
    ToolUsageTracker,
)


# Stand-ins shaped like the SDK's message dataclasses
@dataclass
class SystemMessage:
    subtype: str
    data: dict


@dataclass
class TextBlock:
    text: str


@dataclass
class ToolUseBlock:
    id: str
    name: str
    input: dict


@dataclass
class AssistantMessage:
    content: list
    model: str = "opus"


@dataclass
class ResultMessage:
    subtype: str
    is_error: bool
    num_turns: int
    session_id: str
    total_cost_usd: float | None = None
    result: str | None = None
    structured_output: Any = None
    usage: dict = field(default_factory=dict)


class TestExtractToolArgs:
    """Tests for extract_tool_args function."""

    def test_none_args_returns_empty_dict(self):
        assert extract_tool_args(None) == {}

    def test_plain_dict_returns_dict(self):
        args = {"pattern": "*.py"}
        assert extract_tool_args(args) == args

    def test_json_string_parses_to_dict(self):
        assert extract_tool_args('{"file_path": "a.py"}') == {"file_path": "a.py"}

    def test_whitespace_string_returns_empty_dict(self):
        assert extract_tool_args("   ") == {}

    def test_invalid_json_returns_raw_wrapper(self):
        assert extract_tool_args("not valid json") == {"raw": "not valid json"}

    def test_block_object_extracts_input(self):
        block = ToolUseBlock(id="t1", name="Read", input={"file_path": "a.py"})
        assert extract_tool_args(block) == {"file_path": "a.py"}


class TestSummarizeToolInput:
    """Human-readable tool context."""

    @pytest.mark.parametrize(
        "tool_name,args,expected",
        [
            ("Read", {"file_path": "src/a.py"}, "src/a.py"),
            ("Read", {}, "file"),
            ("Glob", {"pattern": "**/*.ts"}, "**/*.ts"),
            ("Glob", None, "pattern"),
            ("Grep", {"pattern": "TODO", "path": "src"}, '"TODO" in src'),
            ("Grep", {"pattern": "TODO"}, '"TODO" in .'),
            ("Bash", {"command": "ls -la"}, "ls -la"),
            ("Bash", {"cmd": "pwd"}, "pwd"),
            ("Task", {"subagent_type": "security-scanner"}, "security-scanner"),
            ("WebFetch", {"url": "https://example.com"}, ""),
        ],
    )
    def test_summaries(self, tool_name, args, expected):
        assert summarize_tool_input(tool_name, args) == expected


class TestNormalizeDictMessages:
    """SDK-shaped dict messages."""

    def test_system_init(self):
        events = normalize_message({
            "type": "system",
            "subtype": "init",
            "session_id": "abc",
            "tools": ["Read", "Glob"],
            "model": "opus",
        })

        assert events == [InitEvent(session_id="abc", tools=["Read", "Glob"], model="opus")]

    def test_other_system_messages_ignored(self):
        assert normalize_message({"type": "system", "subtype": "compact_boundary"}) == []

    def test_assistant_blocks_in_order(self):
        events = normalize_message({
            "type": "assistant",
            "message": {"content": [
                {"type": "text", "text": "Reading."},
                {"type": "tool_use", "id": "t1", "name": "Read", "input": {"file_path": "a.py"}},
                {"type": "thinking", "thinking": "hmm"},
                {"type": "tool_use", "id": "t2", "name": "Task", "input": {"subagent_type": "security-scanner"}},
            ]},
        })

        assert [type(e) for e in events] == [TextEvent, ToolCallEvent, DelegationEvent]
        assert events[1].arguments == {"file_path": "a.py"}
        assert events[2].subagent_type == "security-scanner"
        assert events[2].tool_id == "t2"

    def test_delegation_without_subagent_type(self):
        events = normalize_message({
            "type": "assistant",
            "message": {"content": [{"type": "tool_use", "id": "t1", "name": "Task", "input": {}}]},
        })

        assert events[0].subagent_type == "general-purpose"

    def test_blocks_without_type_field(self):
        events = normalize_message({
            "type": "assistant",
            "message": {"content": [{"text": "hi"}, {"name": "Glob", "input": {"pattern": "*"}}]},
        })

        assert [e.type for e in events] == ["text", "tool_call"]

    def test_result(self):
        events = normalize_message({
            "type": "result",
            "subtype": "success",
            "total_cost_usd": 0.0123,
            "result": "done",
            "num_turns": 3,
        })

        assert len(events) == 1
        assert isinstance(events[0], ResultEvent)
        assert events[0].succeeded
        assert events[0].total_cost_usd == 0.0123

    def test_user_messages_ignored(self):
        assert normalize_message({"type": "user", "message": {"content": []}}) == []

    def test_flat_events_pass_through(self):
        event = TextEvent(text="x")
        assert normalize_message(event) == [event]
        assert normalize_message({"type": "text", "text": "y"}) == [TextEvent(text="y")]

    def test_malformed_result_raises_value_error(self):
        with pytest.raises(ValueError):
            normalize_message({"type": "result", "subtype": "success", "total_cost_usd": -1})


class TestNormalizeSdkObjects:
    """SDK dataclass messages."""

    def test_system_message_object(self):
        events = normalize_message(SystemMessage(
            subtype="init",
            data={"session_id": "abc", "tools": ["Read"], "model": "sonnet"},
        ))

        assert events == [InitEvent(session_id="abc", tools=["Read"], model="sonnet")]

    def test_assistant_message_object(self):
        events = normalize_message(AssistantMessage(content=[
            TextBlock(text="Let me look."),
            ToolUseBlock(id="t1", name="Glob", input={"pattern": "*.py"}),
        ]))

        assert events == [
            TextEvent(text="Let me look."),
            ToolCallEvent(tool_name="Glob", tool_id="t1", arguments={"pattern": "*.py"}),
        ]

    def test_result_message_object(self):
        events = normalize_message(ResultMessage(
            subtype="error_max_turns",
            is_error=True,
            num_turns=250,
            session_id="abc",
            total_cost_usd=None,
        ))

        assert events[0].subtype == "error_max_turns"
        assert not events[0].succeeded
        assert events[0].total_cost_usd == 0.0


class TestParseEvent:
    """Discriminated union parsing."""

    def test_parse_each_variant(self):
        assert isinstance(parse_event({"type": "init", "session_id": "s"}), InitEvent)
        assert isinstance(parse_event({"type": "text", "text": "t"}), TextEvent)
        assert isinstance(parse_event({"type": "tool_call", "tool_name": "Read"}), ToolCallEvent)
        assert isinstance(parse_event({"type": "delegation", "subagent_type": "x"}), DelegationEvent)
        assert isinstance(parse_event({"type": "result"}), ResultEvent)

    def test_unknown_type_rejected(self):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            parse_event({"type": "progress"})


class TestAppendOnlyLog:
    """Append-only container."""

    def test_append_and_snapshot(self):
        log: AppendOnlyLog[str] = AppendOnlyLog()
        log.append("a")
        snapshot = log.snapshot()
        log.append("b")

        assert snapshot == ("a",)
        assert log.snapshot() == ("a", "b")
        assert len(log) == 2
        assert log[1] == "b"
        assert list(log) == ["a", "b"]

    def test_no_mutation_api(self):
        log: AppendOnlyLog[str] = AppendOnlyLog()
        log.append("a")

        with pytest.raises(TypeError):
            log[0] = "z"  # type: ignore[index]
        with pytest.raises(TypeError):
            del log[0]  # type: ignore[attr-defined]
        assert not hasattr(log, "pop")


class TestToolUsageTracker:
    """Tool invocation log."""

    def test_record_preserves_order(self):
        tracker = ToolUsageTracker()
        tracker.record("Read", "a.py")
        tracker.record("Glob", "*.py")

        assert tracker.count == 2
        assert [(t.tool_name, t.args_summary) for t in tracker.snapshot()] == [
            ("Read", "a.py"),
            ("Glob", "*.py"),
        ]

    def test_snapshot_is_frozen(self):
        tracker = ToolUsageTracker()
        tracker.record("Read")
        snapshot = tracker.snapshot()
        tracker.record("Glob")

        assert len(snapshot) == 1
        assert tracker.count == 2


class TestCostAccumulator:
    """Turn counting and cost."""

    def test_turns_and_ceiling(self):
        metrics = CostAccumulator()
        for _ in range(3):
            metrics.add_turn()

        assert not metrics.exceeds(3)
        metrics.add_turn()
        assert metrics.exceeds(3)
        assert not metrics.exceeds(None)

    def test_cost_never_decreases(self):
        metrics = CostAccumulator()
        metrics.record_cost(0.05)
        metrics.record_cost(0.01)

        assert metrics.total_cost_usd == 0.05

    def test_negative_cost_rejected(self):
        with pytest.raises(ValueError):
            CostAccumulator().record_cost(-0.01)


class TestSessionState:
    """Outcome transitions."""

    def test_starts_pending(self):
        state = SessionState()

        assert not state.outcome.is_terminal
        assert not state.terminated

    def test_outcome_set_once(self):
        state = SessionState()
        state.set_outcome(Outcome.success("ok"))

        with pytest.raises(RuntimeError):
            state.set_outcome(Outcome.failed(FailureKind.NO_EVENTS))

        assert state.outcome.payload == "ok"

    def test_pending_outcome_rejected(self):
        with pytest.raises(ValueError):
            SessionState().set_outcome(Outcome.pending())

    def test_initialize(self):
        state = SessionState()
        state.initialize("s1", ["Read", "Read", "Glob"], model="opus")

        assert state.available_tools == frozenset({"Read", "Glob"})
        assert state.initialized
