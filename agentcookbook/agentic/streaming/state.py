"""Session state management."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, Iterator, TypeVar

from agentcookbook.agentic.streaming.outcome import Outcome

T = TypeVar("T")


class AppendOnlyLog(Generic[T]):
    """Ordered log that only supports appending.

    Entries keep arrival order and are never replaced or removed.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[T] = []

    def append(self, item: T) -> None:
        self._items.append(item)

    def snapshot(self) -> tuple[T, ...]:
        """Read-only copy of the entries so far."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __repr__(self) -> str:
        return f"AppendOnlyLog({self._items!r})"


@dataclass(frozen=True)
class ToolInvocation:
    """One recorded tool call."""

    tool_name: str
    args_summary: str = ""
    tool_id: str | None = None


@dataclass(frozen=True)
class Delegation:
    """One recorded hand-off to a sub-agent."""

    subagent_name: str
    parent_tool_call_id: str | None = None


class ToolUsageTracker:
    """Running count and ordered log of tool invocations."""

    def __init__(self) -> None:
        self._log: AppendOnlyLog[ToolInvocation] = AppendOnlyLog()

    def record(self, tool_name: str, args_summary: str = "", tool_id: str | None = None) -> None:
        self._log.append(ToolInvocation(tool_name, args_summary, tool_id))

    @property
    def count(self) -> int:
        return len(self._log)

    @property
    def log(self) -> AppendOnlyLog[ToolInvocation]:
        return self._log

    def snapshot(self) -> tuple[ToolInvocation, ...]:
        return self._log.snapshot()


@dataclass
class CostAccumulator:
    """Turn counter and final cost for one session.

    Cost comes only from the terminal event; intermediate events
    carry no partial cost.
    """

    turn_count: int = 0
    total_cost_usd: float = 0.0

    def add_turn(self) -> int:
        self.turn_count += 1
        return self.turn_count

    def record_cost(self, total_cost_usd: float) -> None:
        if total_cost_usd < 0:
            raise ValueError(f"total_cost_usd must be non-negative, got {total_cost_usd}")
        # Never decreases
        self.total_cost_usd = max(self.total_cost_usd, total_cost_usd)

    def exceeds(self, max_turns: int | None) -> bool:
        return max_turns is not None and self.turn_count > max_turns


@dataclass
class SessionState:
    """Tracks state during one session.

    Maintains everything the consumer learns from the event stream:
    - Session identification and declared tools
    - Tool invocations and sub-agent delegations
    - Accumulated text fragments
    - Cost and turn metrics
    - The outcome
    """

    session_id: str | None = None
    model: str | None = None
    started_at: float = field(default_factory=lambda: datetime.now(timezone.utc).timestamp())

    available_tools: frozenset[str] = frozenset()
    tracker: ToolUsageTracker = field(default_factory=ToolUsageTracker)
    subagent_delegations: AppendOnlyLog[Delegation] = field(default_factory=AppendOnlyLog)
    accumulated_text: AppendOnlyLog[str] = field(default_factory=AppendOnlyLog)
    warnings: AppendOnlyLog[str] = field(default_factory=AppendOnlyLog)
    metrics: CostAccumulator = field(default_factory=CostAccumulator)

    structured_output: Any = None
    outcome: Outcome = field(default_factory=Outcome.pending)

    initialized: bool = False
    terminated: bool = False
    events_seen: int = 0

    @property
    def tool_invocations(self) -> AppendOnlyLog[ToolInvocation]:
        return self.tracker.log

    @property
    def total_cost_usd(self) -> float:
        return self.metrics.total_cost_usd

    @property
    def turn_count(self) -> int:
        return self.metrics.turn_count

    def initialize(self, session_id: str, tools: list[str], model: str | None = None) -> None:
        """Set session identity and the declared tool set (once)."""
        self.session_id = session_id
        self.available_tools = frozenset(tools)
        self.model = model
        self.initialized = True

    def append_text(self, text: str) -> None:
        self.accumulated_text.append(text)

    def get_full_text(self) -> str:
        """All accumulated text in arrival order."""
        return "".join(self.accumulated_text)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def set_outcome(self, outcome: Outcome) -> None:
        """Move from pending to a terminal outcome exactly once."""
        if self.outcome.is_terminal:
            raise RuntimeError(
                f"Session outcome already {self.outcome.status.value}; cannot set it twice"
            )
        if not outcome.is_terminal:
            raise ValueError("Outcome must be terminal")
        self.outcome = outcome
        self.terminated = True

    def latency_ms(self) -> int:
        """Milliseconds since the session started."""
        return int((datetime.now(timezone.utc).timestamp() - self.started_at) * 1000)
