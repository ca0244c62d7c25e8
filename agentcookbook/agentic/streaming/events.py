"""Session event types consumed by the SessionConsumer.

All events are Pydantic models discriminated on the ``type`` field, so the
classifier can match on the variant instead of inspecting raw dicts.
SDK-shaped messages are converted into these variants by
``handlers.normalize_message``.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

# Reserved tool name the agent uses to delegate work to a named sub-agent
DELEGATION_TOOL = "Task"


class InitEvent(BaseModel):
    """Session initialization (system/init). Must be the first event."""

    type: Literal["init"] = "init"
    session_id: str
    tools: list[str] = Field(default_factory=list)
    model: str | None = None


class TextEvent(BaseModel):
    """Reasoning or response text fragment from the assistant."""

    type: Literal["text"] = "text"
    text: str


class ToolCallEvent(BaseModel):
    """The assistant invoked a tool."""

    type: Literal["tool_call"] = "tool_call"
    tool_name: str
    tool_id: str | None = None
    arguments: dict[str, Any] = Field(default_factory=dict)


class DelegationEvent(BaseModel):
    """The assistant invoked the delegation primitive for a sub-agent.

    Counted as a tool invocation as well as a delegation.
    """

    type: Literal["delegation"] = "delegation"
    tool_name: str = DELEGATION_TOOL
    tool_id: str | None = None
    arguments: dict[str, Any] = Field(default_factory=dict)
    subagent_type: str


class ResultEvent(BaseModel):
    """Terminal event. ``subtype == "success"`` marks a successful run;
    any other subtype is an upstream failure reported verbatim."""

    type: Literal["result"] = "result"
    subtype: str = "success"
    is_error: bool = False
    result: str | None = None
    structured_output: Any = None
    total_cost_usd: float = Field(default=0.0, ge=0.0)
    num_turns: int | None = None
    session_id: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.subtype == "success" and not self.is_error


SessionEvent = Annotated[
    Union[InitEvent, TextEvent, ToolCallEvent, DelegationEvent, ResultEvent],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter = TypeAdapter(SessionEvent)


def parse_event(data: dict[str, Any]) -> SessionEvent:
    """Validate a flat event dict into its SessionEvent variant."""
    return _event_adapter.validate_python(data)
