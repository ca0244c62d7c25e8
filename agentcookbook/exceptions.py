"""Cookbook exception hierarchy.

All cookbook-specific exceptions inherit from CookbookError. The session
consumer raises them internally and converts them into an Outcome before
returning to the caller.
"""

from typing import Any


class CookbookError(Exception):
    """Base exception for all cookbook errors."""


class ProtocolError(CookbookError):
    """Raised when the event sequence violates session ordering.

    Covers a repeated init event, a first event that is not init,
    a result before init, and any event after the result.
    """


class SchemaViolation(CookbookError):
    """Raised when a structured payload fails its output contract.

    Named SchemaViolation (not ValidationError) to avoid
    collision with pydantic.ValidationError.
    """

    def __init__(self, details: list[dict[str, Any]]) -> None:
        self.details = details
        summary = "; ".join(
            f"{'.'.join(str(p) for p in d.get('loc', ())) or '<root>'}: {d.get('msg', 'invalid')}"
            for d in details
        )
        super().__init__(f"Structured output violates contract: {summary}")


class TurnLimitExceeded(CookbookError):
    """Raised when tool invocations exceed the configured max_turns."""

    def __init__(self, turn_count: int, max_turns: int) -> None:
        self.turn_count = turn_count
        self.max_turns = max_turns
        super().__init__(
            f"Turn limit exceeded: {turn_count} tool invocations "
            f"(max: {max_turns})"
        )
