"""Session outcome values.

A session's outcome starts ``pending`` and moves exactly once to
``success`` or ``failure``. Callers branch on ``Outcome.status`` and
``Outcome.failure`` rather than on exception types.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class OutcomeStatus(str, Enum):
    """Lifecycle states of a session outcome."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class FailureKind(str, Enum):
    """Why a session failed."""

    PROTOCOL_ERROR = "protocol_error"
    SCHEMA_VIOLATION = "schema_violation"
    UPSTREAM_FAILURE = "upstream_failure"
    TURN_LIMIT_EXCEEDED = "turn_limit_exceeded"
    NO_EVENTS = "no_events"
    STREAM_CLOSED_EARLY = "stream_closed_early"
    CANCELLED = "cancelled"


class Outcome(BaseModel):
    """Final (or pending) result of one session."""

    status: OutcomeStatus = OutcomeStatus.PENDING
    payload: Any = None
    failure: FailureKind | None = None
    detail: str | None = None
    # Upstream failure subtype, passed through verbatim
    subtype: str | None = None
    # Validation errors for SCHEMA_VIOLATION
    errors: list[dict[str, Any]] | None = None

    model_config = {"frozen": True}

    @classmethod
    def pending(cls) -> "Outcome":
        return cls()

    @classmethod
    def success(cls, payload: Any) -> "Outcome":
        return cls(status=OutcomeStatus.SUCCESS, payload=payload)

    @classmethod
    def failed(
        cls,
        kind: FailureKind,
        detail: str | None = None,
        *,
        subtype: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> "Outcome":
        return cls(
            status=OutcomeStatus.FAILURE,
            failure=kind,
            detail=detail,
            subtype=subtype,
            errors=errors,
        )

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def is_terminal(self) -> bool:
        return self.status != OutcomeStatus.PENDING

    @property
    def reason(self) -> str:
        """Short label for console output: subtype for upstream failures,
        otherwise the failure kind."""
        if self.status == OutcomeStatus.SUCCESS:
            return "success"
        if self.failure == FailureKind.UPSTREAM_FAILURE and self.subtype:
            return self.subtype
        if self.failure is not None:
            return self.failure.value
        return "pending"
