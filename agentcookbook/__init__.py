"""Agent Cookbook - recipes for consuming a streaming agent session."""

__version__ = "0.1.0"

from agentcookbook.agentic.streaming.core import SessionConsumer
from agentcookbook.agentic.streaming.outcome import FailureKind, Outcome, OutcomeStatus

__all__ = ["SessionConsumer", "Outcome", "OutcomeStatus", "FailureKind"]
