"""
Pytest configuration and shared fixtures for agentcookbook tests.

Test Organization:
- tests/unit/ - Isolated tests, no agent service calls
"""

import asyncio
from typing import Any, AsyncIterator

import pytest

from agentcookbook.models.review import REVIEW_SCHEMA


class RecordingSource:
    """Async event source that records how far it was read and whether it was closed."""

    def __init__(self, messages: list[Any], *, hang_after: bool = False) -> None:
        self.messages = list(messages)
        self.hang_after = hang_after
        self.yielded = 0
        self.closed = False

    def __aiter__(self) -> AsyncIterator[Any]:
        return self

    async def __anext__(self) -> Any:
        if self.yielded < len(self.messages):
            message = self.messages[self.yielded]
            self.yielded += 1
            return message
        if self.hang_after:
            # Simulates a source that never closes on its own
            await asyncio.Event().wait()
        raise StopAsyncIteration

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def recording_source():
    """Factory for RecordingSource instances."""
    return RecordingSource


@pytest.fixture
def review_schema() -> dict:
    """The code review output contract."""
    return REVIEW_SCHEMA


@pytest.fixture
def sample_review() -> dict:
    """A payload that satisfies the review contract."""
    return {
        "issues": [
            {
                "severity": "high",
                "category": "bug",
                "file": "src/api.py",
                "line": 17,
                "description": "None is dereferenced when the session is missing.",
            },
            {
                "severity": "critical",
                "category": "security",
                "file": "src/db.py",
                "line": 42,
                "description": "SQL injection.",
                "suggestion": "Use parameterized queries.",
            },
        ],
        "summary": "Two issues found.",
        "overallScore": 80,
    }
