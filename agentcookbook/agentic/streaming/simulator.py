"""
Session Simulator - Scripted Agent Messages for Offline Runs
============================================================

Generates SDK-shaped messages for the cookbook recipes without calling the
agent service. Used by ``cookbook ... --simulate`` and by tests.

Supported scenarios:
- "basic"      - Lists files and describes them (Glob, Read)
- "review"     - Free-text code review (Glob, Read, Grep)
- "structured" - Structured review with a sub-agent delegation (Task)
- "invalid"    - Structured review whose payload breaks the review schema
- "error"      - Upstream failure (error_max_turns)
- "truncated"  - Stream closes without a result message
- "runaway"    - Keeps calling tools and never finishes
- "empty"      - No messages at all

Messages use the same shapes as the agent service:
- {"type": "system", "subtype": "init", "session_id", "tools", "model"}
- {"type": "assistant", "message": {"content": [text | tool_use blocks]}}
- {"type": "result", "subtype", "total_cost_usd", "result", "structured_output"}
"""

import asyncio
import uuid
from typing import Any, AsyncGenerator

from agentcookbook.settings import settings

SCENARIOS = ("basic", "review", "structured", "invalid", "error", "truncated", "runaway", "empty")

SAMPLE_REVIEW = {
    "issues": [
        {
            "severity": "medium",
            "category": "performance",
            "file": "src/cache.py",
            "line": 88,
            "description": "Cache is rebuilt on every request.",
            "suggestion": "Build it once at startup.",
        },
        {
            "severity": "critical",
            "category": "security",
            "file": "src/db.py",
            "line": 42,
            "description": "SQL query built with string formatting from user input.",
            "suggestion": "Use parameterized queries.",
        },
        {
            "severity": "low",
            "category": "style",
            "file": "src/utils.py",
            "description": "Unused import of os.",
        },
        {
            "severity": "high",
            "category": "bug",
            "file": "src/api.py",
            "line": 17,
            "description": "None is dereferenced when the session is missing.",
        },
    ],
    "summary": "Mostly sound code with one injection risk and a null dereference.",
    "overallScore": 72,
}


def _init(tools: list[str], model: str = "opus") -> dict[str, Any]:
    return {
        "type": "system",
        "subtype": "init",
        "session_id": str(uuid.uuid4()),
        "tools": tools,
        "model": model,
    }


def _text(text: str) -> dict[str, Any]:
    return {"type": "assistant", "message": {"content": [{"type": "text", "text": text}]}}


def _tool(name: str, **arguments: Any) -> dict[str, Any]:
    return {
        "type": "assistant",
        "message": {
            "content": [{
                "type": "tool_use",
                "id": f"toolu_{uuid.uuid4().hex[:12]}",
                "name": name,
                "input": arguments,
            }]
        },
    }


def _tool_result(content: str) -> dict[str, Any]:
    # Ignored by the consumer; present so streams look like the real thing
    return {"type": "user", "message": {"content": [{"type": "tool_result", "content": content}]}}


def _result(subtype: str = "success", cost: float = 0.0, **fields: Any) -> dict[str, Any]:
    return {
        "type": "result",
        "subtype": subtype,
        "is_error": subtype != "success",
        "total_cost_usd": cost,
        **fields,
    }


def scenario_messages(scenario: str, directory: str = ".") -> list[dict[str, Any]]:
    """Build the full message list for a scenario."""
    if scenario == "basic":
        return [
            _init(["Glob", "Read"]),
            _text("Let me look at what's in this directory."),
            _tool("Glob", pattern="*"),
            _tool_result("README.md\npyproject.toml\nagentcookbook/"),
            _tool("Read", file_path="README.md"),
            _text("This is a Python project with a README and a package directory."),
            _result(cost=0.0123, result="This is a Python project with a README and a package directory."),
        ]

    if scenario == "review":
        return [
            _init(["Read", "Glob", "Grep"]),
            _tool("Glob", pattern=f"{directory}/**/*.py"),
            _tool("Grep", pattern="execute\\(", path=directory),
            _tool("Read", file_path=f"{directory}/src/db.py"),
            _text("src/db.py:42 builds SQL with string formatting. This is an injection risk."),
            _result(cost=0.0456, result="Found 1 security issue in src/db.py."),
        ]

    if scenario in ("structured", "invalid"):
        payload = dict(SAMPLE_REVIEW)
        if scenario == "invalid":
            payload.pop("summary")
        return [
            _init(["Read", "Glob", "Grep", "Task"]),
            _tool("Glob", pattern=f"{directory}/**/*"),
            _tool("Task", subagent_type="security-scanner", description="Scan for vulnerabilities",
                  prompt="Scan the repository for security issues."),
            _tool("Read", file_path=f"{directory}/src/db.py"),
            _result(cost=0.0789, structured_output=payload),
        ]

    if scenario == "error":
        return [
            _init(["Read"]),
            _tool("Read", file_path=f"{directory}/main.py"),
            _result(subtype="error_max_turns", cost=0.5),
        ]

    if scenario == "truncated":
        return [
            _init(["Read"]),
            _tool("Read", file_path=f"{directory}/main.py"),
        ]

    if scenario == "runaway":
        return [_init(["Read"])] + [
            _tool("Read", file_path=f"{directory}/file_{i}.py") for i in range(1000)
        ]

    if scenario == "empty":
        return []

    raise ValueError(f"Unknown simulator scenario: {scenario!r} (choose from {', '.join(SCENARIOS)})")


async def stream_scenario(
    scenario: str,
    directory: str = ".",
    *,
    delay: float | None = None,
) -> AsyncGenerator[dict[str, Any], None]:
    """Yield a scenario's messages one at a time.

    Args:
        scenario: One of SCENARIOS
        directory: Directory named in tool inputs
        delay: Seconds between messages (default: SIMULATOR__DELAY)
    """
    messages = scenario_messages(scenario, directory)
    pause = settings.simulator.delay if delay is None else delay
    for message in messages:
        if pause:
            await asyncio.sleep(pause)
        yield message
