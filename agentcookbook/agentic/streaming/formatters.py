"""Console formatting functions.

Converts session events and outcomes into the human-readable lines the
cookbook recipes print. Cost is formatted here (4 decimals) and nowhere
else; the consumer keeps the raw figure.
"""

from typing import Iterable

from agentcookbook.agentic.streaming.events import (
    DelegationEvent,
    InitEvent,
    SessionEvent,
    TextEvent,
    ToolCallEvent,
)
from agentcookbook.agentic.streaming.handlers import summarize_tool_input
from agentcookbook.agentic.streaming.outcome import Outcome
from agentcookbook.agentic.streaming.state import SessionState
from agentcookbook.models.review import ReviewResult, group_by_severity

RULE = "=" * 50

SEVERITY_ICONS = {
    "critical": "🔴",
    "high": "🟠",
    "medium": "🟡",
    "low": "🟢",
}

API_KEY_HINT = """
💡 Tip: Set your API key using one of these methods:
   1. Create a .env file with: ANTHROPIC_API_KEY=sk-ant-api03-...
   2. Export in shell: export ANTHROPIC_API_KEY=sk-ant-api03-...
   3. Use Anthropic CLI: anthropic configure

Get your key at: https://console.anthropic.com/settings/keys"""


def format_banner(title: str, directory: str | None = None) -> str:
    """Header block printed before a run."""
    lines = ["", RULE, title]
    if directory is not None:
        lines.append(f"📁 Directory: {directory}")
    lines.extend([RULE, ""])
    return "\n".join(lines)


def format_cost(total_cost_usd: float) -> str:
    return f"${total_cost_usd:.4f}"


def format_event(event: SessionEvent, state: SessionState, *, verbose_tools: bool = True) -> str | None:
    """Progress line for one event, or None if nothing should be printed.

    Args:
        event: The event just applied
        state: Session state after applying it
        verbose_tools: Show tool input summaries instead of a numbered counter
    """
    if isinstance(event, InitEvent):
        return (
            f"📋 Session ID: {event.session_id}\n"
            f"🛠️  Available tools: {', '.join(event.tools)}\n"
        )

    if isinstance(event, TextEvent):
        return f"💭 {event.text}" if verbose_tools else event.text

    if isinstance(event, DelegationEvent):
        return f"🤖 Delegating to sub-agent: {event.subagent_type}"

    if isinstance(event, ToolCallEvent):
        if not verbose_tools:
            return f"\n[Tool {state.tracker.count}] {event.tool_name}"
        summary = summarize_tool_input(event.tool_name, event.arguments)
        return f"🔧 {event.tool_name}: {summary}" if summary else f"🔧 Using tool: {event.tool_name}"

    return None


def format_outcome(
    outcome: Outcome,
    *,
    tool_count: int,
    total_cost_usd: float,
    warnings: Iterable[str] = (),
    label: str = "Done",
) -> str:
    """Completion line(s) with status, tool count and cost."""
    warnings = list(warnings)
    if outcome.is_success:
        lines = [
            f"✅ {label} complete!",
            f"🔧 Tools used: {tool_count}",
            f"💰 Cost: {format_cost(total_cost_usd)}",
        ]
    else:
        lines = [f"❌ {label} failed: {outcome.reason}"]
        if outcome.detail:
            lines.append(f"   {outcome.detail}")
    if warnings:
        lines.append(f"⚠️  Warnings: {len(warnings)}")
        lines.extend(f"   - {w}" for w in warnings)
    return "\n".join(lines)


def format_review(result: ReviewResult) -> str:
    """Review report, issues grouped by severity (most critical first)."""
    lines = [
        "",
        RULE,
        "📊 REVIEW RESULTS",
        RULE,
        "",
        f"Score: {result.overall_score:g}/100",
        f"Issues Found: {len(result.issues)}",
        "",
        f"Summary: {result.summary}",
        "",
    ]

    for severity, issues in group_by_severity(result.issues).items():
        icon = SEVERITY_ICONS[severity.value]
        lines.append(f"\n{icon} {severity.value.upper()} ({len(issues)})")
        lines.append("-" * 30)
        for issue in issues:
            lines.append(f"\n[{issue.category.value}] {issue.location}")
            lines.append(f"  {issue.description}")
            if issue.suggestion:
                lines.append(f"  💡 {issue.suggestion}")

    return "\n".join(lines)


def format_error(error: BaseException | str) -> str:
    """Top-level error text, with the API key hint when relevant."""
    message = str(error)
    text = f"\n❌ Error: {message}"
    if "ANTHROPIC_API_KEY" in message:
        text += "\n" + API_KEY_HINT
    return text
