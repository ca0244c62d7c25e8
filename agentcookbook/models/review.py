"""
Code Review Models

Structured result of the advanced code-review recipe. The JSON schema is
forwarded to the agent as its output contract; the Pydantic models give
typed access to a validated payload.

Severity ranking (most important first):
    critical > high > medium > low
"""

from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """How bad an issue is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Category(str, Enum):
    """What kind of issue it is."""

    BUG = "bug"
    SECURITY = "security"
    PERFORMANCE = "performance"
    STYLE = "style"


SEVERITY_RANK: dict[Severity, int] = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}

SEVERITY_ORDER: tuple[Severity, ...] = tuple(sorted(SEVERITY_RANK, key=SEVERITY_RANK.__getitem__))


REVIEW_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "issues": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "severity": {"type": "string", "enum": [s.value for s in Severity]},
                    "category": {"type": "string", "enum": [c.value for c in Category]},
                    "file": {"type": "string"},
                    "line": {"type": "number"},
                    "description": {"type": "string"},
                    "suggestion": {"type": "string"},
                },
                "required": ["severity", "category", "file", "description"],
            },
        },
        "summary": {"type": "string"},
        "overallScore": {"type": "number"},
    },
    "required": ["issues", "summary", "overallScore"],
}


class ReviewIssue(BaseModel):
    """A single finding."""

    severity: Severity
    category: Category
    file: str
    line: float | None = None
    description: str
    suggestion: str | None = None

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line:g}" if self.line is not None else self.file


class ReviewResult(BaseModel):
    """Full review: findings, summary and a 0-100 score."""

    issues: list[ReviewIssue] = Field(default_factory=list)
    summary: str
    overall_score: float = Field(alias="overallScore")

    model_config = {"populate_by_name": True}


def sort_issues(issues: Iterable[ReviewIssue]) -> list[ReviewIssue]:
    """Sort by severity, most critical first. Stable: ties keep input order."""
    return sorted(issues, key=lambda issue: SEVERITY_RANK[issue.severity])


def group_by_severity(
    issues: Iterable[ReviewIssue],
    *,
    include_empty: bool = False,
) -> dict[Severity, list[ReviewIssue]]:
    """Group issues by severity in rank order (critical first).

    Relative order inside each group follows the input.
    """
    groups: dict[Severity, list[ReviewIssue]] = {severity: [] for severity in SEVERITY_ORDER}
    for issue in issues:
        groups[issue.severity].append(issue)
    if include_empty:
        return groups
    return {severity: items for severity, items in groups.items() if items}
