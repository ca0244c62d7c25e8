"""Domain models for the cookbook recipes."""

from agentcookbook.models.review import (
    REVIEW_SCHEMA,
    Category,
    ReviewIssue,
    ReviewResult,
    Severity,
    group_by_severity,
    sort_issues,
)

__all__ = [
    "REVIEW_SCHEMA",
    "Category",
    "ReviewIssue",
    "ReviewResult",
    "Severity",
    "group_by_severity",
    "sort_issues",
]
