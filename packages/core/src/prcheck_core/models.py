"""Plain records passed between the fetch, analysis and rendering stages.

Everything here is built fresh per run and discarded once the comment has
been rendered; nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

NOT_APPLICABLE = "N/A"

RISK_LEVELS = ("LOW", "MEDIUM", "HIGH")
UNKNOWN_RISK = "UNKNOWN"

# Analysis-method tags shown in the comment header.
AI_POWERED = "AI-Powered"
AI_POWERED_PARSED = "AI-Powered (Parsed)"
BASIC_HEURISTIC = "Basic Heuristic"
NO_CHANGES = "No Changes Detected"
NO_LINKED_ISSUES_SUFFIX = " (No Linked Issues)"

Score = Union[int, str]  # 0-10, or NOT_APPLICABLE


@dataclass(frozen=True)
class PullRequestSummary:
    number: int
    title: str
    body: str
    author: str
    additions: int
    deletions: int
    changed_files: int


@dataclass(frozen=True)
class LinkedIssue:
    number: int
    title: str
    body: str
    labels: frozenset[str] = frozenset()
    state: str = "open"
    assignee: str | None = None


@dataclass(frozen=True)
class FileChange:
    filename: str
    status: str  # "added" | "modified" | "removed" | "renamed"
    additions: int
    deletions: int
    changes: int
    patch: str | None = None


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one analysis run, ready to be rendered into a PR comment."""

    correctness_score: Score
    completeness_score: Score
    risk_level: str
    missing_requirements: str
    implementation_quality: str
    recommendations: tuple[str, ...]
    analysis_type: str
    linked_issues: tuple[int, ...] = ()
    pull_request: PullRequestSummary | None = None
    risk_factors: tuple[str, ...] = ()
    # First characters of the model's answer when it had to be parsed as free text.
    raw_response: str | None = None


@dataclass
class AnalysisOutcome:
    """Result of analyze(): either an AnalysisResult or the error that stopped the run."""

    success: bool
    error: str | None = None
    analysis: AnalysisResult | None = None
