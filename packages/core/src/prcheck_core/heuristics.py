"""Deterministic scoring used when no model is configured or the model call fails.

Every signal here comes from file paths, line counts and PR/issue text, so
the same PR always produces the same scores.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from prcheck_core.models import (
    BASIC_HEURISTIC,
    NO_CHANGES,
    NO_LINKED_ISSUES_SUFFIX,
    NOT_APPLICABLE,
    AnalysisResult,
    FileChange,
    LinkedIssue,
    PullRequestSummary,
)

_TEST_MARKERS = ("test", "spec", "__tests__", ".test.", ".spec.")
_DOC_MARKERS = ("README", ".md", "docs/", "documentation")
_CONFIG_MARKERS = ("config", "package.json", "requirements.txt", "Dockerfile", ".env")

# Files that rarely carry implementation on their own. They still count when
# the file itself changed by more than _LOW_SIGNAL_CHANGE_THRESHOLD lines.
LOW_SIGNAL_EXTENSIONS = frozenset({".md", ".txt", ".gitignore", ".yml", ".yaml", ".json"})
_LOW_SIGNAL_CHANGE_THRESHOLD = 50

_KEYWORDS = ("fix", "add", "update", "implement", "create", "remove")

_LARGE_CHANGE_LINES = 500
_MANY_FILES = 20
_HIGH_RISK_FACTOR_COUNT = 2

RECOMMEND_TESTS = "Consider adding or updating tests for the changes"
RECOMMEND_DOCS = "Consider updating documentation for significant changes"
RECOMMEND_SPLIT = "Consider breaking this into smaller PRs for easier review"
RECOMMEND_HIGH_RISK = "High risk changes detected - consider additional review"
RECOMMEND_LINK_ISSUES = 'Link the issue this PR addresses using "fixes #123" so the change can be checked against it'
RECOMMEND_DESCRIPTION = "Expand the PR description to explain what changed and why"


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _extension(filename: str) -> str:
    name = PurePosixPath(filename).name
    # ".gitignore" has no suffix in pathlib terms; treat the whole dotfile name as the extension.
    if name.startswith(".") and name.count(".") == 1:
        return name.lower()
    return PurePosixPath(name).suffix.lower()


def total_changes(files: list[FileChange]) -> int:
    return sum(f.changes for f in files)


def touches_tests(files: list[FileChange]) -> bool:
    return any(marker in f.filename for f in files for marker in _TEST_MARKERS)


def touches_docs(files: list[FileChange]) -> bool:
    return any(marker in f.filename for f in files for marker in _DOC_MARKERS)


def touches_config(files: list[FileChange]) -> bool:
    return any(marker in f.filename for f in files for marker in _CONFIG_MARKERS)


def has_meaningful_changes(files: list[FileChange]) -> bool:
    """Return True when the PR changes something beyond trivial docs/config edits."""
    if not files or total_changes(files) == 0:
        return False
    significant = [
        f
        for f in files
        if _extension(f.filename) not in LOW_SIGNAL_EXTENSIONS or f.changes > _LOW_SIGNAL_CHANGE_THRESHOLD
    ]
    return bool(significant) and any(f.changes > 0 for f in significant)


def risk_factors(files: list[FileChange]) -> list[str]:
    factors = []
    if total_changes(files) > _LARGE_CHANGE_LINES:
        factors.append("Large number of changes")
    if len(files) > _MANY_FILES:
        factors.append("Many files modified")
    if not touches_tests(files):
        factors.append("No test files modified")
    if touches_config(files):
        factors.append("Core configuration files modified")
    return factors


def risk_level(factors: list[str]) -> str:
    if len(factors) > _HIGH_RISK_FACTOR_COUNT:
        return "HIGH"
    if factors:
        return "MEDIUM"
    return "LOW"


def keyword_matches(issue_text: str, pr_text: str) -> int:
    """Count the action keywords that appear in both the issue text and the PR text."""
    issue_text = issue_text.lower()
    pr_text = pr_text.lower()
    return sum(1 for keyword in _KEYWORDS if keyword in issue_text and keyword in pr_text)


def issue_correctness_score(matches: int, has_tests: bool) -> int:
    return _clamp(matches * 2 + (2 if has_tests else 0), 0, 10)


def issue_completeness_score(issue_count: int, has_docs: bool, has_tests: bool) -> int:
    base = 8 if issue_count <= 2 else 6
    return _clamp(base + (1 if has_docs else 0) + (1 if has_tests else 0), 0, 10)


def description_correctness_score(title: str, description: str, changes: int, has_tests: bool) -> int:
    score = 4 if len(description) > 50 else 2
    if 10 < len(title) < 100:
        score += 2
    score += int(min(10, changes / 10) // 2)
    if has_tests:
        score += 2
    return _clamp(score, 2, 10)


def description_completeness_score(correctness: int, has_docs: bool) -> int:
    return _clamp(correctness - 1 + (1 if has_docs else 0), 2, 10)


def build_recommendations(
    files: list[FileChange],
    factors: list[str],
    linked: bool,
    description: str,
) -> list[str]:
    changes = total_changes(files)
    has_docs = touches_docs(files)
    candidates = [
        not touches_tests(files) and RECOMMEND_TESTS,
        not has_docs and changes > 100 and RECOMMEND_DOCS,
        changes > 300 and RECOMMEND_SPLIT,
        len(factors) > _HIGH_RISK_FACTOR_COUNT and RECOMMEND_HIGH_RISK,
        not linked and RECOMMEND_LINK_ISSUES,
        not linked and len(description.strip()) <= 50 and RECOMMEND_DESCRIPTION,
    ]
    return [c for c in candidates if c]


def _quality_summary(files: list[FileChange]) -> str:
    parts = [f"Basic analysis: {len(files)} files changed, {total_changes(files)} total changes."]
    parts.append("Tests included." if touches_tests(files) else "No tests detected.")
    if touches_docs(files):
        parts.append("Documentation updated.")
    return " ".join(parts)


def basic_analysis(
    pr: PullRequestSummary,
    issues: list[LinkedIssue],
    files: list[FileChange],
    linked: bool = True,
) -> AnalysisResult:
    """Score the PR from observable signals.

    ``linked`` says whether the PR text referenced any issues at all. It can be
    True while ``issues`` is empty when every referenced issue failed to load.
    """
    factors = risk_factors(files)
    has_tests = touches_tests(files)
    has_docs = touches_docs(files)
    recommendations = build_recommendations(files, factors, linked, pr.body)

    if linked:
        issue_text = " ".join(f"{i.title} {i.body}" for i in issues)
        pr_text = f"{pr.title} {pr.body}"
        return AnalysisResult(
            correctness_score=issue_correctness_score(keyword_matches(issue_text, pr_text), has_tests),
            completeness_score=issue_completeness_score(len(issues), has_docs, has_tests),
            risk_level=risk_level(factors),
            missing_requirements=(
                "Potential concerns identified" if factors else "None identified with basic analysis"
            ),
            implementation_quality=_quality_summary(files),
            recommendations=tuple(recommendations),
            analysis_type=BASIC_HEURISTIC,
            risk_factors=tuple(factors),
        )

    analysis_type = BASIC_HEURISTIC + NO_LINKED_ISSUES_SUFFIX
    if not pr.title.strip() and not pr.body.strip():
        return AnalysisResult(
            correctness_score=3,
            completeness_score=3,
            risk_level=risk_level(factors),
            missing_requirements="No PR description provided; the intended behaviour cannot be assessed",
            implementation_quality=_quality_summary(files),
            recommendations=tuple(recommendations),
            analysis_type=analysis_type,
            risk_factors=tuple(factors),
        )

    correctness = description_correctness_score(pr.title, pr.body, total_changes(files), has_tests)
    return AnalysisResult(
        correctness_score=correctness,
        completeness_score=description_completeness_score(correctness, has_docs),
        risk_level=risk_level(factors),
        missing_requirements=(
            "No linked issues; changes were checked against the PR description only"
            if factors
            else "None identified with basic analysis"
        ),
        implementation_quality=_quality_summary(files),
        recommendations=tuple(recommendations),
        analysis_type=analysis_type,
        risk_factors=tuple(factors),
    )


def no_changes_analysis() -> AnalysisResult:
    """Canned result for a PR with no meaningful code changes and nothing to check it against."""
    return AnalysisResult(
        correctness_score=NOT_APPLICABLE,
        completeness_score=NOT_APPLICABLE,
        risk_level="LOW",
        missing_requirements="None identified",
        implementation_quality="No meaningful code changes detected in this PR.",
        recommendations=(RECOMMEND_LINK_ISSUES,),
        analysis_type=NO_CHANGES + NO_LINKED_ISSUES_SUFFIX,
    )
