from __future__ import annotations

import logging
import re

from github import Github, GithubException

from prcheck_core.models import FileChange, LinkedIssue, PullRequestSummary

logger = logging.getLogger(__name__)

# Patches are cut at fetch time so no single file can dominate the prompt.
PATCH_CHAR_LIMIT = 3_000

_ISSUE_PATTERNS = (
    re.compile(r"#(\d+)"),  # #123
    re.compile(r"(?:fix(?:es)?|close(?:s)?|resolve(?:s)?)\s+#(\d+)", re.IGNORECASE),  # fixes #123
    re.compile(r"(?:fix(?:es)?|close(?:s)?|resolve(?:s)?)\s+(\d+)", re.IGNORECASE),  # fixes 123
)


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def describe_github_error(exc: GithubException) -> str:
    """Return the status line GitHub sent back, e.g. "404 Not Found"."""
    message = exc.data.get("message") if isinstance(exc.data, dict) else None
    return f"{exc.status} {message}" if message else str(exc.status)


def to_summary(pr) -> PullRequestSummary:
    return PullRequestSummary(
        number=pr.number,
        title=pr.title or "",
        body=pr.body or "",
        author=pr.user.login if pr.user else "unknown",
        additions=pr.additions or 0,
        deletions=pr.deletions or 0,
        changed_files=pr.changed_files or 0,
    )


def extract_issue_numbers(title: str, body: str) -> list[int]:
    """Return issue numbers referenced in the PR title/body, deduplicated.

    Patterns are applied in turn and their matches unioned in the order found,
    so every ``#N`` reference comes before numbers only a keyword pattern finds.
    """
    text = f"{title} {body or ''}"
    numbers: dict[int, None] = {}
    for pattern in _ISSUE_PATTERNS:
        numbers.update(dict.fromkeys(int(n) for n in pattern.findall(text)))
    return list(numbers)


def fetch_linked_issues(repo, issue_numbers: list[int]) -> list[LinkedIssue]:
    """Fetch each referenced issue one at a time; inaccessible issues are skipped."""
    issues: list[LinkedIssue] = []
    for number in issue_numbers:
        try:
            issue = repo.get_issue(number)
        except GithubException as e:
            logger.warning("Issue #%d not found or not accessible: %s", number, describe_github_error(e))
            continue
        issues.append(
            LinkedIssue(
                number=issue.number,
                title=issue.title or "",
                body=issue.body or "",
                labels=frozenset(label.name for label in issue.labels),
                state=issue.state,
                assignee=issue.assignee.login if issue.assignee else None,
            )
        )
    return issues


def fetch_file_changes(pr) -> list[FileChange]:
    """Return every changed file in the PR. PyGithub walks the pagination for us."""
    return [
        FileChange(
            filename=f.filename,
            status=f.status,
            additions=f.additions,
            deletions=f.deletions,
            changes=f.changes,
            patch=f.patch[:PATCH_CHAR_LIMIT] if f.patch else None,
        )
        for f in pr.get_files()
    ]
