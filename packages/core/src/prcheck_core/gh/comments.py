"""Post or refresh the single summary comment the bot keeps on a PR.

The prior comment is re-discovered on every run rather than remembered
anywhere. Two runs racing on the same PR can still both create a comment.
"""

from __future__ import annotations

import logging

from github import GithubException

from prcheck_core.gh.pull_request import describe_github_error

logger = logging.getLogger(__name__)

COMMENT_MARKER = "PR Issue Correctness Analysis"


def find_existing_comment(pr):
    """Return the first bot-authored comment carrying COMMENT_MARKER, or None."""
    for comment in pr.get_issue_comments():
        if comment.user is not None and comment.user.type == "Bot" and COMMENT_MARKER in (comment.body or ""):
            return comment
    return None


def publish_comment(pr, body: str, update_existing: bool = True) -> bool:
    """Edit the previous analysis comment in place, or create a new one.

    Returns False instead of raising when GitHub rejects any of the calls:
    a comment that could not be posted must not fail the run.
    """
    try:
        if update_existing:
            existing = find_existing_comment(pr)
            if existing is not None:
                existing.edit(body)
                logger.info("Updated existing PR comment %s", existing.id)
                return True

        pr.create_issue_comment(body)
        logger.info("Posted new PR comment")
        return True
    except GithubException as e:
        logger.error("Error handling PR comment: %s", describe_github_error(e))
        return False
