"""analyze command — check a PR against its linked issues and publish the result."""

from __future__ import annotations

import logging

import click
from github import GithubException
from rich.console import Console

from prcheck_cli import actions
from prcheck_core.analyzer import analyze
from prcheck_core.comment import format_score, render_comment, render_failure_comment
from prcheck_core.gh.comments import publish_comment
from prcheck_core.gh.pull_request import describe_github_error, get_pull, get_repo
from prcheck_core.models import NOT_APPLICABLE, AnalysisOutcome

console = Console()
logger = logging.getLogger(__name__)

LOW_CORRECTNESS_THRESHOLD = 6


def _emit_failure(error: str) -> None:
    console.print(f"[red]Analysis failed: {error}[/red]")
    actions.error(f"PR analysis failed: {error}")
    actions.set_output("success", False)
    actions.set_output("comment", actions.escape_comment(render_failure_comment(error)))
    actions.set_output("risk_level", "UNKNOWN")
    actions.set_output("comment_posted", False)


def _post(this_repo, pr_number: int, comment: str, update_existing: bool) -> bool:
    try:
        pr = get_pull(this_repo, pr_number)
    except GithubException as e:
        logger.error("Could not load PR #%d to comment on: %s", pr_number, describe_github_error(e))
        return False
    return publish_comment(pr, comment, update_existing=update_existing)


def _annotate(outcome: AnalysisOutcome) -> None:
    analysis = outcome.analysis
    if analysis.risk_level == "HIGH":
        actions.warning("High risk changes detected in this PR")
    score = analysis.correctness_score
    if score != NOT_APPLICABLE and score < LOW_CORRECTNESS_THRESHOLD:
        actions.warning(f"Low correctness score: {score}/10")


@click.command("analyze")
@click.option("--repo", envvar="GITHUB_REPOSITORY", required=True, show_envvar=True, help="Repository as owner/name.")
@click.option("--pr", "pr_number", envvar="PR_NUMBER", type=int, required=True, show_envvar=True, help="PR number.")
@click.option(
    "--comment/--no-comment",
    "comment_on_pr",
    envvar="COMMENT_ON_PR",
    default=False,
    show_envvar=True,
    help="Post the analysis as a PR comment.",
)
@click.option(
    "--update-existing/--no-update-existing",
    "update_existing",
    envvar="UPDATE_EXISTING_COMMENT",
    default=True,
    show_envvar=True,
    help="Edit the previous analysis comment instead of adding a new one.",
)
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option(
    "--config",
    "config_path",
    default=".prcheck.yml",
    show_default=True,
    envvar="PRCHECK_CONFIG",
    help="Path to the configuration file.",
)
def analyze_cmd(
    repo: str,
    pr_number: int,
    comment_on_pr: bool,
    update_existing: bool,
    model: str | None,
    config_path: str,
):
    """Check whether a pull request correctly implements its linked issues.

    Without linked issues the PR is checked against its own description.
    When no model API key is set, a heuristic analysis is used instead.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token with read access to PRs and issues
    Optional:
      ANTHROPIC_API_KEY    Enables model analysis with --model anthropic (default)
      OPENAI_API_KEY       Enables model analysis with --model openai
    """
    from prcheck_core.config import load_config

    config = load_config(config_path, cli_overrides={"model": model})
    token = config.get("github_token")
    if not token:
        raise click.UsageError("No GitHub token found. Set the GITHUB_TOKEN environment variable.")

    console.print(f"Starting analysis for PR #{pr_number} in {repo}")

    try:
        try:
            this_repo = get_repo(repo, token=token)
        except GithubException as e:
            outcome = AnalysisOutcome(success=False, error=f"Failed to fetch repository: {describe_github_error(e)}")
        else:
            outcome = analyze(repo, pr_number, config, repo_obj=this_repo)

        if not outcome.success:
            _emit_failure(outcome.error)
            raise SystemExit(1)

        analysis = outcome.analysis
        console.print("[green]Analysis completed successfully![/green]")
        console.print(f"Correctness: {format_score(analysis.correctness_score)}")
        console.print(f"Completeness: {format_score(analysis.completeness_score)}")
        console.print(f"Risk Level: {analysis.risk_level}")

        comment = render_comment(analysis, pr_number)
        actions.set_output("success", True)
        actions.set_output("comment", actions.escape_comment(comment))
        actions.set_output("risk_level", analysis.risk_level)

        comment_posted = False
        if comment_on_pr:
            comment_posted = _post(this_repo, pr_number, comment, update_existing)
            if not comment_posted:
                actions.warning("Failed to post comment")
        else:
            console.print("Comment posting disabled")
        actions.set_output("comment_posted", comment_posted)

        _annotate(outcome)

        console.print("\nGenerated comment preview:")
        console.rule()
        console.print(comment, markup=False, highlight=False)
        console.rule()
    except Exception as e:
        logger.exception("Script execution failed")
        actions.error(f"Script execution failed: {e}")
        raise SystemExit(1)
