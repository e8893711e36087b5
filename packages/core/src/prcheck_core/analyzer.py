"""Core PR analysis orchestration."""

from __future__ import annotations

import dataclasses
import logging

from github import GithubException
from rich.console import Console

from prcheck_core.config import model_api_key
from prcheck_core.gh.pull_request import (
    describe_github_error,
    extract_issue_numbers,
    fetch_file_changes,
    fetch_linked_issues,
    get_pull,
    get_repo,
    to_summary,
)
from prcheck_core.heuristics import basic_analysis, has_meaningful_changes, no_changes_analysis
from prcheck_core.models import (
    AI_POWERED,
    AI_POWERED_PARSED,
    NO_LINKED_ISSUES_SUFFIX,
    NOT_APPLICABLE,
    UNKNOWN_RISK,
    AnalysisOutcome,
    AnalysisResult,
    FileChange,
    LinkedIssue,
    PullRequestSummary,
)
from prcheck_core.parser import (
    DEFAULT_IMPLEMENTATION_QUALITY,
    DEFAULT_MISSING_REQUIREMENTS,
    ParsedResponse,
    parse_model_response,
)
from prcheck_core.prompts import build_description_prompt, build_issue_prompt
from prcheck_core.providers.anthropic import AnthropicProvider
from prcheck_core.providers.openai import OpenAIProvider

console = Console()
logger = logging.getLogger(__name__)

_PARSED_RECOMMENDATIONS_DEFAULT = ("See full analysis for details",)


class AnalysisError(Exception):
    """Raised when the PR itself cannot be read and there is nothing to analyse."""


def _get_provider(config: dict):
    """Return the configured model provider, or None when its credential or SDK is missing."""
    api_key = model_api_key(config)
    if not api_key:
        return None
    max_tokens = config.get("max_output_tokens", 3000)
    provider_cls = AnthropicProvider if config["model"] == "anthropic" else OpenAIProvider
    try:
        return provider_cls(api_key=api_key, max_tokens=max_tokens)
    except ImportError as e:
        logger.warning("%s; falling back to basic analysis", e)
        return None


def _is_empty(parsed: ParsedResponse) -> bool:
    """True when the text fallback recognised none of the expected sections."""
    return (
        not parsed.structured
        and parsed.correctness_score is None
        and parsed.completeness_score is None
        and parsed.risk_level == UNKNOWN_RISK
        and parsed.missing_requirements is None
        and parsed.implementation_quality is None
        and parsed.recommendations is None
    )


def _result_from_parsed(parsed: ParsedResponse, linked: bool) -> AnalysisResult:
    analysis_type = AI_POWERED if parsed.structured else AI_POWERED_PARSED
    if not linked:
        analysis_type += NO_LINKED_ISSUES_SUFFIX
    return AnalysisResult(
        correctness_score=NOT_APPLICABLE if parsed.correctness_score is None else parsed.correctness_score,
        completeness_score=NOT_APPLICABLE if parsed.completeness_score is None else parsed.completeness_score,
        risk_level=parsed.risk_level,
        missing_requirements=parsed.missing_requirements or DEFAULT_MISSING_REQUIREMENTS,
        implementation_quality=parsed.implementation_quality or DEFAULT_IMPLEMENTATION_QUALITY,
        recommendations=(
            parsed.recommendations if parsed.recommendations is not None else _PARSED_RECOMMENDATIONS_DEFAULT
        ),
        analysis_type=analysis_type,
        raw_response=parsed.raw_response,
    )


def analyze_with_model(
    provider,
    pr: PullRequestSummary,
    issues: list[LinkedIssue],
    files: list[FileChange],
    config: dict,
    linked: bool = True,
) -> AnalysisResult:
    """Ask the model for an analysis; fall back to heuristics if it cannot be reached or read."""
    if linked:
        prompt = build_issue_prompt(pr, issues, files, config)
    else:
        prompt = build_description_prompt(pr, files, config)

    raw = provider.complete(prompt)
    if raw is None:
        console.print("[yellow]Model analysis failed, falling back to basic analysis.[/yellow]")
        return basic_analysis(pr, issues, files, linked=linked)

    parsed = parse_model_response(raw)
    if _is_empty(parsed):
        logger.warning("Model response contained no recognisable analysis fields: %s", raw[:200])
        console.print("[yellow]Could not read the model's answer, falling back to basic analysis.[/yellow]")
        return basic_analysis(pr, issues, files, linked=linked)
    return _result_from_parsed(parsed, linked)


def _fetch(repo: str, pr_number: int, config: dict, repo_obj=None):
    """Fetch everything the analysis needs. Raises AnalysisError if the PR itself is unreadable."""
    try:
        this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])
        pr_obj = get_pull(this_repo, pr_number)
    except GithubException as e:
        raise AnalysisError(f"Failed to fetch PR data: {describe_github_error(e)}") from e

    pr = to_summary(pr_obj)
    console.print(f'PR Title: "{pr.title}"')

    issue_numbers = extract_issue_numbers(pr.title, pr.body)
    console.print(f"Found {len(issue_numbers)} linked issue(s): {', '.join(f'#{n}' for n in issue_numbers)}")

    issues = fetch_linked_issues(this_repo, issue_numbers) if issue_numbers else []
    if issue_numbers:
        console.print(f"Fetched {len(issues)} issue detail(s)")

    try:
        files = fetch_file_changes(pr_obj)
    except GithubException as e:
        raise AnalysisError(f"Failed to fetch PR files: {describe_github_error(e)}") from e
    console.print(f"Found {len(files)} changed file(s)")

    return pr, issue_numbers, issues, files


def analyze(repo: str, pr_number: int, config: dict, repo_obj=None) -> AnalysisOutcome:
    """Run the full analysis pipeline for one PR.

    Never raises for GitHub-side failures: a PR that cannot be fetched comes
    back as an unsuccessful AnalysisOutcome carrying the error text.
    """
    console.print(f"Fetching PR data for #{pr_number} in {repo}...")
    try:
        pr, issue_numbers, issues, files = _fetch(repo, pr_number, config, repo_obj)
    except AnalysisError as e:
        logger.error("Analysis failed: %s", e)
        return AnalysisOutcome(success=False, error=str(e))

    linked = bool(issue_numbers)

    if not linked and not has_meaningful_changes(files):
        console.print("[yellow]No linked issues and no meaningful code changes; skipping analysis.[/yellow]")
        analysis = no_changes_analysis()
    else:
        provider = _get_provider(config)
        if provider is not None:
            console.print(f"Analyzing with {provider.__class__.__name__} ({provider.MODEL})...")
            analysis = analyze_with_model(provider, pr, issues, files, config, linked=linked)
        else:
            console.print("Using basic analysis (no model API key or SDK available)")
            analysis = basic_analysis(pr, issues, files, linked=linked)

    analysis = dataclasses.replace(analysis, linked_issues=tuple(issue_numbers), pull_request=pr)
    return AnalysisOutcome(success=True, analysis=analysis)
