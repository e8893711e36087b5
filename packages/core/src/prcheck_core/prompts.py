"""Prompt templates for the model-based analysis.

Two templates: one that checks the diff against the linked issues, and one
used when the PR references no issues and can only be checked against its
own description. Both ask for the same six JSON keys so a single parser
handles either answer.
"""

from __future__ import annotations

from prcheck_core.models import FileChange, LinkedIssue, PullRequestSummary

_OUTPUT_FORMAT = """Please format your response as JSON with these exact keys:
{
  "correctness_score": <number>,
  "completeness_score": <number>,
  "risk_level": "<LOW|MEDIUM|HIGH>",
  "missing_requirements": "<detailed list or 'None identified'>",
  "implementation_quality": "<assessment of code quality>",
  "recommendations": ["<recommendation 1>", "<recommendation 2>", "..."]
}"""


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def _pr_section(pr: PullRequestSummary, config: dict) -> str:
    description = pr.body[: config["description_chars_in_prompt"]] if pr.body else "No description provided"
    return f"""# PULL REQUEST DETAILS
**Title:** {pr.title}
**Description:** {description}
**Author:** {pr.author}
**Changes:** +{pr.additions} -{pr.deletions} lines across {pr.changed_files} files"""


def _issues_section(issues: list[LinkedIssue], config: dict) -> str:
    limit = config["issue_chars_in_prompt"]
    blocks = [
        f"""### Issue #{issue.number}: {issue.title}
**Description:** {_truncate(issue.body, limit)}
**Labels:** {', '.join(sorted(issue.labels)) or 'None'}
**Status:** {issue.state}"""
        for issue in issues
    ]
    return "\n\n".join(blocks) or "No linked issue details could be fetched."


def _changes_section(files: list[FileChange], config: dict) -> str:
    limit = config["patch_chars_in_prompt"]
    blocks = []
    for f in files[: config["max_files_in_prompt"]]:
        if f.patch:
            code = f"**Code Changes:**\n```diff\n{f.patch[:limit]}\n```"
        else:
            code = "**No patch data available**"
        blocks.append(f"### File: {f.filename} ({f.status})\n**Changes:** +{f.additions} -{f.deletions}\n{code}")
    return "\n\n".join(blocks)


def build_issue_prompt(
    pr: PullRequestSummary,
    issues: list[LinkedIssue],
    files: list[FileChange],
    config: dict,
) -> str:
    """Prompt that asks whether the diff implements the linked issues."""
    return f"""Please analyze this pull request against its linked issues to determine if the implementation correctly addresses the requirements.

{_pr_section(pr, config)}

# LINKED ISSUES
{_issues_section(issues, config)}

# CODE CHANGES
{_changes_section(files, config)}

# ANALYSIS INSTRUCTIONS
Please provide a thorough analysis addressing:

1. **CORRECTNESS_SCORE** (0-10): How well does the PR implementation match the issue requirements?
2. **COMPLETENESS_SCORE** (0-10): Are all aspects of the linked issues addressed?
3. **RISK_LEVEL** (LOW/MEDIUM/HIGH): What is the risk level of these changes?
4. **MISSING_REQUIREMENTS**: What specific requirements from the issues appear to be unaddressed?
5. **IMPLEMENTATION_QUALITY**: Comments on code quality, approach, and best practices
6. **RECOMMENDATIONS**: Specific actionable suggestions for improvement

{_OUTPUT_FORMAT}"""  # noqa: E501


def build_description_prompt(
    pr: PullRequestSummary,
    files: list[FileChange],
    config: dict,
) -> str:
    """Prompt used when the PR links no issues: judge the diff against its own description."""
    return f"""Please analyze this pull request. It does not reference any issues, so judge whether the code changes deliver what the PR title and description say they do.

{_pr_section(pr, config)}

# CODE CHANGES
{_changes_section(files, config)}

# ANALYSIS INSTRUCTIONS
Please provide a thorough analysis addressing:

1. **CORRECTNESS_SCORE** (0-10): How well do the changes match the stated intent of the PR?
2. **COMPLETENESS_SCORE** (0-10): Is everything the description promises actually implemented?
3. **RISK_LEVEL** (LOW/MEDIUM/HIGH): What is the risk level of these changes?
4. **MISSING_REQUIREMENTS**: What does the description promise that the diff does not deliver? If the description is too vague to judge, say so.
5. **IMPLEMENTATION_QUALITY**: Comments on code quality, approach, and best practices
6. **RECOMMENDATIONS**: Specific actionable suggestions, including how the description could be clearer

{_OUTPUT_FORMAT}"""  # noqa: E501
