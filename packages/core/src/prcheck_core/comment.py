"""Markdown rendering of the PR comment.

The headings and emoji are matched by people and scripts diffing bot output,
and COMMENT_MARKER is how the publisher finds the comment again. Change
them only deliberately.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from prcheck_core.gh.comments import COMMENT_MARKER
from prcheck_core.models import NOT_APPLICABLE, AnalysisResult

FOOTER = "---\n*🤖 Analysis performed by Claude-powered PR Issue Correctness Checker*"

_NO_MISSING = ("None identified",)


def format_score(value) -> str:
    return NOT_APPLICABLE if value == NOT_APPLICABLE else f"{value}/10"


def _code_fence(text: str) -> str:
    """Return a backtick fence longer than any backtick run inside ``text``."""
    longest = max((len(run) for run in re.findall(r"`+", text)), default=0)
    return "`" * max(3, longest + 1)


def render_comment(analysis: AnalysisResult, pr_number: int, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    pr = analysis.pull_request
    author = pr.author if pr else "unknown"
    linked = ", ".join(f"#{n}" for n in analysis.linked_issues) or "None"

    lines = [f"## 📊 {COMMENT_MARKER}\n"]
    lines.append(f"🔗 **PR:** #{pr_number} by @{author}")
    lines.append(f"📋 **Linked Issues:** {linked}")
    lines.append(f"📅 **Analysis Time:** {now.strftime('%Y-%m-%d %H:%M:%S UTC')}")
    lines.append(f"🤖 **Analysis Type:** {analysis.analysis_type}\n")

    lines.append("### 🎯 Analysis Results")
    lines.append(f"- ✅ **Correctness Score:** {format_score(analysis.correctness_score)}")
    lines.append(f"- 📋 **Completeness Score:** {format_score(analysis.completeness_score)}")
    lines.append(f"- ⚠️ **Risk Level:** {analysis.risk_level}")
    if pr:
        lines.append(f"- 📁 **Files Changed:** {pr.changed_files}")
        lines.append(f"- 📈 **Lines:** +{pr.additions} -{pr.deletions}")
    lines.append("")

    if analysis.risk_level == "HIGH":
        lines.append("### 🚨 High Risk Notice")
        lines.append(
            "This PR has been flagged as high risk. Please ensure thorough review and testing before merging.\n"
        )

    if analysis.missing_requirements and analysis.missing_requirements not in _NO_MISSING:
        lines.append(f"### ❌ Missing Requirements\n{analysis.missing_requirements}\n")

    if analysis.implementation_quality:
        lines.append(f"### 🔍 Implementation Quality\n{analysis.implementation_quality}\n")

    recommendations = [r for r in analysis.recommendations if r and r.strip()]
    if recommendations:
        lines.append("### 💡 Recommendations")
        lines.extend(f"- {r}" for r in recommendations)
        lines.append("")

    if analysis.raw_response:
        lines.append("<details><summary>Raw model response (truncated)</summary>\n")
        fence = _code_fence(analysis.raw_response)
        lines.append(f"{fence}\n{analysis.raw_response}\n{fence}\n")
        lines.append("</details>\n")

    lines.append(FOOTER)
    return "\n".join(lines)


def render_failure_comment(error: str) -> str:
    return (
        "## ❌ PR Analysis Failed\n\n"
        f"**Error:** {error}\n\n"
        "Please check the workflow logs for more details or contact the repository maintainers."
    )
