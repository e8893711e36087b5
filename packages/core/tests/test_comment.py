"""Tests for PR comment rendering."""

from datetime import datetime, timezone

from prcheck_core.comment import FOOTER, format_score, render_comment, render_failure_comment
from prcheck_core.heuristics import no_changes_analysis
from prcheck_core.models import AnalysisResult, PullRequestSummary

NOW = datetime(2026, 3, 1, 12, 30, 0, tzinfo=timezone.utc)

PR = PullRequestSummary(
    number=12, title="Fix login", body="", author="octocat", additions=40, deletions=5, changed_files=3
)


def _analysis(**overrides):
    fields = dict(
        correctness_score=8,
        completeness_score=7,
        risk_level="LOW",
        missing_requirements="None identified",
        implementation_quality="Clean change",
        recommendations=("Add tests",),
        analysis_type="AI-Powered",
        linked_issues=(42, 43),
        pull_request=PR,
    )
    fields.update(overrides)
    return AnalysisResult(**fields)


class TestRenderComment:
    def test_header_and_metadata(self):
        body = render_comment(_analysis(), 12, now=NOW)
        assert body.startswith("## 📊 PR Issue Correctness Analysis")
        assert "🔗 **PR:** #12 by @octocat" in body
        assert "📋 **Linked Issues:** #42, #43" in body
        assert "📅 **Analysis Time:** 2026-03-01 12:30:00 UTC" in body
        assert "🤖 **Analysis Type:** AI-Powered" in body
        assert body.endswith(FOOTER)
        assert body.endswith("*🤖 Analysis performed by Claude-powered PR Issue Correctness Checker*")

    def test_results_section(self):
        body = render_comment(_analysis(), 12, now=NOW)
        assert "- ✅ **Correctness Score:** 8/10" in body
        assert "- 📋 **Completeness Score:** 7/10" in body
        assert "- ⚠️ **Risk Level:** LOW" in body
        assert "- 📁 **Files Changed:** 3" in body
        assert "- 📈 **Lines:** +40 -5" in body

    def test_no_linked_issues_shows_none(self):
        body = render_comment(_analysis(linked_issues=()), 12, now=NOW)
        assert "📋 **Linked Issues:** None" in body

    def test_high_risk_notice_only_for_high(self):
        assert "High Risk Notice" not in render_comment(_analysis(risk_level="MEDIUM"), 12, now=NOW)
        assert "### 🚨 High Risk Notice" in render_comment(_analysis(risk_level="HIGH"), 12, now=NOW)

    def test_missing_requirements_hidden_when_none_identified(self):
        assert "Missing Requirements" not in render_comment(_analysis(), 12, now=NOW)
        body = render_comment(_analysis(missing_requirements="CSV export"), 12, now=NOW)
        assert "### ❌ Missing Requirements\nCSV export" in body

    def test_blank_recommendations_skipped(self):
        body = render_comment(_analysis(recommendations=("Add tests", "  ", "")), 12, now=NOW)
        assert "### 💡 Recommendations\n- Add tests\n" in body
        assert "- \n" not in body

    def test_raw_response_in_details_block(self):
        body = render_comment(_analysis(raw_response="CORRECTNESS_SCORE: 8"), 12, now=NOW)
        assert "<details>" in body
        assert "```\nCORRECTNESS_SCORE: 8\n```" in body

    def test_fenced_raw_response_keeps_details_block_intact(self):
        raw = 'Here you go:\n```json\n{"risk_level": "LOW"}\n```'
        body = render_comment(_analysis(raw_response=raw), 12, now=NOW)
        assert f"````\n{raw}\n````\n" in body
        assert body.index("````\n" + raw) < body.index("</details>")

    def test_no_raw_response_no_details(self):
        assert "<details>" not in render_comment(_analysis(), 12, now=NOW)

    def test_not_applicable_scores(self):
        body = render_comment(no_changes_analysis(), 12, now=NOW)
        assert "**Correctness Score:** N/A" in body
        assert "**Completeness Score:** N/A" in body
        assert "N/A/10" not in body
        assert "by @unknown" in body
        assert "Files Changed" not in body


def test_format_score():
    assert format_score(0) == "0/10"
    assert format_score(7.5) == "7.5/10"
    assert format_score("N/A") == "N/A"


def test_failure_comment():
    body = render_failure_comment("Failed to fetch PR data: 404 Not Found")
    assert body.startswith("## ❌ PR Analysis Failed")
    assert "**Error:** Failed to fetch PR data: 404 Not Found" in body
