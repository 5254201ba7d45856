"""Tests for agents/reviewer.py."""

from __future__ import annotations

import pytest

from vibepair.agents.reviewer import Reviewer, calculate_score, is_approved, map_issue
from vibepair.exceptions import ReviewError
from vibepair.models.agent import AgentRole, ReviewerStatus
from vibepair.models.provider import RawIssue, RawReview
from vibepair.models.workflow import Issue, IssueCategory, Severity, WorkflowContext

from conftest import FakeReviewService


def _issues(*severities: str) -> list[Issue]:
    return [Issue(severity=Severity(s), category=IssueCategory.BUG, message=s) for s in severities]


class TestMapping:
    @pytest.mark.parametrize(
        "native, mapped",
        [
            ("error", Severity.CRITICAL),
            ("warning", Severity.HIGH),
            ("info", Severity.MEDIUM),
            ("suggestion", Severity.LOW),
        ],
    )
    def test_severity(self, native, mapped):
        issue = map_issue(RawIssue(severity=native, category="bug", message="m"))
        assert issue.severity == mapped

    def test_complexity_becomes_best_practice(self):
        issue = map_issue(RawIssue(severity="info", category="complexity", message="m"))
        assert issue.category == IssueCategory.BEST_PRACTICE

    def test_other_categories_pass_through(self):
        for category in ("bug", "security", "performance", "style", "best-practice"):
            assert map_issue(RawIssue(severity="info", category=category, message="m")).category.value == category

    def test_fix_becomes_suggestion(self):
        issue = map_issue(RawIssue(severity="info", category="bug", message="m", fix="do this"))
        assert issue.suggestion == "do this"


class TestScoring:
    def test_clean(self):
        assert calculate_score([]) == 100
        assert is_approved([], 100) is True

    def test_weights(self):
        assert calculate_score(_issues("critical")) == 80
        assert calculate_score(_issues("high")) == 90
        assert calculate_score(_issues("medium")) == 95
        assert calculate_score(_issues("low")) == 98
        assert calculate_score(_issues("critical", "medium", "medium")) == 70

    def test_floor_at_zero(self):
        assert calculate_score(_issues(*["critical"] * 6)) == 0

    def test_critical_blocks_approval_despite_score(self):
        issues = _issues("critical")
        assert calculate_score(issues) == 80
        assert is_approved(issues, 80) is False

    def test_score_threshold(self):
        assert is_approved(_issues(*["medium"] * 4), 80) is True
        assert is_approved(_issues(*["medium"] * 5), 75) is False


class TestReviewer:
    @pytest.mark.asyncio
    async def test_review_code(self, registry):
        service = FakeReviewService(
            [
                RawReview(
                    issues=[
                        RawIssue(severity="warning", category="security", message="eval", fix="remove"),
                        RawIssue(severity="suggestion", category="style", message="name"),
                    ]
                )
            ]
        )
        reviewer = Reviewer(service, registry)

        result = await reviewer.review_code("code", WorkflowContext(file_path="a.ts"))

        assert result.score == 88
        assert result.approved is False
        assert [i.severity for i in result.issues] == [Severity.HIGH, Severity.LOW]
        assert registry.status(AgentRole.REVIEWER) == ReviewerStatus.ALERT
        assert registry.review_count == 1
        assert registry.issues_found == 2
        assert service.calls[0][1].file_path == "a.ts"

    @pytest.mark.asyncio
    async def test_clean_review_approves(self, registry):
        reviewer = Reviewer(FakeReviewService([RawReview()]), registry)
        result = await reviewer.review_code("code")
        assert result.approved is True
        assert result.score == 100
        assert registry.status(AgentRole.REVIEWER) == ReviewerStatus.APPROVED
        assert registry.issues_found == 0

    @pytest.mark.asyncio
    async def test_low_score_without_blocking_is_idle(self, registry):
        review = RawReview(issues=[RawIssue(severity="info", category="style", message="m")] * 5)
        result = await Reviewer(FakeReviewService([review]), registry).review_code("code")
        assert result.score == 75
        assert result.approved is False
        assert registry.status(AgentRole.REVIEWER) == ReviewerStatus.IDLE

    @pytest.mark.asyncio
    async def test_failure_sets_error(self, registry):
        reviewer = Reviewer(FakeReviewService([ReviewError("down")]), registry)
        with pytest.raises(ReviewError):
            await reviewer.review_code("code")
        assert registry.status(AgentRole.REVIEWER) == ReviewerStatus.ERROR

    @pytest.mark.asyncio
    async def test_config_toggles_categories(self, registry):
        service = FakeReviewService([RawReview()])
        await Reviewer(service, registry, {"include_style": False}).review_code("code")
        options = service.calls[0][1]
        assert options.include_style is False
        assert options.include_security is True

    @pytest.mark.asyncio
    async def test_analyze_issues_focus(self, registry):
        review = RawReview(
            issues=[
                RawIssue(severity="error", category="security", message="sqli"),
                RawIssue(severity="info", category="style", message="ignored"),
                RawIssue(severity="info", category="bug", message="minor bug"),
            ]
        )
        service = FakeReviewService([review])
        result = await Reviewer(service, registry).analyze_issues("code")

        assert [i.message for i in result.issues] == ["sqli", "minor bug"]
        assert result.score == 80
        assert result.approved is False
        assert registry.status(AgentRole.REVIEWER) == ReviewerStatus.ALERT
        assert service.calls[0][1].include_style is False

    @pytest.mark.asyncio
    async def test_analyze_issues_medium_only_is_approved(self, registry):
        review = RawReview(issues=[RawIssue(severity="info", category="bug", message="m")])
        result = await Reviewer(FakeReviewService([review]), registry).analyze_issues("code")
        assert result.approved is True
        assert result.score == 100
        assert registry.status(AgentRole.REVIEWER) == ReviewerStatus.APPROVED

    def test_reset(self, registry):
        registry.set_status(AgentRole.REVIEWER, ReviewerStatus.ALERT)
        Reviewer(FakeReviewService([]), registry).reset()
        assert registry.status(AgentRole.REVIEWER) == ReviewerStatus.IDLE
