"""Reviewer agent: scores code through the review collaborator.

The review service speaks its own taxonomy (error/warning/info/suggestion,
with a ``complexity`` category). The Reviewer maps that onto the Issue
taxonomy, computes the score and decides approval.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ..core.registry import AgentStateRegistry
from ..models.agent import AgentRole, ReviewerStatus
from ..models.provider import NativeCategory, NativeSeverity, RawIssue, ReviewOptions
from ..models.workflow import Issue, IssueCategory, ReviewResult, Severity, WorkflowContext
from ..providers.review import ReviewService

APPROVAL_SCORE = 80

SEVERITY_MAP: dict[NativeSeverity, Severity] = {
    NativeSeverity.ERROR: Severity.CRITICAL,
    NativeSeverity.WARNING: Severity.HIGH,
    NativeSeverity.INFO: Severity.MEDIUM,
    NativeSeverity.SUGGESTION: Severity.LOW,
}

SEVERITY_PENALTY: dict[Severity, int] = {
    Severity.CRITICAL: 20,
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 2,
}


def map_issue(raw: RawIssue) -> Issue:
    if raw.category == NativeCategory.COMPLEXITY:
        category = IssueCategory.BEST_PRACTICE
    else:
        category = IssueCategory(raw.category.value)
    return Issue(
        severity=SEVERITY_MAP[raw.severity],
        category=category,
        message=raw.message,
        suggestion=raw.fix,
    )


def calculate_score(issues: Sequence[Issue]) -> int:
    """100 for a clean review, otherwise 100 minus weighted severity penalties, floored at 0."""
    if not issues:
        return 100
    return max(0, 100 - sum(SEVERITY_PENALTY[i.severity] for i in issues))


def is_approved(issues: Sequence[Issue], score: int) -> bool:
    blocking = any(i.severity in (Severity.CRITICAL, Severity.HIGH) for i in issues)
    return not blocking and score >= APPROVAL_SCORE


class Reviewer:
    role = AgentRole.REVIEWER

    def __init__(
        self,
        service: ReviewService,
        registry: AgentStateRegistry,
        config: Optional[dict] = None,
    ):
        config = config or {}
        self.service = service
        self.registry = registry
        self.include_security = config.get("include_security", True)
        self.include_performance = config.get("include_performance", True)
        self.include_style = config.get("include_style", True)

    async def review_code(
        self, code: str, context: Optional[WorkflowContext] = None
    ) -> ReviewResult:
        context = context or WorkflowContext()
        self.registry.set_status(self.role, ReviewerStatus.SCANNING)
        self.registry.increment_review_count()

        options = ReviewOptions(
            include_security=self.include_security,
            include_performance=self.include_performance,
            include_style=self.include_style,
            file_path=context.file_path,
            language=context.language,
        )

        self.registry.set_status(self.role, ReviewerStatus.REVIEWING)
        try:
            raw = await self.service.review(code, options)
        except Exception:
            self.registry.set_status(self.role, ReviewerStatus.ERROR)
            raise

        issues = [map_issue(i) for i in raw.issues]
        score = calculate_score(issues)
        approved = is_approved(issues, score)

        if issues:
            self.registry.increment_issues_found(len(issues))

        if approved:
            self.registry.set_status(self.role, ReviewerStatus.APPROVED)
        elif any(i.severity in (Severity.CRITICAL, Severity.HIGH) for i in issues):
            self.registry.set_status(self.role, ReviewerStatus.ALERT)
        else:
            self.registry.set_status(self.role, ReviewerStatus.IDLE)

        return ReviewResult(approved=approved, issues=issues, score=score)

    async def analyze_issues(
        self,
        code: str,
        focus_areas: Sequence[IssueCategory] = (IssueCategory.BUG, IssueCategory.SECURITY),
    ) -> ReviewResult:
        """Targeted review restricted to ``focus_areas``.

        Only critical and high issues count against the score here, and
        approval is simply the absence of them.
        """
        self.registry.set_status(self.role, ReviewerStatus.SCANNING)
        focus = set(focus_areas)
        options = ReviewOptions(
            include_security=IssueCategory.SECURITY in focus,
            include_performance=IssueCategory.PERFORMANCE in focus,
            include_style=IssueCategory.STYLE in focus,
        )

        try:
            raw = await self.service.review(code, options)
        except Exception:
            self.registry.set_status(self.role, ReviewerStatus.ERROR)
            raise

        issues = [issue for issue in map(map_issue, raw.issues) if issue.category in focus]
        blocking = [i for i in issues if i.severity in (Severity.CRITICAL, Severity.HIGH)]
        score = 100 if not issues else max(
            0, 100 - sum(SEVERITY_PENALTY[i.severity] for i in blocking)
        )

        self.registry.set_status(
            self.role, ReviewerStatus.ALERT if blocking else ReviewerStatus.APPROVED
        )
        return ReviewResult(approved=not blocking, issues=issues, score=score)

    def reset(self) -> None:
        self.registry.set_status(self.role, ReviewerStatus.IDLE)
