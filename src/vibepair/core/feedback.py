"""Feedback formatter: turns review issues into a refinement message for the Writer."""

from __future__ import annotations

from typing import Sequence

from ..models.workflow import Issue, Severity

LOOKS_GOOD = "Code looks good!"

MAX_MEDIUM = 5
MAX_LOW = 3


def _render(issues: Sequence[Issue]) -> list[str]:
    lines: list[str] = []
    for issue in issues:
        lines.append(f"- {issue.message}")
        if issue.suggestion:
            lines.append(f"  Suggestion: {issue.suggestion}")
    return lines


def format_feedback(issues: Sequence[Issue]) -> str:
    """Render issues as labeled sections, most severe first.

    Medium issues are capped at five. Low issues only appear when there is
    nothing critical or high, capped at three.
    """
    if not issues:
        return LOOKS_GOOD

    by_severity: dict[Severity, list[Issue]] = {s: [] for s in Severity}
    for issue in issues:
        by_severity[issue.severity].append(issue)

    critical = by_severity[Severity.CRITICAL]
    high = by_severity[Severity.HIGH]
    medium = by_severity[Severity.MEDIUM]
    low = by_severity[Severity.LOW]

    sections: list[tuple[str, list[Issue]]] = [
        ("CRITICAL ISSUES:", critical),
        ("HIGH PRIORITY:", high),
        ("MEDIUM PRIORITY:", medium[:MAX_MEDIUM]),
    ]
    if not critical and not high:
        sections.append(("MINOR SUGGESTIONS:", low[:MAX_LOW]))

    lines = ["Found some issues that need attention:", ""]
    for title, section in sections:
        if not section:
            continue
        lines.append(title)
        lines.extend(_render(section))
        lines.append("")

    return "\n".join(lines).strip()
