"""Prompt templates for the Writer and Reviewer agents."""

from __future__ import annotations

from typing import Optional

# Markers the mock provider keys on; keep them in the first line of each prompt.
WRITER_GENERATE_MARKER = "You are the Writer, a skilled code writer."
WRITER_REFINE_MARKER = "You are the Writer. The Reviewer found issues with this code."
REVIEWER_ANALYSIS_MARKER = "You are the Reviewer, a code review agent."
WRITER_ANALYSIS_MARKER = "You are the Writer, focused on performance and refactoring."
REVIEW_SERVICE_MARKER = "You are a static code reviewer."


def build_generation_prompt(
    prompt: str,
    existing_code: Optional[str] = None,
    language: str = "typescript",
    file_path: Optional[str] = None,
) -> str:
    parts = [WRITER_GENERATE_MARKER, "", f"User Request: {prompt}"]
    if existing_code:
        parts += ["", "Existing Code:", f"```{language}", existing_code, "```"]
    if file_path:
        parts += ["", f"Target File: {file_path}"]
    parts += [
        "",
        "Generate the code. Keep it clean, well-commented, and maintainable. "
        "Respond with the code only.",
    ]
    return "\n".join(parts)


def build_refine_prompt(code: str, feedback: str, language: str = "typescript") -> str:
    return (
        f"{WRITER_REFINE_MARKER} Refine it based on the feedback.\n\n"
        f"Original Code:\n```{language}\n{code}\n```\n\n"
        f"Reviewer Feedback:\n{feedback}\n\n"
        "Generate the improved code:"
    )


def build_reviewer_analysis_prompt(code: str) -> str:
    return (
        f"{REVIEWER_ANALYSIS_MARKER} Analyze this code snippet for bugs, style "
        "issues, and best practices.\n\n"
        f"Code:\n```\n{code}\n```\n\n"
        "Respond with a JSON array of objects. Each object should have:\n"
        '- "type": "bug" or "style"\n'
        '- "message": Brief description of the issue\n'
        '- "suggestion": Optional improvement suggestion\n'
        '- "lineStart": Starting line number (1-indexed)\n'
        '- "lineEnd": Ending line number (1-indexed)\n\n'
        "Only include real issues. Return an empty array if the code is good.\n"
        'Example: [{"type": "bug", "message": "Potential null reference", '
        '"suggestion": "Add null check", "lineStart": 5, "lineEnd": 5}]'
    )


def build_writer_analysis_prompt(code: str) -> str:
    return (
        f"{WRITER_ANALYSIS_MARKER} Analyze this code for optimization "
        "opportunities and refactoring suggestions.\n\n"
        f"Code:\n```\n{code}\n```\n\n"
        "Respond with a JSON array of objects. Each object should have:\n"
        '- "type": "performance" or "refactor"\n'
        '- "message": Brief description of the opportunity\n'
        '- "suggestion": Optional refactoring suggestion\n'
        '- "lineStart": Starting line number (1-indexed)\n'
        '- "lineEnd": Ending line number (1-indexed)\n\n'
        "Focus on meaningful improvements. Return an empty array if the code "
        "is already optimal.\n"
        'Example: [{"type": "performance", "message": "Consider memoizing this '
        'calculation", "suggestion": "Cache the result", "lineStart": 10, "lineEnd": 12}]'
    )


def build_review_service_prompt(
    code: str,
    language: str,
    categories: list[str],
    file_path: Optional[str] = None,
) -> str:
    location = f" from {file_path}" if file_path else ""
    return (
        f"{REVIEW_SERVICE_MARKER} Review the {language} code{location} below.\n\n"
        f"Code:\n```{language}\n{code}\n```\n\n"
        f"Report issues in these categories only: {', '.join(categories)}.\n"
        "Respond with a JSON array of objects. Each object should have:\n"
        '- "severity": "error", "warning", "info" or "suggestion"\n'
        f'- "category": one of {", ".join(categories)}\n'
        '- "message": Brief description of the issue\n'
        '- "fix": Optional suggested fix\n\n'
        "Return an empty array if there is nothing to report."
    )
