"""Review collaborator: scores code by asking a generation provider for issues."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import ValidationError
from rich.console import Console

from ..agents.prompts import build_review_service_prompt
from ..core.parser import extract_json_array
from ..exceptions import GenerationError, ReviewError
from ..models.provider import (
    GenerationOptions,
    NativeCategory,
    RawIssue,
    RawReview,
    ReviewOptions,
)
from .base import GenerationService

console = Console()


@runtime_checkable
class ReviewService(Protocol):
    """Anything that turns code into a list of native-taxonomy issues."""

    async def review(self, code: str, options: ReviewOptions) -> RawReview: ...


def _categories_for(options: ReviewOptions) -> list[str]:
    categories = [NativeCategory.BUG, NativeCategory.COMPLEXITY, NativeCategory.BEST_PRACTICE]
    if options.include_security:
        categories.append(NativeCategory.SECURITY)
    if options.include_performance:
        categories.append(NativeCategory.PERFORMANCE)
    if options.include_style:
        categories.append(NativeCategory.STYLE)
    return [c.value for c in categories]


class LLMReviewService:
    """Review service backed by a generation provider at low temperature."""

    def __init__(self, generator: GenerationService, temperature: float = 0.2, max_tokens: int = 2048):
        self.generator = generator
        self.options = GenerationOptions(temperature=temperature, max_tokens=max_tokens)

    async def review(self, code: str, options: ReviewOptions) -> RawReview:
        categories = _categories_for(options)
        prompt = build_review_service_prompt(code, options.language, categories, options.file_path)

        try:
            response = await self.generator.generate(prompt, self.options)
        except GenerationError as e:
            raise ReviewError(str(e)) from e

        items = extract_json_array(response.text)
        if items is None:
            raise ReviewError("Review response did not contain a JSON array of issues")

        issues: list[RawIssue] = []
        dropped = 0
        for item in items:
            try:
                issue = RawIssue.model_validate(item)
            except ValidationError:
                dropped += 1
                continue
            if issue.category.value in categories:
                issues.append(issue)

        if dropped:
            console.print(f"  [dim]Review: dropped {dropped} malformed issue(s)[/dim]")
        return RawReview(issues=issues)
