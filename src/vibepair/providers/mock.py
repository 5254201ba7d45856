"""Canned provider for dry runs: no network, deterministic output."""

from __future__ import annotations

from typing import Optional

from ..agents.prompts import (
    REVIEW_SERVICE_MARKER,
    REVIEWER_ANALYSIS_MARKER,
    WRITER_ANALYSIS_MARKER,
    WRITER_GENERATE_MARKER,
    WRITER_REFINE_MARKER,
)
from ..models.provider import CompletionResult
from .base import BaseProvider

UNCHECKED_MARKER = "// unchecked input"

MOCK_RESPONSES: dict[str, str] = {
    WRITER_GENERATE_MARKER: """```typescript
export function parsePort(value: string): number {
  """ + UNCHECKED_MARKER + """
  return parseInt(value);
}
```""",
    WRITER_REFINE_MARKER: """```typescript
export function parsePort(value: string): number {
  const port = Number.parseInt(value, 10);
  if (Number.isNaN(port) || port < 1 || port > 65535) {
    throw new RangeError(`Invalid port: ${value}`);
  }
  return port;
}
```""",
    REVIEWER_ANALYSIS_MARKER: """Here is what I found:
[
  {"type": "bug", "message": "parseInt without a radix", "suggestion": "Pass 10 as the radix", "lineStart": 3, "lineEnd": 3},
  {"type": "style", "message": "Missing JSDoc on exported function", "lineStart": 1}
]""",
    WRITER_ANALYSIS_MARKER: """[
  {"type": "refactor", "message": "Validate the range once at the boundary", "suggestion": "Extract a PORT_RANGE constant", "lineStart": 2, "lineEnd": 4}
]""",
}

_FLAGGED_REVIEW = """[
  {"severity": "warning", "category": "bug", "message": "Input is parsed without validation", "fix": "Reject NaN and out-of-range ports"},
  {"severity": "info", "category": "complexity", "message": "parseInt called without a radix"}
]"""


class MockProvider(BaseProvider):
    name = "mock"

    async def complete(
        self,
        prompt: str,
        temperature: float,
        max_tokens: int,
        system_prompt: Optional[str] = None,
    ) -> CompletionResult:
        if prompt.startswith(REVIEW_SERVICE_MARKER):
            content = _FLAGGED_REVIEW if UNCHECKED_MARKER in prompt else "[]"
            return CompletionResult(success=True, content=content)

        for marker, response in MOCK_RESPONSES.items():
            if prompt.startswith(marker):
                return CompletionResult(success=True, content=response)

        return CompletionResult(success=False, error="400 | mock provider has no canned response")
