"""Response parser: converts free-form model output into validated annotations.

Two stages. The first pulls the outermost array-shaped substring out of the
text and decodes it. The second validates every element on its own, so one
malformed entry never sinks the rest of the array.
"""

from __future__ import annotations

import json
import math
import re
import time
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..models.agent import AgentRole
from ..models.annotation import AnnotationType, CodeAnnotation

_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def extract_json_array(text: str) -> Optional[list]:
    """Return the list spanning the first '[' to the last ']', or None."""
    if not text:
        return None
    match = _ARRAY_PATTERN.search(text)
    if not match:
        return None
    try:
        decoded = json.loads(match.group(0))
    except ValueError:
        return None
    return decoded if isinstance(decoded, list) else None


class _RawAnnotation(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: AnnotationType
    message: str = Field(min_length=1)
    suggestion: Optional[str] = None
    line_start: int = Field(alias="lineStart")
    line_end: Optional[int] = Field(default=None, alias="lineEnd")

    @field_validator("line_start", mode="before")
    @classmethod
    def _positive_number(cls, value: Any) -> Any:
        if not _is_number(value) or value <= 0:
            raise ValueError("lineStart must be a number greater than 0")
        return max(1, math.floor(value))

    @field_validator("line_end", mode="before")
    @classmethod
    def _optional_number(cls, value: Any) -> Any:
        return math.floor(value) if _is_number(value) else None

    @field_validator("suggestion", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return value if isinstance(value, str) and value else None


def _validate(item: Any) -> Optional[_RawAnnotation]:
    if not isinstance(item, dict):
        return None
    try:
        return _RawAnnotation.model_validate(item)
    except ValidationError:
        return None


def parse_annotations(raw_text: str, agent: AgentRole) -> list[CodeAnnotation]:
    """Parse model output into annotations. Never raises on bad input."""
    items = extract_json_array(raw_text)
    if not items:
        return []

    valid = [raw for raw in (_validate(item) for item in items) if raw is not None]

    stamp = int(time.time() * 1000)
    annotations: list[CodeAnnotation] = []
    for index, raw in enumerate(valid):
        line_start = raw.line_start
        line_end = line_start
        if raw.line_end is not None and raw.line_end >= line_start:
            line_end = raw.line_end

        annotations.append(
            CodeAnnotation(
                id=f"{agent.value}-{stamp}-{index}",
                type=raw.type,
                message=raw.message,
                suggestion=raw.suggestion,
                agent=agent,
                line_start=line_start,
                line_end=line_end,
            )
        )
    return annotations
