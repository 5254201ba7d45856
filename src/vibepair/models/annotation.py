"""Inline code annotation ("vibe") models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .agent import AgentRole


class AnnotationType(str, Enum):
    BUG = "bug"
    STYLE = "style"
    PERFORMANCE = "performance"
    REFACTOR = "refactor"


class CodeAnnotation(BaseModel):
    id: str
    type: AnnotationType
    message: str
    suggestion: Optional[str] = None
    agent: AgentRole
    line_start: int = Field(ge=1)
    line_end: int = Field(ge=1)
    file_path: str = ""
    created_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def _check_range(self) -> "CodeAnnotation":
        if self.line_end < self.line_start:
            raise ValueError("line_end must not precede line_start")
        return self
