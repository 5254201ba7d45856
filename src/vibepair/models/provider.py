"""Collaborator data models: generation and review service payloads."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class CompletionResult(BaseModel):
    success: bool
    content: Optional[str] = None
    tokens_used: Optional[dict] = None
    error: Optional[str] = None


class GenerationOptions(BaseModel):
    temperature: float = 0.7
    max_tokens: int = 2048


class GenerationResponse(BaseModel):
    text: str
    tokens_used: Optional[dict] = None


class NativeSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    SUGGESTION = "suggestion"


class NativeCategory(str, Enum):
    BUG = "bug"
    SECURITY = "security"
    PERFORMANCE = "performance"
    STYLE = "style"
    COMPLEXITY = "complexity"
    BEST_PRACTICE = "best-practice"


class ReviewOptions(BaseModel):
    include_security: bool = True
    include_performance: bool = True
    include_style: bool = True
    file_path: Optional[str] = None
    language: str = "typescript"


class RawIssue(BaseModel):
    severity: NativeSeverity
    category: NativeCategory
    message: str
    fix: Optional[str] = None


class RawReview(BaseModel):
    issues: list[RawIssue] = []
