"""Generation, review, and workflow record models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class IssueCategory(str, Enum):
    BUG = "bug"
    SECURITY = "security"
    PERFORMANCE = "performance"
    STYLE = "style"
    BEST_PRACTICE = "best-practice"


class GenerationResult(BaseModel):
    code: str
    explanation: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class Issue(BaseModel):
    severity: Severity
    category: IssueCategory
    message: str
    suggestion: Optional[str] = None


class ReviewResult(BaseModel):
    approved: bool
    issues: list[Issue] = []
    score: int = Field(ge=0, le=100)


class WorkflowContext(BaseModel):
    """Optional context passed along with a generation prompt."""

    file_path: Optional[str] = None
    existing_code: Optional[str] = None
    language: str = "typescript"


class ThresholdConfig(BaseModel):
    max_iterations: int = Field(default=3, ge=1)
    min_score: int = Field(default=80, ge=0, le=100)


class WorkflowRecord(BaseModel):
    id: str
    generation_result: GenerationResult
    review_result: Optional[ReviewResult] = None
    refined_code: Optional[str] = None
    iterations: int = 0
    refinement_cycles: int = 0
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def final_code(self) -> str:
        return self.refined_code if self.refined_code is not None else self.generation_result.code
