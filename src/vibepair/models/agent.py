"""Agent role, status, and workflow phase models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class AgentRole(str, Enum):
    WRITER = "writer"
    REVIEWER = "reviewer"


class WriterStatus(str, Enum):
    IDLE = "idle"
    THINKING = "thinking"
    CODING = "coding"
    REFINING = "refining"
    SUCCESS = "success"
    ERROR = "error"


class ReviewerStatus(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    REVIEWING = "reviewing"
    APPROVED = "approved"
    ALERT = "alert"
    ERROR = "error"


class WorkflowPhase(str, Enum):
    IDLE = "idle"
    WRITER_GENERATING = "writer-generating"
    REVIEWER_REVIEWING = "reviewer-reviewing"
    WRITER_REFINING = "writer-refining"
    COMPLETE = "complete"
    ERROR = "error"


AgentStatus = Union[WriterStatus, ReviewerStatus]


class RegistrySnapshot(BaseModel):
    """Point-in-time view of the registry for UI polling."""

    model_config = ConfigDict(frozen=True)

    writer_status: WriterStatus
    reviewer_status: ReviewerStatus
    phase: WorkflowPhase
    writer_last_activity: Optional[datetime] = None
    reviewer_last_activity: Optional[datetime] = None
    review_count: int = 0
    issues_found: int = 0
    history_size: int = 0
