"""Agent state registry.

Single owner of the Writer/Reviewer statuses, the global workflow phase,
the workflow history and the per-file annotation sets. Every other component
reads and writes through one injected instance so that observers always see
a consistent snapshot.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Optional

from ..models.agent import (
    AgentRole,
    AgentStatus,
    RegistrySnapshot,
    ReviewerStatus,
    WorkflowPhase,
    WriterStatus,
)
from ..models.annotation import CodeAnnotation
from ..models.workflow import WorkflowRecord

STATUS_TYPES: dict[AgentRole, type] = {
    AgentRole.WRITER: WriterStatus,
    AgentRole.REVIEWER: ReviewerStatus,
}

IDLE_STATUSES: dict[AgentRole, AgentStatus] = {
    AgentRole.WRITER: WriterStatus.IDLE,
    AgentRole.REVIEWER: ReviewerStatus.IDLE,
}


class AgentStateRegistry:
    def __init__(self, history_limit: Optional[int] = 100):
        if history_limit is not None and history_limit < 1:
            raise ValueError("history_limit must be at least 1 or None")
        self.history_limit = history_limit
        self._statuses: dict[AgentRole, AgentStatus] = dict(IDLE_STATUSES)
        self._last_activity: dict[AgentRole, Optional[datetime]] = {
            role: None for role in AgentRole
        }
        self._phase = WorkflowPhase.IDLE
        self._history: deque[WorkflowRecord] = deque(maxlen=history_limit)
        self._annotations: dict[str, list[CodeAnnotation]] = {}
        self._review_count = 0
        self._issues_found = 0

    # -- agent status -------------------------------------------------------

    def set_status(self, role: AgentRole, status: AgentStatus) -> None:
        expected = STATUS_TYPES[AgentRole(role)]
        if not isinstance(status, expected):
            raise TypeError(
                f"{role.value} status must be a {expected.__name__}, got {status!r}"
            )
        self._statuses[role] = status
        self._last_activity[role] = datetime.now()

    def status(self, role: AgentRole) -> AgentStatus:
        return self._statuses[role]

    def last_activity(self, role: AgentRole) -> Optional[datetime]:
        return self._last_activity[role]

    # -- workflow phase -----------------------------------------------------

    def set_phase(self, phase: WorkflowPhase) -> None:
        self._phase = WorkflowPhase(phase)

    @property
    def phase(self) -> WorkflowPhase:
        return self._phase

    # -- history ------------------------------------------------------------

    def record_workflow(self, record: WorkflowRecord) -> None:
        """Append a completed workflow. The oldest entry drops once the limit is hit."""
        self._history.append(record)

    @property
    def history(self) -> list[WorkflowRecord]:
        return list(self._history)

    # -- counters -----------------------------------------------------------

    def increment_review_count(self) -> None:
        self._review_count += 1

    def increment_issues_found(self, count: int) -> None:
        self._issues_found += max(0, count)

    @property
    def review_count(self) -> int:
        return self._review_count

    @property
    def issues_found(self) -> int:
        return self._issues_found

    # -- annotations --------------------------------------------------------

    def set_annotations(self, file_path: str, annotations: list[CodeAnnotation]) -> None:
        """Replace the whole annotation set for a file."""
        self._annotations[file_path] = list(annotations)

    def annotations(self, file_path: str) -> list[CodeAnnotation]:
        return list(self._annotations.get(file_path, []))

    def clear_annotations(self, file_path: Optional[str] = None) -> None:
        if file_path is None:
            self._annotations.clear()
        else:
            self._annotations.pop(file_path, None)

    # -- lifecycle ----------------------------------------------------------

    def reset(self) -> None:
        """Return both agents to idle, the phase to idle, and drop the history."""
        self._statuses = dict(IDLE_STATUSES)
        self._last_activity = {role: None for role in AgentRole}
        self._phase = WorkflowPhase.IDLE
        self._history.clear()
        self._review_count = 0
        self._issues_found = 0

    def snapshot(self) -> RegistrySnapshot:
        return RegistrySnapshot(
            writer_status=self._statuses[AgentRole.WRITER],
            reviewer_status=self._statuses[AgentRole.REVIEWER],
            phase=self._phase,
            writer_last_activity=self._last_activity[AgentRole.WRITER],
            reviewer_last_activity=self._last_activity[AgentRole.REVIEWER],
            review_count=self._review_count,
            issues_found=self._issues_found,
            history_size=len(self._history),
        )
