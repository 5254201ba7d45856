"""Tests for core/registry.py."""

from __future__ import annotations

import pytest

from vibepair.core.registry import AgentStateRegistry
from vibepair.models.agent import AgentRole, ReviewerStatus, WorkflowPhase, WriterStatus
from vibepair.models.annotation import AnnotationType, CodeAnnotation
from vibepair.models.workflow import GenerationResult, WorkflowRecord


def _record(n: int) -> WorkflowRecord:
    return WorkflowRecord(id=f"workflow-{n}", generation_result=GenerationResult(code="x"))


def _annotation(n: int) -> CodeAnnotation:
    return CodeAnnotation(
        id=f"reviewer-0-{n}",
        type=AnnotationType.BUG,
        message="m",
        agent=AgentRole.REVIEWER,
        line_start=1,
        line_end=1,
        file_path="a.ts",
    )


class TestStatus:
    def test_starts_idle(self, registry: AgentStateRegistry):
        assert registry.status(AgentRole.WRITER) == WriterStatus.IDLE
        assert registry.status(AgentRole.REVIEWER) == ReviewerStatus.IDLE
        assert registry.phase == WorkflowPhase.IDLE

    def test_set_status_overwrites_and_stamps(self, registry: AgentStateRegistry):
        assert registry.last_activity(AgentRole.WRITER) is None
        registry.set_status(AgentRole.WRITER, WriterStatus.CODING)
        assert registry.status(AgentRole.WRITER) == WriterStatus.CODING
        assert registry.last_activity(AgentRole.WRITER) is not None
        assert registry.last_activity(AgentRole.REVIEWER) is None

    def test_rejects_other_roles_vocabulary(self, registry: AgentStateRegistry):
        with pytest.raises(TypeError):
            registry.set_status(AgentRole.WRITER, ReviewerStatus.SCANNING)

    def test_set_phase(self, registry: AgentStateRegistry):
        registry.set_phase(WorkflowPhase.REVIEWER_REVIEWING)
        assert registry.phase == WorkflowPhase.REVIEWER_REVIEWING


class TestHistory:
    def test_appends_in_order(self, registry: AgentStateRegistry):
        registry.record_workflow(_record(1))
        registry.record_workflow(_record(2))
        assert [r.id for r in registry.history] == ["workflow-1", "workflow-2"]

    def test_no_deduplication(self, registry: AgentStateRegistry):
        record = _record(1)
        registry.record_workflow(record)
        registry.record_workflow(record)
        assert len(registry.history) == 2

    def test_history_limit_drops_oldest(self):
        registry = AgentStateRegistry(history_limit=2)
        for n in range(3):
            registry.record_workflow(_record(n))
        assert [r.id for r in registry.history] == ["workflow-1", "workflow-2"]

    def test_unbounded_history(self):
        registry = AgentStateRegistry(history_limit=None)
        for n in range(250):
            registry.record_workflow(_record(n))
        assert len(registry.history) == 250

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            AgentStateRegistry(history_limit=0)


class TestReset:
    def test_reset_restores_idle(self, registry: AgentStateRegistry):
        registry.set_status(AgentRole.WRITER, WriterStatus.ERROR)
        registry.set_status(AgentRole.REVIEWER, ReviewerStatus.ALERT)
        registry.set_phase(WorkflowPhase.ERROR)
        registry.record_workflow(_record(1))
        registry.increment_review_count()

        registry.reset()

        snap = registry.snapshot()
        assert snap.writer_status == WriterStatus.IDLE
        assert snap.reviewer_status == ReviewerStatus.IDLE
        assert snap.phase == WorkflowPhase.IDLE
        assert snap.history_size == 0
        assert snap.review_count == 0

    def test_reset_is_idempotent(self, registry: AgentStateRegistry):
        registry.set_phase(WorkflowPhase.COMPLETE)
        registry.record_workflow(_record(1))
        registry.reset()
        once = registry.snapshot()
        registry.reset()
        assert registry.snapshot() == once
        assert registry.history == []


class TestAnnotations:
    def test_set_replaces_per_file(self, registry: AgentStateRegistry):
        registry.set_annotations("a.ts", [_annotation(0), _annotation(1)])
        registry.set_annotations("a.ts", [_annotation(2)])
        assert [a.id for a in registry.annotations("a.ts")] == ["reviewer-0-2"]

    def test_files_are_independent(self, registry: AgentStateRegistry):
        registry.set_annotations("a.ts", [_annotation(0)])
        registry.set_annotations("b.ts", [])
        assert len(registry.annotations("a.ts")) == 1
        assert registry.annotations("b.ts") == []
        assert registry.annotations("missing.ts") == []

    def test_clear(self, registry: AgentStateRegistry):
        registry.set_annotations("a.ts", [_annotation(0)])
        registry.set_annotations("b.ts", [_annotation(1)])
        registry.clear_annotations("a.ts")
        assert registry.annotations("a.ts") == []
        registry.clear_annotations()
        assert registry.annotations("b.ts") == []


class TestCounters:
    def test_counters(self, registry: AgentStateRegistry):
        registry.increment_review_count()
        registry.increment_review_count()
        registry.increment_issues_found(3)
        registry.increment_issues_found(-1)
        assert registry.review_count == 2
        assert registry.issues_found == 3
