"""Pair workflow orchestrator.

Drives the Writer -> Reviewer -> Writer loop. Both public entry points share a
single loop parameterized by a ``LoopPolicy``:

- ``run_pipeline``: approval is the Reviewer's own verdict, and the budget
  counts refinement cycles after the first review.
- ``run_until_converged``: approval also requires the caller's minimum score,
  and the budget counts review passes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape

from ..agents.reviewer import Reviewer
from ..agents.writer import Writer
from ..exceptions import WorkflowInProgressError
from ..models.agent import WorkflowPhase
from ..models.workflow import (
    GenerationResult,
    ReviewResult,
    ThresholdConfig,
    WorkflowContext,
    WorkflowRecord,
)
from .feedback import format_feedback
from .registry import AgentStateRegistry

console = Console()


@dataclass(frozen=True)
class LoopPolicy:
    name: str
    accepts: Callable[[ReviewResult], bool]
    max_refinements: int
    # Record the accepted code as refined_code even when no refinement happened
    keep_accepted_code: bool = False


def _new_workflow_id() -> str:
    return f"workflow-{int(datetime.now().timestamp() * 1000)}-{uuid.uuid4().hex[:9]}"


class PairWorkflowOrchestrator:
    def __init__(self, writer: Writer, reviewer: Reviewer, registry: AgentStateRegistry):
        self.writer = writer
        self.reviewer = reviewer
        self.registry = registry
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def run_pipeline(
        self,
        prompt: str,
        context: Optional[WorkflowContext] = None,
        max_iterations: int = 3,
    ) -> WorkflowRecord:
        """Generate, review, and refine until approved or the refinement budget runs out.

        Makes at most ``2 + 2 * max_iterations`` collaborator calls.
        """
        thresholds = ThresholdConfig(max_iterations=max_iterations)
        policy = LoopPolicy(
            name="pipeline",
            accepts=lambda review: review.approved,
            max_refinements=thresholds.max_iterations,
        )
        return await self._run(prompt, context, policy)

    async def run_until_converged(
        self,
        prompt: str,
        context: Optional[WorkflowContext] = None,
        max_iterations: int = 5,
        min_score: int = 80,
    ) -> WorkflowRecord:
        """Review/refine until the review is approved with ``score >= min_score``.

        ``max_iterations`` bounds the number of review passes, not collaborator
        calls: a run makes at most ``2 * max_iterations - 1`` calls.
        """
        thresholds = ThresholdConfig(max_iterations=max_iterations, min_score=min_score)
        policy = LoopPolicy(
            name="convergence",
            accepts=lambda review: review.approved and review.score >= thresholds.min_score,
            max_refinements=thresholds.max_iterations - 1,
            keep_accepted_code=True,
        )
        return await self._run(prompt, context, policy)

    async def _run(
        self,
        prompt: str,
        context: Optional[WorkflowContext],
        policy: LoopPolicy,
    ) -> WorkflowRecord:
        if self._in_flight:
            raise WorkflowInProgressError("A pair workflow is already running")
        self._in_flight = True

        record = WorkflowRecord(
            id=_new_workflow_id(),
            generation_result=GenerationResult(code="", confidence=0.0),
        )

        try:
            accepted = await self._loop(prompt, context, policy, record)
        except Exception as e:
            record.completed_at = datetime.now()
            self.registry.set_phase(WorkflowPhase.ERROR)
            console.print(
                f"  [red]FAILED[/red] {policy.name} {record.id} after "
                f"{record.iterations} call(s): {escape(str(e))}"
            )
            raise
        finally:
            self._in_flight = False

        record.completed_at = datetime.now()
        self.registry.set_phase(WorkflowPhase.COMPLETE if accepted else WorkflowPhase.IDLE)
        self.registry.record_workflow(record)

        score = record.review_result.score if record.review_result else 0
        if accepted:
            console.print(
                f"  [green]OK[/green] {policy.name} {record.id}: approved "
                f"(score {score}, {record.iterations} calls)"
            )
        else:
            console.print(
                f"  [yellow]WARN[/yellow] {policy.name} {record.id}: not approved "
                f"after {record.refinement_cycles} refinement(s) (score {score})"
            )
        return record

    async def _loop(
        self,
        prompt: str,
        context: Optional[WorkflowContext],
        policy: LoopPolicy,
        record: WorkflowRecord,
    ) -> bool:
        self.registry.set_phase(WorkflowPhase.WRITER_GENERATING)
        generation = await self.writer.generate_code(prompt, context)
        record.generation_result = generation
        record.iterations += 1
        code = generation.code

        while True:
            self.registry.set_phase(WorkflowPhase.REVIEWER_REVIEWING)
            review = await self.reviewer.review_code(code, context)
            record.review_result = review
            record.iterations += 1

            if policy.accepts(review):
                if policy.keep_accepted_code:
                    record.refined_code = code
                return True

            if record.refinement_cycles >= policy.max_refinements:
                return False

            feedback = format_feedback(review.issues)
            self.registry.set_phase(WorkflowPhase.WRITER_REFINING)
            refined = await self.writer.refine_code(code, feedback, context)
            code = refined.code
            record.refined_code = code
            record.iterations += 1
            record.refinement_cycles += 1
