"""Debounced live analysis.

Edits are debounced per file. When a file goes quiet the Reviewer-style and
Writer-style branches run concurrently, their annotations are merged in a
fixed order, and the merged set replaces the file's annotations in the
registry.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape

from ..agents.prompts import build_reviewer_analysis_prompt, build_writer_analysis_prompt
from ..exceptions import AnalysisError
from ..models.agent import AgentRole, ReviewerStatus, WriterStatus
from ..models.annotation import AnnotationType, CodeAnnotation
from ..models.provider import GenerationOptions
from ..providers.base import GenerationService
from .parser import parse_annotations
from .registry import AgentStateRegistry

console = Console()

DEBOUNCE_SECONDS = 1.5
MIN_CHUNK_SIZE = 50


@dataclass
class AnalysisBranch:
    """One side of the fan-out: which agent, which prompt, which annotation types."""

    role: AgentRole
    generator: GenerationService
    build_prompt: Callable[[str], str]
    options: GenerationOptions
    allowed_types: frozenset[AnnotationType]

    async def run(self, code: str) -> list[CodeAnnotation]:
        response = await self.generator.generate(self.build_prompt(code), self.options)
        annotations = parse_annotations(response.text, self.role)
        return [a for a in annotations if a.type in self.allowed_types]


def reviewer_branch(generator: GenerationService, config: Optional[dict] = None) -> AnalysisBranch:
    config = config or {}
    return AnalysisBranch(
        role=AgentRole.REVIEWER,
        generator=generator,
        build_prompt=build_reviewer_analysis_prompt,
        options=GenerationOptions(
            temperature=config.get("analysis_temperature", 0.3),
            max_tokens=config.get("analysis_max_tokens", 1000),
        ),
        allowed_types=frozenset({AnnotationType.BUG, AnnotationType.STYLE}),
    )


def writer_branch(generator: GenerationService, config: Optional[dict] = None) -> AnalysisBranch:
    config = config or {}
    return AnalysisBranch(
        role=AgentRole.WRITER,
        generator=generator,
        build_prompt=build_writer_analysis_prompt,
        options=GenerationOptions(
            temperature=config.get("analysis_temperature", 0.91),
            max_tokens=config.get("analysis_max_tokens", 1000),
        ),
        allowed_types=frozenset({AnnotationType.PERFORMANCE, AnnotationType.REFACTOR}),
    )


class AnalysisScheduler:
    def __init__(
        self,
        registry: AgentStateRegistry,
        reviewer: AnalysisBranch,
        writer: AnalysisBranch,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        min_chunk_size: int = MIN_CHUNK_SIZE,
        drop_stale_results: bool = False,
    ):
        self.registry = registry
        # Merge order follows this tuple, whatever order the calls finish in
        self.branches = (reviewer, writer)
        self.debounce_seconds = debounce_seconds
        self.min_chunk_size = min_chunk_size
        self.drop_stale_results = drop_stale_results
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task] = set()
        self._generation_counter = itertools.count(1)
        self._latest: dict[str, int] = {}

    @classmethod
    def from_config(
        cls,
        registry: AgentStateRegistry,
        generator: GenerationService,
        config: dict,
    ) -> "AnalysisScheduler":
        analysis = config.get("analysis", {})
        return cls(
            registry,
            reviewer=reviewer_branch(generator, config.get("reviewer")),
            writer=writer_branch(generator, config.get("writer")),
            debounce_seconds=analysis.get("debounce_seconds", DEBOUNCE_SECONDS),
            min_chunk_size=analysis.get("min_chunk_size", MIN_CHUNK_SIZE),
            drop_stale_results=analysis.get("drop_stale_results", False),
        )

    # -- scheduling ---------------------------------------------------------

    def on_edit(self, code: str, file_path: str) -> None:
        """Schedule an analysis once the file has been quiet for the debounce delay.

        Must be called from a running event loop.
        """
        if len(code.strip()) < self.min_chunk_size:
            return

        loop = asyncio.get_running_loop()
        pending = self._timers.pop(file_path, None)
        if pending is not None:
            pending.cancel()
        self._timers[file_path] = loop.call_later(
            self.debounce_seconds, self._fire, code, file_path
        )

    def _fire(self, code: str, file_path: str) -> None:
        self._timers.pop(file_path, None)
        task = asyncio.ensure_future(self._analyze_quietly(code, file_path))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _analyze_quietly(self, code: str, file_path: str) -> None:
        try:
            await self.analyze(code, file_path)
        except AnalysisError as e:
            console.print(f"  [red]FAILED[/red] Analysis of {escape(file_path)}: {escape(str(e))}")

    @property
    def pending(self) -> bool:
        return bool(self._timers or self._tasks)

    def cancel_pending(self) -> None:
        """Drop scheduled timers. Analyses already running are left alone."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    async def wait_idle(self) -> None:
        """Wait until no timer is scheduled and no analysis is running."""
        while self._timers or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(self.debounce_seconds / 4)

    # -- analysis -----------------------------------------------------------

    async def analyze(self, code: str, file_path: str) -> list[CodeAnnotation]:
        generation = next(self._generation_counter)
        self._latest[file_path] = generation
        try:
            return await self._analyze(code, file_path, generation)
        finally:
            # Only the newest analysis of a file releases its entry
            if self._latest.get(file_path) == generation:
                del self._latest[file_path]

    async def _analyze(self, code: str, file_path: str, generation: int) -> list[CodeAnnotation]:
        self.registry.set_status(AgentRole.WRITER, WriterStatus.THINKING)
        self.registry.set_status(AgentRole.REVIEWER, ReviewerStatus.SCANNING)

        outcomes = await asyncio.gather(
            *(branch.run(code) for branch in self.branches),
            return_exceptions=True,
        )

        annotations: list[CodeAnnotation] = []
        failures: list[BaseException] = []
        for branch, outcome in zip(self.branches, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                failures.append(outcome)
                console.print(
                    f"  [yellow]WARN[/yellow] {branch.role.value} analysis failed: {escape(str(outcome))}"
                )
                continue
            annotations.extend(a.model_copy(update={"file_path": file_path}) for a in outcome)

        if len(failures) == len(self.branches):
            self.registry.set_status(AgentRole.WRITER, WriterStatus.ERROR)
            self.registry.set_status(AgentRole.REVIEWER, ReviewerStatus.ERROR)
            raise AnalysisError(
                f"All analysis branches failed for {file_path}", failures
            ) from failures[0]

        self.registry.set_status(AgentRole.WRITER, WriterStatus.IDLE)
        self.registry.set_status(AgentRole.REVIEWER, ReviewerStatus.IDLE)

        if self.drop_stale_results and generation != self._latest.get(file_path):
            console.print(f"  [dim]Discarded stale analysis of {escape(file_path)}[/dim]")
            return annotations

        self.registry.set_annotations(file_path, annotations)
        if annotations:
            console.print(
                f"  [cyan]Found {len(annotations)} code vibe(s) in {escape(file_path)}[/cyan]"
            )
        return annotations
