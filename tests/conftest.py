"""Shared fixtures and collaborator fakes for vibepair tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Union

import pytest

from vibepair.agents.reviewer import Reviewer
from vibepair.agents.writer import Writer
from vibepair.core.orchestrator import PairWorkflowOrchestrator
from vibepair.core.registry import AgentStateRegistry
from vibepair.models.provider import (
    GenerationOptions,
    GenerationResponse,
    RawReview,
    ReviewOptions,
)

Scripted = Union[str, BaseException]


class FakeGenerator:
    """Generation collaborator returning scripted texts in order.

    A script entry that is an exception is raised instead of returned. When
    ``responder`` is given it is called with the prompt instead.
    """

    def __init__(
        self,
        script: Optional[list[Scripted]] = None,
        responder: Optional[Callable[[str], Scripted]] = None,
    ):
        self.script = list(script or [])
        self.responder = responder
        self.calls: list[tuple[str, GenerationOptions]] = []

    async def generate(self, prompt: str, options: GenerationOptions) -> GenerationResponse:
        self.calls.append((prompt, options))
        if self.responder is not None:
            outcome = self.responder(prompt)
        else:
            outcome = self.script.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return GenerationResponse(text=outcome)


class FakeReviewService:
    """Review collaborator returning scripted reviews in order."""

    def __init__(self, script: list[Union[RawReview, BaseException]]):
        self.script = list(script)
        self.calls: list[tuple[str, ReviewOptions]] = []

    async def review(self, code: str, options: ReviewOptions) -> RawReview:
        self.calls.append((code, options))
        outcome = self.script.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def registry() -> AgentStateRegistry:
    return AgentStateRegistry()


@pytest.fixture
def make_orchestrator(registry: AgentStateRegistry):
    """Factory: (generator script, review script) -> (orchestrator, generator, reviews)."""

    def _make(gen_script: list[Scripted], review_script: list, generator=None):
        generator = generator or FakeGenerator(gen_script)
        reviews = FakeReviewService(review_script)
        orchestrator = PairWorkflowOrchestrator(
            Writer(generator, registry),
            Reviewer(reviews, registry),
            registry,
        )
        return orchestrator, generator, reviews

    return _make


@pytest.fixture
def long_code() -> str:
    """A 200-character snippet, comfortably above the analysis size gate."""
    body = "function add(a, b) {\n  return a + b;\n}\n"
    return (body * 10)[:200]


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    project = tmp_path / "test-project"
    project.mkdir()
    (project / "src").mkdir()
    (project / "src" / "port.ts").write_text(
        "export function parsePort(value: string): number {\n  return parseInt(value);\n}\n",
        encoding="utf-8",
    )
    return project


@pytest.fixture
def initialized_project(tmp_project: Path) -> Path:
    config_dir = tmp_project / ".vibepair"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text(
        'project:\n  name: "test-project"\n\nworkflow:\n  max_iterations: 2\n\nai:\n  provider: openai\n',
        encoding="utf-8",
    )
    return tmp_project
