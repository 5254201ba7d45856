"""vibepair command line: run the Writer/Reviewer pair or a live-analysis pass."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__

console = Console()

EXIT_OK = 0
EXIT_NOT_APPROVED = 1
EXIT_BAD_PROJECT = 12
EXIT_PROVIDER = 13
EXIT_COLLABORATOR = 14


def _load_config(
    project: Optional[str],
    dry_run: bool,
    ai_provider: Optional[str] = None,
) -> dict:
    from ..core.config import get_effective_config

    project_path = None
    if project:
        project_path = Path(project).resolve()
        if not project_path.is_dir():
            console.print(f"  [red]ERROR[/red] Project path does not exist: {escape(str(project_path))}")
            sys.exit(EXIT_BAD_PROJECT)

    overrides: dict = {}
    if dry_run:
        overrides["ai"] = {"provider": "mock", "retry_attempts": 1}
    elif ai_provider:
        overrides["ai"] = {"provider": ai_provider}

    return get_effective_config(project_path, cli_overrides=overrides or None)


def _build_provider(config: dict, ai_model: Optional[str] = None):
    from ..providers.base import get_ai_provider

    try:
        provider = get_ai_provider(config, model_override=ai_model)
    except ValueError as e:
        console.print(f"  [red]ERROR[/red] Failed to initialize AI provider: {escape(str(e))}")
        sys.exit(EXIT_PROVIDER)
    console.print(f"  [green]OK[/green] Provider: {provider.name}")
    return provider


@click.group()
@click.version_option(__version__, prog_name="vibepair")
def cli() -> None:
    """vibepair - Writer/Reviewer agent pair for code generation and live review."""


@cli.command()
@click.option("--project", "-p", type=click.Path(exists=True, file_okay=False), required=True)
def init(project: str) -> None:
    """Create .vibepair/config.yaml in a project."""
    from ..core.config import initialize_project

    path = initialize_project(Path(project))
    console.print(f"  [green]Initialized[/green] {escape(str(path))}")


@cli.command()
@click.argument("prompt")
@click.option("--project", "-p", type=click.Path(file_okay=False))
@click.option("--converge", is_flag=True, help="Loop until the score reaches --min-score")
@click.option("--max-iterations", type=click.IntRange(min=1), help="Iteration budget")
@click.option("--min-score", type=click.IntRange(0, 100), help="Score needed to converge")
@click.option("--file", "file_path", type=str, help="Target file, used as prompt context")
@click.option("--language", type=str, help="Language of the generated code")
@click.option("--dry-run", is_flag=True, help="Use canned responses (no API calls)")
@click.option("--ai-provider", type=click.Choice(["anthropic", "openai", "ollama"]))
@click.option("--ai-model", type=str, help="Model override")
def generate(
    prompt: str,
    project: Optional[str],
    converge: bool,
    max_iterations: Optional[int],
    min_score: Optional[int],
    file_path: Optional[str],
    language: Optional[str],
    dry_run: bool,
    ai_provider: Optional[str],
    ai_model: Optional[str],
) -> None:
    """Generate code for PROMPT and refine it until the Reviewer approves."""
    from ..agents.reviewer import Reviewer
    from ..agents.writer import Writer
    from ..core.orchestrator import PairWorkflowOrchestrator
    from ..core.registry import AgentStateRegistry
    from ..exceptions import VibePairError
    from ..models.agent import WorkflowPhase
    from ..models.workflow import WorkflowContext
    from ..providers.review import LLMReviewService

    config = _load_config(project, dry_run, ai_provider)
    provider = _build_provider(config, ai_model)
    workflow_cfg = config.get("workflow", {})
    reviewer_cfg = config.get("reviewer", {})

    try:
        registry = AgentStateRegistry(history_limit=workflow_cfg.get("history_limit", 100))
    except (TypeError, ValueError) as e:
        console.print(f"  [red]ERROR[/red] Invalid workflow config: {escape(str(e))}")
        sys.exit(EXIT_BAD_PROJECT)
    orchestrator = PairWorkflowOrchestrator(
        Writer(provider, registry, config.get("writer")),
        Reviewer(
            LLMReviewService(
                provider,
                temperature=reviewer_cfg.get("temperature", 0.2),
                max_tokens=reviewer_cfg.get("max_tokens", 2048),
            ),
            registry,
            reviewer_cfg,
        ),
        registry,
    )

    existing_code = None
    if file_path and Path(file_path).is_file():
        existing_code = Path(file_path).read_text(encoding="utf-8")
    context = WorkflowContext(
        file_path=file_path,
        existing_code=existing_code,
        language=language or config.get("project", {}).get("language", "typescript"),
    )

    try:
        if converge:
            record = asyncio.run(
                orchestrator.run_until_converged(
                    prompt,
                    context,
                    max_iterations=max_iterations or workflow_cfg.get("converge_max_iterations", 5),
                    min_score=min_score if min_score is not None else workflow_cfg.get("min_score", 80),
                )
            )
        else:
            record = asyncio.run(
                orchestrator.run_pipeline(
                    prompt,
                    context,
                    max_iterations=max_iterations or workflow_cfg.get("max_iterations", 3),
                )
            )
    except VibePairError as e:
        console.print(f"  [red]ERROR[/red] {escape(str(e))}")
        sys.exit(EXIT_COLLABORATOR)

    review = record.review_result
    console.print()
    console.print(f"  Workflow:   [white]{record.id}[/white]")
    console.print(f"  Calls:      {record.iterations} ({record.refinement_cycles} refinement(s))")
    if review is not None:
        color = "green" if review.approved else "yellow"
        console.print(f"  Score:      [{color}]{review.score}[/{color}]")
        for issue in review.issues:
            console.print(f"    [dim]{issue.severity.value:<8}[/dim] {escape(issue.message)}")
    console.print()
    click.echo(record.final_code)

    accepted = registry.phase == WorkflowPhase.COMPLETE
    sys.exit(EXIT_OK if accepted else EXIT_NOT_APPROVED)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--project", "-p", type=click.Path(file_okay=False))
@click.option("--dry-run", is_flag=True, help="Use canned responses (no API calls)")
@click.option("--ai-provider", type=click.Choice(["anthropic", "openai", "ollama"]))
@click.option("--ai-model", type=str, help="Model override")
def analyze(
    file: str,
    project: Optional[str],
    dry_run: bool,
    ai_provider: Optional[str],
    ai_model: Optional[str],
) -> None:
    """Run one live-analysis pass over FILE and list the annotations."""
    from ..core.registry import AgentStateRegistry
    from ..core.scheduler import AnalysisScheduler
    from ..exceptions import AnalysisError

    config = _load_config(project, dry_run, ai_provider)
    provider = _build_provider(config, ai_model)
    registry = AgentStateRegistry()
    scheduler = AnalysisScheduler.from_config(registry, provider, config)

    code = Path(file).read_text(encoding="utf-8")
    try:
        annotations = asyncio.run(scheduler.analyze(code, file))
    except AnalysisError as e:
        console.print(f"  [red]ERROR[/red] {escape(str(e))}")
        sys.exit(EXIT_COLLABORATOR)

    if not annotations:
        console.print("  [green]OK[/green] No annotations")
        return

    table = Table(title=f"Code vibes: {escape(file)}")
    table.add_column("Lines", justify="right")
    table.add_column("Type")
    table.add_column("Agent")
    table.add_column("Message")
    for a in annotations:
        lines = str(a.line_start) if a.line_end == a.line_start else f"{a.line_start}-{a.line_end}"
        message = escape(a.message)
        if a.suggestion:
            message += f"\n[dim]{escape(a.suggestion)}[/dim]"
        table.add_row(lines, a.type.value, a.agent.value, message)
    console.print(table)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
