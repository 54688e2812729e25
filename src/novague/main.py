"""Main CLI entry point for NoVague.

Usage:
    novague design "an Instagram-like photo sharing app" --output project.json
    novague graph "an online shop" --mode data-flow
    novague serve --port 8000
"""

from __future__ import annotations

import asyncio
import json
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from novague.config import NovagueConfig, load_config
from novague.generation.backend import HttpGenerationBackend
from novague.logging import setup_logging
from novague.models.analysis import ProjectAnalysis
from novague.models.components import ComponentArchitecture
from novague.models.data import DataArchitecture
from novague.models.graph import ProjectionMode, VisualizationGraph
from novague.models.project import Project
from novague.models.ux import ScreenAnalysis
from novague.models.validation import ValidationResult
from novague.pipeline.orchestrator import DesignPipeline, PipelineError
from novague.pipeline.state import STAGE_LABELS, Stage
from novague.stages.contracts import StageContext

app = typer.Typer(
    name="novague",
    help="NoVague: turn a product idea into a specified software design",
    no_args_is_help=True,
)

console = Console()


class AppContext:
    """Application context shared across CLI commands.

    Attributes:
        config: Loaded NoVague configuration
    """

    def __init__(self, config: NovagueConfig):
        self.config = config


_app_context: AppContext | None = None


def get_app_context() -> AppContext:
    """Get the shared application context.

    Raises:
        RuntimeError: If context has not been initialized
    """
    if _app_context is None:
        raise RuntimeError("Application context not initialized. Call initialize_context first.")
    return _app_context


def initialize_context(config: NovagueConfig) -> AppContext:
    """Initialize the global application context."""
    global _app_context
    _app_context = AppContext(config)
    return _app_context


def describe_artifact(artifact: object) -> str:
    """One-line summary of a stage artifact for console output."""
    if isinstance(artifact, ProjectAnalysis):
        return (
            f"{artifact.project_name}: {len(artifact.core_features)} features, "
            f"{artifact.estimated_complexity} complexity"
        )
    if isinstance(artifact, ScreenAnalysis):
        return (
            f"{len(artifact.screens)} screens, {len(artifact.user_flows)} flows, "
            f"{len(artifact.background_processes)} background processes"
        )
    if isinstance(artifact, DataArchitecture):
        return f"{len(artifact.tables)} tables, {len(artifact.endpoints)} endpoints"
    if isinstance(artifact, ComponentArchitecture):
        return (
            f"{len(artifact.all_components())} components across "
            f"{len(artifact.screens)} screens"
        )
    if isinstance(artifact, ValidationResult):
        verdict = "valid" if artifact.is_valid else "invalid"
        return f"score {artifact.score}/100 ({verdict}), {len(artifact.issues)} issues"
    if isinstance(artifact, Project):
        return f"{len(artifact.nodes)} nodes, {len(artifact.edges)} edges"
    return type(artifact).__name__


async def _run_stages(config: NovagueConfig, idea: str, last: Stage) -> DesignPipeline:
    async with AsyncExitStack() as stack:
        backend = None
        if config.generation.has_credential:
            backend = await stack.enter_async_context(HttpGenerationBackend())

        pipeline = DesignPipeline(StageContext(config=config, backend=backend))
        pipeline.submit_idea(idea)

        table = Table(title="Design Pipeline")
        table.add_column("Stage", style="cyan", justify="right")
        table.add_column("Name", style="bold")
        table.add_column("Result")

        for stage in Stage:
            if stage == Stage.IDLE or stage > last:
                continue
            artifact = await pipeline.advance(stage)
            table.add_row(str(int(stage)), STAGE_LABELS[stage], describe_artifact(artifact))

        console.print(table)
        return pipeline


def _print_graph(graph: VisualizationGraph) -> None:
    nodes = Table(title=f"Nodes ({graph.mode.value})")
    nodes.add_column("ID", style="cyan")
    nodes.add_column("Label")
    nodes.add_column("Kind", style="magenta")
    nodes.add_column("Position", style="dim")
    for node in graph.nodes:
        nodes.add_row(node.id, node.label, node.kind, f"({node.position.x:g}, {node.position.y:g})")

    edges = Table(title=f"Edges ({graph.mode.value})")
    edges.add_column("ID", style="cyan")
    edges.add_column("Source")
    edges.add_column("Target")
    edges.add_column("Label")
    for edge in graph.edges:
        edges.add_row(edge.id, edge.source, edge.target, edge.label or "")

    console.print(nodes)
    console.print(edges)


@app.command()
def design(
    idea: Annotated[str, typer.Argument(help="Product idea in plain language")],
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Write the assembled project JSON to this file",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Run every stage for an idea and print the design summary."""
    ctx = get_app_context()

    try:
        pipeline = asyncio.run(_run_stages(ctx.config, idea, Stage.VISUALIZED))
    except (PipelineError, ValueError) as e:
        console.print(f"[red]Error running pipeline:[/red] {e}")
        raise typer.Exit(code=1)

    validation = pipeline.state.validation
    project = pipeline.state.project
    if validation is not None:
        color = "green" if validation.is_valid else "yellow"
        lines = [f"[{color}]Score: {validation.score}/100[/{color}]"]
        lines.extend(
            f"[bold]{issue.severity}[/bold] {issue.type}: {issue.description}"
            for issue in validation.issues
        )
        console.print(Panel("\n".join(lines), title="Integration Validation", border_style=color))

    if output is not None and project is not None:
        try:
            output.write_text(
                json.dumps(project.model_dump(mode="json"), indent=2), encoding="utf-8"
            )
        except OSError as e:
            console.print(f"[red]Error writing project:[/red] {e}")
            raise typer.Exit(code=1)
        console.print(f"[green]Project written to[/green] {output}")


@app.command()
def graph(
    idea: Annotated[str, typer.Argument(help="Product idea in plain language")],
    mode: Annotated[
        ProjectionMode,
        typer.Option("--mode", "-m", help="Projection mode"),
    ] = ProjectionMode.architecture,
) -> None:
    """Design an idea up to its components and print one graph projection."""
    ctx = get_app_context()

    try:
        pipeline = asyncio.run(_run_stages(ctx.config, idea, Stage.COMPONENTS_DESIGNED))
        projection = pipeline.graph(mode)
    except (PipelineError, ValueError) as e:
        console.print(f"[red]Error running pipeline:[/red] {e}")
        raise typer.Exit(code=1)

    _print_graph(projection)


@app.command()
def serve(
    host: Annotated[
        Optional[str],
        typer.Option("--host", "-h", help="Host to bind to (default from config)"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Port to bind to (default from config)"),
    ] = None,
) -> None:
    """Start the NoVague web server."""
    import uvicorn

    from novague.web.app import create_app

    config = get_app_context().config
    bind_host = host or config.web.host
    bind_port = port or config.web.port

    console.print("[bold cyan]Starting NoVague Web Server[/bold cyan]")
    console.print(f"[dim]Host:[/dim] {bind_host}")
    console.print(f"[dim]Port:[/dim] {bind_port}")
    console.print()

    uvicorn.run(
        create_app(config),
        host=bind_host,
        port=bind_port,
        log_level="info",
    )


@app.callback()
def main_callback(
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (TOML format)",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure global options and initialize application context."""
    try:
        config = load_config(config_path)
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/red] {e}")
        raise typer.Exit(code=1)

    # Info-level events would interleave with the console tables
    level = "DEBUG" if verbose else "WARNING"
    setup_logging(config.logging.model_copy(update={"level": level}))

    initialize_context(config)

    if verbose:
        console.print("[dim]Debug logging enabled[/dim]")


if __name__ == "__main__":
    app()
