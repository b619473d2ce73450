import asyncio
import logging
import sys
from pathlib import Path

import typer
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from snipnet.resonance.client import ResonanceEngine
from snipnet.resonance.config import (
    AppConfig,
    Config,
    find_config_file,
    generate_default_config,
    load_yaml_config,
)
from snipnet.resonance.exceptions import ResonanceError
from snipnet.resonance.logging import configure_cli_logging
from snipnet.resonance.pathways import PathwayStep

console = Console()

_cli = typer.Typer(
    name="resonance",
    no_args_is_help=True,
    help="Find, explain and explore resonances between content nodes.",
)


def load_config(config_path: Path | None) -> AppConfig:
    """Load config from file or fall back to the global configuration."""
    if config_path is None:
        return Config.get()
    found = find_config_file(config_path)
    assert found is not None
    return AppConfig.model_validate(load_yaml_config(found))


def _engine(ctx: typer.Context, create: bool = False) -> ResonanceEngine:
    return ResonanceEngine(ctx.obj["db"], config=ctx.obj["config"], create=create)


@_cli.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", help="Path to resonance YAML config file."
    ),
    db: Path | None = typer.Option(None, "--db", help="Path to the database."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    configure_cli_logging(logging.DEBUG if verbose else logging.INFO)
    ctx.obj = {"config": load_config(config), "db": db}


@_cli.command("add", help="Add a node, optionally processing it right away")
def add(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Node title."),
    body: str = typer.Option("", "--body", "-b", help="Node body text."),
    process: bool = typer.Option(
        False, "--process", help="Run a resonance pass after adding."
    ),
) -> None:
    async def run():
        async with _engine(ctx, create=True) as engine:
            node = await engine.create_node(title, body)
            console.print(f"[green]Added node[/green] [bold]{node.id}[/bold]")
            if process:
                assert node.id is not None
                result = await engine.process_resonance(node.id)
                console.print(
                    f"Created {len(result.created)} resonances, "
                    f"score {result.score:.3f}"
                )

    asyncio.run(run())


@_cli.command("process", help="Run a resonance pass for one node")
def process(
    ctx: typer.Context,
    node_id: str = typer.Argument(..., help="Node id."),
) -> None:
    async def run():
        async with _engine(ctx) as engine:
            result = await engine.process_resonance(node_id)
            console.print(
                f"Created {len(result.created)} resonances, "
                f"skipped {result.skipped}, score {result.score:.3f}"
            )

    asyncio.run(run())


@_cli.command("backfill", help="Run a resonance pass for every node")
def backfill(ctx: typer.Context) -> None:
    async def run():
        async with _engine(ctx) as engine:
            report = await engine.process_all()
            console.print(
                f"Processed {len(report.processed)} nodes, "
                f"created {report.created} resonances"
            )
            for node_id, error in report.failures.items():
                console.print(f"[yellow]Failed[/yellow] {node_id}: {error}")

    asyncio.run(run())


@_cli.command("resonances", help="List the resonances of a node")
def resonances(
    ctx: typer.Context,
    node_id: str = typer.Argument(..., help="Node id."),
    limit: int = typer.Option(10, "--limit", "-l", help="Maximum results."),
) -> None:
    async def run():
        async with _engine(ctx) as engine:
            found = await engine.get_resonances(node_id, limit=limit)
            if not found:
                console.print("No resonances found.")
                return
            table = Table("Score", "Node", "Thinking", "Explanation")
            for resonance in found:
                title = resonance.neighbor.title if resonance.neighbor else "?"
                table.add_row(
                    f"{resonance.score:.3f}",
                    title,
                    resonance.edge.thinking,
                    resonance.edge.explanation,
                )
            console.print(table)

    asyncio.run(run())


def _add_steps(tree: Tree, steps: list[PathwayStep]) -> None:
    for step in steps:
        title = step.neighbor.title if step.neighbor else step.neighbor_id
        branch = tree.add(f"[bold]{title}[/bold] ({step.score:.3f})")
        _add_steps(branch, step.connected)


@_cli.command("pathways", help="Show resonance pathways starting at a node")
def pathways(
    ctx: typer.Context,
    node_id: str = typer.Argument(..., help="Start node id."),
    depth: int | None = typer.Option(None, "--depth", "-d", help="Walk depth."),
) -> None:
    async def run():
        async with _engine(ctx) as engine:
            start = await engine.get_node(node_id)
            steps = await engine.find_pathways(node_id, depth)
            tree = Tree(start.title if start else node_id)
            _add_steps(tree, steps)
            console.print(tree)

    asyncio.run(run())


@_cli.command("clusters", help="Build and list resonance clusters")
def clusters(
    ctx: typer.Context,
    stats: bool = typer.Option(False, "--stats", help="Show network statistics."),
) -> None:
    async def run():
        async with _engine(ctx) as engine:
            built = await engine.build_clusters()
            table = Table("Theme", "Size", "Average", "Strength", "Keywords")
            for cluster in built:
                table.add_row(
                    cluster.theme,
                    str(cluster.size),
                    f"{cluster.average_score:.3f}",
                    cluster.strength.value,
                    ", ".join(cluster.keywords),
                )
            console.print(table)
            if stats:
                network = await engine.cluster_network_stats()
                console.print(
                    f"Clusters: {network.total_clusters}  "
                    f"Connections: {network.total_connections}  "
                    f"Most active: {network.most_active_cluster}  "
                    f"Strongest: {network.strongest_resonance:.3f}"
                )

    asyncio.run(run())


@_cli.command("score", help="Show the aggregate resonance score of a node")
def score(
    ctx: typer.Context,
    node_id: str = typer.Argument(..., help="Node id."),
) -> None:
    async def run():
        async with _engine(ctx) as engine:
            value = await engine.get_aggregate_score(node_id)
            console.print(f"{value:.3f}")

    asyncio.run(run())


@_cli.command("init-config", help="Write a default YAML configuration file")
def init_config(
    output: Path = typer.Argument(
        Path("resonance.yaml"), help="Where to write the configuration."
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite existing file."),
) -> None:
    if output.exists() and not force:
        console.print(f"[red]{output} already exists. Use --force to overwrite.[/red]")
        raise typer.Exit(1)

    with open(output, "w") as f:
        yaml.safe_dump(generate_default_config(), f, sort_keys=False)
    console.print(f"[green]Wrote default configuration to {output}[/green]")


def cli():
    load_dotenv()
    try:
        _cli()
    except (ResonanceError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
