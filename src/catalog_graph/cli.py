"""
Command-line interface for catalog_graph.

Provides discover, map-type and info commands.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from catalog_graph import __version__
from catalog_graph.config import DiscoveryConfig
from catalog_graph.errors import CatalogGraphError, UnsupportedTypeError
from catalog_graph.metadata.types import map_store_type
from catalog_graph.models import CatalogGraph

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def print_graph_summary(graph: CatalogGraph) -> None:
    """Print schemas and tables of a graph as Rich tables."""
    database = graph.database

    info_table = Table(title="Database")
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")

    info_table.add_row("Name", database.name)
    info_table.add_row("Id", str(database.id))
    info_table.add_row("Collation", database.collation or "N/A")
    info_table.add_row("Created", database.created_at.isoformat() if database.created_at else "N/A")
    info_table.add_row("Schemas", str(len(database.schemas)))

    console.print(info_table)

    tables_table = Table(title="Tables")
    tables_table.add_column("Schema", style="cyan")
    tables_table.add_column("Table", style="green")
    tables_table.add_column("Columns", style="yellow", justify="right")
    tables_table.add_column("PK", style="magenta")
    tables_table.add_column("FKs", style="blue", justify="right")
    tables_table.add_column("Indexes", style="blue", justify="right")

    for table in graph.iter_tables():
        pk = table.primary_key
        tables_table.add_row(
            table.schema_name,
            table.name,
            str(len(table.columns)),
            f"{pk.name} ({', '.join(pk.columns)})" if pk else "-",
            str(len(table.foreign_keys)),
            str(len(table.indexes)),
        )

    console.print(tables_table)

    views = list(graph.iter_views())
    if views:
        views_table = Table(title="Views")
        views_table.add_column("Schema", style="cyan")
        views_table.add_column("View", style="green")
        views_table.add_column("Columns", style="yellow", justify="right")

        for view in views:
            views_table.add_row(view.schema_name, view.name, str(len(view.columns)))

        console.print(views_table)


@click.group()
@click.version_option(version=__version__, prog_name="catalog-graph")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """
    Catalog Graph - Relational Catalog Discovery

    Discover schemas, tables, columns, keys and indexes of a PostgreSQL database.
    """
    setup_logging(verbose)


@cli.command()
@click.option(
    "--dsn",
    type=str,
    default=None,
    help="PostgreSQL connection string (defaults to $CATALOG_GRAPH_DSN)",
)
@click.option(
    "--database",
    type=str,
    default=None,
    help="Database to discover (case-insensitive)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML file with discovery settings",
)
@click.option(
    "--lenient-types",
    is_flag=True,
    help="Leave unsupported store types unmapped instead of failing",
)
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Save the graph to this path (.yaml/.yml for YAML, otherwise JSON)",
)
def discover(
    dsn: Optional[str],
    database: Optional[str],
    config_file: Optional[Path],
    lenient_types: bool,
    output: Optional[Path],
) -> None:
    """
    Discover the catalog graph of a database.

    Examples:

        # Discover using an explicit connection string
        catalog-graph discover --dsn "postgresql://reader@localhost/shop" \\
            --database shop --output shop_graph.yaml

        # Discover using a configuration file
        catalog-graph discover --config configs/discovery.yaml
    """
    from catalog_graph.discovery import discover as run_discovery

    try:
        config = DiscoveryConfig.from_yaml(config_file) if config_file else DiscoveryConfig()
        config = config.with_environment().with_overrides(
            connection_string=dsn,
            database=database,
            strict_types=False if lenient_types else None,
        ).validate()
    except CatalogGraphError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print("[bold blue]Catalog Graph Discovery[/bold blue]")
    console.print(f"Database: {config.database}")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Connecting...", total=None)

        def on_pass(pass_name: str) -> None:
            progress.update(task, description=f"Discovering {pass_name.replace('_', ' ')}...")

        try:
            graph = run_discovery(
                config.connection_string,
                config.database,
                strict_types=config.strict_types,
                on_pass=on_pass,
            )
        except CatalogGraphError as e:
            progress.stop()
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)

        progress.update(task, completed=True)

    console.print("\n[green]Discovery complete![/green]")
    print_graph_summary(graph)

    if output:
        graph.save(output)
        console.print(f"\n[green]Saved graph to: {output}[/green]")


@cli.command("map-type")
@click.argument("store_types", nargs=-1, required=True)
def map_type(store_types: Tuple[str, ...]) -> None:
    """
    Show the portable type for one or more store types.

    Example:

        catalog-graph map-type "character varying(255)" "integer[]" jsonb
    """
    result_table = Table(title="Type Mapping")
    result_table.add_column("Store Type", style="cyan")
    result_table.add_column("Portable Type", style="green")

    failed = False
    for store_type in store_types:
        try:
            result_table.add_row(store_type, str(map_store_type(store_type)))
        except UnsupportedTypeError:
            result_table.add_row(store_type, "[red]unsupported[/red]")
            failed = True

    console.print(result_table)

    if failed:
        sys.exit(1)


@cli.command()
@click.option(
    "--graph",
    "graph_file",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to a saved graph (JSON or YAML)",
)
def info(graph_file: Path) -> None:
    """
    Display information about a saved graph.

    Example:

        catalog-graph info --graph shop_graph.yaml
    """
    console.print("[bold blue]Catalog Graph Information[/bold blue]")

    graph = CatalogGraph.load(graph_file)
    print_graph_summary(graph)


if __name__ == "__main__":
    cli()
