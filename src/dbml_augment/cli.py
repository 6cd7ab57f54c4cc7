"""
Command-line interface for dbml_augment.

Provides augment, tables, fetch, diagram and serve commands.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from dbml_augment import __version__
from dbml_augment.discovery import DbmlParser, RelationshipInferrer
from dbml_augment.models import AugmentResult, ServiceConfig

# DBML goes to stdout, everything else to stderr
console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _write_dbml(dbml: str, output: Optional[Path]) -> None:
    if output:
        output = Path(output)
        output.write_text(dbml)
        console.print(f"\n[green]Saved DBML to: {output}[/green]")
    else:
        click.echo(dbml)


def _print_generated(result: AugmentResult) -> None:
    console.print(
        f"Tables: {len(result.tables)}, existing references: {result.existing_references}"
    )

    if not result.generated:
        console.print("[yellow]No relationships generated.[/yellow]")
        return

    rel_table = Table(title="Generated Relationships")
    rel_table.add_column("Table", style="cyan")
    rel_table.add_column("Field", style="green")
    rel_table.add_column("References", style="yellow")

    for rel in result.generated:
        rel_table.add_row(rel.table, rel.field_name, f"{rel.referenced_table}.id")

    console.print(rel_table)


@click.group()
@click.version_option(version=__version__, prog_name="dbml-augment")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="YAML file with service configuration",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Optional[Path]) -> None:
    """
    DBML Augment - Foreign-key relationship inference for DBML schemas

    Adds the `Ref:` statements implied by `*_id` field names.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = ServiceConfig.load(config_path)


@cli.command()
@click.argument("input_file", type=click.File("r"))
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for augmented DBML (default: stdout)",
)
def augment(input_file, output: Optional[Path]) -> None:
    """
    Append inferred relationships to a DBML file.

    Examples:

        dbml-augment augment schema.dbml --output schema_with_refs.dbml

        cat schema.dbml | dbml-augment augment -
    """
    result = RelationshipInferrer(input_file.read()).augment()

    _print_generated(result)
    _write_dbml(result.dbml, output)


@cli.command()
@click.argument("input_file", type=click.File("r"))
def tables(input_file) -> None:
    """
    List declared tables and the foreign keys their fields resolve to.

    Example:

        dbml-augment tables schema.dbml
    """
    parser = DbmlParser()
    inferrer = RelationshipInferrer(input_file.read(), parser=parser)
    notes = parser.extract_table_notes(inferrer.dbml)

    tables_table = Table(title="Declared Tables")
    tables_table.add_column("Table", style="cyan")
    tables_table.add_column("Fields", style="green", justify="right")
    tables_table.add_column("Foreign Keys", style="yellow")
    tables_table.add_column("Note", style="magenta")

    for table in parser.iter_tables(inferrer.dbml):
        fields = list(parser.iter_fields(table.body, skip_notes=True))
        fks = []
        for entry in fields:
            referenced = inferrer.resolver.resolve(entry.name)
            if referenced:
                fks.append(f"{entry.name} -> {referenced}")
        tables_table.add_row(
            table.name,
            str(len(fields)),
            ", ".join(fks) if fks else "-",
            notes.get(table.name, ""),
        )

    console.print(tables_table)

    if not inferrer.tables:
        console.print("\n[yellow]No table declarations found.[/yellow]")


@cli.command()
@click.option("--url", type=str, required=True, help="URL of the app whose schema to fetch")
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for augmented DBML (default: stdout)",
)
@click.pass_context
def fetch(ctx: click.Context, url: str, output: Optional[Path]) -> None:
    """
    Fetch a schema from the extraction API and augment it.

    Example:

        dbml-augment fetch --url https://myapp.bubbleapps.io --output schema.dbml
    """
    from dbml_augment.service import SchemaRequestHandler

    handler = SchemaRequestHandler(ctx.obj["config"])

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Fetching schema...", total=None)
            result = handler.process(url)
            progress.update(task, completed=True)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    _print_generated(result)
    _write_dbml(result.dbml, output)


@cli.command()
@click.argument("input_file", type=click.File("r"))
@click.pass_context
def diagram(ctx: click.Context, input_file) -> None:
    """
    Create a dbdiagram.io diagram from a DBML file.

    Requires DBDIAGRAM_API_TOKEN (or dbdiagram_token in --config).

    Example:

        dbml-augment diagram schema.dbml
    """
    from dbml_augment.service import DbDiagramClient

    client = DbDiagramClient(ctx.obj["config"])

    try:
        link = client.create(input_file.read())
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]Diagram created:[/green] {link.diagram_id}")
    click.echo(link.embed_url)


@cli.command()
@click.option("--host", type=str, default="127.0.0.1", help="Bind address")
@click.option("--port", type=int, default=8000, help="Bind port")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """
    Run the JSON API (POST /api/schema, POST /api/diagram).

    Example:

        dbml-augment serve --host 0.0.0.0 --port 8080
    """
    import uvicorn

    from dbml_augment.service import get_app_factory

    create_app = get_app_factory()
    console.print(f"[bold blue]Serving on http://{host}:{port}[/bold blue]")
    uvicorn.run(create_app(ctx.obj["config"]), host=host, port=port)


if __name__ == "__main__":
    cli()
