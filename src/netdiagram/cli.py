"""CLI interface for netdiagram using Typer framework."""

import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from netdiagram import __description__, __version__
from netdiagram.config import LogLevel, NetDiagramConfig, load_config
from netdiagram.diagnostics import ErrorCollector, ErrorContext, ErrorSeverity
from netdiagram.errors import NetDiagramError
from netdiagram.graph import DiagramGenerator, DrawioRenderer, read_document
from netdiagram.repository import load_nodes
from netdiagram.template import write_template

app = typer.Typer(
    name="netdiagram",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

_LOG_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def _configure_logging(config: NetDiagramConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else _LOG_LEVELS.get(config.logging.level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config_or_exit(config: Path | None) -> NetDiagramConfig:
    try:
        return load_config(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _resolve_output_path(input_file: Path, out: Path | None, config: NetDiagramConfig) -> Path:
    output_file = out if out else input_file.parent / config.output.filename
    if output_file.suffix.lower() != ".drawio":
        output_file = output_file.with_name(output_file.name + ".drawio")
    return output_file.resolve()


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"netdiagram version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True, help="Show version and exit")
    ] = False,
) -> None:
    """netdiagram - Generate draw.io network diagrams from connection tables."""


@app.command()
def generate(
    input_file: Annotated[
        Path,
        typer.Argument(help="Connection table exported as CSV")
    ],
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output .drawio file (default: next to the input)")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .netdiagram.json)")
    ] = None,
    no_fuzzy: Annotated[
        bool,
        typer.Option("--no-fuzzy", help="Reject parent IDs that do not match exactly")
    ] = False,
    diagnostics: Annotated[
        bool,
        typer.Option("--diagnostics", help="Write a JSON diagnostics report next to the output")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """Generate a draw.io network diagram from a connection table."""
    netdiagram_config = _load_config_or_exit(config)
    _configure_logging(netdiagram_config, verbose)

    collector = ErrorCollector("generate")
    output_file = _resolve_output_path(input_file, out, netdiagram_config)
    diagnostics_file = output_file.with_suffix(".diagnostics.json")

    try:
        console.print(f"[green]Reading connection table:[/green] {input_file}")
        nodes = load_nodes(
            input_file,
            fuzzy_match=netdiagram_config.input.fuzzy_match and not no_fuzzy,
            encoding=netdiagram_config.input.encoding,
            delimiter=netdiagram_config.input.delimiter,
            collector=collector,
        )

        generator = DiagramGenerator(netdiagram_config, collector)
        generator.add_renderer(DrawioRenderer(netdiagram_config, collector))

        result = generator.generate(nodes)
        console.print(
            f"[green]OK[/green] {len(nodes)} nodes, {len(result.forest.roots)} roots, "
            f"{len(result.groups)} VLANs"
        )

        generator.write(result, output_file)
        console.print(f"[green]Diagram generated:[/green] {output_file}")

        warnings = collector.get_error_counts()[ErrorSeverity.WARNING.value]
        if warnings:
            console.print(f"[yellow]Warnings:[/yellow] {warnings}")

    except (FileNotFoundError, NetDiagramError) as e:
        collector.collect_error(e, ErrorContext(operation="generate", component="cli"), ErrorSeverity.CRITICAL)
        console.print(f"[red]Error:[/red] {e}")
        if diagnostics:
            collector.flush_to_filesystem(diagnostics_file)
        raise typer.Exit(1)

    if diagnostics:
        collector.flush_to_filesystem(diagnostics_file)
        console.print(f"[dim]Diagnostics written to {diagnostics_file}[/dim]")


@app.command()
def template(
    out: Annotated[
        Path,
        typer.Argument(help="Path of the CSV template to create")
    ] = Path("network_template.csv"),
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file")
    ] = False,
) -> None:
    """Create an empty connection table template."""
    try:
        path = write_template(out, overwrite=force)
    except FileExistsError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Error:[/red] Failed to write template: {e}")
        raise typer.Exit(1)

    console.print(f"[green]Template created:[/green] {path}")


@app.command()
def inspect(
    document: Annotated[
        Path,
        typer.Argument(help="draw.io document generated by netdiagram")
    ],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print a JSON summary instead of tables")
    ] = False,
) -> None:
    """Summarize the shapes, edges and frames of a generated document."""
    try:
        diagram = read_document(document)
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] Document not found: {document}")
        raise typer.Exit(1)
    except NetDiagramError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Error:[/red] Cannot read {document}: {e}")
        raise typer.Exit(1)

    if json_output:
        summary = {
            "name": diagram.name,
            "frames": [cell.value for cell in diagram.frames],
            "shapes": len(diagram.shapes),
            "edges": len(diagram.edges),
            "hasNote": diagram.note is not None,
        }
        console.print_json(jsonlib.dumps(summary))
        return

    labels = {cell.id: cell.value.split("<br>")[0] for cell in diagram.shapes}

    table = Table(title=f"Shapes ({len(diagram.shapes)})")
    table.add_column("Cell ID", style="cyan")
    table.add_column("Label")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    for cell in diagram.shapes:
        table.add_row(
            cell.id,
            escape(cell.value.replace("<br>", " / ")),
            f"{cell.geometry.x:g}",
            f"{cell.geometry.y:g}",
        )
    console.print(table)

    edge_table = Table(title=f"Edges ({len(diagram.edges)})")
    edge_table.add_column("From", style="green")
    edge_table.add_column("To", style="green")
    for cell in diagram.edges:
        edge_table.add_row(
            escape(labels.get(cell.source, cell.source or "")),
            escape(labels.get(cell.target, cell.target or "")),
        )
    console.print(edge_table)

    if diagram.frames:
        console.print(f"[blue]VLAN frames:[/blue] {', '.join(cell.value for cell in diagram.frames)}")
    if diagram.note is not None:
        console.print("[blue]Notes box:[/blue] present")


if __name__ == "__main__":
    app()
