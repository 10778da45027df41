#!/usr/bin/env python3
"""
Diagram Rendering CLI

Renders PlantUML diagrams through the local engine, one file (or buffer) per page.

Commands:
    render  - Export every page of a diagram
    map     - Extract image map data for every page of a diagram
    formats - List supported output formats

Examples:\n

    render_diagram.py render docs/seq.puml                       # PNG pages, in memory

    render_diagram.py render docs/seq.puml -f svg -o out/seq.svg # SVG page files

    render_diagram.py render docs/seq.puml -f emf -o out/seq.emf # SVG + Inkscape conversion

    render_diagram.py map docs/seq.puml -o out/seq.cmapx         # Image map files
"""

import asyncio
import os
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from umlpress.contexts.diagram import Diagram
from umlpress.contexts.rendering import (
    ConfigurationError,
    LocalRenderer,
    PageOutcome,
    RenderError,
)
from umlpress.contexts.rendering.formats import LOCAL_FORMATS, file_extension
from umlpress.contexts.rendering.logger import setup_rendering_logger
from umlpress.utils.config import ConfigProvider
from umlpress.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


app = typer.Typer(
    help="Render PlantUML diagrams page by page with the local PlantUML engine",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


async def _run(
    renderer: LocalRenderer, diagram: Diagram, format: Optional[str], output: Optional[Path]
) -> Optional[List[PageOutcome]]:
    if format is None:
        task = await renderer.get_map_data(diagram, output)
    else:
        task = await renderer.render(diagram, format, output)
    return await task.result()


def _execute(
    diagram_file: Path,
    format: Optional[str],
    output: Optional[Path],
    workspace: Optional[Path],
    verbose: bool,
) -> None:
    try:
        diagram = Diagram.from_file(diagram_file)
    except (FileNotFoundError, UnicodeDecodeError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if output is not None and output.is_dir():
        extension = file_extension(format) if format else "cmapx"
        output = output / f"{diagram_file.stem}.{extension}"

    config = ConfigProvider(workspace_folders=[workspace or diagram.dir])
    log_dir = LOGS_PATH / f"render_{now()}"
    setup_rendering_logger(log_dir, java=config.java, verbose=verbose)

    typer.secho(f"\nRendering: {diagram.title}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Pages: {diagram.page_count}")
    typer.echo(f"Format: {format or 'map data'}")
    typer.echo("")

    renderer = LocalRenderer(config, verbose=verbose)
    try:
        outcomes = asyncio.run(_run(renderer, diagram, format, output))
    except ConfigurationError as e:
        typer.secho(f"✗ {e.message}\n", fg=typer.colors.RED, bold=True, err=True)
        raise typer.Exit(code=1)
    except RenderError as e:
        typer.secho(f"✗ {e.message}", fg=typer.colors.RED, bold=True, err=True)
        if verbose and e.out:
            typer.echo(f"  Partial output: {len(e.out)} bytes")
        typer.echo(f"  Log: {log_dir / 'render.log'}\n")
        raise typer.Exit(code=1)

    typer.echo("")
    if outcomes is None:
        typer.secho("Render cancelled, no pages kept", fg=typer.colors.YELLOW, bold=True)
        raise typer.Exit(code=1)

    typer.secho(f"✓ Rendered {len(outcomes)} page(s)", fg=typer.colors.GREEN, bold=True)
    for outcome in outcomes:
        if outcome.written:
            typer.echo(f"  Page {outcome.index + 1}: {outcome.path}")
        else:
            typer.echo(f"  Page {outcome.index + 1}: {len(outcome.data or b'')} bytes")
    typer.echo(f"  Log: {log_dir / 'render.log'}")
    typer.echo("")


@app.command("render")
def render_command(
    diagram_file: Annotated[
        Path,
        typer.Argument(help="Diagram source file (.puml, .plantuml, ...)"),
    ],
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (see 'formats' command)"),
    ] = "png",
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Destination file; multi-page diagrams get -pageN suffixes. Omit to render in memory",
        ),
    ] = None,
    workspace: Annotated[
        Optional[Path],
        typer.Option(
            "--workspace",
            "-w",
            help="Workspace folder holding umlpress.yaml (default: the diagram's folder)",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show engine commands and partial output"),
    ] = False,
):
    """
    Export every page of a diagram.

    Examples:\n

        $ render_diagram.py render docs/seq.puml -f svg -o out/seq.svg
    """
    if format not in LOCAL_FORMATS:
        typer.secho(
            f"Error: unsupported format '{format}'. Supported: {', '.join(LOCAL_FORMATS)}\n",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)
    _execute(diagram_file, format, output, workspace, verbose)


@app.command("map")
def map_command(
    diagram_file: Annotated[
        Path,
        typer.Argument(help="Diagram source file"),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Destination file for the map data"),
    ] = None,
    workspace: Annotated[
        Optional[Path],
        typer.Option("--workspace", "-w", help="Workspace folder holding umlpress.yaml"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show engine commands and partial output"),
    ] = False,
):
    """Extract image map data for every page of a diagram."""
    _execute(diagram_file, None, output, workspace, verbose)


@app.command("formats")
def formats_command():
    """List supported output formats."""
    for format in LOCAL_FORMATS:
        typer.echo(format)


if __name__ == "__main__":
    app()
