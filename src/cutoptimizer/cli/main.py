"""Typer CLI for sheet cut optimization."""

import logging
from pathlib import Path
from typing import Annotated

import typer

from cutoptimizer.application import (
    OptimizationInputError,
    OptimizationOutput,
    OptimizeCommand,
)
from cutoptimizer.application.config import ConfigError, config_to_input, load_config
from cutoptimizer.cli.commands import validate_command
from cutoptimizer.infrastructure import CutDiagramRenderer
from cutoptimizer.infrastructure.formatters import JsonExporter, ResultReportFormatter

OUTPUT_FORMATS = ("text", "json", "svg", "ascii")

app = typer.Typer(
    name="cutoptimizer",
    help="Pack rectangular pieces onto stock sheets and report the layout.",
)

app.command(name="validate")(validate_command)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Sheet cut optimizer."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _write_svg(output: OptimizationOutput, output_file: Path | None) -> None:
    renderer = CutDiagramRenderer()
    if output_file is None:
        typer.echo(renderer.render_combined_svg(output.result))
        return

    svgs = renderer.render_all_svg(output.result)
    if not svgs:
        typer.echo("No sheets to export.", err=True)
        return
    for i, svg in enumerate(svgs):
        if len(svgs) == 1:
            svg_path = output_file
        else:
            # Multiple sheets: layout_1.svg, layout_2.svg, etc.
            suffix = output_file.suffix or ".svg"
            svg_path = output_file.parent / f"{output_file.stem}_{i + 1}{suffix}"
        svg_path.write_text(svg, encoding="utf-8")
        typer.echo(f"SVG exported to: {svg_path}")


def _emit(text: str, output_file: Path | None) -> None:
    if output_file is None:
        typer.echo(text)
    else:
        output_file.write_text(text, encoding="utf-8")
        typer.echo(f"Output written to: {output_file}")


@app.command()
def optimize(
    config_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON job file"),
    ],
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text, json, svg, ascii"),
    ] = "text",
    output_file: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write output to a file instead of stdout"),
    ] = None,
    no_rotation: Annotated[
        bool,
        typer.Option("--no-rotation", help="Do not rotate pieces, overriding the job file"),
    ] = False,
) -> None:
    """Optimize the pieces of a job file onto sheets.

    Examples:
        cutoptimizer optimize kitchen.json
        cutoptimizer optimize kitchen.json --format svg --output layout.svg
        cutoptimizer optimize kitchen.json --format json --no-rotation
    """
    output_format = output_format.lower()
    if output_format not in OUTPUT_FORMATS:
        typer.echo(
            f"Error: Unknown format '{output_format}'. "
            f"Available formats: {', '.join(OUTPUT_FORMATS)}",
            err=True,
        )
        raise typer.Exit(code=1)

    try:
        config = load_config(config_file)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    optimization_input = config_to_input(config)
    if no_rotation:
        optimization_input.allow_rotation = False

    try:
        output = OptimizeCommand().execute(optimization_input)
    except OptimizationInputError as e:
        for message in e.errors:
            typer.echo(f"Error: {message}", err=True)
        raise typer.Exit(code=1)

    if output_format == "json":
        _emit(JsonExporter().export(output), output_file)
    elif output_format == "svg":
        _write_svg(output, output_file)
    elif output_format == "ascii":
        renderer = CutDiagramRenderer()
        text = renderer.render_all_ascii(output.result)
        text += "\n\n" + renderer.render_waste_summary(output.result)
        _emit(text, output_file)
    else:
        _emit(ResultReportFormatter().format(output), output_file)

    if output.unplaced_pieces and output_format != "text":
        typer.echo(
            f"Warning: {len(output.unplaced_pieces)} piece(s) could not be placed",
            err=True,
        )


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host", help="Interface to bind")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Port to listen on")] = 8000,
) -> None:
    """Run the REST API with uvicorn."""
    import uvicorn

    uvicorn.run("cutoptimizer.web:app", host=host, port=port)


if __name__ == "__main__":
    app()
