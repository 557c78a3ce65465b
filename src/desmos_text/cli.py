"""Click CLI entry point for desmos-text."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from desmos_text import __version__
from desmos_text.config import is_initialized, load_config_or_default, save_config
from desmos_text.errors import DestError
from desmos_text.models import ConverterConfig


@click.group()
@click.version_option(version=__version__, prog_name="desmos-text")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log translation details")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Translate Desmos graph state JSON into DEST text."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
def init() -> None:
    """Write a default configuration file in the current directory."""
    project_root = Path.cwd()
    if is_initialized(project_root):
        click.echo("Warning: Configuration already exists. Leaving it unchanged.")
        return
    path = save_config(ConverterConfig(), project_root)
    click.echo(f"Created: {path}")


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, allow_dash=True))
@click.option("--output", "-o", "output_path", type=click.Path(dir_okay=False), default=None)
@click.option(
    "--write", "-w", is_flag=True, default=False,
    help="Write next to the input file using the configured suffix",
)
@click.option("--format", "fmt", type=click.Choice(["dest", "ir"]), default="dest")
@click.option("--graph-flags/--no-graph-flags", default=None, help="Emit the `flags:` setting line")
@click.pass_context
def convert(
    ctx: click.Context,
    input_path: str,
    output_path: str | None,
    write: bool,
    fmt: str,
    graph_flags: bool | None,
) -> None:
    """Convert a graph state JSON file (or `-` for stdin)."""
    from desmos_text.pipeline import json_to_dest, json_to_ir

    try:
        config = load_config_or_default(Path.cwd())
    except DestError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
        return
    if graph_flags is not None:
        config.graph_flags = graph_flags

    if input_path == "-":
        content = click.get_text_stream("stdin").read()
    else:
        source = Path(input_path)
        if source.suffix == ".dest":
            click.echo("Error: Converting DEST back to JSON is not supported.", err=True)
            ctx.exit(1)
            return
        content = source.read_text(encoding="utf-8")
        if write and output_path is None:
            output_path = str(source.with_suffix(config.output_suffix))

    if write and input_path == "-" and output_path is None:
        click.echo("Error: --write needs an input file, not stdin.", err=True)
        ctx.exit(1)
        return

    try:
        if fmt == "ir":
            text = json_to_ir(content, config)
        else:
            text = json_to_dest(content, config)
    except json.JSONDecodeError as e:
        click.echo(f"Error: Invalid JSON: {e}", err=True)
        ctx.exit(1)
        return
    except DestError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
        return

    if output_path is not None:
        Path(output_path).write_text(text + "\n", encoding="utf-8")
        click.echo(f"Wrote: {output_path}")
    else:
        click.echo(text)
