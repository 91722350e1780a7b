"""Command-line interface for cellang."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from cellang import __version__


@click.group()
@click.version_option(version=__version__, prog_name="cellang")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="Configuration file or directory holding cellang.yaml.",
)
@click.option(
    "--log-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Write structured NDJSON events to this directory.",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, log_dir: Path | None) -> None:
    """cellang -- spreadsheet-style formula language over numbered cells."""
    from cellang.config import load_config
    from cellang.logging import configure_logging

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))
    if log_dir is not None:
        config["log_dir"] = str(log_dir)
    configure_logging(config.get("log_dir"), fsync=bool(config.get("logging_fsync")))
    ctx.obj = config


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _run_lines(config: dict[str, Any], lines: Any, *, interactive: bool) -> int:
    from cellang.context import CellContext
    from cellang.session import Session

    out = click.get_text_stream("stdout")
    err = click.get_text_stream("stderr")
    with CellContext(click.get_text_stream("stdin"), out, err) as context:
        with Session(context, config) as session:
            return session.run(lines, out, err, interactive=interactive)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("script", type=click.File("r"))
@click.option("--keep-going", is_flag=True, help="Report errors and continue with the next statement.")
@click.pass_obj
def run(config: dict[str, Any], script: Any, keep_going: bool) -> None:
    """Run the statements in SCRIPT ('-' reads standard input)."""
    if keep_going:
        config = {**config, "stop_on_error": False}
    sys.exit(_run_lines(config, script, interactive=False))


@main.command("eval")
@click.argument("expression")
@click.pass_obj
def eval_(config: dict[str, Any], expression: str) -> None:
    """Evaluate EXPRESSION and print its value."""
    config = {**config, "echo_results": True}
    sys.exit(_run_lines(config, expression.splitlines(), interactive=False))


@main.command()
@click.pass_obj
def repl(config: dict[str, Any]) -> None:
    """Start an interactive session."""
    sys.exit(_run_lines(config, click.get_text_stream("stdin"), interactive=True))


@main.command()
@click.argument("expression")
def inspect(expression: str) -> None:
    """Print the canonical form of EXPRESSION without evaluating it."""
    from cellang.formulas import FormulaError, compile_formula, render

    try:
        tree = compile_formula(expression)
        text = render(tree) if tree is not None else None
    except FormulaError as e:
        raise click.ClickException(e.message)
    if text is not None:
        click.echo(text)


@main.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False, path_type=Path))
def init(directory: Path) -> None:
    """Write a default cellang.yaml into DIRECTORY."""
    from cellang.config import write_default_config

    try:
        target = write_default_config(directory)
    except FileExistsError as e:
        raise click.ClickException(str(e))
    click.echo(f"Created {target}")
