"""gilt command line.

Usage:
    gilt compile page.gilt                 # print generated markup
    gilt compile page.gilt -o page.j2      # write generated markup to a file
    gilt render page.gilt -d data.yaml     # render with Jinja2 and data
    gilt --version
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional

import jinja2
import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler

from gilt._version import __version__
from gilt.compiler import Compiler
from gilt.config import GiltConfig, find_config_file
from gilt.errors import GiltError

log = logging.getLogger(__name__)

console = Console(stderr=True)

typer_app = typer.Typer(
    help="Compile indentation-based markup templates to Jinja2.",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the gilt CLI.

    Log levels:
    - Normal: only warnings/errors shown
    - Verbose (-v): INFO level
    - Debug (GILT_DEBUG=1): DEBUG level - template loading, cache hits, handoff
    """
    if os.environ.get("GILT_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=bool(os.environ.get("GILT_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    gilt_logger = logging.getLogger("gilt")
    gilt_logger.setLevel(level)
    gilt_logger.handlers = [handler]
    gilt_logger.propagate = False


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gilt {__version__}")
        raise typer.Exit()


def _fail(message: str) -> NoReturn:
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _make_compiler(config_path: Optional[Path], base_dir: Optional[str]) -> Compiler:
    path = config_path or find_config_file()
    if config_path is not None and not config_path.exists():
        _fail(f"Config file not found: {config_path}")

    try:
        config = GiltConfig.load(path)
    except (ValueError, yaml.YAMLError) as exc:
        _fail(f"Invalid config: {exc}")
    if base_dir is not None:
        config = config.model_copy(update={"base_dir": base_dir})
    log.info(f"Using base directory {config.base_dir or '.'}")
    return Compiler(config=config)


def _load_data(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return {}
    if not path.exists():
        _fail(f"Data file not found: {path}")
    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            _fail(f"Invalid data file {path}: {exc}")
    if not isinstance(data, dict):
        _fail(f"Data file must contain a mapping: {path}")
    return data


def _emit(text: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(text, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    log.info(f"Wrote {output}")


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "-V",
        "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """gilt - markup shorthand compiler."""


@typer_app.command("compile")
def compile_command(
    template: str = typer.Argument(..., help="Template path or name."),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write generated markup to file."
    ),
    base_dir: Optional[str] = typer.Option(
        None, "--base-dir", help="Base directory for template paths."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to gilt.yaml."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Print the generated markup (with Jinja2 placeholders) for TEMPLATE."""
    setup_logging(verbose)
    compiler = _make_compiler(config_path, base_dir)
    try:
        text = compiler.generate(template)
    except GiltError as exc:
        _fail(str(exc))
    _emit(text, output)


@typer_app.command("render")
def render_command(
    template: str = typer.Argument(..., help="Template path or name."),
    data: Optional[Path] = typer.Option(
        None, "-d", "--data", help="YAML file with template data."
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write rendered output to file."
    ),
    base_dir: Optional[str] = typer.Option(
        None, "--base-dir", help="Base directory for template paths."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to gilt.yaml."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Compile TEMPLATE and render it with Jinja2."""
    setup_logging(verbose)
    compiler = _make_compiler(config_path, base_dir)
    context = _load_data(data)
    try:
        text = compiler.render(template, context)
    except GiltError as exc:
        _fail(str(exc))
    except jinja2.TemplateError as exc:
        _fail(f"render failed: {exc}")
    _emit(text, output)


def app() -> None:
    """Entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    app()
