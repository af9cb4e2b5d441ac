"""Templ CLI Entry Point

Usage:
    templ fmt <paths...>             # Rewrite template files in canonical form
    templ fmt --check <paths...>     # Exit 1 if any file is not formatted
    templ fmt --stdout <file>        # Print formatted source instead
    templ dump <file> -f yaml        # Print the parsed tree
    templ --version                  # Show version
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from templ import codec
from templ._version import __version__
from templ.config import FormatConfig, find_config
from templ.exceptions import TemplError
from templ.parser import parse
from templ.writer import render

log = logging.getLogger(__name__)

err_console = Console(stderr=True)
_handlers: dict[tuple[bool, bool], RichHandler] = {}

typer_app = typer.Typer(no_args_is_help=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the templ CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level - shows each file formatted
    - Debug (TEMPL_DEBUG=1): DEBUG level - shows everything
    """
    if os.environ.get("TEMPL_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    templ_logger = logging.getLogger("templ")
    templ_logger.setLevel(level)
    templ_logger.propagate = False

    # One handler per display setting; repeated calls reuse it.
    key = (verbose, bool(os.environ.get("TEMPL_DEBUG")))
    handler = _handlers.get(key)
    if handler is None:
        handler = RichHandler(
            console=err_console,
            show_time=key[0],
            show_path=key[1],
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        _handlers[key] = handler
    for old in list(templ_logger.handlers):
        if old is not handler and isinstance(old, RichHandler):
            templ_logger.removeHandler(old)
    if handler not in templ_logger.handlers:
        templ_logger.addHandler(handler)


def load_config(config_path: Optional[Path]) -> FormatConfig:
    path = config_path if config_path is not None else find_config()
    if path is not None:
        log.debug(f"Using config {path}")
    return FormatConfig.load(path)


def discover(paths: List[Path], extensions: List[str]) -> List[Path]:
    """Expand directories into the template files they contain."""
    found: List[Path] = []
    for path in paths:
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                if candidate.is_file() and candidate.suffix in extensions:
                    found.append(candidate)
        else:
            found.append(path)
    log.debug(f"Discovered {len(found)} template files")
    return found


def read_source(path: Path) -> str:
    """Read a template file, failing the command on unreadable input."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise _fail(f"Cannot read {path}: {exc}")


def format_source(source: str, config: FormatConfig) -> str:
    """Parse source and render it canonically."""
    return render(parse(source), config)


def _fail(message: str) -> typer.Exit:
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    return typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"templ {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Canonical formatter for templ template files."""


@typer_app.command()
def fmt(
    paths: List[Path] = typer.Argument(..., help="Files or directories to format."),
    check: bool = typer.Option(
        False, "--check", help="Report unformatted files and exit 1, write nothing."
    ),
    stdout: bool = typer.Option(
        False, "--stdout", help="Print formatted source instead of rewriting."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to templ.yaml."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Rewrite template files in canonical form."""
    setup_logging(verbose)
    try:
        config = load_config(config_path)
        unformatted: List[Path] = []
        for path in discover(paths, config.extensions):
            if not path.exists():
                raise _fail(f"File not found: {path}")
            source = read_source(path)
            try:
                formatted = format_source(source, config)
            except TemplError as exc:
                raise _fail(f"{path}: {exc}")

            if stdout:
                typer.echo(formatted, nl=False)
            elif formatted != source:
                unformatted.append(path)
                if not check:
                    path.write_text(formatted, encoding="utf-8")
                    log.info(f"Formatted {path}")
            else:
                log.info(f"Unchanged {path}")
    except TemplError as exc:
        raise _fail(str(exc))

    if check and unformatted:
        for path in unformatted:
            err_console.print(f"[yellow]would reformat[/yellow] {path}")
        raise typer.Exit(code=1)


@typer_app.command()
def dump(
    path: Path = typer.Argument(..., help="Template file to parse."),
    output_format: str = typer.Option(
        "json", "-f", "--format", help="Output format: json or yaml."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Print the parsed tree of a template file."""
    setup_logging(verbose)
    if output_format not in codec.FORMATS:
        raise _fail(f"Unknown format {output_format!r}, expected json or yaml")
    if not path.exists():
        raise _fail(f"File not found: {path}")
    try:
        tf = parse(read_source(path))
    except TemplError as exc:
        raise _fail(f"{path}: {exc}")
    typer.echo(codec.encode(tf, output_format).decode("utf-8"))


def app() -> None:
    """Entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    app()
