"""Layerlint CLI entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from layerlint import __version__
from layerlint.architecture.config import DEFAULT_CONFIG_NAME


@click.group()
@click.version_option(version=__version__, prog_name="layerlint")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """Layerlint - namespace-based architecture rules for PHP codebases."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument(
    "paths",
    nargs=-1,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Architecture definition (default: ./{DEFAULT_CONFIG_NAME}).",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Exit 1 if violations found.",
)
def check(
    paths: tuple[Path, ...],
    *,
    config_path: Path | None,
    fmt: str | None,
    strict: bool,
) -> None:
    """Check PHP sources against the declared architecture.

    PATHS override the source paths listed in the configuration file.
    Exit codes: 0 = clean or violations without --strict,
    1 = violations with --strict, 2 = configuration error.
    """
    from layerlint.linter import LintError, format_json, format_porcelain, format_rich, lint

    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_NAME

    # Resolve output format: explicit flag > TTY detection.
    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        result = lint(config_path, paths=list(paths) or None)
    except LintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    formatters = {
        "rich": format_rich,
        "json": format_json,
        "porcelain": format_porcelain,
    }
    output = formatters[fmt](result)
    if output:
        click.echo(output)

    if fmt == "porcelain":
        for warning in result.warnings:
            click.echo(f"warning: {warning}", err=True)

    if strict and result.violations:
        sys.exit(1)
