"""CLI entry point."""

from __future__ import annotations

import importlib
import importlib.util
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from sitespine.core.exceptions import BuildFailed, SiteSpineError

app = typer.Typer(
    name="sitespine",
    help="Declarative static site build pipeline",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


@app.command()
def version() -> None:
    """Show version."""
    from sitespine import __version__

    console.print(f"sitespine {__version__}")


@app.command()
def info() -> None:
    """Show system information and effective settings."""
    from sitespine import __version__
    from sitespine.core.config import get_settings

    try:
        settings = get_settings()
    except SiteSpineError as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", highlight=False)
        raise typer.Exit(code=2) from e
    console.print(f"[bold]SiteSpine[/bold] {__version__}")
    console.print(f"Python {sys.version}")
    console.print(f"Content root: {settings.content_root}")
    console.print(f"Output directory: {settings.output_dir}")
    console.print(f"Templates: {settings.templates_dir}")
    console.print(f"Force: {settings.force}, verbosity: {settings.verbosity}")


def load_site(target: str) -> Callable[..., Any]:
    """Resolve ``path/to/site.py:func`` or ``package.module:func``.

    Raises:
        typer.BadParameter: If the target cannot be imported.
    """
    location, sep, attr = target.rpartition(":")
    if not sep or not location or not attr:
        raise typer.BadParameter(f"Expected FILE.py:FUNCTION or MODULE:FUNCTION, got `{target}`")

    if location.endswith(".py"):
        path = Path(location)
        if not path.is_file():
            raise typer.BadParameter(f"No such file: {location}")
        spec = importlib.util.spec_from_file_location(path.stem, path)
        if spec is None or spec.loader is None:
            raise typer.BadParameter(f"Cannot import {location}")
        module = importlib.util.module_from_spec(spec)
        sys.path.insert(0, str(path.parent.resolve()))
        try:
            spec.loader.exec_module(module)
        finally:
            sys.path.pop(0)
    else:
        try:
            module = importlib.import_module(location)
        except ImportError as e:
            raise typer.BadParameter(f"Cannot import module `{location}`: {e}") from e

    func = getattr(module, attr, None)
    if not callable(func):
        raise typer.BadParameter(f"`{attr}` is not a function of {location}")
    return func


@app.command()
def build(
    target: str = typer.Argument(..., help="Site definition: FILE.py:FUNCTION or MODULE:FUNCTION"),
    content_root: Path | None = typer.Option(None, "--content-root", "-C", help="Source tree"),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Output tree"),
    force: bool = typer.Option(False, "--force", "-f", help="Ignore mtimes, rebuild everything"),
    verbosity: int | None = typer.Option(None, "--verbosity", "-v", min=0, max=5),
    plain: bool = typer.Option(False, "--plain", help="Log the summary instead of a table"),
) -> None:
    """Build a site.

    The function named by TARGET receives a `State` and registers rules
    on it; the CLI then runs the build and prints a summary.
    """
    from sitespine.core.state import State
    from sitespine.reporter import RichBuildReporter, SimpleBuildReporter

    site = load_site(target)
    overrides: dict[str, Any] = {}
    if content_root is not None:
        overrides["content_root"] = content_root
    if output_dir is not None:
        overrides["output_dir"] = output_dir
    if force:
        overrides["force"] = True
    if verbosity is not None:
        overrides["verbosity"] = verbosity

    reporter = SimpleBuildReporter() if plain else RichBuildReporter(console=console)
    try:
        state = State(**overrides)
        site(state)
        report = state.finish()
    except BuildFailed as e:
        err_console.print(f"[bold red]Build failed:[/bold red] {escape(str(e))}", highlight=False)
        if e.report is not None:
            reporter.report(e.report)
        raise typer.Exit(code=1) from e
    except SiteSpineError as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", highlight=False)
        raise typer.Exit(code=2) from e

    reporter.report(report)
    if not report.ok:
        raise typer.Exit(code=report.exit_code)


if __name__ == "__main__":
    app()
