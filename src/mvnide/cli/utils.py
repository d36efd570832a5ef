"""
CLI Utilities - Shared helper functions for command line operations.

This module provides common functionality used across the CLI commands:
formatted printing, configuration lookup, project loading and a
rich-backed progress monitor.
"""

from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console

from ..config import MvnideConfig
from ..core.errors import MvnideError
from ..core.project import ProjectModel, read_project
from ..core.settings import SettingsResolver

console = Console()


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    click.echo(click.style(f"   {message}", dim=True))


def fail(error: MvnideError) -> NoReturn:
    """Report an engine error, and its cause if wrapped, then exit with status 1."""
    echo_error(str(error))
    if error.__cause__ is not None:
        click.echo(click.style(f"   Caused by: {error.__cause__}", fg="red"), err=True)
    raise SystemExit(1)


def get_config() -> MvnideConfig:
    """
    Configuration of the current invocation.

    Uses the config loaded by the ``mvnide`` group when present, so
    commands invoked on their own fall back to ``MvnideConfig.load()``.
    """
    ctx = click.get_current_context(silent=True)
    if ctx is not None:
        obj = ctx.find_root().obj
        if isinstance(obj, dict) and obj.get("config") is not None:
            return obj["config"]
    return MvnideConfig.load()


def get_settings_resolver() -> SettingsResolver:
    return SettingsResolver(get_config())


def load_project(project_dir: str) -> ProjectModel:
    """
    Read ``pom.xml`` from a project directory.

    Args:
        project_dir (str): Directory containing pom.xml, or the pom itself.

    Raises:
        ProjectReadError: If the POM cannot be read.
    """
    path = Path(project_dir)
    if path.is_dir():
        path = path / "pom.xml"
    return read_project(path)


class ConsoleProgressMonitor:
    """
    Progress monitor printing to the rich console.

    Cancellation is requested by calling ``cancel()``, for instance from a
    signal handler.
    """

    def __init__(self, quiet: bool = False, output: Optional[Console] = None):
        self.quiet = quiet
        self.console = output or console
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def is_cancelled(self) -> bool:
        return self._cancelled

    def report(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[dim]{message}[/dim]")
