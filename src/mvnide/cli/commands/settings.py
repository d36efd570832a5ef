"""
Settings Commands - Inspect and validate settings.xml files.
"""

from pathlib import Path

import click
from rich.table import Table

from ...core.errors import MvnideError
from ..utils import console, echo_error, echo_success, fail, get_settings_resolver


@click.group()
def settings():
    """Inspect Maven settings."""
    pass


@settings.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(as_json: bool):
    """
    Show the effective settings.

    User settings take precedence over global settings.
    """
    resolver = get_settings_resolver()
    try:
        effective = resolver.get_settings()
        local_repository = resolver.local_repository()
    except MvnideError as e:
        fail(e)

    if as_json:
        click.echo(effective.model_dump_json(indent=2))
        return

    console.print(f"[bold]Global settings:[/bold] {resolver.global_settings_file or '(none)'}")
    console.print(f"[bold]User settings:[/bold]   {resolver.user_settings_file or '(none)'}")
    console.print(f"[bold]Local repository:[/bold] {local_repository}")
    console.print(f"[bold]Offline:[/bold] {effective.offline}")

    if effective.mirrors:
        table = Table(title="Mirrors")
        table.add_column("Id")
        table.add_column("Mirror of")
        table.add_column("URL")
        for mirror in effective.mirrors:
            table.add_row(mirror.id, mirror.mirror_of, mirror.url)
        console.print(table)

    if effective.profiles:
        table = Table(title="Profiles")
        table.add_column("Id")
        table.add_column("Active")
        table.add_column("Repositories", justify="right")
        for profile in effective.profiles:
            active = profile.active_by_default or profile.id in effective.active_profiles
            table.add_row(profile.id, "yes" if active else "no", str(len(profile.repositories)))
        console.print(table)

    if effective.proxies:
        console.print(f"[bold]Proxies:[/bold] {', '.join(f'{p.id} ({p.host}:{p.port})' for p in effective.proxies)}")
    if effective.servers:
        console.print(f"[bold]Servers:[/bold] {', '.join(s.id for s in effective.servers)}")


@settings.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def validate(path: Path):
    """Validate a settings.xml file."""
    problems = get_settings_resolver().validate(path)
    if not problems:
        echo_success(f"{path} is valid")
        return
    for problem in problems:
        echo_error(problem)
    raise SystemExit(1)
