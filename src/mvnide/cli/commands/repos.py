"""
Repos Command - Show the assembled remote repository list.
"""

import click
from rich.table import Table

from ...core.errors import MvnideError
from ...core.repositories import RepositoryAssembler
from ..utils import console, fail, get_settings_resolver


@click.command()
@click.option("--plugins", is_flag=True, help="Show plugin repositories")
@click.option("--no-inject", is_flag=True, help="Skip mirrors, proxies and credentials")
def repos(plugins: bool, no_inject: bool):
    """
    List remote repositories in resolution order.

    Repositories come from active settings profiles plus the default
    repository, with mirrors, proxies and credentials applied.
    """
    assembler = RepositoryAssembler(get_settings_resolver())
    try:
        if plugins:
            repositories = assembler.plugin_repositories(inject_settings=not no_inject)
        else:
            repositories = assembler.repositories(inject_settings=not no_inject)
    except MvnideError as e:
        fail(e)

    table = Table(title="Plugin repositories" if plugins else "Repositories")
    table.add_column("Id", style="cyan")
    table.add_column("URL")
    table.add_column("Mirror of")
    table.add_column("Proxy")
    table.add_column("User")
    for repository in repositories:
        proxy = repository.proxy
        table.add_row(
            repository.id,
            repository.url,
            repository.mirror_of or "",
            f"{proxy.host}:{proxy.port}" if proxy else "",
            repository.username or "",
        )
    console.print(table)
