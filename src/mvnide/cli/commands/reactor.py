"""
Reactor Command - Show the build order of a multi-module project.
"""

from pathlib import Path

import click

from ...core.errors import MvnideError
from ...core.planner import ExecutionPlanner
from ...core.project import read_reactor
from ..utils import echo_success, fail, get_settings_resolver


@click.command()
@click.option("-p", "--project", "project_dir", default=".", type=click.Path(exists=True),
              help="Aggregator project directory or pom.xml")
def reactor(project_dir: str):
    """
    Order the modules of a multi-module build.

    Each module is listed after the modules it depends on.
    """
    root_pom = Path(project_dir)
    if root_pom.is_dir():
        root_pom = root_pom / "pom.xml"

    planner = ExecutionPlanner(get_settings_resolver())
    try:
        projects = planner.sorted_projects(read_reactor(root_pom))
    except MvnideError as e:
        fail(e)

    echo_success(f"Reactor build order ({len(projects)} modules):")
    for index, project in enumerate(projects, 1):
        click.echo(f"  {index:>2}. {project.display_name} [{project.module_id}]")
