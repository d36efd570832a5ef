"""
Plan Command - Show the execution plan of a project.
"""

from typing import Tuple

import click
from rich.table import Table

from ...config import SOURCE_LEVELS, TARGET_LEVELS
from ...core.errors import MvnideError
from ...core.planner import ExecutionPlanner
from ..utils import ConsoleProgressMonitor, console, fail, get_config, get_settings_resolver, load_project


@click.command()
@click.argument("goals", nargs=-1)
@click.option("-p", "--project", "project_dir", default=".", type=click.Path(exists=True),
              help="Project directory or pom.xml")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def plan(goals: Tuple[str, ...], project_dir: str, as_json: bool):
    """
    Calculate the execution plan for GOALS.

    Goals may be lifecycle phases, prefix:goal or groupId:artifactId:goal.
    Without goals the configured default goals are planned.
    """
    goals = tuple(goals) or tuple(get_config().goals)
    planner = ExecutionPlanner(get_settings_resolver())
    monitor = ConsoleProgressMonitor(quiet=as_json)

    try:
        project = load_project(project_dir)
        request = planner.create_request(monitor, goals)
        execution_plan = planner.calculate_plan(request, project, monitor=monitor)
        session = planner.create_session(request, project)
        source = planner.compiler_level(execution_plan, "source", SOURCE_LEVELS, session)
        target = planner.compiler_level(execution_plan, "target", TARGET_LEVELS, session)
    except MvnideError as e:
        fail(e)

    if as_json:
        click.echo(execution_plan.model_dump_json(indent=2))
        return

    table = Table(title=f"{project.display_name}: {' '.join(goals)}")
    table.add_column("#", justify="right")
    table.add_column("Phase")
    table.add_column("Plugin", style="cyan")
    table.add_column("Goal", style="green")
    table.add_column("Execution")
    for index, execution in enumerate(execution_plan, 1):
        table.add_row(
            str(index),
            execution.phase or "",
            f"{execution.plugin_key}:{execution.version}" if execution.version else execution.plugin_key,
            execution.goal,
            execution.execution_id,
        )
    console.print(table)
    console.print(f"Compiler source [bold]{source}[/bold], target [bold]{target}[/bold]")
