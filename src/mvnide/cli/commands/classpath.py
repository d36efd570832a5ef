"""
Classpath Command - Synthesize the IDE classpath of a project.
"""

import json
from pathlib import Path

import click
from rich.table import Table

from ...core.classpath import BuildUnit, ClasspathSynthesizer, ProjectConfigurationRequest
from ...core.errors import MvnideError
from ...core.planner import ExecutionPlanner
from ...core.project import read_reactor
from ..utils import ConsoleProgressMonitor, console, fail, get_config, get_settings_resolver, load_project


@click.command()
@click.option("-p", "--project", "project_dir", default=".", type=click.Path(exists=True),
              help="Project directory or pom.xml")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def classpath(project_dir: str, as_json: bool):
    """
    Compute the classpath of a Java project.

    Creates the output folders, maps source and resource roots and picks
    the JRE container matching the compiler target level.
    """
    config = get_config()
    planner = ExecutionPlanner(get_settings_resolver())
    synthesizer = ClasspathSynthesizer(planner, installed_environments=config.installed_environments)
    monitor = ConsoleProgressMonitor(quiet=as_json)

    try:
        project = load_project(project_dir)
        nested = []
        if project.modules:
            base = Path(project.basedir)
            nested = [
                p for p in read_reactor(base / "pom.xml")[1:]
                if base in Path(p.basedir).parents
            ]
        request = planner.create_request(monitor, config.goals)
        execution_plan = planner.calculate_plan(request, project, monitor=monitor)
        build_unit = BuildUnit(name=project.artifact_id)
        descriptor = synthesizer.synthesize(
            ProjectConfigurationRequest(
                project=project,
                build_unit=build_unit,
                session=planner.create_session(request, project),
                plan=execution_plan,
                nested_projects=nested,
            ),
            monitor=monitor,
        )
    except MvnideError as e:
        fail(e)

    if as_json:
        click.echo(json.dumps(
            {
                "entries": [entry.to_dict() for entry in descriptor],
                "output": build_unit.output_location,
                "options": build_unit.options,
            },
            indent=2,
        ))
        return

    table = Table(title=f"Classpath of {project.display_name}")
    table.add_column("Kind")
    table.add_column("Path", style="cyan")
    table.add_column("Output")
    table.add_column("Excludes")
    for entry in descriptor:
        table.add_row(
            entry.kind.value,
            entry.path,
            entry.output_path or "",
            ", ".join(entry.exclusion_patterns),
        )
    console.print(table)
    console.print(f"Default output: {build_unit.output_location}")
    for key, value in build_unit.options.items():
        console.print(f"[dim]{key}={value}[/dim]")
