"""
Resolve Command - Fetch a single artifact into the local repository.
"""

import click

from ...core.errors import MvnideError
from ...core.repositories import RepositoryAssembler
from ...core.resolver import ArtifactResolver
from ...core.types import ArtifactCoordinate
from ..utils import ConsoleProgressMonitor, echo_error, echo_info, echo_success, echo_warning, fail, get_settings_resolver


@click.command()
@click.argument("coordinate")
@click.option("--check", is_flag=True, help="Only report whether the artifact is known to be unavailable")
@click.option("-q", "--quiet", is_flag=True, help="Hide transfer progress")
def resolve(coordinate: str, check: bool, quiet: bool):
    """
    Resolve an artifact.

    COORDINATE is groupId:artifactId[:type[:classifier]]:version.
    """
    try:
        artifact = ArtifactCoordinate.parse(coordinate)
    except ValueError as e:
        echo_error(str(e))
        raise SystemExit(2)

    settings_resolver = get_settings_resolver()
    assembler = RepositoryAssembler(settings_resolver)
    resolver = ArtifactResolver(settings_resolver, assembler)

    try:
        if check:
            repositories = assembler.repositories()
            path = resolver.artifact_path(artifact)
            if resolver.is_unavailable(artifact, repositories):
                echo_warning(f"{artifact} was already looked up in every repository")
                raise SystemExit(1)
            echo_info(f"{artifact} may be available ({path})")
            return

        resolved = resolver.resolve(artifact, monitor=ConsoleProgressMonitor(quiet=quiet))
    except MvnideError as e:
        fail(e)

    echo_success(f"Resolved {artifact}")
    click.echo(str(resolved.file))
