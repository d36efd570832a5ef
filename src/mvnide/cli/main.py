"""
mvnide CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from ..config import MvnideConfig
from ..core.errors import SettingsLoadError
from .commands import classpath, plan, reactor, repos, resolve, settings
from .utils import echo_error

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


@click.group()
@click.version_option(package_name="mvnide")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to config.yaml (default: .mvnide/config.yaml)",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Optional[Path]):
    """mvnide: Maven build planning and classpath synthesis.

    Reads settings.xml and pom.xml the way Maven does and derives the
    execution plan, reactor order and classpath an IDE needs.

    \b
    Quick Start:
      mvnide settings show
      mvnide plan -p ./my-project
      mvnide classpath -p ./my-project --json
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)
    try:
        config = MvnideConfig.load(config_path)
    except SettingsLoadError as e:
        echo_error(str(e))
        raise SystemExit(1)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# Register commands
main.add_command(settings.settings)
main.add_command(repos.repos)
main.add_command(resolve.resolve)
main.add_command(plan.plan)
main.add_command(reactor.reactor)
main.add_command(classpath.classpath)

if __name__ == "__main__":
    main()
