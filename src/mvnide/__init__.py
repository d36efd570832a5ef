"""
mvnide - Maven build planning and classpath synthesis for IDEs.

mvnide turns Maven project descriptions into what a development
environment needs to compile and navigate them: an ordered build
execution plan and a concrete classpath.

Key Components:
- core.settings: Effective settings.xml and listener registries
- core.repositories: Remote repository assembly (mirrors, proxies, auth)
- core.resolver: Artifact resolution with a local staleness cache
- core.planner: Execution plans and compiler levels
- core.reactor: Multi-module ordering
- core.classpath: Classpath synthesis

Usage:
    from mvnide import MvnideConfig
    from mvnide.core import ExecutionPlanner, SettingsResolver, read_project

    planner = ExecutionPlanner(SettingsResolver(MvnideConfig.load()))
    plan = planner.calculate_plan(planner.create_request(), read_project(pom))
"""

__version__ = "0.1.0"

from .config import MvnideConfig

__all__ = [
    "__version__",
    "MvnideConfig",
]
