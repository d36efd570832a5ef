"""
Execution Planner.

Builds execution requests from settings, scopes them to one project at a
time and expands requested goals into an ordered ``ExecutionPlan``.

Also answers the questions the classpath synthesizer asks of a plan,
most importantly the effective compiler source and target levels.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from .. import __version__
from ..config import (
    COMPILER_PLUGIN_ARTIFACT_ID,
    COMPILER_PLUGIN_GROUP_ID,
    DEFAULT_COMPILER_LEVEL,
    TOOL_VERSION_PROPERTY,
)
from .collaborators import (
    LifecycleExecutor,
    MojoExecutor,
    MojoParameterReader,
    NullProgressMonitor,
    ProgressMonitor,
    UnsupportedMojoExecutor,
)
from .errors import CycleError, DuplicateIdError, MvnideError, PlanningError
from .lifecycle import ConfigurationParameterReader, DefaultLifecycleExecutor
from .project import ProjectModel
from .reactor import ReactorSorter
from .session import BuildSession, ExecutionRequest, ExecutionResult
from .settings import SettingsResolver
from .types import ExecutionPlan, MojoExecution

logger = logging.getLogger(__name__)


class ExecutionPlanner:
    """
    Plans builds for single projects.

    Example:
        ```python
        planner = ExecutionPlanner(SettingsResolver(config))
        request = planner.create_request(goals=["process-test-resources"])
        plan = planner.calculate_plan(request, project)
        planner.compiler_level(plan, "target", TARGET_LEVELS)  # "1.6"
        ```
    """

    def __init__(
        self,
        settings: SettingsResolver,
        lifecycle: Optional[LifecycleExecutor] = None,
        parameter_reader: Optional[MojoParameterReader] = None,
        mojo_executor: Optional[MojoExecutor] = None,
        sorter: Optional[ReactorSorter] = None,
    ):
        self.settings = settings
        self.lifecycle = lifecycle or DefaultLifecycleExecutor()
        self.parameter_reader = parameter_reader or ConfigurationParameterReader()
        self.mojo_executor = mojo_executor or UnsupportedMojoExecutor()
        self.sorter = sorter or ReactorSorter()

    def create_request(
        self,
        monitor: Optional[ProgressMonitor] = None,
        goals: Sequence[str] = (),
    ) -> ExecutionRequest:
        """
        Create a request populated from the effective settings.

        Args:
            monitor: Receives transfer progress messages.
            goals: Goals or phases to plan.

        Raises:
            PlanningError: If the settings cannot be loaded.
        """
        try:
            settings = self.settings.get_settings()
            local_repository = self.settings.local_repository()
        except MvnideError as e:
            raise PlanningError("Could not create execution request") from e

        transfer_listener = monitor.report if monitor is not None else None
        return ExecutionRequest(
            global_settings_file=self.settings.global_settings_file,
            user_settings_file=self.settings.user_settings_file,
            local_repository=local_repository,
            offline=settings.offline or self.settings.config.offline,
            goals=list(goals),
            mirrors=list(settings.mirrors),
            proxies=list(settings.proxies),
            servers=list(settings.servers),
            active_profiles=list(settings.active_profiles),
            user_properties={TOOL_VERSION_PROPERTY: __version__},
            transfer_listener=transfer_listener,
        )

    def create_session(self, request: ExecutionRequest, project: ProjectModel) -> BuildSession:
        """Scope ``request`` to exactly one project with a fresh result."""
        return BuildSession(request=request, project=project, result=ExecutionResult())

    def calculate_plan(
        self,
        request: ExecutionRequest,
        project: ProjectModel,
        goals: Optional[Sequence[str]] = None,
        monitor: Optional[ProgressMonitor] = None,
    ) -> ExecutionPlan:
        """
        Expand goals into the ordered executions for ``project``.

        Args:
            request: Execution request.
            project: Project to plan.
            goals: Overrides ``request.goals`` when given.
            monitor: Cancellation token.

        Raises:
            PlanningError: If the plan cannot be calculated or the monitor
                cancelled planning.
        """
        monitor = monitor or NullProgressMonitor()
        if monitor.is_cancelled():
            raise PlanningError("Could not calculate build plan", cancelled=True)

        goals = list(goals) if goals is not None else list(request.goals)
        session = self.create_session(request, project)
        try:
            executions = self.lifecycle.calculate_plan(session, goals)
        except Exception as e:
            raise PlanningError("Could not calculate build plan") from e

        plan = ExecutionPlan(executions=tuple(executions))
        logger.info(f"Calculated plan for {project.module_id} with {len(plan)} executions")
        return plan

    def mojo_parameter_value(
        self,
        session: Optional[BuildSession],
        execution: MojoExecution,
        parameter: str,
        as_type: type = str,
    ) -> Any:
        """
        Read a configured parameter of ``execution``.

        Returns:
            The converted value, or None when the parameter is not configured.

        Raises:
            PlanningError: If the reader fails.
        """
        try:
            return self.parameter_reader.read(session, execution, parameter, as_type)
        except Exception as e:
            raise PlanningError("Could not get mojo execution parameter value") from e

    def compiler_level(
        self,
        plan: ExecutionPlan,
        parameter: str,
        levels: Sequence[str],
        session: Optional[BuildSession] = None,
    ) -> str:
        """
        Effective compiler level across all compiler plugin executions.

        Keeps the highest recognized level; unrecognized values and ties
        never lower it. Falls back to ``DEFAULT_COMPILER_LEVEL`` when no
        execution declares a recognized level.

        Raises:
            PlanningError: If a parameter cannot be read.
        """
        level_index = -1
        for execution in plan.for_plugin(COMPILER_PLUGIN_GROUP_ID, COMPILER_PLUGIN_ARTIFACT_ID):
            value = self.mojo_parameter_value(session, execution, parameter, str)
            index = levels.index(value) if value in levels else -1
            if index > level_index:
                level_index = index
        if level_index < 0:
            return DEFAULT_COMPILER_LEVEL
        return levels[level_index]

    def execute_mojo(
        self,
        session: BuildSession,
        execution: MojoExecution,
        monitor: Optional[ProgressMonitor] = None,
    ) -> None:
        """Run one execution; failures are recorded on ``session.result``."""
        monitor = monitor or NullProgressMonitor()
        monitor.report(f"Executing {execution}")
        try:
            self.mojo_executor.execute(session, execution)
        except Exception as e:
            logger.debug(f"Execution {execution} failed: {e}")
            session.result.add_exception(e)

    def sorted_projects(self, projects: Sequence[ProjectModel]) -> List[ProjectModel]:
        """
        Order reactor projects dependencies-first.

        Raises:
            PlanningError: On a dependency cycle or duplicate project ids.
        """
        try:
            modules = self.sorter.order(self.sorter.modules_from_projects(projects))
        except (CycleError, DuplicateIdError) as e:
            raise PlanningError("unable to sort projects") from e
        by_id = {p.module_id: p for p in projects}
        return [by_id[m.module_id] for m in modules]
