"""
Lifecycle Expansion and Mojo Configuration.

Default ``LifecycleExecutor`` and ``MojoParameterReader`` implementations.

Plan Calculation:
    - A lifecycle phase expands to every phase up to and including it,
      each contributing the packaging's default bindings followed by the
      project's declared plugin executions bound to that phase.
    - ``prefix:goal`` invokes a goal directly (``compiler:compile``).
    - ``groupId:artifactId[:version]:goal`` invokes a fully qualified goal.

Binding executions carry the id ``default-<goal>``; a declared execution
with the same id merges its configuration into the binding instead of
adding a second execution, as Maven does.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .project import DEFAULT_PLUGIN_GROUP_ID, PluginDeclaration, ProjectModel, interpolate
from .session import BuildSession
from .types import MojoExecution

logger = logging.getLogger(__name__)

CLEAN_LIFECYCLE: List[str] = ["pre-clean", "clean", "post-clean"]

DEFAULT_LIFECYCLE: List[str] = [
    "validate",
    "initialize",
    "generate-sources",
    "process-sources",
    "generate-resources",
    "process-resources",
    "compile",
    "process-classes",
    "generate-test-sources",
    "process-test-sources",
    "generate-test-resources",
    "process-test-resources",
    "test-compile",
    "process-test-classes",
    "test",
    "prepare-package",
    "package",
    "pre-integration-test",
    "integration-test",
    "post-integration-test",
    "verify",
    "install",
    "deploy",
]

LIFECYCLES: List[List[str]] = [CLEAN_LIFECYCLE, DEFAULT_LIFECYCLE]

# Goal prefix -> artifactId of the plugin in org.apache.maven.plugins
PLUGIN_PREFIXES: Dict[str, str] = {
    "clean": "maven-clean-plugin",
    "resources": "maven-resources-plugin",
    "compiler": "maven-compiler-plugin",
    "surefire": "maven-surefire-plugin",
    "jar": "maven-jar-plugin",
    "war": "maven-war-plugin",
    "install": "maven-install-plugin",
    "deploy": "maven-deploy-plugin",
    "plugin": "maven-plugin-plugin",
}

_JAR_BINDINGS: Dict[str, List[str]] = {
    "process-resources": ["resources:resources"],
    "compile": ["compiler:compile"],
    "process-test-resources": ["resources:testResources"],
    "test-compile": ["compiler:testCompile"],
    "test": ["surefire:test"],
    "package": ["jar:jar"],
    "install": ["install:install"],
    "deploy": ["deploy:deploy"],
}

# Packaging -> phase -> "prefix:goal" bindings
PACKAGING_BINDINGS: Dict[str, Dict[str, List[str]]] = {
    "jar": _JAR_BINDINGS,
    "war": {**_JAR_BINDINGS, "package": ["war:war"]},
    "pom": {
        "install": ["install:install"],
        "deploy": ["deploy:deploy"],
    },
    "maven-plugin": {
        **_JAR_BINDINGS,
        "generate-resources": ["plugin:descriptor"],
        "package": ["jar:jar", "plugin:addPluginArtifactMetadata"],
    },
}

CLEAN_BINDINGS: Dict[str, List[str]] = {"clean": ["clean:clean"]}

# Default phase of goals whose executions omit <phase>
GOAL_DEFAULT_PHASES: Dict[Tuple[str, str], str] = {
    ("maven-compiler-plugin", "compile"): "compile",
    ("maven-compiler-plugin", "testCompile"): "test-compile",
    ("maven-resources-plugin", "resources"): "process-resources",
    ("maven-resources-plugin", "testResources"): "process-test-resources",
    ("maven-surefire-plugin", "test"): "test",
    ("maven-jar-plugin", "jar"): "package",
    ("maven-jar-plugin", "test-jar"): "package",
    ("maven-source-plugin", "jar"): "package",
    ("maven-install-plugin", "install"): "install",
    ("maven-deploy-plugin", "deploy"): "deploy",
}


def _merge_configuration(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge plugin configuration; ``override`` wins on leaves."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_configuration(merged[key], value)
        else:
            merged[key] = value
    return merged


def _lifecycle_of(phase: str) -> Optional[List[str]]:
    for lifecycle in LIFECYCLES:
        if phase in lifecycle:
            return lifecycle
    return None


class DefaultLifecycleExecutor:
    """
    Expands goals and phases into an ordered list of mojo executions.

    Example:
        ```python
        executor = DefaultLifecycleExecutor()
        executions = executor.calculate_plan(session, ["process-test-resources"])
        ```
    """

    def calculate_plan(self, session: BuildSession, goals: Sequence[str]) -> List[MojoExecution]:
        """
        Expand ``goals`` for the session's project.

        Raises:
            ValueError: For an unknown phase, an unknown goal prefix or an
                unsupported packaging.
        """
        project = session.project
        executions: List[MojoExecution] = []
        for goal in goals:
            if ":" in goal:
                executions.append(self._direct_invocation(project, goal))
            elif _lifecycle_of(goal) is not None:
                executions.extend(self._lifecycle_executions(project, goal))
            else:
                raise ValueError(f"Unknown lifecycle phase \"{goal}\"")

        logger.debug(f"Planned {len(executions)} executions for {project.module_id}: {list(goals)}")
        return executions

    # --- Lifecycle phases ---

    def _lifecycle_executions(self, project: ProjectModel, target_phase: str) -> List[MojoExecution]:
        lifecycle = _lifecycle_of(target_phase) or []
        phases = lifecycle[: lifecycle.index(target_phase) + 1]
        bindings = self._bindings(project.packaging, lifecycle)

        executions: List[MojoExecution] = []
        for phase in phases:
            phase_executions: List[MojoExecution] = []
            for invocation in bindings.get(phase, []):
                prefix, goal = invocation.split(":")
                phase_executions.append(
                    self._create_execution(
                        project,
                        DEFAULT_PLUGIN_GROUP_ID,
                        PLUGIN_PREFIXES[prefix],
                        goal,
                        execution_id=f"default-{goal}",
                        phase=phase,
                    )
                )
            self._apply_declared_executions(project, phase, phase_executions)
            executions.extend(phase_executions)
        return executions

    @staticmethod
    def _bindings(packaging: str, lifecycle: List[str]) -> Dict[str, List[str]]:
        if lifecycle is CLEAN_LIFECYCLE:
            return CLEAN_BINDINGS
        if packaging not in PACKAGING_BINDINGS:
            raise ValueError(f"Unsupported packaging \"{packaging}\"")
        return PACKAGING_BINDINGS[packaging]

    def _apply_declared_executions(
        self, project: ProjectModel, phase: str, phase_executions: List[MojoExecution]
    ) -> None:
        for plugin in project.plugins:
            for declared in plugin.executions:
                for goal in declared.goals:
                    bound = declared.phase or GOAL_DEFAULT_PHASES.get((plugin.artifact_id, goal))
                    if bound != phase:
                        continue
                    index = self._index_of(phase_executions, plugin, goal, declared.id)
                    if index is not None:
                        existing = phase_executions[index]
                        phase_executions[index] = existing.model_copy(
                            update={
                                "configuration": _merge_configuration(
                                    existing.configuration, declared.configuration
                                )
                            }
                        )
                        continue
                    phase_executions.append(
                        self._create_execution(
                            project,
                            plugin.group_id,
                            plugin.artifact_id,
                            goal,
                            execution_id=declared.id,
                            phase=phase,
                            execution_configuration=declared.configuration,
                        )
                    )

    @staticmethod
    def _index_of(
        executions: List[MojoExecution], plugin: PluginDeclaration, goal: str, execution_id: str
    ) -> Optional[int]:
        for i, execution in enumerate(executions):
            if (
                execution.matches(plugin.group_id, plugin.artifact_id)
                and execution.goal == goal
                and execution.execution_id == execution_id
            ):
                return i
        return None

    # --- Direct invocations ---

    def _direct_invocation(self, project: ProjectModel, invocation: str) -> MojoExecution:
        parts = invocation.split(":")
        if len(parts) == 2:
            prefix, goal = parts
            group_id, artifact_id = self._plugin_for_prefix(project, prefix)
            version = None
        elif len(parts) in (3, 4):
            group_id, artifact_id = parts[0], parts[1]
            version = parts[2] if len(parts) == 4 else None
            goal = parts[-1]
        else:
            raise ValueError(f"Invalid goal \"{invocation}\"")

        return self._create_execution(
            project,
            group_id,
            artifact_id,
            goal,
            execution_id="default-cli",
            version=version,
        )

    @staticmethod
    def _plugin_for_prefix(project: ProjectModel, prefix: str) -> Tuple[str, str]:
        if prefix in PLUGIN_PREFIXES:
            return DEFAULT_PLUGIN_GROUP_ID, PLUGIN_PREFIXES[prefix]
        for plugin in project.plugins:
            if plugin.artifact_id in (f"maven-{prefix}-plugin", f"{prefix}-maven-plugin"):
                return plugin.group_id, plugin.artifact_id
        raise ValueError(f"No plugin found for prefix \"{prefix}\"")

    @staticmethod
    def _create_execution(
        project: ProjectModel,
        group_id: str,
        artifact_id: str,
        goal: str,
        execution_id: str,
        phase: Optional[str] = None,
        version: Optional[str] = None,
        execution_configuration: Optional[Dict[str, Any]] = None,
    ) -> MojoExecution:
        plugin = project.get_plugin(group_id, artifact_id)
        configuration: Dict[str, Any] = {}
        if plugin is not None:
            version = version or plugin.version
            configuration = dict(plugin.configuration)
        if execution_configuration:
            configuration = _merge_configuration(configuration, execution_configuration)
        return MojoExecution(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            goal=goal,
            execution_id=execution_id,
            phase=phase,
            configuration=configuration,
        )


# --- Parameter reading ---

# Expressions used when a parameter is not configured explicitly
DEFAULT_PARAMETER_EXPRESSIONS: Dict[Tuple[str, str], str] = {
    ("maven-compiler-plugin", "source"): "${maven.compiler.source}",
    ("maven-compiler-plugin", "target"): "${maven.compiler.target}",
    ("maven-compiler-plugin", "encoding"): "${project.build.sourceEncoding}",
    ("maven-resources-plugin", "encoding"): "${project.build.sourceEncoding}",
}


class ConfigurationParameterReader:
    """
    Reads mojo parameters from execution configuration.

    ``${...}`` expressions are evaluated against the request's user
    properties, the project's properties and its ``project.*`` fields.
    An expression that stays unresolved yields None.
    """

    def read(
        self,
        session: Optional[BuildSession],
        execution: MojoExecution,
        parameter: str,
        as_type: type,
    ) -> Any:
        """
        Read ``parameter`` converted to ``as_type``.

        Raises:
            ValueError: If the value cannot be converted.
            TypeError: If ``as_type`` is not str, int, bool or list.
        """
        value = execution.configuration.get(parameter)
        if value is None:
            value = DEFAULT_PARAMETER_EXPRESSIONS.get((execution.artifact_id, parameter))
        if value is None:
            return None

        properties = self._properties(session)
        if isinstance(value, list):
            value = [interpolate(v, properties) if isinstance(v, str) else v for v in value]
        elif isinstance(value, str):
            value = interpolate(value, properties)
            if value.startswith("${") and value.endswith("}"):
                return None

        return self._convert(value, as_type, parameter)

    @staticmethod
    def _properties(session: Optional[BuildSession]) -> Dict[str, str]:
        if session is None:
            return {}
        project = session.project
        properties = {
            "project.groupId": project.group_id,
            "project.artifactId": project.artifact_id,
            "project.version": project.version or "",
            "project.packaging": project.packaging,
            "project.basedir": project.basedir,
            "basedir": project.basedir,
            "project.build.outputDirectory": project.output_directory,
            "project.build.testOutputDirectory": project.test_output_directory,
        }
        properties.update(project.properties)
        properties.update(session.request.user_properties)
        return properties

    @staticmethod
    def _convert(value: Any, as_type: type, parameter: str) -> Any:
        if as_type is list:
            return list(value) if isinstance(value, list) else [value]
        if isinstance(value, (list, dict)):
            raise ValueError(f"Parameter '{parameter}' is not a simple value")
        if as_type is str:
            return str(value)
        if as_type is bool:
            return str(value).strip().lower() == "true"
        if as_type is int:
            try:
                return int(str(value).strip())
            except ValueError as e:
                raise ValueError(f"Parameter '{parameter}' is not an integer: {value!r}") from e
        raise TypeError(f"Unsupported parameter type {as_type!r}")
