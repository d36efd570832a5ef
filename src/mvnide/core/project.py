"""
Project model and pom.xml reading.

Parses Maven ``pom.xml`` files into ``ProjectModel`` instances carrying
everything the planner and the classpath synthesizer need: coordinates,
packaging, source and resource roots, output folders, build plugins with
their executions, dependencies, properties and child modules.

Property expressions (``${...}``) are interpolated against the project's
own properties and the ``project.*`` fields after parsing.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .errors import ProjectReadError
from .types import ArtifactCoordinate

logger = logging.getLogger(__name__)

# XML namespace used by Maven POM files (POM model version 4.0.0).
NS = {"m": "http://maven.apache.org/POM/4.0.0"}

DEFAULT_PLUGIN_GROUP_ID = "org.apache.maven.plugins"

_EXPRESSION = re.compile(r"\$\{([^}]+)\}")


class Resource(BaseModel):
    """A ``<resource>`` or ``<testResource>`` directory."""

    directory: str
    target_path: Optional[str] = None
    includes: List[str] = Field(default_factory=list)
    excludes: List[str] = Field(default_factory=list)


class Dependency(BaseModel):
    """A declared ``<dependency>``."""

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    type: str = "jar"
    classifier: str = ""
    scope: str = "compile"
    optional: bool = False

    @property
    def key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    def to_coordinate(self) -> ArtifactCoordinate:
        if not self.version:
            raise ValueError(f"Dependency {self.key} has no version")
        return ArtifactCoordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            type=self.type,
            classifier=self.classifier,
        )


class PluginExecutionDeclaration(BaseModel):
    """An ``<execution>`` block within a plugin declaration."""

    id: str = "default"
    phase: Optional[str] = None
    goals: List[str] = Field(default_factory=list)
    configuration: Dict[str, Any] = Field(default_factory=dict)


class PluginDeclaration(BaseModel):
    """A ``<build><plugins><plugin>`` declaration."""

    group_id: str = DEFAULT_PLUGIN_GROUP_ID
    artifact_id: str
    version: Optional[str] = None
    configuration: Dict[str, Any] = Field(default_factory=dict)
    executions: List[PluginExecutionDeclaration] = Field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"


class ProjectModel(BaseModel):
    """
    Effective model of a single Maven project.

    Directory attributes are absolute paths as strings; ``basedir`` is the
    directory holding the pom.xml.

    Attributes:
        group_id: groupId (inherited from parent if not declared).
        artifact_id: artifactId.
        version: Version (inherited from parent if not declared).
        packaging: Packaging type, ``jar`` by default.
        name: Project name, the artifactId when not declared.
        basedir: Project base directory.
        parent_group_id: Parent groupId, if any.
        parent_artifact_id: Parent artifactId, if any.
        compile_source_roots: Main source roots.
        test_compile_source_roots: Test source roots.
        resources: Main resource directories.
        test_resources: Test resource directories.
        output_directory: Main output folder.
        test_output_directory: Test output folder.
        plugins: Build plugins.
        dependencies: Declared dependencies.
        properties: ``<properties>``.
        modules: Child module directory names.
    """

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    packaging: str = "jar"
    name: Optional[str] = None
    basedir: str
    parent_group_id: Optional[str] = None
    parent_artifact_id: Optional[str] = None
    compile_source_roots: List[str] = Field(default_factory=list)
    test_compile_source_roots: List[str] = Field(default_factory=list)
    resources: List[Resource] = Field(default_factory=list)
    test_resources: List[Resource] = Field(default_factory=list)
    output_directory: str = ""
    test_output_directory: str = ""
    plugins: List[PluginDeclaration] = Field(default_factory=list)
    dependencies: List[Dependency] = Field(default_factory=list)
    properties: Dict[str, str] = Field(default_factory=dict)
    modules: List[str] = Field(default_factory=list)

    def model_post_init(self, __context) -> None:
        base = Path(self.basedir)
        if not self.output_directory:
            self.output_directory = str(base / "target" / "classes")
        if not self.test_output_directory:
            self.test_output_directory = str(base / "target" / "test-classes")

    @property
    def module_id(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def display_name(self) -> str:
        return self.name or self.artifact_id

    def get_plugin(self, group_id: str, artifact_id: str) -> Optional[PluginDeclaration]:
        for plugin in self.plugins:
            if plugin.group_id == group_id and plugin.artifact_id == artifact_id:
                return plugin
        return None

    def relative_path(self, path: str) -> Optional[str]:
        """
        Project-relative POSIX path of ``path``.

        Returns:
            ``""`` for the basedir itself, None if ``path`` is outside it.
        """
        try:
            relative = Path(path).resolve().relative_to(Path(self.basedir).resolve())
        except ValueError:
            return None
        return relative.as_posix() if str(relative) != "." else ""


# --- XML helpers ---


def _local(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _find(el, tag):
    """Find a direct child element, with or without the Maven namespace."""
    result = el.find(f"m:{tag}", NS)
    if result is not None:
        return result
    return el.find(tag)


def _findall(el, tag) -> list:
    return list(el.findall(f"m:{tag}", NS)) + list(el.findall(tag))


def _text(el, tag) -> Optional[str]:
    child = _find(el, tag)
    if child is not None and child.text:
        return child.text.strip()
    return None


def _children_text(el, container: str, item: str) -> List[str]:
    parent = _find(el, container)
    if parent is None:
        return []
    return [c.text.strip() for c in _findall(parent, item) if c.text and c.text.strip()]


def _parse_configuration(config_el) -> Dict[str, Any]:
    """
    Flatten a ``<configuration>`` block into a dict.

    Leaves become strings; elements whose children all carry text become
    lists; other nested elements become dicts.
    """
    if config_el is None:
        return {}
    result: Dict[str, Any] = {}
    for child in config_el:
        tag = _local(child.tag)
        if len(child) > 0:
            items = [sub.text.strip() for sub in child if sub.text and sub.text.strip()]
            if items and len(items) == len(child):
                result[tag] = items
            else:
                result[tag] = _parse_configuration(child)
        elif child.text and child.text.strip():
            result[tag] = child.text.strip()
    return result


def _parse_plugin(plugin_el) -> PluginDeclaration:
    executions = []
    executions_el = _find(plugin_el, "executions")
    if executions_el is not None:
        for exec_el in _findall(executions_el, "execution"):
            executions.append(
                PluginExecutionDeclaration(
                    id=_text(exec_el, "id") or "default",
                    phase=_text(exec_el, "phase"),
                    goals=_children_text(exec_el, "goals", "goal"),
                    configuration=_parse_configuration(_find(exec_el, "configuration")),
                )
            )
    return PluginDeclaration(
        group_id=_text(plugin_el, "groupId") or DEFAULT_PLUGIN_GROUP_ID,
        artifact_id=_text(plugin_el, "artifactId") or "",
        version=_text(plugin_el, "version"),
        configuration=_parse_configuration(_find(plugin_el, "configuration")),
        executions=executions,
    )


def _parse_dependency(dep_el) -> Dependency:
    optional = (_text(dep_el, "optional") or "").lower() == "true"
    return Dependency(
        group_id=_text(dep_el, "groupId") or "",
        artifact_id=_text(dep_el, "artifactId") or "",
        version=_text(dep_el, "version"),
        type=_text(dep_el, "type") or "jar",
        classifier=_text(dep_el, "classifier") or "",
        scope=_text(dep_el, "scope") or "compile",
        optional=optional,
    )


def _parse_resources(build_el, container: str, item: str, default: str) -> List[Resource]:
    parent = _find(build_el, container) if build_el is not None else None
    if parent is None:
        return [Resource(directory=default)]
    resources = []
    for res_el in _findall(parent, item):
        directory = _text(res_el, "directory")
        if not directory:
            continue
        resources.append(
            Resource(
                directory=directory,
                target_path=_text(res_el, "targetPath"),
                includes=_children_text(res_el, "includes", "include"),
                excludes=_children_text(res_el, "excludes", "exclude"),
            )
        )
    return resources


# --- Interpolation ---


def interpolate(value: str, properties: Dict[str, str], _depth: int = 0) -> str:
    """
    Replace ``${name}`` references in ``value``.

    Unknown references are left untouched. Chains are followed up to a depth
    of 10 to guard against circular definitions.
    """
    if not value or "${" not in value or _depth > 10:
        return value

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        for key in (name, name.replace("pom.", "project.")):
            if key in properties:
                return properties[key]
        return match.group(0)

    resolved = _EXPRESSION.sub(_replace, value)
    if resolved != value:
        return interpolate(resolved, properties, _depth + 1)
    return resolved


def _interpolate_any(value: Any, properties: Dict[str, str]) -> Any:
    if isinstance(value, str):
        return interpolate(value, properties)
    if isinstance(value, list):
        return [_interpolate_any(v, properties) for v in value]
    if isinstance(value, dict):
        return {k: _interpolate_any(v, properties) for k, v in value.items()}
    return value


def _absolute(basedir: Path, value: str) -> str:
    path = Path(value)
    if not path.is_absolute():
        path = basedir / path
    return str(path)


# --- Public API ---


def read_project(pom_path: Path) -> ProjectModel:
    """
    Parse a ``pom.xml`` into a ProjectModel.

    Args:
        pom_path: Path to the pom.xml file.

    Returns:
        ProjectModel with Maven's default directory layout applied where the
        POM does not override it.

    Raises:
        ProjectReadError: If the file cannot be read or is not valid XML.
    """
    try:
        root = ET.parse(pom_path).getroot()
    except (OSError, ET.ParseError) as e:
        raise ProjectReadError(f"Could not read {pom_path}: {e}") from e

    basedir = pom_path.resolve().parent

    parent_el = _find(root, "parent")
    parent_gid = parent_aid = parent_ver = None
    if parent_el is not None:
        parent_gid = _text(parent_el, "groupId")
        parent_aid = _text(parent_el, "artifactId")
        parent_ver = _text(parent_el, "version")

    group_id = _text(root, "groupId") or parent_gid or ""
    artifact_id = _text(root, "artifactId") or ""
    version = _text(root, "version") or parent_ver
    if not artifact_id:
        raise ProjectReadError(f"Could not read {pom_path}: missing artifactId")

    properties: Dict[str, str] = {}
    props_el = _find(root, "properties")
    if props_el is not None:
        for child in props_el:
            if child.text:
                properties[_local(child.tag)] = child.text.strip()

    properties.update(
        {
            "project.groupId": group_id,
            "project.artifactId": artifact_id,
            "project.version": version or "",
            "project.basedir": str(basedir),
            "basedir": str(basedir),
            "project.build.directory": str(basedir / "target"),
        }
    )

    build_el = _find(root, "build")

    def build_dir(tag: str, default: str) -> str:
        declared = _text(build_el, tag) if build_el is not None else None
        return _absolute(basedir, interpolate(declared or default, properties))

    plugins = []
    dependencies = []
    if build_el is not None:
        plugins_el = _find(build_el, "plugins")
        if plugins_el is not None:
            plugins = [_parse_plugin(p) for p in _findall(plugins_el, "plugin")]
    deps_el = _find(root, "dependencies")
    if deps_el is not None:
        dependencies = [_parse_dependency(d) for d in _findall(deps_el, "dependency")]

    resources = _parse_resources(build_el, "resources", "resource", "src/main/resources")
    test_resources = _parse_resources(
        build_el, "testResources", "testResource", "src/test/resources"
    )

    model = ProjectModel(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        packaging=_text(root, "packaging") or "jar",
        name=_text(root, "name"),
        basedir=str(basedir),
        parent_group_id=parent_gid,
        parent_artifact_id=parent_aid,
        compile_source_roots=[build_dir("sourceDirectory", "src/main/java")],
        test_compile_source_roots=[build_dir("testSourceDirectory", "src/test/java")],
        resources=[
            r.model_copy(update={"directory": _absolute(basedir, interpolate(r.directory, properties))})
            for r in resources
        ],
        test_resources=[
            r.model_copy(update={"directory": _absolute(basedir, interpolate(r.directory, properties))})
            for r in test_resources
        ],
        output_directory=build_dir("outputDirectory", "target/classes"),
        test_output_directory=build_dir("testOutputDirectory", "target/test-classes"),
        plugins=[
            PluginDeclaration.model_validate(_interpolate_any(p.model_dump(), properties))
            for p in plugins
        ],
        dependencies=[
            Dependency.model_validate(_interpolate_any(d.model_dump(), properties))
            for d in dependencies
        ],
        properties=properties,
        modules=_children_text(root, "modules", "module"),
    )
    logger.debug(f"Read project {model.module_id} from {pom_path}")
    return model


def read_reactor(root_pom: Path) -> List[ProjectModel]:
    """
    Read a root POM and all of its modules recursively.

    Args:
        root_pom: Path to the aggregator pom.xml.

    Returns:
        Projects in discovery order, root first.

    Raises:
        ProjectReadError: If any POM (including a module's) cannot be read.
    """
    projects: List[ProjectModel] = []
    seen: set = set()

    def _visit(pom: Path) -> None:
        resolved = pom.resolve()
        if resolved in seen:
            return
        seen.add(resolved)
        project = read_project(resolved)
        projects.append(project)
        for module in project.modules:
            module_path = resolved.parent / module
            if module_path.is_dir():
                module_path = module_path / "pom.xml"
            if not module_path.exists():
                raise ProjectReadError(f"Module '{module}' of {project.module_id} not found at {module_path}")
            _visit(module_path)

    _visit(root_pom)
    return projects
