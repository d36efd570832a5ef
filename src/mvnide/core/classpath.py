"""
Classpath Synthesis.

Maps a project's source, resource and test roots plus the compiler levels
of its execution plan onto a concrete, ordered classpath.

Synthesis Steps:
    1. Create the main and test output folders
    2. Main source roots (existing roots added, missing ones purged)
    3. Main resource roots, excluded from compilation with ``**``
    4. Test source and resource roots against the test output folder
    5. Registered contributors, in order
    6. The JRE container for the target level's execution environment
    7. Exactly one dependency container
    8. Compiler options, raw classpath and output location on the build unit

The descriptor starts from the build unit's current raw classpath so entries
for roots that no longer exist are removed on the next pass. Paths are
POSIX paths relative to the project's base directory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from ..config import (
    COMPILER_COMPLIANCE_OPTION,
    COMPILER_PLUGIN_ARTIFACT_ID,
    COMPILER_PLUGIN_GROUP_ID,
    COMPILER_SOURCE_OPTION,
    COMPILER_TARGET_OPTION,
    DEPENDENCY_CONTAINER,
    EXECUTION_ENVIRONMENTS,
    JRE_CONTAINER,
    JRE_VM_TYPE,
    SOURCE_LEVELS,
    TARGET_LEVELS,
)
from .collaborators import ClasspathContributor, FileSystem, LocalFileSystem, NullProgressMonitor, ProgressMonitor
from .errors import ConfigurationError
from .planner import ExecutionPlanner
from .project import ProjectModel, Resource
from .session import BuildSession
from .types import ClasspathEntryDescriptor, ClasspathEntryKind, ExecutionPlan

logger = logging.getLogger(__name__)

EntryFilter = Callable[[ClasspathEntryDescriptor], bool]


class ClasspathDescriptor:
    """
    Ordered classpath entries, unique by path.

    Adding an entry whose path is already present replaces it in place, so
    the original position is kept.
    """

    def __init__(self, entries: Iterable[ClasspathEntryDescriptor] = ()):
        self._entries: Dict[str, ClasspathEntryDescriptor] = {}
        for entry in entries:
            self.add_entry(entry)

    def add_entry(self, entry: ClasspathEntryDescriptor) -> ClasspathEntryDescriptor:
        self._entries[entry.path] = entry
        return entry

    def add_source_entry(
        self,
        path: str,
        output_path: Optional[str],
        exclusion_patterns: Sequence[str] = (),
        inclusion_patterns: Sequence[str] = (),
        optional: bool = False,
    ) -> ClasspathEntryDescriptor:
        return self.add_entry(
            ClasspathEntryDescriptor(
                kind=ClasspathEntryKind.SOURCE,
                path=path,
                output_path=output_path,
                exclusion_patterns=list(exclusion_patterns),
                inclusion_patterns=list(inclusion_patterns),
                optional=optional,
            )
        )

    def add_container_entry(self, path: str) -> ClasspathEntryDescriptor:
        return self.add_entry(ClasspathEntryDescriptor(kind=ClasspathEntryKind.CONTAINER, path=path))

    def add_library_entry(self, path: str, optional: bool = False) -> ClasspathEntryDescriptor:
        return self.add_entry(
            ClasspathEntryDescriptor(kind=ClasspathEntryKind.LIBRARY, path=path, optional=optional)
        )

    def remove_entry(self, path: str) -> Optional[ClasspathEntryDescriptor]:
        """Remove the entry at ``path``; returns it, or None if absent."""
        return self._entries.pop(path, None)

    def remove_entries(self, accept: EntryFilter) -> List[ClasspathEntryDescriptor]:
        """Remove every entry ``accept`` returns True for."""
        removed = [e for e in self._entries.values() if accept(e)]
        for entry in removed:
            del self._entries[entry.path]
        return removed

    def contains_path(self, path: str) -> bool:
        return path in self._entries

    def find(self, accept: EntryFilter) -> List[ClasspathEntryDescriptor]:
        return [e for e in self._entries.values() if accept(e)]

    @property
    def entries(self) -> List[ClasspathEntryDescriptor]:
        return list(self._entries.values())

    def __iter__(self) -> Iterator[ClasspathEntryDescriptor]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class BuildUnit:
    """
    The compilable unit the IDE keeps for a project.

    Attributes:
        name: Unit name, usually the project's artifactId.
        raw_classpath: Classpath entries as last configured.
        output_location: Default output folder.
        options: Compiler options.
    """

    name: str
    raw_classpath: List[ClasspathEntryDescriptor] = field(default_factory=list)
    output_location: Optional[str] = None
    options: Dict[str, str] = field(default_factory=dict)

    def set_raw_classpath(self, entries: Sequence[ClasspathEntryDescriptor], output_location: str) -> None:
        self.raw_classpath = list(entries)
        self.output_location = output_location


@dataclass
class ProjectConfigurationRequest:
    """
    Everything one configuration pass needs.

    Attributes:
        project: Project to configure.
        build_unit: Build unit receiving the classpath and options.
        session: Session the plan was calculated in.
        plan: The project's execution plan.
        nested_projects: Reactor projects located inside ``project``'s base
            directory; their roots are added to the same classpath.
    """

    project: ProjectModel
    build_unit: BuildUnit
    session: Optional[BuildSession]
    plan: ExecutionPlan
    nested_projects: List[ProjectModel] = field(default_factory=list)


def _is_jre_container(entry: ClasspathEntryDescriptor) -> bool:
    return entry.kind == ClasspathEntryKind.CONTAINER and entry.path.split("/")[0] == JRE_CONTAINER


def _is_dependency_container(entry: ClasspathEntryDescriptor) -> bool:
    return entry.kind == ClasspathEntryKind.CONTAINER and entry.path.split("/")[0] == DEPENDENCY_CONTAINER


class ClasspathSynthesizer:
    """
    Produces the classpath of a Java project.

    Example:
        ```python
        synthesizer = ClasspathSynthesizer(planner)
        request = ProjectConfigurationRequest(project, BuildUnit(project.artifact_id), session, plan)
        descriptor = synthesizer.synthesize(request)
        for entry in descriptor:
            print(entry.kind, entry.path)
        ```
    """

    def __init__(
        self,
        planner: ExecutionPlanner,
        file_system: Optional[FileSystem] = None,
        installed_environments: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the synthesizer.

        Args:
            planner: Computes compiler levels from the plan.
            file_system: File system collaborator.
            installed_environments: Execution environment ids available to
                the IDE; taken from the planner's configuration when None.
        """
        self.planner = planner
        self.file_system = file_system or LocalFileSystem()
        if installed_environments is None:
            installed_environments = planner.settings.config.installed_environments
        self.installed_environments = set(installed_environments)

    def synthesize(
        self,
        request: ProjectConfigurationRequest,
        contributors: Sequence[ClasspathContributor] = (),
        monitor: Optional[ProgressMonitor] = None,
    ) -> ClasspathDescriptor:
        """
        Configure the classpath of ``request.project``.

        Returns:
            The descriptor that was applied to the build unit.

        Raises:
            ConfigurationError: If the plan has no compiler executions or an
                output folder cannot be created.
            PlanningError: If a compiler level cannot be read.
        """
        monitor = monitor or NullProgressMonitor()
        project = request.project

        if not request.plan.for_plugin(COMPILER_PLUGIN_GROUP_ID, COMPILER_PLUGIN_ARTIFACT_ID):
            raise ConfigurationError(f"Not a java project {project.display_name}")
        source = self.planner.compiler_level(request.plan, "source", SOURCE_LEVELS, request.session)
        target = self.planner.compiler_level(request.plan, "target", TARGET_LEVELS, request.session)
        logger.debug(f"{project.module_id}: compiler source {source}, target {target}")

        descriptor = ClasspathDescriptor(request.build_unit.raw_classpath)

        for nested in [project] + list(request.nested_projects):
            self._add_project_source_folders(descriptor, project, nested)

        for contributor in contributors:
            contributor.contribute(descriptor, request, monitor)

        self._add_jre_container(descriptor, target)
        self._add_dependency_container(descriptor)

        build_unit = request.build_unit
        build_unit.options[COMPILER_SOURCE_OPTION] = source
        build_unit.options[COMPILER_COMPLIANCE_OPTION] = source
        build_unit.options[COMPILER_TARGET_OPTION] = target
        build_unit.set_raw_classpath(descriptor.entries, self._relative(project, project.output_directory))

        logger.info(f"Configured classpath of {project.module_id} with {len(descriptor)} entries")
        return descriptor

    # --- Source and resource roots ---

    def _add_project_source_folders(
        self, descriptor: ClasspathDescriptor, owner: ProjectModel, project: ProjectModel
    ) -> None:
        classes = Path(project.output_directory)
        test_classes = Path(project.test_output_directory)
        for folder in (classes, test_classes):
            try:
                self.file_system.create_folder(folder)
            except OSError as e:
                raise ConfigurationError(f"Could not create output folder {folder}: {e}") from e

        classes_path = self._relative(owner, str(classes))
        test_classes_path = self._relative(owner, str(test_classes))

        self._add_source_dirs(descriptor, owner, project.compile_source_roots, classes_path)
        self._add_resource_dirs(descriptor, owner, project.resources, classes_path)
        self._add_source_dirs(descriptor, owner, project.test_compile_source_roots, test_classes_path)
        self._add_resource_dirs(descriptor, owner, project.test_resources, test_classes_path)

    def _add_source_dirs(
        self,
        descriptor: ClasspathDescriptor,
        owner: ProjectModel,
        source_roots: Sequence[str],
        output_path: str,
    ) -> None:
        for root in source_roots:
            relative = owner.relative_path(root)
            if relative is None:
                logger.warning(f"Skipping source folder {root} outside of {owner.basedir}")
                continue
            if self.file_system.is_dir(Path(root)):
                logger.info(f"Adding source folder {relative}")
                descriptor.add_source_entry(relative, output_path)
            elif descriptor.remove_entry(relative) is not None:
                logger.debug(f"Removed missing source folder {relative}")

    def _add_resource_dirs(
        self,
        descriptor: ClasspathDescriptor,
        owner: ProjectModel,
        resources: Sequence[Resource],
        output_path: str,
    ) -> None:
        for resource in resources:
            if not self.file_system.is_dir(Path(resource.directory)):
                continue
            relative = owner.relative_path(resource.directory)
            if relative is None:
                logger.warning(f"Skipping resource folder {resource.directory} outside of {owner.basedir}")
            elif relative == "":
                logger.warning(f"Skipping resource folder {resource.directory}")
            elif not descriptor.contains_path(relative):
                logger.info(f"Adding resource folder {relative}")
                descriptor.add_source_entry(relative, output_path, exclusion_patterns=["**"])

    # --- Containers ---

    def _add_jre_container(self, descriptor: ClasspathDescriptor, target: str) -> None:
        descriptor.remove_entries(_is_jre_container)
        environment = EXECUTION_ENVIRONMENTS.get(target)
        if environment is not None and environment in self.installed_environments:
            descriptor.add_container_entry(f"{JRE_CONTAINER}/{JRE_VM_TYPE}/{environment}")
        else:
            logger.debug(f"No execution environment installed for target {target}, using default JRE")
            descriptor.add_container_entry(JRE_CONTAINER)

    @staticmethod
    def _add_dependency_container(descriptor: ClasspathDescriptor) -> None:
        descriptor.remove_entries(_is_dependency_container)
        descriptor.add_container_entry(DEPENDENCY_CONTAINER)

    @staticmethod
    def _relative(project: ProjectModel, path: str) -> str:
        relative = project.relative_path(path)
        if relative is None:
            return Path(path).as_posix()
        return relative
