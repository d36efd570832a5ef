"""
Core modules for mvnide.

This package contains the resolution and orchestration engine:
- types: Settings, repositories, coordinates, plans, classpath entries
- settings: Effective settings and listener registries
- repositories: Remote repository assembly
- staleness: Per-artifact last-checked records
- resolver: Artifact resolution
- planner: Execution requests, plans and compiler levels
- reactor: Multi-module ordering
- classpath: Classpath synthesis
"""

from .classpath import BuildUnit, ClasspathDescriptor, ClasspathSynthesizer, ProjectConfigurationRequest
from .errors import (
    ConfigurationError,
    CycleError,
    DuplicateIdError,
    MvnideError,
    PlanningError,
    ProjectReadError,
    RepositoryAssemblyError,
    ResolutionError,
    SettingsLoadError,
    SettingsSecurityError,
)
from .planner import ExecutionPlanner
from .project import ProjectModel, read_project, read_reactor
from .reactor import ReactorSorter
from .repositories import RepositoryAssembler
from .resolver import ArtifactResolver, ResolvedArtifact
from .security import SettingsSecurityDecrypter
from .settings import SettingsResolver
from .staleness import StalenessCache, StalenessRecord
from .types import (
    ArtifactCoordinate,
    ClasspathEntryDescriptor,
    ClasspathEntryKind,
    EffectiveSettings,
    ExecutionPlan,
    MojoExecution,
    ReactorModule,
    RemoteRepository,
)

__all__ = [
    # Types
    "ArtifactCoordinate", "ClasspathEntryDescriptor", "ClasspathEntryKind",
    "EffectiveSettings", "ExecutionPlan", "MojoExecution", "ReactorModule",
    "RemoteRepository", "ProjectModel",
    # Services
    "SettingsResolver", "SettingsSecurityDecrypter", "RepositoryAssembler", "StalenessCache", "StalenessRecord",
    "ArtifactResolver", "ResolvedArtifact", "ExecutionPlanner", "ReactorSorter",
    "ClasspathSynthesizer", "ClasspathDescriptor", "BuildUnit", "ProjectConfigurationRequest",
    # Project reading
    "read_project", "read_reactor",
    # Errors
    "MvnideError", "SettingsLoadError", "SettingsSecurityError", "ProjectReadError", "RepositoryAssemblyError",
    "ResolutionError", "PlanningError", "CycleError", "DuplicateIdError", "ConfigurationError",
]
