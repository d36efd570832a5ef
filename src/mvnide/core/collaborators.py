"""
External collaborator interfaces.

The engine only talks to the outside world (settings parsing, artifact
transport, lifecycle expansion, mojo configuration, file system, progress
reporting) through the protocols defined here. Default implementations
live in ``settings_loader``, ``security``, ``transport`` and
``lifecycle``; the trivial ones are defined below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional, Protocol, Sequence, runtime_checkable

from .types import ArtifactCoordinate, EffectiveSettings, MojoExecution, RemoteRepository, Server

if TYPE_CHECKING:
    from .classpath import ClasspathDescriptor, ProjectConfigurationRequest
    from .session import BuildSession


# --- Result containers ---


@dataclass
class SettingsLoadResult:
    """
    Outcome of loading settings files.

    Attributes:
        settings: Merged settings; None when loading failed outright.
        problems: Human-readable problems, fatal or not.
    """

    settings: Optional[EffectiveSettings] = None
    problems: List[str] = field(default_factory=list)


@dataclass
class DecryptionResult:
    server: Server
    problems: List[str] = field(default_factory=list)


@dataclass
class TransportResult:
    """
    Outcome of a transport resolution request.

    Attributes:
        file: Local file of the resolved artifact, None on failure.
        missing: Coordinates the transport could not find anywhere.
        exceptions: Transport-level failures.
    """

    file: Optional[Path] = None
    missing: List[ArtifactCoordinate] = field(default_factory=list)
    exceptions: List[Exception] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.file is not None and not self.missing and not self.exceptions


# --- Protocols ---


@runtime_checkable
class ProgressMonitor(Protocol):
    """Cancellation token plus a textual progress sink."""

    def is_cancelled(self) -> bool: ...

    def report(self, message: str) -> None: ...


class SettingsLoader(Protocol):
    def load(self, global_path: Optional[Path], user_path: Optional[Path]) -> SettingsLoadResult: ...


class SettingsDecrypter(Protocol):
    def decrypt(self, server: Server) -> DecryptionResult: ...


class ArtifactTransport(Protocol):
    def resolve(
        self,
        coordinate: ArtifactCoordinate,
        local_repository: Path,
        repositories: Sequence[RemoteRepository],
        monitor: ProgressMonitor,
    ) -> TransportResult: ...


class LifecycleExecutor(Protocol):
    def calculate_plan(self, session: "BuildSession", goals: Sequence[str]) -> List[MojoExecution]: ...


class MojoParameterReader(Protocol):
    def read(
        self,
        session: Optional["BuildSession"],
        execution: MojoExecution,
        parameter: str,
        as_type: type,
    ) -> Any: ...


class MojoExecutor(Protocol):
    def execute(self, session: "BuildSession", execution: MojoExecution) -> None: ...


class FileSystem(Protocol):
    def exists(self, path: Path) -> bool: ...

    def is_dir(self, path: Path) -> bool: ...

    def create_folder(self, path: Path) -> None: ...


class ClasspathContributor(Protocol):
    """Extension point for configurators that append classpath entries."""

    def contribute(
        self,
        descriptor: "ClasspathDescriptor",
        request: "ProjectConfigurationRequest",
        monitor: ProgressMonitor,
    ) -> None: ...


class SettingsChangeListener(Protocol):
    def settings_changed(self, settings: EffectiveSettings) -> None: ...


class LocalRepositoryListener(Protocol):
    def artifact_installed(
        self, repository_root: Path, coordinate: ArtifactCoordinate, file: Path
    ) -> None: ...


# --- Trivial defaults ---


class NullProgressMonitor:
    """Never cancelled, discards progress messages."""

    def is_cancelled(self) -> bool:
        return False

    def report(self, message: str) -> None:
        pass


class LocalFileSystem:
    """FileSystem backed by pathlib."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def create_folder(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)


class UnsupportedMojoExecutor:
    """
    Refuses to run mojos.

    Mojo execution belongs to an embedding build tool; plug in a real
    ``MojoExecutor`` to run configurators that need it.
    """

    def execute(self, session: "BuildSession", execution: MojoExecution) -> None:
        raise NotImplementedError(f"Executing {execution} is not supported")
