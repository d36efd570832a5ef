"""
Artifact Resolver.

Resolves a single artifact coordinate to a file in the local repository.

Resolution Strategy:
    1. Use the caller's repository list, or assemble the default one
       (falling back to no remotes if assembly fails)
    2. Delegate the transfer to the ArtifactTransport collaborator
    3. Record a staleness timestamp for every consulted repository,
       whether or not the transfer succeeded
    4. Aggregate all failures into one ResolutionError

``is_unavailable`` answers "have we already tried everywhere" from the
staleness records alone, without any network access.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .collaborators import ArtifactTransport, NullProgressMonitor, ProgressMonitor, TransportResult
from .errors import RepositoryAssemblyError, ResolutionError
from .repositories import RepositoryAssembler
from .settings import SettingsResolver
from .staleness import StalenessCache
from .transport import HttpArtifactTransport
from .types import ArtifactCoordinate, RemoteRepository

logger = logging.getLogger(__name__)


@dataclass
class ResolvedArtifact:
    """
    An artifact available in the local repository.

    Attributes:
        coordinate: The requested coordinate.
        file: Absolute path of the artifact file.
        repositories: Remote repositories consulted for this resolution.
    """

    coordinate: ArtifactCoordinate
    file: Path
    repositories: List[RemoteRepository]

    def __repr__(self) -> str:
        return f"ResolvedArtifact({str(self.coordinate)!r}, {self.file})"


class ArtifactResolver:
    """
    Resolves artifacts against the local repository and remote repositories.

    Example:
        ```python
        resolver = ArtifactResolver(settings, RepositoryAssembler(settings))
        artifact = resolver.resolve(ArtifactCoordinate.parse("junit:junit:4.13.2"))
        print(artifact.file)
        ```
    """

    def __init__(
        self,
        settings: SettingsResolver,
        assembler: RepositoryAssembler,
        transport: Optional[ArtifactTransport] = None,
    ):
        """
        Initialize the resolver.

        Args:
            settings: Settings resolver (local repository, listeners).
            assembler: Supplies default repositories when none are given.
            transport: Transfer collaborator; HTTP by default.
        """
        self.settings = settings
        self.assembler = assembler
        self.transport = transport or HttpArtifactTransport(offline=settings.config.offline)

    @property
    def local_repository(self) -> Path:
        return self.settings.local_repository()

    @property
    def staleness(self) -> StalenessCache:
        return StalenessCache(self.local_repository)

    def artifact_path(self, coordinate: ArtifactCoordinate) -> Path:
        """Location of ``coordinate`` inside the local repository."""
        return self.local_repository / coordinate.path

    def resolve(
        self,
        coordinate: ArtifactCoordinate,
        repositories: Optional[Sequence[RemoteRepository]] = None,
        monitor: Optional[ProgressMonitor] = None,
    ) -> ResolvedArtifact:
        """
        Resolve ``coordinate`` to a local file.

        Args:
            coordinate: Artifact to resolve.
            repositories: Remote repositories; the assembled default list
                when None.
            monitor: Progress sink and cancellation token.

        Returns:
            ResolvedArtifact pointing at the local file.

        Raises:
            ResolutionError: If the artifact could not be resolved or the
                monitor cancelled the request.
        """
        monitor = monitor or NullProgressMonitor()
        if repositories is None:
            try:
                repositories = self.assembler.repositories()
            except RepositoryAssemblyError as e:
                logger.warning(f"Could not assemble repositories, using none: {e}")
                repositories = []
        repositories = list(repositories)

        if monitor.is_cancelled():
            raise ResolutionError(f"Resolution of {coordinate} cancelled", cancelled=True)

        local_repository = self.local_repository
        existed = self.artifact_path(coordinate).is_file()
        logger.info(f"Resolving {coordinate} ({len(repositories)} remote repositories)")

        staleness = StalenessCache(local_repository)
        try:
            result = self.transport.resolve(coordinate, local_repository, repositories, monitor)
        except ResolutionError as e:
            # A cancelled request may not have reached every repository
            if not e.cancelled:
                staleness.record(coordinate, repositories)
            raise
        except Exception as e:
            result = TransportResult(exceptions=[e])
        staleness.record(coordinate, repositories)

        if not result.success:
            causes: List[object] = list(result.exceptions)
            causes.extend(f"Missing {missing}" for missing in result.missing)
            if not causes:
                causes.append(f"Missing {coordinate}")
            raise ResolutionError("Could not resolve artifact", causes)

        if not existed:
            self._notify_installed(local_repository, coordinate, result.file)

        return ResolvedArtifact(coordinate=coordinate, file=result.file, repositories=repositories)

    def is_unavailable(
        self,
        coordinate: ArtifactCoordinate,
        repositories: Optional[Sequence[RemoteRepository]],
    ) -> bool:
        """
        Heuristic: has every repository already been tried for ``coordinate``?

        Never touches the network. False when the file is in the local
        repository; True when there is nowhere to look; otherwise True only if
        every repository has a staleness record. A repository that was never
        consulted keeps availability open. This says nothing about whether a
        repository would serve the artifact now.
        """
        if self.artifact_path(coordinate).is_file():
            return False
        if not repositories:
            return True
        return self.staleness.all_checked(coordinate, list(repositories))

    def _notify_installed(
        self, local_repository: Path, coordinate: ArtifactCoordinate, file: Path
    ) -> None:
        for listener in self.settings.local_repository_listeners():
            try:
                listener.artifact_installed(local_repository, coordinate, file)
            except Exception as e:
                logger.error(f"Local repository listener {listener!r} failed: {e}", exc_info=True)
