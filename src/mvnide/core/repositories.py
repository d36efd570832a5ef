"""
Repository Assembler.

Builds the remote repository list used for artifact resolution:

    1. Repositories of every active settings profile
    2. The built-in default repository (``central``) unless already declared
    3. Mirrors, proxies and server credentials from settings (optional)
    4. De-duplication by ``(id, url, username)``, first occurrence wins

Plugin repositories are assembled the same way from each profile's
plugin repository list.
"""

from __future__ import annotations

import fnmatch
import logging
from typing import Callable, List, Optional, Sequence

from ..config import DEFAULT_REMOTE_REPO_ID, DEFAULT_REMOTE_REPO_URL
from .errors import RepositoryAssemblyError
from .settings import SettingsResolver
from .types import (
    Authentication,
    EffectiveSettings,
    Mirror,
    Profile,
    Proxy,
    RemoteRepository,
    RepositoryDeclaration,
)

logger = logging.getLogger(__name__)

SUPPORTED_PROTOCOLS = ("http", "https", "file")
LOCAL_HOSTS = ("localhost", "127.0.0.1")


def _matches_pattern(repository: RemoteRepository, pattern: str) -> bool:
    """
    Check a ``mirrorOf`` pattern against a repository.

    Supports ``*``, ``external:*``, comma-separated ids and ``!id``
    exclusions; an exclusion always wins.
    """
    if pattern == repository.id:
        return True
    matched = False
    for token in (t.strip() for t in pattern.split(",")):
        if token.startswith("!"):
            if token[1:] == repository.id:
                return False
        elif token == repository.id or token == "*":
            matched = True
        elif token == "external:*" and _is_external(repository):
            matched = True
    return matched


def _is_external(repository: RemoteRepository) -> bool:
    return repository.protocol != "file" and repository.host not in LOCAL_HOSTS


def _is_non_proxy_host(host: str, non_proxy_hosts: Optional[str]) -> bool:
    if not non_proxy_hosts:
        return False
    patterns = [p.strip().lower() for p in non_proxy_hosts.replace(",", "|").split("|")]
    return any(p and fnmatch.fnmatch(host, p) for p in patterns)


def repository_key(repository: RemoteRepository) -> str:
    """De-duplication key, ``id:url:username``."""
    return f"{repository.id}:{repository.url}:{repository.username or ''}"


def remove_duplicates(repositories: Sequence[RemoteRepository]) -> List[RemoteRepository]:
    """Keep the first repository for each identity key, preserving order."""
    seen = set()
    result = []
    for repository in repositories:
        key = repository_key(repository)
        if key not in seen:
            seen.add(key)
            result.append(repository)
    return result


class RepositoryAssembler:
    """
    Assembles remote repository lists from settings.

    Example:
        ```python
        assembler = RepositoryAssembler(settings_resolver)
        for repo in assembler.repositories():
            print(repo.id, repo.url)
        ```
    """

    def __init__(self, settings: SettingsResolver):
        self.settings = settings

    def active_profiles(self, settings: Optional[EffectiveSettings] = None) -> List[Profile]:
        """Profiles active by default or listed in ``active_profiles``."""
        settings = settings or self.settings.get_settings()
        return [
            profile
            for profile in settings.profiles
            if profile.active_by_default or profile.id in settings.active_profiles
        ]

    def repositories(self, inject_settings: bool = True) -> List[RemoteRepository]:
        """
        Artifact repositories for dependency resolution.

        Raises:
            RepositoryAssemblyError: If any profile declares an invalid repository.
        """
        return self._assemble(lambda p: p.repositories, inject_settings)

    def plugin_repositories(self, inject_settings: bool = True) -> List[RemoteRepository]:
        """
        Repositories for plugin resolution.

        Raises:
            RepositoryAssemblyError: If any profile declares an invalid repository.
        """
        return self._assemble(lambda p: p.plugin_repositories, inject_settings)

    def _assemble(
        self,
        declarations_of: Callable[[Profile], List[RepositoryDeclaration]],
        inject_settings: bool,
    ) -> List[RemoteRepository]:
        settings = self.settings.get_settings()
        problems: List[str] = []
        repositories: List[RemoteRepository] = []

        for profile in self.active_profiles(settings):
            for declaration in declarations_of(profile):
                repository = self._build_repository(profile, declaration, problems)
                if repository is not None:
                    repositories.append(repository)

        self._add_default_repository(repositories)

        if inject_settings:
            repositories = self.inject_mirrors(repositories, settings.mirrors)
            repositories = self.inject_proxies(repositories, settings.proxies)
            repositories = self.inject_authentication(repositories, settings)

        if problems:
            raise RepositoryAssemblyError(problems)

        return remove_duplicates(repositories)

    @staticmethod
    def _build_repository(
        profile: Profile,
        declaration: RepositoryDeclaration,
        problems: List[str],
    ) -> Optional[RemoteRepository]:
        label = declaration.id or declaration.url or "?"
        if not declaration.id:
            problems.append(f"Repository '{label}' in profile '{profile.id}' is missing an id")
            return None
        if not declaration.url:
            problems.append(f"Repository '{label}' in profile '{profile.id}' is missing a url")
            return None
        repository = RemoteRepository(id=declaration.id, url=declaration.url.rstrip("/"))
        if repository.protocol not in SUPPORTED_PROTOCOLS:
            problems.append(
                f"Repository '{label}' in profile '{profile.id}' has unsupported url {declaration.url!r}"
            )
            return None
        return repository

    @staticmethod
    def _add_default_repository(repositories: List[RemoteRepository]) -> None:
        if any(r.id == DEFAULT_REMOTE_REPO_ID for r in repositories):
            return
        repositories.insert(0, RemoteRepository(id=DEFAULT_REMOTE_REPO_ID, url=DEFAULT_REMOTE_REPO_URL))

    # --- Settings injection ---

    @staticmethod
    def mirror_for(repository: RemoteRepository, mirrors: Sequence[Mirror]) -> Optional[Mirror]:
        """
        Select the mirror serving ``repository``.

        An exact id match takes precedence over wildcard patterns; otherwise
        the first matching mirror in declaration order wins.
        """
        for mirror in mirrors:
            if mirror.mirror_of == repository.id:
                return mirror
        for mirror in mirrors:
            if _matches_pattern(repository, mirror.mirror_of):
                return mirror
        return None

    def inject_mirrors(
        self, repositories: Sequence[RemoteRepository], mirrors: Sequence[Mirror]
    ) -> List[RemoteRepository]:
        result = []
        for repository in repositories:
            mirror = self.mirror_for(repository, mirrors)
            if mirror is None:
                result.append(repository)
                continue
            logger.debug(f"Using mirror {mirror.id} ({mirror.url}) for {repository.id}")
            result.append(
                repository.model_copy(
                    update={"id": mirror.id, "url": mirror.url.rstrip("/"), "mirror_of": repository.id}
                )
            )
        return result

    @staticmethod
    def inject_proxies(
        repositories: Sequence[RemoteRepository], proxies: Sequence[Proxy]
    ) -> List[RemoteRepository]:
        result = []
        for repository in repositories:
            proxy = next(
                (
                    p
                    for p in proxies
                    if p.active
                    and p.protocol.lower() == repository.protocol
                    and not _is_non_proxy_host(repository.host, p.non_proxy_hosts)
                ),
                None,
            )
            result.append(repository.model_copy(update={"proxy": proxy}) if proxy else repository)
        return result

    def inject_authentication(
        self, repositories: Sequence[RemoteRepository], settings: EffectiveSettings
    ) -> List[RemoteRepository]:
        result = []
        for repository in repositories:
            server = settings.get_server(repository.id)
            if server is None:
                result.append(repository)
                continue
            server = self.settings.decrypt(server)
            authentication = Authentication(username=server.username, password=server.password)
            result.append(repository.model_copy(update={"authentication": authentication}))
        return result
