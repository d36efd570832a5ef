"""
Core type definitions for mvnide.

Settings, repositories, artifact coordinates, execution plans, reactor
modules and classpath entries. Snapshots shared between threads are
frozen models.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

_SNAPSHOT_TIMESTAMP = re.compile(r"^(.*)-(\d{8}\.\d{6})-(\d+)$")

# type -> (extension, implied classifier)
ARTIFACT_HANDLERS: Dict[str, Tuple[str, str]] = {
    "jar": ("jar", ""),
    "pom": ("pom", ""),
    "war": ("war", ""),
    "ear": ("ear", ""),
    "rar": ("rar", ""),
    "bundle": ("jar", ""),
    "ejb": ("jar", ""),
    "maven-plugin": ("jar", ""),
    "test-jar": ("jar", "tests"),
    "ejb-client": ("jar", "client"),
    "java-source": ("jar", "sources"),
    "javadoc": ("jar", "javadoc"),
}


# --- Settings ---


class Authentication(BaseModel):
    """Credentials attached to a remote repository."""

    username: Optional[str] = None
    password: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Server(BaseModel):
    """A ``<server>`` entry: credentials keyed by repository id."""

    id: str
    username: Optional[str] = None
    password: Optional[str] = None
    private_key: Optional[str] = None
    passphrase: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Proxy(BaseModel):
    """A ``<proxy>`` entry."""

    id: str = "default"
    active: bool = True
    protocol: str = "http"
    host: str
    port: int = 8080
    username: Optional[str] = None
    password: Optional[str] = None
    non_proxy_hosts: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Mirror(BaseModel):
    """
    A ``<mirror>`` entry.

    Attributes:
        id: Mirror id; replaces the mirrored repository's id.
        url: Mirror URL.
        mirror_of: Pattern of repository ids this mirror serves.
    """

    id: str
    url: str
    mirror_of: str
    name: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class RepositoryDeclaration(BaseModel):
    """Repository as declared in a profile, before validation."""

    id: Optional[str] = None
    url: Optional[str] = None
    name: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Activation(BaseModel):
    active_by_default: bool = False

    model_config = ConfigDict(frozen=True)


class Profile(BaseModel):
    """A settings ``<profile>`` with its repositories."""

    id: str
    activation: Optional[Activation] = None
    repositories: List[RepositoryDeclaration] = Field(default_factory=list)
    plugin_repositories: List[RepositoryDeclaration] = Field(default_factory=list)
    properties: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def active_by_default(self) -> bool:
        return self.activation is not None and self.activation.active_by_default


class EffectiveSettings(BaseModel):
    """
    Merged global and user settings.

    Immutable snapshot; a reload builds a new instance.
    """

    local_repository: Optional[str] = None
    offline: bool = False
    mirrors: List[Mirror] = Field(default_factory=list)
    proxies: List[Proxy] = Field(default_factory=list)
    servers: List[Server] = Field(default_factory=list)
    profiles: List[Profile] = Field(default_factory=list)
    active_profiles: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def get_server(self, server_id: str) -> Optional[Server]:
        for server in self.servers:
            if server.id == server_id:
                return server
        return None


# --- Repositories & artifacts ---


class RemoteRepository(BaseModel):
    """
    A concrete remote repository.

    Identity for de-duplication is ``(id, url, username)``.
    """

    id: str
    url: str
    authentication: Optional[Authentication] = None
    proxy: Optional[Proxy] = None
    mirror_of: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def username(self) -> Optional[str]:
        return self.authentication.username if self.authentication else None

    @property
    def identity_key(self) -> Tuple[str, str, Optional[str]]:
        return (self.id, self.url, self.username)

    @property
    def protocol(self) -> str:
        return urlparse(self.url).scheme.lower()

    @property
    def host(self) -> str:
        return (urlparse(self.url).hostname or "").lower()

    def __str__(self) -> str:
        return f"{self.id} ({self.url})"


class ArtifactCoordinate(BaseModel):
    """
    Identity of an artifact for resolution and caching.

    Attributes:
        group_id: e.g. ``org.apache.maven.plugins``.
        artifact_id: e.g. ``maven-compiler-plugin``.
        version: Version, possibly a timestamped snapshot.
        type: Packaging type (``jar``, ``pom``, ``test-jar``...).
        classifier: Optional classifier, empty when absent.
    """

    group_id: str
    artifact_id: str
    version: str
    type: str = "jar"
    classifier: str = ""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(cls, value: str) -> "ArtifactCoordinate":
        """
        Parse ``groupId:artifactId[:type[:classifier]]:version``.

        Raises:
            ValueError: If the string has fewer than three or more than
                five segments.
        """
        parts = value.strip().split(":")
        if len(parts) == 3:
            return cls(group_id=parts[0], artifact_id=parts[1], version=parts[2])
        if len(parts) == 4:
            return cls(group_id=parts[0], artifact_id=parts[1], type=parts[2], version=parts[3])
        if len(parts) == 5:
            return cls(
                group_id=parts[0],
                artifact_id=parts[1],
                type=parts[2],
                classifier=parts[3],
                version=parts[4],
            )
        raise ValueError(f"Invalid artifact coordinate: {value!r}")

    @property
    def base_version(self) -> str:
        """Version with snapshot timestamps collapsed to ``-SNAPSHOT``."""
        match = _SNAPSHOT_TIMESTAMP.match(self.version)
        if match:
            return f"{match.group(1)}-SNAPSHOT"
        return self.version

    @property
    def extension(self) -> str:
        return ARTIFACT_HANDLERS.get(self.type, (self.type, ""))[0]

    @property
    def effective_classifier(self) -> str:
        return self.classifier or ARTIFACT_HANDLERS.get(self.type, ("", ""))[1]

    @property
    def file_name(self) -> str:
        classifier = self.effective_classifier
        suffix = f"-{classifier}" if classifier else ""
        return f"{self.artifact_id}-{self.version}{suffix}.{self.extension}"

    @property
    def directory(self) -> str:
        """Repository-relative directory, ``group/path/artifact/baseVersion``."""
        return "/".join([self.group_id.replace(".", "/"), self.artifact_id, self.base_version])

    @property
    def path(self) -> str:
        return f"{self.directory}/{self.file_name}"

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.type]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)


# --- Execution plan ---


class MojoExecution(BaseModel):
    """One plugin goal invocation in an execution plan."""

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    goal: str
    execution_id: str = "default"
    phase: Optional[str] = None
    configuration: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def plugin_key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    def matches(self, group_id: str, artifact_id: str) -> bool:
        return self.group_id == group_id and self.artifact_id == artifact_id

    def __str__(self) -> str:
        version = f":{self.version}" if self.version else ""
        return f"{self.plugin_key}{version}:{self.goal} ({self.execution_id})"


class ExecutionPlan(BaseModel):
    """Ordered plugin goal executions; order is execution order."""

    executions: Tuple[MojoExecution, ...] = ()

    model_config = ConfigDict(frozen=True)

    def __iter__(self) -> Iterator[MojoExecution]:  # type: ignore[override]
        return iter(self.executions)

    def __len__(self) -> int:
        return len(self.executions)

    def for_plugin(self, group_id: str, artifact_id: str) -> List[MojoExecution]:
        return [e for e in self.executions if e.matches(group_id, artifact_id)]


# --- Reactor ---


class ReactorModule(BaseModel):
    """A module of a multi-module build and the module ids it depends on."""

    module_id: str
    depends_on: FrozenSet[str] = frozenset()

    model_config = ConfigDict(frozen=True)


# --- Classpath ---


class ClasspathEntryKind(StrEnum):
    SOURCE = "source"
    LIBRARY = "library"
    CONTAINER = "container"


class ClasspathEntryDescriptor(BaseModel):
    """
    A single classpath entry. Identity is ``path``.

    Attributes:
        kind: Entry kind.
        path: Workspace path or container path.
        output_path: Output folder (SOURCE entries only).
        inclusion_patterns: Ant-style include globs.
        exclusion_patterns: Ant-style exclude globs.
        optional: Whether a missing path is tolerated.
    """

    kind: ClasspathEntryKind
    path: str
    output_path: Optional[str] = None
    inclusion_patterns: List[str] = Field(default_factory=list)
    exclusion_patterns: List[str] = Field(default_factory=list)
    optional: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_defaults=True)
