"""
Execution request, session and result containers.

A request carries everything derived from settings and configuration; a
session scopes a request to exactly one project for planning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .project import ProjectModel
from .types import Mirror, Proxy, Server


@dataclass
class ExecutionRequest:
    """
    Inputs of a build or planning run.

    Attributes:
        global_settings_file: Global settings.xml path, if configured.
        user_settings_file: User settings.xml path, if configured.
        local_repository: Local repository root.
        offline: Whether remote access is disabled.
        goals: Requested goals or lifecycle phases.
        mirrors: Mirrors from settings.
        proxies: Proxies from settings.
        servers: Server credentials from settings.
        active_profiles: Profile ids explicitly activated.
        user_properties: Properties visible to plugin expressions.
        transfer_listener: Receives transfer progress messages.
    """

    global_settings_file: Optional[Path] = None
    user_settings_file: Optional[Path] = None
    local_repository: Optional[Path] = None
    offline: bool = False
    goals: List[str] = field(default_factory=list)
    mirrors: List[Mirror] = field(default_factory=list)
    proxies: List[Proxy] = field(default_factory=list)
    servers: List[Server] = field(default_factory=list)
    active_profiles: List[str] = field(default_factory=list)
    user_properties: Dict[str, str] = field(default_factory=dict)
    transfer_listener: Optional[Callable[[str], None]] = None


@dataclass
class ExecutionResult:
    """Exceptions collected while working within a session."""

    exceptions: List[Exception] = field(default_factory=list)

    def add_exception(self, exc: Exception) -> "ExecutionResult":
        self.exceptions.append(exc)
        return self

    @property
    def has_exceptions(self) -> bool:
        return bool(self.exceptions)


@dataclass
class BuildSession:
    """A request scoped to a single project."""

    request: ExecutionRequest
    project: ProjectModel
    result: ExecutionResult = field(default_factory=ExecutionResult)

    @property
    def projects(self) -> List[ProjectModel]:
        return [self.project]
