"""
Error taxonomy for the resolution engine.

Every failure the core surfaces to callers derives from ``MvnideError``.
Best-effort paths (credential decryption, listener notification) log
instead of raising.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class MvnideError(Exception):
    """Base class for all engine errors."""


class SettingsLoadError(MvnideError):
    """
    Raised when settings or tool configuration cannot be read.

    Attributes:
        message: Human-readable error message.
        problems: Individual problems reported by the loader.
    """

    def __init__(self, message: str, problems: Optional[Sequence[str]] = None):
        self.message = message
        self.problems: List[str] = list(problems or [])
        detail = "; ".join(self.problems)
        super().__init__(f"{message}: {detail}" if detail else message)


class SettingsSecurityError(MvnideError):
    """Raised when an encrypted credential or the master password cannot be decrypted."""


class ProjectReadError(MvnideError):
    """Raised when a pom.xml cannot be read or parsed."""


class RepositoryAssemblyError(MvnideError):
    """
    Raised when one or more repository declarations are invalid.

    Assembly still visits every declaration so ``problems`` lists all of
    them, not only the first.
    """

    def __init__(self, problems: Sequence[str]):
        self.problems: List[str] = list(problems)
        super().__init__("Invalid repository declarations: " + "; ".join(self.problems))


class ResolutionError(MvnideError):
    """
    Raised when an artifact cannot be resolved.

    Attributes:
        causes: Underlying transport exceptions and ``Missing ...`` messages.
        cancelled: True when the caller's monitor cancelled the request.
    """

    def __init__(
        self,
        message: str,
        causes: Optional[Sequence[object]] = None,
        cancelled: bool = False,
    ):
        self.message = message
        self.causes: List[object] = list(causes or [])
        self.cancelled = cancelled
        super().__init__(message)

    def __str__(self) -> str:
        if not self.causes:
            return self.message
        lines = [self.message] + [f"  - {cause}" for cause in self.causes]
        return "\n".join(lines)


class PlanningError(MvnideError):
    """Raised when an execution request or plan cannot be computed."""

    def __init__(self, message: str, cancelled: bool = False):
        self.message = message
        self.cancelled = cancelled
        super().__init__(message)


class CycleError(MvnideError):
    """
    Raised when reactor modules depend on each other cyclically.

    Attributes:
        cycle: Module ids participating in the cycle, in edge order.
    """

    def __init__(self, cycle: Sequence[str]):
        self.cycle: List[str] = list(cycle)
        path = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(f"Dependency cycle detected: {path}")


class DuplicateIdError(MvnideError):
    """Raised when two reactor modules share the same id."""

    def __init__(self, module_id: str):
        self.module_id = module_id
        super().__init__(f"Duplicate module id in reactor: {module_id}")


class ConfigurationError(MvnideError):
    """Raised when a project's classpath configuration pass cannot complete."""
