"""
CLI Commands Package.

Each command is implemented in its own module for maintainability.
"""

from . import classpath
from . import plan
from . import reactor
from . import repos
from . import resolve
from . import settings

__all__ = [
    "classpath",
    "plan",
    "reactor",
    "repos",
    "resolve",
    "settings",
]
