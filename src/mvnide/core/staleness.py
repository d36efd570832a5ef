"""
Staleness Cache.

Remembers, per artifact and per remote repository, when resolution last
consulted that repository. Records live next to the artifact inside the
local repository:

    <local repo>/
    └── org/example/demo/1.0/
        ├── demo-1.0.jar                         # present once resolved
        └── mvnide-lastUpdated.properties        # key=epoch millis

Keys are ``id[|username]|url|classifier``. Records are never expired here.
Concurrent writers in different processes race; the last writer wins.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from ..config import LAST_UPDATED_FILE
from .errors import ResolutionError
from .types import ArtifactCoordinate, RemoteRepository

logger = logging.getLogger(__name__)

# Serializes read-modify-write of record files within this process
_FILE_LOCK = threading.Lock()

_SEPARATORS = "=:"


def _escape(text: str) -> str:
    out = []
    for ch in text:
        if ord(ch) > 0xFF:
            # Record files are latin-1; wider characters become \uXXXX
            out.extend(f"\\u{unit:04x}" for unit in _utf16_units(ch))
            continue
        if ch in "\\=: #!":
            out.append("\\")
        out.append(ch)
    return "".join(out)


def _utf16_units(ch: str) -> List[int]:
    code = ord(ch)
    if code <= 0xFFFF:
        return [code]
    code -= 0x10000
    return [0xD800 + (code >> 10), 0xDC00 + (code & 0x3FF)]


def _unescape(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\":
            out.append(ch)
            i += 1
        elif text[i + 1 : i + 2] == "u" and _is_hex(text[i + 2 : i + 6]):
            out.append(chr(int(text[i + 2 : i + 6], 16)))
            i += 6
        else:
            out.append(text[i + 1 : i + 2])
            i += 2
    # Re-join surrogate pairs written for characters outside the BMP
    return "".join(out).encode("utf-16", "surrogatepass").decode("utf-16")


def _is_hex(digits: str) -> bool:
    return len(digits) == 4 and all(c in "0123456789abcdefABCDEF" for c in digits)


def parse_properties(text: str) -> Dict[str, str]:
    """Parse ``key=value`` lines; ``#``/``!`` lines are comments."""
    result: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        escaped = False
        split_at = -1
        for i, ch in enumerate(line):
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch in _SEPARATORS:
                split_at = i
                break
        if split_at < 0:
            result[_unescape(line)] = ""
            continue
        result[_unescape(line[:split_at]).strip()] = _unescape(line[split_at + 1 :]).strip()
    return result


def format_properties(values: Dict[str, str]) -> str:
    stamp = datetime.now(timezone.utc).strftime("%a %b %d %H:%M:%S UTC %Y")
    lines = [f"#{stamp}"]
    lines.extend(f"{_escape(k)}={v}" for k, v in values.items())
    return "\n".join(lines) + "\n"


@dataclass
class StalenessRecord:
    """
    Last-checked timestamps of one artifact, keyed by repository key.

    A missing key means the repository was never consulted.
    """

    entries: Dict[str, int] = field(default_factory=dict)

    def last_checked(self, key: str) -> Optional[int]:
        return self.entries.get(key)

    def is_checked(self, key: str) -> bool:
        return key in self.entries


class StalenessCache:
    """
    Per-local-repository staleness records.

    Example:
        ```python
        cache = StalenessCache(Path("~/.m2/repository").expanduser())
        cache.record(coordinate, repositories)
        cache.all_checked(coordinate, repositories)  # True
        ```
    """

    def __init__(self, local_repository: Path):
        self.local_repository = local_repository

    @staticmethod
    def key(repository: RemoteRepository, coordinate: ArtifactCoordinate) -> str:
        """Record key: id, then ``|username`` if authenticated, ``|url``, ``|classifier``."""
        parts = [repository.id]
        if repository.authentication is not None:
            parts.append(repository.authentication.username or "")
        parts.append(repository.url)
        parts.append(coordinate.classifier)
        return "|".join(parts)

    def record_file(self, coordinate: ArtifactCoordinate) -> Path:
        return self.local_repository / coordinate.directory / LAST_UPDATED_FILE

    def load(self, coordinate: ArtifactCoordinate) -> StalenessRecord:
        """
        Read the record for ``coordinate``; empty if none was written yet.

        Raises:
            ResolutionError: If the record file exists but cannot be read.
        """
        path = self.record_file(coordinate)
        try:
            properties = parse_properties(path.read_text(encoding="latin-1"))
        except FileNotFoundError:
            return StalenessRecord()
        except (OSError, UnicodeError) as e:
            raise ResolutionError("Could not read artifact lastUpdated status", [e]) from e

        entries = {}
        for key, value in properties.items():
            try:
                entries[key] = int(value)
            except ValueError:
                logger.debug(f"Ignoring malformed timestamp {value!r} in {path}")
        return StalenessRecord(entries=entries)

    def record(
        self,
        coordinate: ArtifactCoordinate,
        repositories: Iterable[RemoteRepository],
        timestamp: Optional[int] = None,
    ) -> None:
        """
        Mark every repository as checked now for ``coordinate``.

        Raises:
            ResolutionError: If the record file cannot be written.
        """
        stamp = timestamp if timestamp is not None else int(time.time() * 1000)
        path = self.record_file(coordinate)
        with _FILE_LOCK:
            current = self.load(coordinate)
            values = {k: str(v) for k, v in current.entries.items()}
            for repository in repositories:
                values[self.key(repository, coordinate)] = str(stamp)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(format_properties(values), encoding="latin-1")
            except (OSError, UnicodeError) as e:
                raise ResolutionError("Could not write artifact lastUpdated status", [e]) from e

    def all_checked(
        self, coordinate: ArtifactCoordinate, repositories: Sequence[RemoteRepository]
    ) -> bool:
        """True when every repository has a recorded check for ``coordinate``."""
        record = self.load(coordinate)
        return all(record.is_checked(self.key(r, coordinate)) for r in repositories)
