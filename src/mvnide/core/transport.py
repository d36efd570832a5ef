"""
HTTP Artifact Transport.

Default ``ArtifactTransport``: fetches artifacts from Maven-layout remote
repositories over HTTP(S) or ``file://`` into the local repository. No
version-range or conflict resolution happens here; a coordinate maps to
exactly one path.
"""

from __future__ import annotations

import base64
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Sequence
from urllib import error, request
from urllib.parse import unquote, urlparse

from .collaborators import ProgressMonitor, TransportResult
from .errors import ResolutionError
from .types import ArtifactCoordinate, RemoteRepository

logger = logging.getLogger(__name__)


class HttpArtifactTransport:
    """
    Downloads artifacts with urllib.

    Attributes:
        offline: When True only the local repository is consulted.
        timeout: Socket timeout in seconds per request.
    """

    def __init__(self, offline: bool = False, timeout: float = 60.0):
        self.offline = offline
        self.timeout = timeout

    def resolve(
        self,
        coordinate: ArtifactCoordinate,
        local_repository: Path,
        repositories: Sequence[RemoteRepository],
        monitor: ProgressMonitor,
    ) -> TransportResult:
        target = local_repository / coordinate.path
        if target.is_file():
            return TransportResult(file=target)

        result = TransportResult()
        if self.offline:
            logger.debug(f"Offline, not downloading {coordinate}")
            result.missing.append(coordinate)
            return result

        for repository in repositories:
            if monitor.is_cancelled():
                raise ResolutionError(f"Resolution of {coordinate} cancelled", cancelled=True)
            url = f"{repository.url}/{coordinate.path}"
            monitor.report(f"Downloading {url}")
            try:
                if self._download(repository, url, target):
                    logger.info(f"Downloaded {coordinate} from {repository.id}")
                    result.file = target
                    return result
            except (OSError, error.URLError) as e:
                logger.debug(f"Transfer of {url} failed: {e}")
                result.exceptions.append(e)

        if not result.exceptions:
            result.missing.append(coordinate)
        return result

    def _download(self, repository: RemoteRepository, url: str, target: Path) -> bool:
        """
        Fetch ``url`` into ``target``.

        Returns:
            False when the repository does not have the file.
        """
        if repository.protocol == "file":
            source = Path(unquote(urlparse(url).path))
            if not source.is_file():
                return False
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
            return True

        handlers = []
        if repository.proxy is not None:
            proxy = repository.proxy
            credentials = f"{proxy.username}:{proxy.password}@" if proxy.username else ""
            proxy_url = f"http://{credentials}{proxy.host}:{proxy.port}"
            handlers.append(request.ProxyHandler({repository.protocol: proxy_url}))
        opener = request.build_opener(*handlers)

        req = request.Request(url, headers={"User-Agent": "mvnide"})
        if repository.authentication is not None and repository.authentication.username:
            auth = repository.authentication
            token = base64.b64encode(f"{auth.username}:{auth.password or ''}".encode()).decode()
            req.add_header("Authorization", f"Basic {token}")

        try:
            with opener.open(req, timeout=self.timeout) as response:
                target.parent.mkdir(parents=True, exist_ok=True)
                tmp = tempfile.NamedTemporaryFile(dir=target.parent, delete=False)
                try:
                    with tmp:
                        shutil.copyfileobj(response, tmp)
                    Path(tmp.name).replace(target)
                except BaseException:
                    # Interrupted transfers leave no partial file behind
                    Path(tmp.name).unlink(missing_ok=True)
                    raise
        except error.HTTPError as e:
            if e.code == 404:
                return False
            raise
        return True
