"""
Settings Resolver.

Builds the effective settings from the configured global and user
settings files, validates settings files for diagnostics, decrypts server
credentials and keeps the settings-change and local-repository listener
registries.

Lifecycle:
    - First ``get_settings()`` call loads and caches the snapshot.
    - ``reload_settings()`` rebuilds it and notifies listeners.
    - ``configuration_changed(key)`` reloads when a settings file key changes.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import List, Optional

from ..config import (
    CONFIG_GLOBAL_SETTINGS_FILE,
    CONFIG_USER_SETTINGS_FILE,
    DEFAULT_LOCAL_REPOSITORY,
    MvnideConfig,
)
from .collaborators import (
    LocalRepositoryListener,
    SettingsChangeListener,
    SettingsDecrypter,
    SettingsLoader,
)
from .errors import SettingsLoadError
from .security import SettingsSecurityDecrypter
from .settings_loader import XmlSettingsLoader
from .types import EffectiveSettings, Proxy, Server

logger = logging.getLogger(__name__)


def _optional_path(value: Optional[str]) -> Optional[Path]:
    return Path(value).expanduser() if value else None


class SettingsResolver:
    """
    Owns the effective settings snapshot and its listeners.

    Example:
        ```python
        resolver = SettingsResolver(MvnideConfig.load())
        settings = resolver.get_settings()
        print(settings.local_repository)
        ```
    """

    def __init__(
        self,
        config: Optional[MvnideConfig] = None,
        loader: Optional[SettingsLoader] = None,
        decrypter: Optional[SettingsDecrypter] = None,
    ):
        """
        Initialize the resolver.

        Args:
            config: Tool configuration holding the settings file paths.
            loader: Settings-loading collaborator.
            decrypter: Credential decryption collaborator.
        """
        self.config = config or MvnideConfig()
        self.loader = loader or XmlSettingsLoader()
        self.decrypter = decrypter or SettingsSecurityDecrypter(_optional_path(self.config.settings_security_file))
        self._settings: Optional[EffectiveSettings] = None
        self._lock = threading.Lock()
        self._settings_listeners: List[SettingsChangeListener] = []
        self._local_repository_listeners: List[LocalRepositoryListener] = []

    @property
    def global_settings_file(self) -> Optional[Path]:
        return _optional_path(self.config.global_settings_file)

    @property
    def user_settings_file(self) -> Optional[Path]:
        return _optional_path(self.config.user_settings_file)

    def effective_settings(
        self,
        global_path: Optional[Path] = None,
        user_path: Optional[Path] = None,
    ) -> EffectiveSettings:
        """
        Load and merge the given settings files.

        Raises:
            SettingsLoadError: If the loader could not produce settings.
        """
        result = self.loader.load(global_path, user_path)
        if result.settings is None:
            raise SettingsLoadError("Could not read settings.xml", result.problems)
        for problem in result.problems:
            logger.warning(problem)
        return result.settings

    def get_settings(self) -> EffectiveSettings:
        """Return the cached snapshot, loading it on first use."""
        with self._lock:
            settings = self._settings
        if settings is None:
            settings = self.effective_settings(self.global_settings_file, self.user_settings_file)
            with self._lock:
                if self._settings is None:
                    self._settings = settings
                settings = self._settings
        return settings

    def validate(self, path: Optional[Path]) -> List[str]:
        """
        Parse a settings file and collect problems instead of raising.

        Args:
            path: settings.xml to validate; None validates nothing.

        Returns:
            Human-readable problems, empty when the file is valid.
        """
        if path is None:
            return []
        if not path.is_file():
            return [f"Can not read settings file {path}"]
        try:
            return list(self.loader.load(None, path).problems)
        except Exception as e:
            return [f"Can not read settings file {path}: {e}"]

    def reload_settings(self) -> EffectiveSettings:
        """
        Rebuild the snapshot and notify settings listeners.

        Listeners run synchronously in registration order over a snapshot of
        the registry; a failing listener is logged and the rest still run.
        """
        settings = self.effective_settings(self.global_settings_file, self.user_settings_file)
        with self._lock:
            self._settings = settings
            listeners = list(self._settings_listeners)

        for listener in listeners:
            try:
                listener.settings_changed(settings)
            except Exception as e:
                logger.error(f"Settings listener {listener!r} failed: {e}", exc_info=True)
        return settings

    def configuration_changed(self, key: str) -> None:
        """React to a tool configuration change."""
        if key in (CONFIG_USER_SETTINGS_FILE, CONFIG_GLOBAL_SETTINGS_FILE):
            logger.info(f"Configuration '{key}' changed, reloading settings")
            self.reload_settings()

    def decrypt(self, server: Server) -> Server:
        """
        Decrypt a server's credentials, best effort.

        Problems are logged as warnings and the server is returned with its
        password as stored.
        """
        try:
            result = self.decrypter.decrypt(server)
        except Exception as e:
            logger.warning(f"Could not decrypt credentials for server '{server.id}': {e}")
            return server
        for problem in result.problems:
            logger.warning(problem)
        return result.server

    def local_repository(self) -> Path:
        """Configured local repository root, ``~/.m2/repository`` by default."""
        configured = self.get_settings().local_repository
        if configured:
            return Path(configured).expanduser()
        return DEFAULT_LOCAL_REPOSITORY

    def proxy_info(self, protocol: str) -> Optional[Proxy]:
        """First active proxy for ``protocol`` (case-insensitive)."""
        for proxy in self.get_settings().proxies:
            if proxy.active and proxy.protocol.lower() == protocol.lower():
                return proxy
        return None

    # --- Listener registries ---

    def add_settings_listener(self, listener: SettingsChangeListener) -> None:
        with self._lock:
            self._settings_listeners.append(listener)

    def remove_settings_listener(self, listener: SettingsChangeListener) -> None:
        with self._lock:
            if listener in self._settings_listeners:
                self._settings_listeners.remove(listener)

    def add_local_repository_listener(self, listener: LocalRepositoryListener) -> None:
        with self._lock:
            self._local_repository_listeners.append(listener)

    def remove_local_repository_listener(self, listener: LocalRepositoryListener) -> None:
        with self._lock:
            if listener in self._local_repository_listeners:
                self._local_repository_listeners.remove(listener)

    def local_repository_listeners(self) -> List[LocalRepositoryListener]:
        """Snapshot of the local repository listeners."""
        with self._lock:
            return list(self._local_repository_listeners)
