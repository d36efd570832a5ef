"""
Global Configuration and Defaults.

This module centralizes the well-known identities the engine depends on
(default remote repository, compiler plugin coordinates, compliance level
tables, classpath container ids) and the user-facing tool configuration
loaded from ``.mvnide/config.yaml``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

# --- Repositories ---
DEFAULT_REMOTE_REPO_ID = "central"
DEFAULT_REMOTE_REPO_URL = "https://repo.maven.apache.org/maven2"
DEFAULT_LOCAL_REPOSITORY = Path.home() / ".m2" / "repository"

# Encrypted master password for server credentials
DEFAULT_SETTINGS_SECURITY_FILE = Path.home() / ".m2" / "settings-security.xml"
SETTINGS_SECURITY_PASSWORD = "settings.security"

# Written next to every artifact the resolver has tried to fetch
LAST_UPDATED_FILE = "mvnide-lastUpdated.properties"

# Execution request user property identifying the tool
TOOL_VERSION_PROPERTY = "mvnide.version"

# --- Compiler ---
COMPILER_PLUGIN_GROUP_ID = "org.apache.maven.plugins"
COMPILER_PLUGIN_ARTIFACT_ID = "maven-compiler-plugin"

SOURCE_LEVELS: List[str] = ["1.1", "1.2", "1.3", "1.4", "1.5", "1.6", "1.7"]
TARGET_LEVELS: List[str] = ["1.1", "1.2", "1.3", "1.4", "jsr14", "1.5", "1.6", "1.7"]
DEFAULT_COMPILER_LEVEL = "1.4"

# Ordered: compiler target level -> execution environment id
EXECUTION_ENVIRONMENTS: Dict[str, str] = {
    "1.1": "JRE-1.1",
    "1.2": "J2SE-1.2",
    "1.3": "J2SE-1.3",
    "1.4": "J2SE-1.4",
    "1.5": "J2SE-1.5",
    "jsr14": "J2SE-1.5",
    "1.6": "JavaSE-1.6",
    "1.7": "JavaSE-1.7",
}

COMPILER_SOURCE_OPTION = "org.eclipse.jdt.core.compiler.source"
COMPILER_COMPLIANCE_OPTION = "org.eclipse.jdt.core.compiler.compliance"
COMPILER_TARGET_OPTION = "org.eclipse.jdt.core.compiler.codegen.targetPlatform"

# --- Classpath containers ---
JRE_CONTAINER = "org.eclipse.jdt.launching.JRE_CONTAINER"
JRE_VM_TYPE = "org.eclipse.jdt.internal.debug.ui.launcher.StandardVMType"
DEPENDENCY_CONTAINER = "org.maven.ide.eclipse.MAVEN2_CLASSPATH_CONTAINER"

# --- Configuration keys ---
CONFIG_USER_SETTINGS_FILE = "user_settings_file"
CONFIG_GLOBAL_SETTINGS_FILE = "global_settings_file"

CONFIG_ENV_VAR = "MVNIDE_CONFIG"
DEFAULT_CONFIG_PATH = Path(".mvnide/config.yaml")


class MvnideConfig(BaseModel):
    """
    Tool configuration.

    Attributes:
        global_settings_file: Installation-wide settings.xml, if any.
        user_settings_file: Per-user settings.xml, if any.
        settings_security_file: settings-security.xml holding the master
            password; ``~/.m2/settings-security.xml`` when unset.
        offline: Disable all remote transfers.
        installed_environments: Execution environment ids known to the IDE.
        goals: Goals used when planning without explicit goals.
    """

    global_settings_file: Optional[str] = None
    user_settings_file: Optional[str] = None
    settings_security_file: Optional[str] = None
    offline: bool = False
    installed_environments: List[str] = Field(
        default_factory=lambda: sorted(set(EXECUTION_ENVIRONMENTS.values()))
    )
    goals: List[str] = Field(default_factory=lambda: ["process-test-resources"])

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "MvnideConfig":
        """
        Load configuration from YAML, applying environment overrides.

        Args:
            path: Explicit config path. Falls back to ``$MVNIDE_CONFIG`` and
                then ``.mvnide/config.yaml``.

        Returns:
            MvnideConfig: Defaults when the file does not exist.

        Raises:
            SettingsLoadError: If the file is malformed.
        """
        # Deferred: mvnide.core imports this module at package load
        from .core.errors import SettingsLoadError

        if path is None:
            env_path = os.getenv(CONFIG_ENV_VAR)
            path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

        data: dict = {}
        if path.exists():
            try:
                with open(path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise SettingsLoadError(f"Failed to parse {path}", [str(e)]) from e
            if not isinstance(data, dict):
                raise SettingsLoadError(f"Failed to parse {path}", ["top level must be a mapping"])
        else:
            logger.debug(f"No configuration at {path}, using defaults")

        if os.getenv("MVNIDE_OFFLINE"):
            data["offline"] = os.getenv("MVNIDE_OFFLINE", "").lower() in ("1", "true", "yes")
        if os.getenv("MVNIDE_USER_SETTINGS"):
            data["user_settings_file"] = os.getenv("MVNIDE_USER_SETTINGS")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise SettingsLoadError(
                f"Invalid configuration in {path}",
                [err["msg"] for err in e.errors()],
            ) from e
