"""
settings.xml loader.

Default ``SettingsLoader``: reads the global and user ``settings.xml``
files and merges them, the user file being dominant. Scalars from the user
file win; list entries (mirrors, proxies, servers, profiles) are merged by
id with user entries first.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .collaborators import SettingsLoadResult
from .types import (
    Activation,
    EffectiveSettings,
    Mirror,
    Profile,
    Proxy,
    RepositoryDeclaration,
    Server,
)

logger = logging.getLogger(__name__)


def _local(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _child(el, name: str):
    for child in el:
        if _local(child.tag) == name:
            return child
    return None


def _children(el, container: str, item: str) -> list:
    parent = _child(el, container)
    if parent is None:
        return []
    return [c for c in parent if _local(c.tag) == item]


def _text(el, name: str) -> Optional[str]:
    child = _child(el, name)
    if child is not None and child.text and child.text.strip():
        return child.text.strip()
    return None


def _bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.lower() == "true"


def _repositories(profile_el, container: str, item: str) -> List[RepositoryDeclaration]:
    return [
        RepositoryDeclaration(id=_text(r, "id"), url=_text(r, "url"), name=_text(r, "name"))
        for r in _children(profile_el, container, item)
    ]


def parse_settings_file(path: Path) -> Tuple[Optional[Dict[str, Any]], List[str]]:
    """
    Parse one settings.xml into a raw dictionary.

    Returns:
        ``(raw, problems)``; ``raw`` is None when the file is not valid XML.
    """
    problems: List[str] = []
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        return None, [f"Non-parseable settings {path}: {e}"]
    except OSError as e:
        return None, [f"Can not read settings file {path}: {e}"]

    if _local(root.tag) != "settings":
        return None, [f"Non-parseable settings {path}: root element is <{_local(root.tag)}>"]

    mirrors = []
    for m in _children(root, "mirrors", "mirror"):
        mirror_id, url, mirror_of = _text(m, "id"), _text(m, "url"), _text(m, "mirrorOf")
        if not mirror_id or not url or not mirror_of:
            problems.append(f"{path}: mirror '{mirror_id or '?'}' is missing id, url or mirrorOf")
            continue
        mirrors.append(Mirror(id=mirror_id, url=url, mirror_of=mirror_of, name=_text(m, "name")))

    proxies = []
    for p in _children(root, "proxies", "proxy"):
        host = _text(p, "host")
        if not host:
            problems.append(f"{path}: proxy '{_text(p, 'id') or '?'}' is missing host")
            continue
        port_text = _text(p, "port") or "8080"
        try:
            port = int(port_text)
        except ValueError:
            problems.append(f"{path}: proxy '{_text(p, 'id') or '?'}' has invalid port {port_text!r}")
            continue
        proxies.append(
            Proxy(
                id=_text(p, "id") or "default",
                active=_bool(_text(p, "active"), True),
                protocol=_text(p, "protocol") or "http",
                host=host,
                port=port,
                username=_text(p, "username"),
                password=_text(p, "password"),
                non_proxy_hosts=_text(p, "nonProxyHosts"),
            )
        )

    servers = []
    for s in _children(root, "servers", "server"):
        server_id = _text(s, "id")
        if not server_id:
            problems.append(f"{path}: server is missing id")
            continue
        servers.append(
            Server(
                id=server_id,
                username=_text(s, "username"),
                password=_text(s, "password"),
                private_key=_text(s, "privateKey"),
                passphrase=_text(s, "passphrase"),
            )
        )

    profiles = []
    for pr in _children(root, "profiles", "profile"):
        profile_id = _text(pr, "id")
        if not profile_id:
            problems.append(f"{path}: profile is missing id")
            continue
        activation_el = _child(pr, "activation")
        activation = None
        if activation_el is not None:
            activation = Activation(active_by_default=_bool(_text(activation_el, "activeByDefault"), False))
        properties = {}
        props_el = _child(pr, "properties")
        if props_el is not None:
            properties = {_local(c.tag): (c.text or "").strip() for c in props_el}
        profiles.append(
            Profile(
                id=profile_id,
                activation=activation,
                repositories=_repositories(pr, "repositories", "repository"),
                plugin_repositories=_repositories(pr, "pluginRepositories", "pluginRepository"),
                properties=properties,
            )
        )

    offline_text = _text(root, "offline")
    raw = {
        "local_repository": _text(root, "localRepository"),
        "offline": None if offline_text is None else _bool(offline_text, False),
        "mirrors": mirrors,
        "proxies": proxies,
        "servers": servers,
        "profiles": profiles,
        "active_profiles": [
            c.text.strip() for c in _children(root, "activeProfiles", "activeProfile") if c.text
        ],
    }
    return raw, problems


def _merge_by_id(dominant: list, recessive: list) -> list:
    ids = {item.id for item in dominant}
    return list(dominant) + [item for item in recessive if item.id not in ids]


def merge_settings(dominant: Dict[str, Any], recessive: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two raw settings dictionaries, ``dominant`` winning."""
    merged = dict(recessive)
    for key in ("local_repository", "offline"):
        if dominant.get(key) is not None:
            merged[key] = dominant[key]
    for key in ("mirrors", "proxies", "servers", "profiles"):
        merged[key] = _merge_by_id(dominant.get(key, []), recessive.get(key, []))
    active = list(dominant.get("active_profiles", []))
    active += [p for p in recessive.get("active_profiles", []) if p not in active]
    merged["active_profiles"] = active
    return merged


class XmlSettingsLoader:
    """Loads and merges global and user settings.xml files."""

    def load(self, global_path: Optional[Path], user_path: Optional[Path]) -> SettingsLoadResult:
        """
        Build effective settings.

        Missing files are skipped, as Maven does. A file that cannot be
        parsed makes the whole load fail.
        """
        problems: List[str] = []
        layers: List[Dict[str, Any]] = []

        # Global first so the user layer ends up dominant
        for path in (global_path, user_path):
            if path is None or not path.exists():
                continue
            raw, file_problems = parse_settings_file(path)
            problems.extend(file_problems)
            if raw is None:
                return SettingsLoadResult(settings=None, problems=problems)
            layers.append(raw)
            logger.debug(f"Loaded settings layer from {path}")

        merged: Dict[str, Any] = {}
        for layer in layers:
            merged = merge_settings(layer, merged) if merged else layer

        merged = {k: v for k, v in merged.items() if v is not None}
        return SettingsLoadResult(settings=EffectiveSettings(**merged), problems=problems)
