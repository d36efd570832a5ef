"""
Settings Security.

Decrypts server credentials written by ``mvn --encrypt-password``. Such
values are wrapped in braces and may carry free text around them:

    <password>Rotated 2024-01 {COQLCE6DU6GtcS5P=}</password>

They are encrypted with a master password, which is itself stored
encrypted in ``~/.m2/settings-security.xml``:

    <settingsSecurity>
      <master>{jSMOWnoPFgsHVpMvz5VrIt5kRbzGpI8u+9EF1iFQyJQ=}</master>
    </settingsSecurity>

The master password is encrypted with the fixed password
``settings.security``. Both layers use the same cipher: base64 of
``salt(8) | pad length(1) | AES-128-CBC ciphertext | padding``, with key
and IV taken from ``SHA-256(password + salt)``.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Optional

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad, unpad

from ..config import DEFAULT_SETTINGS_SECURITY_FILE, SETTINGS_SECURITY_PASSWORD
from .collaborators import DecryptionResult
from .errors import SettingsSecurityError
from .settings_loader import _text
from .types import Server

logger = logging.getLogger(__name__)

SALT_SIZE = 8
BLOCK_SIZE = 16

# Innermost unescaped {...} block
_ENCRYPTED = re.compile(r"(?<!\\)\{([^{}]*?)(?<!\\)\}")


def encrypted_payload(value: Optional[str]) -> Optional[str]:
    """Base64 payload of a brace-wrapped value, None for plain text."""
    if not value:
        return None
    match = _ENCRYPTED.search(value)
    return match.group(1) if match else None


def _key_and_iv(password: str, salt: bytes):
    digest = hashlib.sha256(password.encode("utf-8") + salt).digest()
    return digest[:BLOCK_SIZE], digest[BLOCK_SIZE : 2 * BLOCK_SIZE]


def decrypt_value(payload: str, password: str) -> str:
    """
    Decrypt one base64 payload.

    Raises:
        SettingsSecurityError: If the payload is malformed or the password
            is wrong.
    """
    try:
        data = base64.b64decode(payload, validate=True)
        if len(data) < SALT_SIZE + 1 + BLOCK_SIZE:
            raise ValueError("payload too short")
        salt = data[:SALT_SIZE]
        pad_length = data[SALT_SIZE]
        ciphertext = data[SALT_SIZE + 1 : len(data) - pad_length]

        key, iv = _key_and_iv(password, salt)
        padded = AES.new(key, AES.MODE_CBC, iv=iv).decrypt(ciphertext)
        return unpad(padded, BLOCK_SIZE).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise SettingsSecurityError(f"Cannot decrypt value: {e}") from e


def encrypt_value(plain: str, password: str, salt: Optional[bytes] = None) -> str:
    """Encrypt ``plain`` the way ``mvn --encrypt-password`` does, without braces."""
    salt = salt if salt is not None else get_random_bytes(SALT_SIZE)
    key, iv = _key_and_iv(password, salt)
    ciphertext = AES.new(key, AES.MODE_CBC, iv=iv).encrypt(pad(plain.encode("utf-8"), BLOCK_SIZE))

    pad_length = BLOCK_SIZE - (SALT_SIZE + len(ciphertext) + 1) % BLOCK_SIZE
    data = salt + bytes([pad_length]) + ciphertext + bytes(pad_length)
    return base64.b64encode(data).decode("ascii")


class SettingsSecurityDecrypter:
    """
    ``SettingsDecrypter`` backed by ``settings-security.xml``.

    Plain credentials pass through untouched. When an encrypted credential
    cannot be decrypted (no security file, wrong master password) the
    server is returned as stored together with a problem.

    Example:
        ```python
        decrypter = SettingsSecurityDecrypter()
        result = decrypter.decrypt(Server(id="corp", password="{...}"))
        result.server.password  # clear text
        ```
    """

    def __init__(self, security_file: Optional[Path] = None):
        self.security_file = security_file or DEFAULT_SETTINGS_SECURITY_FILE
        self._master: Optional[str] = None

    def master_password(self) -> str:
        """
        Read and decrypt the master password, following ``<relocation>``.

        Raises:
            SettingsSecurityError: If no usable master password is configured.
        """
        if self._master is not None:
            return self._master

        path = self.security_file
        seen = set()
        while True:
            if path in seen:
                raise SettingsSecurityError(f"Relocation loop at {path}")
            seen.add(path)
            try:
                root = ET.parse(path).getroot()
            except FileNotFoundError as e:
                raise SettingsSecurityError(f"no master password, {path} does not exist") from e
            except (OSError, ET.ParseError) as e:
                raise SettingsSecurityError(f"Cannot read {path}: {e}") from e

            relocation = _text(root, "relocation")
            if relocation:
                logger.debug(f"{path} relocated to {relocation}")
                path = Path(relocation).expanduser()
                continue

            payload = encrypted_payload(_text(root, "master"))
            if payload is None:
                raise SettingsSecurityError(f"no master password in {path}")
            self._master = decrypt_value(payload, SETTINGS_SECURITY_PASSWORD)
            return self._master

    def decrypt(self, server: Server) -> DecryptionResult:
        updates: Dict[str, str] = {}
        problems = []
        for field in ("password", "passphrase"):
            payload = encrypted_payload(getattr(server, field))
            if payload is None:
                continue
            try:
                updates[field] = decrypt_value(payload, self.master_password())
            except SettingsSecurityError as e:
                problems.append(f"Cannot decrypt {field} for server '{server.id}': {e}")
        if updates:
            server = server.model_copy(update=updates)
        return DecryptionResult(server=server, problems=problems)
