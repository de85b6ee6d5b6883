"""Encryption of secrets kept in the host settings store."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from cryptography.fernet import Fernet, InvalidToken

from .errors import DecryptionError

LOGGER = logging.getLogger(__name__)


class Decryptor(Protocol):
    """Anything able to turn a stored ciphertext back into plaintext."""

    def decrypt(self, ciphertext: str) -> str:
        ...


class SecretCipher:
    """Fernet-based cipher for the API key stored at rest.

    Empty values stay empty in both directions so that an unconfigured
    settings store yields an empty API key instead of an error.
    """

    def __init__(self, key: bytes) -> None:
        self._fernet = Fernet(key)

    @classmethod
    def generate(cls) -> "SecretCipher":
        return cls(Fernet.generate_key())

    def encrypt(self, plaintext: str) -> str:
        if not plaintext:
            return ""
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        if not ciphertext:
            return ""
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            raise DecryptionError("Stored secret could not be decrypted") from exc


def load_or_create_key(path: Path) -> bytes:
    """Read the Fernet key at ``path``, creating one if it does not exist."""

    if path.exists():
        return path.read_bytes().strip()

    path.parent.mkdir(parents=True, exist_ok=True)
    key = Fernet.generate_key()
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as stream:
        stream.write(key)
    LOGGER.info("Generated new secret key at %s", path)
    return key
