"""
storage/crypto.py

Fernet-based encryption helpers for MedBook data at rest.

Used by the encrypted notification backend: notification messages name
patients and doctors, so when a key is configured the on-disk file holds a
single Fernet token instead of plain JSON.

Key lifecycle
-------------
The key comes from ``Settings.data_key`` (env ``APP_DATA_KEY``), a URL-safe
base64-encoded 32-byte key as produced by ``Fernet.generate_key()``.

Public API
----------
generate_key() -> str
encrypt_json(data, key) -> str
decrypt_json(token, key) -> Any
"""

import json
import logging
from functools import lru_cache
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def _get_fernet(key: str) -> Fernet:
    return Fernet(key.encode("utf-8"))


def generate_key() -> str:
    return Fernet.generate_key().decode("utf-8")


def encrypt_json(data: Any, key: str) -> str:
    """
    Serialize *data* to JSON, encrypt with Fernet, and return the token.

    Raises:
        TypeError: If *data* contains non-serialisable types.
    """
    plaintext: bytes = json.dumps(data, ensure_ascii=False, default=str).encode("utf-8")
    return _get_fernet(key).encrypt(plaintext).decode("utf-8")


def decrypt_json(token: str, key: str) -> Any:
    """
    Decrypt a token produced by :func:`encrypt_json`.

    Raises:
        cryptography.fernet.InvalidToken: Wrong key or corrupted token.
    """
    try:
        plaintext: bytes = _get_fernet(key).decrypt(token.encode("utf-8"))
    except InvalidToken:
        logger.error("Fernet decryption failed, wrong key or corrupted token.")
        raise

    return json.loads(plaintext.decode("utf-8"))
