"""
Security helpers for hashing credentials and encrypting sensitive fields.
"""

from __future__ import annotations

import base64
import hashlib
import os
import secrets
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

SALT_BYTES = 16


def _get_pepper() -> str:
    pepper = os.getenv("PASSWORD_HASH_SALT")
    if pepper:
        return pepper
    raise RuntimeError(
        "PASSWORD_HASH_SALT environment variable not set. "
        "Please set this environment variable in production."
    )


def _derive_key_from_secret(secret: str) -> bytes:
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


@lru_cache(maxsize=1)
def _fernet() -> Fernet:
    key = os.getenv("CUSTOMER_DATA_KEY")
    if key:
        return Fernet(key.encode("utf-8"))
    secret = os.getenv("SECRET_KEY")
    if not secret:
        raise RuntimeError(
            "SECRET_KEY environment variable not set. "
            "Please set this environment variable in production."
        )
    return Fernet(_derive_key_from_secret(secret))


def _hash_payload(payload: str) -> str:
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def hash_password(password: str, salt: str | None = None) -> str:
    """
    Hash a password with a per-account salt and the application pepper.

    The result is ``<salt>$<hexdigest>``; the raw password is discarded.
    """
    if password is None:
        raise ValueError("password must not be None")
    salt = salt or secrets.token_hex(SALT_BYTES)
    digest = _hash_payload(f"{salt}:{password}:{_get_pepper()}")
    return f"{salt}${digest}"


def verify_password(password: str | None, stored_hash: str | None) -> bool:
    """
    Compare a candidate password against the stored hash.
    """
    if not stored_hash or password is None or "$" not in stored_hash:
        return False
    salt, _ = stored_hash.split("$", 1)
    candidate = hash_password(password, salt)
    return secrets.compare_digest(candidate, stored_hash)


def encrypt_string(value: str | None) -> str | None:
    """
    Encrypt a string using Fernet. Returns None when the input is None.
    """
    if value is None:
        return None
    token = _fernet().encrypt(value.encode("utf-8"))
    return token.decode("utf-8")


def decrypt_string(value: str | None) -> str | None:
    """
    Decrypt a previously encrypted string. Returns None when the input is None
    or was encrypted with a different key.
    """
    if value is None:
        return None
    try:
        return _fernet().decrypt(value.encode("utf-8")).decode("utf-8")
    except InvalidToken:
        return None
