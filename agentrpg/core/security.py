# File: agentrpg/core/security.py

"""
Password hashing and HTTP Basic credential helpers.

Hashing scheme: sha256(password + salt), hex encoded, where the salt is
base64 text of random bytes drawn per account. Verification always
re-derives the hash from the stored salt and compares; nothing is ever
decrypted. A slow hash such as bcrypt can replace hash_password and
verify_password without changing any caller.
"""

import base64
import binascii
import hashlib
import hmac
import secrets
from typing import Optional, Tuple

from agentrpg.core.config import settings

SALT_BYTES = settings.salt_bytes


def generate_salt(nbytes: int = SALT_BYTES) -> str:
    """Fresh random salt from the OS CSPRNG, encoded as base64 text."""
    return base64.b64encode(secrets.token_bytes(nbytes)).decode("ascii")


def hash_password(password: str, salt: str) -> str:
    return hashlib.sha256((password + salt).encode("utf-8")).hexdigest()


def verify_password(password: str, salt: str, password_hash: str) -> bool:
    candidate = hash_password(password, salt)
    return hmac.compare_digest(candidate.encode("ascii"), password_hash.encode("ascii", "replace"))


def parse_basic_auth(header: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Split an ``Authorization: Basic ...`` header into (email, password).

    Returns None for a missing header, another scheme, bad base64, or a
    decoded value without a ``:`` separator.
    """
    if not header or not header.startswith("Basic "):
        return None
    try:
        decoded = base64.b64decode(header[len("Basic "):], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    email, sep, password = decoded.partition(":")
    if not sep:
        return None
    return email, password
