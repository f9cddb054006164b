"""Password hashing for admin and user credentials."""

from __future__ import annotations

import base64
import hashlib
import hmac
import os


PBKDF2_ROUNDS = 260_000
_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str) -> str:
    """Hash password with PBKDF2-SHA256 and a random salt."""

    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ROUNDS)
    salt_b64 = base64.b64encode(salt).decode("ascii")
    digest_b64 = base64.b64encode(digest).decode("ascii")
    return f"{_ALGORITHM}${PBKDF2_ROUNDS}${salt_b64}${digest_b64}"


def verify_password(password: str, encoded_hash: str | None) -> bool:
    """Constant-time check of a password against a stored PBKDF2 hash."""

    if not encoded_hash:
        return False
    try:
        algorithm, rounds_str, salt_b64, digest_b64 = encoded_hash.split("$", 3)
        rounds = int(rounds_str)
        salt = base64.b64decode(salt_b64.encode("ascii"))
        expected = base64.b64decode(digest_b64.encode("ascii"))
    except (ValueError, TypeError):
        return False
    if algorithm != _ALGORITHM:
        return False

    observed = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(observed, expected)
