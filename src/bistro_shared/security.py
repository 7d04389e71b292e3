"""
Security helpers for hashing credentials.
"""

from __future__ import annotations

import hashlib
import secrets

HASH_ALGORITHM = "pbkdf2_sha256"
HASH_ITERATIONS = 120_000


def normalize_email(value: str | None) -> str:
    """Normalize emails before storing or looking them up."""
    if not value:
        return ""
    return value.strip().lower()


def _derive(password: str, salt: str, iterations: int) -> str:
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations
    )
    return digest.hex()


def hash_password(password: str) -> str:
    """
    Hash a password with a fresh random salt.

    The stored value is ``algorithm$iterations$salt$digest`` so that the
    iteration count can change without invalidating older hashes.
    """
    if password is None:
        raise ValueError("password must not be None")
    salt = secrets.token_hex(16)
    digest = _derive(password, salt, HASH_ITERATIONS)
    return f"{HASH_ALGORITHM}${HASH_ITERATIONS}${salt}${digest}"


def verify_password(password: str | None, stored_hash: str | None) -> bool:
    """
    Compare a candidate password against the stored hash.
    """
    if not stored_hash or password is None:
        return False
    try:
        algorithm, iterations, salt, digest = stored_hash.split("$", 3)
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != HASH_ALGORITHM:
        return False
    candidate = _derive(password, salt, rounds)
    return secrets.compare_digest(candidate, digest)
