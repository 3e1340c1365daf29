"""
Password hashing helpers (bcrypt).

bcrypt only looks at the first 72 bytes of a password and recent releases
reject longer input, so passwords are truncated to 72 UTF-8 bytes on both the
hash and the verify path.
"""

import logging

import bcrypt

from notestash.config import settings

logger = logging.getLogger(__name__)

_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """One-way hash with a fresh salt at the configured cost factor."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("ascii")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored hash. Malformed hashes never match."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_encode(plain_password), hashed_password.encode("ascii"))
    except ValueError:
        logger.warning("Stored password hash is malformed; treating as mismatch")
        return False
