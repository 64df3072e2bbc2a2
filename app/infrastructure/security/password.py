"""Password hashing for user accounts (bcrypt over a SHA-256 pre-hash).

bcrypt only reads the first 72 bytes of its input; hashing the password with
SHA-256 first (base64-encoded, 44 bytes) keeps long passphrases significant.
"""

import base64
import hashlib

import bcrypt

BCRYPT_ROUNDS = 12


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def get_password_hash(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Return the bcrypt hash to store for password."""
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if plain_password matches the stored hash; False for malformed hashes."""
    try:
        return bool(
            bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8"))
        )
    except (ValueError, TypeError):
        return False
