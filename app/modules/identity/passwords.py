"""Password and reset token hashing."""

import hashlib
import hmac
import secrets
import string

RESET_TOKEN_LENGTH = 32
_RESET_ALPHABET = string.ascii_letters + string.digits


def hash_secret(value: str) -> str:
    """Hex sha256 of ``value``; the stored form of passwords and reset tokens."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def verify_secret(value: str, stored_hash: str) -> bool:
    return hmac.compare_digest(hash_secret(value), stored_hash)


def generate_reset_token(length: int = RESET_TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(_RESET_ALPHABET) for _ in range(length))
