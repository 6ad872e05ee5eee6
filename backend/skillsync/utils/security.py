"""Password hashing and bearer token generation for the built-in identity provider."""
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

password_hasher = PasswordHasher(time_cost=3, memory_cost=65536, parallelism=4)


def hash_password(password: str) -> str:
    return password_hasher.hash(password)


def verify_password(stored_hash: str, password: str) -> bool:
    try:
        return password_hasher.verify(stored_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def password_needs_rehash(stored_hash: str) -> bool:
    # True when the stored hash was made with weaker parameters than the current hasher
    return password_hasher.check_needs_rehash(stored_hash)


def generate_token() -> str:
    return secrets.token_urlsafe(32)
