"""
Credential hashing.

Passwords are stored as salted bcrypt hashes through Django's hasher
framework. The cost factor comes from settings.PASSWORD_BCRYPT_ROUNDS.
"""
from django.conf import settings
from django.contrib.auth.hashers import (
    BCryptSHA256PasswordHasher,
    check_password,
    make_password,
)


class TunableBCryptPasswordHasher(BCryptSHA256PasswordHasher):
    """bcrypt hasher whose cost factor is read from settings at call time."""

    @property
    def rounds(self):
        return settings.PASSWORD_BCRYPT_ROUNDS


def hash_password(plaintext: str) -> str:
    return make_password(plaintext)


def verify_password(plaintext: str, hashed: str) -> bool:
    """Constant-time compare using the hash algorithm's own check."""
    if not hashed:
        return False
    return check_password(plaintext, hashed)


def burn_password_check(plaintext: str) -> None:
    """
    Run one hash so a login for an unknown email costs the same as a
    login with a wrong password.
    """
    make_password(plaintext)
