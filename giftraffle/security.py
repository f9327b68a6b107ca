from __future__ import annotations

from passlib.context import CryptContext


# Browsers send SHA-256(passphrase); only its argon2 hash is stored on User.
passkey_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_client_key(client_hash: str) -> str:
    """Hash a user's client-side passkey digest for User.passkey_hash."""
    return passkey_context.hash(client_hash)


def verify_client_key(client_hash: str, stored_hash: str) -> bool:
    """Check a login attempt against the stored passkey hash."""
    return passkey_context.verify(client_hash, stored_hash)
