from __future__ import annotations

import secrets

DEFAULT_KEY_LENGTH = 10
MAX_KEY_LENGTH = 64


def generate_join_key(length: int = DEFAULT_KEY_LENGTH) -> str:
    # token_urlsafe yields ~1.3 chars per byte; over-draw then cut
    if not 1 <= length <= MAX_KEY_LENGTH:
        raise ValueError(f"Join key length must be between 1 and {MAX_KEY_LENGTH}.")
    return secrets.token_urlsafe(length)[:length]


def join_keys_match(given: str | None, expected: str) -> bool:
    if not given:
        return False
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))
