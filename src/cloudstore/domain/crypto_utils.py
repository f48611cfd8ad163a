"""Identifiers and opaque tokens."""

from __future__ import annotations

import secrets
import string

_ALPHANUMERIC = string.ascii_letters + string.digits


def random_string(size: int) -> str:
    """Random alphanumeric string of exactly `size` characters."""
    if size <= 0:
        raise ValueError("size must be positive")
    return "".join(secrets.choice(_ALPHANUMERIC) for _ in range(size))


def random_hex_string(size: int) -> str:
    if size <= 0 or size % 2:
        raise ValueError("size must be a positive even number")
    return secrets.token_hex(size // 2)


def new_object_id() -> str:
    # 10 alphanumerics, the same shape clients expect from the hosted service
    return random_string(10)


def new_token() -> str:
    return random_hex_string(32)


def new_session_token() -> str:
    """Revocable session tokens carry the `r:` prefix."""
    return "r:" + new_token()
