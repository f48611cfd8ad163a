"""Password hashing (argon2id)."""

from __future__ import annotations

import asyncio
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_hasher = PasswordHasher()


def hash_password_sync(password: str) -> str:
    return _hasher.hash(password)


def verify_password_sync(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return _hasher.verify(hashed, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


async def hash_password(password: str) -> str:
    # argon2 is CPU bound; keep it off the event loop
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, hash_password_sync, password)


async def verify_password(password: str, hashed: Optional[str]) -> bool:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, verify_password_sync, password, hashed)
