"""
Third-party auth provider validators.

A validator receives the provider's auth payload (`{"id": ..., ...}`) and
raises when the credential does not check out. Sync and async validators are
both accepted.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from cloudstore.core.errors import CloudStoreError, ErrorCode

logger = logging.getLogger(__name__)

Validator = Callable[[Dict[str, Any]], Any]


async def validate_anonymous(auth_data: Dict[str, Any]) -> None:
    # anonymous users only need a client-chosen id
    if not auth_data.get("id"):
        raise CloudStoreError(ErrorCode.UNSUPPORTED_SERVICE, "anonymous auth data needs an id")


class AuthDataManager:
    def __init__(self, providers: Optional[Dict[str, Validator]] = None, *, enable_anonymous_users: bool = True):
        self._validators: Dict[str, Validator] = {}
        if enable_anonymous_users:
            self.register("anonymous", validate_anonymous)
        for name, validator in (providers or {}).items():
            self.register(name, validator)

    def register(self, provider: str, validator: Validator) -> None:
        self._validators[provider] = validator

    def providers(self) -> list[str]:
        return sorted(self._validators)

    def get_validator_for_provider(self, provider: str) -> Optional[Callable[[Dict[str, Any]], Awaitable[None]]]:
        validator = self._validators.get(provider)
        if validator is None:
            return None

        async def _run(auth_data: Dict[str, Any]) -> None:
            result = validator(auth_data)
            if inspect.isawaitable(result):
                result = await result
            if result is False:
                logger.info("auth data rejected by provider %s", provider)
                raise CloudStoreError(ErrorCode.UNSUPPORTED_SERVICE, f"{provider} auth is invalid for this user.")

        return _run
