"""
Resolve the per-request Config and Auth from the X-Parse-* headers.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from cloudstore.config.cache import ConfigResolver
from cloudstore.config.config import Config
from cloudstore.core.di import inject
from cloudstore.core.errors import CloudStoreError
from cloudstore.domain.auth import Auth, get_auth_for_session_token, master

logger = logging.getLogger(__name__)


class UnauthorizedError(Exception):
    pass


@dataclass
class RequestContext:
    config: Config
    auth: Auth


@inject(ConfigResolver)
class RequestContextFactory:
    def __init__(self, config_resolver: Optional[ConfigResolver] = None):
        if config_resolver is None:
            raise RuntimeError("ConfigResolver is not registered; call bootstrap_dependencies() first")
        self.config_resolver = config_resolver

    async def build(
        self,
        *,
        mount: str,
        application_id: Optional[str],
        master_key: Optional[str] = None,
        session_token: Optional[str] = None,
        installation_id: Optional[str] = None,
    ) -> RequestContext:
        config = self.config_resolver.resolve(application_id, mount)
        if not config.is_valid:
            raise UnauthorizedError()

        if master_key is not None:
            if not config.master_key or not hmac.compare_digest(master_key, config.master_key):
                raise UnauthorizedError()
            auth = master(config)
            auth.installation_id = installation_id
            return RequestContext(config, auth)

        if session_token:
            try:
                auth = await get_auth_for_session_token(config, session_token, installation_id)
            except CloudStoreError:
                logger.info("rejected session token for app %s", application_id)
                raise
            return RequestContext(config, auth)

        return RequestContext(config, Auth(config=config, installation_id=installation_id))


async def request_context(
    request: Request,
    x_parse_application_id: Optional[str] = Header(None),
    x_parse_master_key: Optional[str] = Header(None),
    x_parse_session_token: Optional[str] = Header(None),
    x_parse_installation_id: Optional[str] = Header(None),
) -> RequestContext:
    factory = RequestContextFactory()
    return await factory.build(
        mount=str(request.base_url).rstrip("/"),
        application_id=x_parse_application_id,
        master_key=x_parse_master_key,
        session_token=x_parse_session_token,
        installation_id=x_parse_installation_id,
    )
