"""
REST 入口：create / update。

update 在类注册了保存触发器时先加载原对象，供触发器比较新旧值。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from cloudstore.application.triggers import TriggerType
from cloudstore.application.write import WriteResult, run_write
from cloudstore.core.errors import CloudStoreError, ErrorCode
from cloudstore.domain.auth import Auth

if TYPE_CHECKING:  # pragma: no cover
    from cloudstore.config.config import Config

logger = logging.getLogger(__name__)


def _require_valid(config: "Config") -> None:
    if not config.is_valid or config.database is None:
        raise CloudStoreError(ErrorCode.INTERNAL_SERVER_ERROR, "Invalid application configuration.")


async def create(config: "Config", auth: Auth, class_name: str, data: Dict[str, Any]) -> Optional[WriteResult]:
    _require_valid(config)
    return await run_write(config, auth, class_name, None, data)


async def update(
    config: "Config", auth: Auth, class_name: str, object_id: str, data: Dict[str, Any]
) -> Optional[WriteResult]:
    _require_valid(config)
    original: Optional[Dict[str, Any]] = None
    registry = config.triggers
    if registry is not None and (
        registry.trigger_exists(class_name, TriggerType.before_save, config.application_id)
        or registry.trigger_exists(class_name, TriggerType.after_save, config.application_id)
    ):
        options = {} if auth.is_master else {"acl": ["*"] + ([auth.user_id] if auth.user_id else [])}
        found = await config.database.find(class_name, {"objectId": object_id}, options)
        if found:
            original = found[0]
        else:
            logger.debug("no original %s/%s for triggers", class_name, object_id)
    return await run_write(config, auth, class_name, {"objectId": object_id}, data, original)
