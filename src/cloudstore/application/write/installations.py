"""
_Installation 写入的去重与合并。

一台设备可能先后以 deviceToken、installationId 或两者注册。写入前先查出
按 installationId 命中的行（idMatch）和按 deviceToken 命中的所有行，再由
resolve_installation 这张决策表决定：新建、并入已有行，或清理过期行。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from cloudstore.core.errors import CloudStoreError, ErrorCode
from cloudstore.domain.encoding import INSTALLATION_CLASS

if TYPE_CHECKING:  # pragma: no cover
    from cloudstore.application.write.rest_write import RestWrite

logger = logging.getLogger(__name__)

IOS_TOKEN_LENGTH = 64


@dataclass(frozen=True)
class InstallationFacts:
    """决策所需的全部输入（均为快照，不含数据库句柄）"""

    id_match: Optional[Dict[str, Any]]
    device_token_matches: Sequence[Dict[str, Any]]
    installation_id: Optional[str] = None
    device_token: Optional[str] = None
    app_identifier: Optional[str] = None


@dataclass
class InstallationDecision:
    # 需要转为更新的目标 objectId；None 表示按新建处理
    object_id: Optional[str] = None
    # 合并时必须先删除的行（需等待）
    merge_delete: Optional[Dict[str, Any]] = None
    # 过期行清理（后台执行）
    cleanup: List[Dict[str, Any]] = field(default_factory=list)


def _stale_token_query(facts: InstallationFacts) -> Dict[str, Any]:
    query: Dict[str, Any] = {
        "deviceToken": facts.device_token,
        "installationId": {"$ne": facts.installation_id},
    }
    if facts.app_identifier:
        query["appIdentifier"] = facts.app_identifier
    return query


def resolve_installation(facts: InstallationFacts) -> InstallationDecision:
    """
    决策表

    无 idMatch:
        - 无 token 命中                               -> 新建
        - 单个 token 命中，且任一方缺 installationId   -> 并入该命中行
        - 多个 token 命中，且请求缺 installationId     -> 132 错误
        - 其他                                        -> 清理 token 过期行后新建
    有 idMatch:
        - 单个 token 命中且该行无 installationId       -> 删除 idMatch，并入 token 行
        - 其他                                        -> （token 变化时清理过期行）并入 idMatch
    """
    matches = list(facts.device_token_matches)

    if facts.id_match is None:
        if not matches:
            return InstallationDecision()
        if len(matches) == 1 and (not matches[0].get("installationId") or not facts.installation_id):
            return InstallationDecision(object_id=matches[0].get("objectId"))
        if not facts.installation_id:
            raise CloudStoreError(
                ErrorCode.INVALID_INSTALLATION_ID,
                "Must specify installationId when deviceToken matches multiple Installation objects",
            )
        return InstallationDecision(cleanup=[_stale_token_query(facts)])

    if len(matches) == 1 and not matches[0].get("installationId"):
        return InstallationDecision(
            object_id=matches[0].get("objectId"),
            merge_delete={"objectId": facts.id_match.get("objectId")},
        )

    cleanup = []
    if facts.device_token and facts.id_match.get("deviceToken") != facts.device_token:
        cleanup.append(_stale_token_query(facts))
    return InstallationDecision(object_id=facts.id_match.get("objectId"), cleanup=cleanup)


def _normalize(data: Dict[str, Any]) -> None:
    token = data.get("deviceToken")
    # 64 位 token 视为 iOS，统一小写
    if isinstance(token, str) and len(token) == IOS_TOKEN_LENGTH:
        data["deviceToken"] = token.lower()
    installation_id = data.get("installationId")
    if isinstance(installation_id, str):
        data["installationId"] = installation_id.lower()


def _check_immutable(data: Dict[str, Any], existing: Dict[str, Any]) -> None:
    if data.get("installationId") and existing.get("installationId") and data["installationId"] != existing["installationId"]:
        raise CloudStoreError(ErrorCode.CHANGED_IMMUTABLE_FIELD, "installationId may not be changed in this operation")
    if (
        data.get("deviceToken")
        and existing.get("deviceToken")
        and data["deviceToken"] != existing["deviceToken"]
        and not data.get("installationId")
        and not existing.get("installationId")
    ):
        raise CloudStoreError(ErrorCode.CHANGED_IMMUTABLE_FIELD, "deviceToken may not be changed in this operation")
    if data.get("deviceType") and data["deviceType"] != existing.get("deviceType"):
        raise CloudStoreError(ErrorCode.CHANGED_IMMUTABLE_FIELD, "deviceType may not be changed in this operation")


async def handle_installation(write: "RestWrite") -> None:
    data = write.data
    database = write.config.database

    if not write.query:
        if not data.get("deviceToken") and not data.get("installationId"):
            raise CloudStoreError(
                ErrorCode.MISSING_REQUIRED_FIELD,
                "at least one ID field (deviceToken, installationId) must be specified in this operation",
            )
        if not data.get("deviceType"):
            raise CloudStoreError(ErrorCode.MISSING_REQUIRED_FIELD, "deviceType must be specified in this operation")

    _normalize(data)

    id_match: Optional[Dict[str, Any]] = None
    if write.query and write.query.get("objectId"):
        found = await database.find(INSTALLATION_CLASS, {"objectId": write.query["objectId"]}, {})
        if not found:
            raise CloudStoreError(ErrorCode.OBJECT_NOT_FOUND, "Object not found for update.")
        id_match = found[0]
        _check_immutable(data, id_match)

    if data.get("installationId"):
        found = await database.find(INSTALLATION_CLASS, {"installationId": data["installationId"]}, {})
        if found:
            # 只取第一条
            id_match = found[0]

    token_matches: List[Dict[str, Any]] = []
    if data.get("deviceToken"):
        token_matches = await database.find(INSTALLATION_CLASS, {"deviceToken": data["deviceToken"]}, {})

    decision = resolve_installation(
        InstallationFacts(
            id_match=id_match,
            device_token_matches=token_matches,
            installation_id=data.get("installationId"),
            device_token=data.get("deviceToken"),
            app_identifier=data.get("appIdentifier"),
        )
    )

    for query in decision.cleanup:
        write.config.background.spawn(
            database.destroy(INSTALLATION_CLASS, query),
            name="installation-cleanup",
        )
    if decision.merge_delete is not None:
        await database.destroy(INSTALLATION_CLASS, decision.merge_delete)
        logger.info("merged installation %s into %s", decision.merge_delete.get("objectId"), decision.object_id)

    if decision.object_id:
        write.query = {"objectId": decision.object_id}
        data.pop("objectId", None)
        data.pop("createdAt", None)
