"""
写入编排器：一次 create / update 对应一个 RestWrite。

query 为 None 表示创建；否则更新匹配 query 的对象。RestWrite 负责
objectId / createdAt / updatedAt，以及 _User、_Session、_Installation、
_Role 等系统类的特殊处理和 before/after 触发器。
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from cloudstore.application.triggers import TriggerType, inflate
from cloudstore.application.write import installations, roles, sessions, users
from cloudstore.application.write.result import WriteResult
from cloudstore.core.errors import CloudStoreError, ErrorCode, invalid_key_name
from cloudstore.core.pipeline import Pipeline, PipelineStage
from cloudstore.domain.auth import Auth, master
from cloudstore.domain.crypto_utils import new_object_id
from cloudstore.domain.encoding import (
    INSTALLATION_CLASS,
    PRODUCT_CLASS,
    ROLE_CLASS,
    SESSION_CLASS,
    SYSTEM_CLASSES,
    USER_CLASS,
    strip_internal_fields,
    to_iso,
    user_pointer,
    utcnow,
)

if TYPE_CHECKING:  # pragma: no cover
    from cloudstore.config.config import Config

logger = logging.getLogger(__name__)


class RestWrite:
    def __init__(
        self,
        config: "Config",
        auth: Auth,
        class_name: str,
        query: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        original_data: Optional[Dict[str, Any]] = None,
    ):
        data = data or {}
        if not query and "objectId" in data:
            raise invalid_key_name("objectId is an invalid field name.")

        self.config = config
        self.auth = auth
        self.class_name = class_name
        self.storage: Dict[str, Any] = {}
        self.run_options: Dict[str, Any] = {}
        self.response: Optional[WriteResult] = None

        # 流水线会修改 data，这里操作副本；original_data 只读
        self.query: Optional[Dict[str, Any]] = copy.deepcopy(query) or None
        self.data: Dict[str, Any] = copy.deepcopy(data)
        self.original_data = original_data

        # 整个操作共用的时间戳
        self.updated_at = to_iso(utcnow())

    # ------------------------------------------------------------------ #
    # 执行
    # ------------------------------------------------------------------ #

    def build_pipeline(self) -> Pipeline:
        def is_class(name: str):
            return lambda w: w.class_name != name or w.response is not None

        return (
            Pipeline(f"write:{self.class_name}")
            .add_stage(PipelineStage("get_user_and_role_acl", RestWrite.get_user_and_role_acl))
            .add_stage(PipelineStage("validate_client_class_creation", RestWrite.validate_client_class_creation))
            .add_stage(PipelineStage("validate_schema", RestWrite.validate_schema))
            .add_stage(
                PipelineStage("handle_installation", installations.handle_installation, skip_if=is_class(INSTALLATION_CLASS))
            )
            .add_stage(PipelineStage("handle_session", sessions.handle_session, skip_if=is_class(SESSION_CLASS)))
            .add_stage(PipelineStage("handle_role", roles.handle_role, skip_if=is_class(ROLE_CLASS)))
            .add_stage(
                PipelineStage("validate_auth_data", users.validate_auth_data, skip_if=lambda w: w.class_name != USER_CLASS)
            )
            .add_stage(
                PipelineStage("run_before_trigger", RestWrite.run_before_trigger, skip_if=lambda w: w.response is not None)
            )
            .add_stage(PipelineStage("set_required_fields_if_needed", RestWrite.set_required_fields_if_needed))
            .add_stage(PipelineStage("transform_user", users.transform_user, skip_if=lambda w: w.class_name != USER_CLASS))
            .add_stage(PipelineStage("expand_files_for_existing_objects", RestWrite.expand_files_for_existing_objects))
            .add_stage(
                PipelineStage(
                    "run_database_operation", RestWrite.run_database_operation, skip_if=lambda w: w.response is not None
                )
            )
            .add_stage(PipelineStage("handle_followup", RestWrite.handle_followup))
            .add_stage(PipelineStage("run_after_trigger", RestWrite.run_after_trigger))
        )

    async def execute(self) -> Optional[WriteResult]:
        result = await self.build_pipeline().run(self)
        result.raise_for_error()
        logger.debug("write %s %s done via %s", self.class_name, self.object_id(), result.stage_names)
        return self.response

    async def run_nested(self, class_name: str, data: Dict[str, Any]) -> Optional[WriteResult]:
        """以 master 身份执行一次独立的嵌套创建（例如签发会话）"""
        return await run_write(self.config, master(self.config), class_name, None, data)

    # ------------------------------------------------------------------ #
    # 阶段
    # ------------------------------------------------------------------ #

    async def get_user_and_role_acl(self) -> None:
        if self.auth.is_master:
            return
        acl = ["*"]
        if self.auth.user:
            acl.extend(await self.auth.get_user_roles())
            acl.append(self.auth.user_id)
        self.run_options["acl"] = acl

    async def validate_client_class_creation(self) -> None:
        if self.config.allow_client_class_creation is not False:
            return
        if self.auth.is_master or self.class_name in SYSTEM_CLASSES:
            return
        if await self.config.database.collection_exists(self.class_name):
            return
        raise CloudStoreError(
            ErrorCode.OPERATION_FORBIDDEN,
            f"This user is not allowed to access non-existent class: {self.class_name}",
        )

    async def validate_schema(self) -> None:
        await self.config.database.validate_object(self.class_name, self.data, self.query, self.run_options)

    def _trigger_extra(self) -> Dict[str, Any]:
        extra: Dict[str, Any] = {"className": self.class_name}
        if self.query and self.query.get("objectId"):
            extra["objectId"] = self.query["objectId"]
        return extra

    def _has_trigger(self, kind: TriggerType) -> bool:
        registry = self.config.triggers
        return registry is not None and registry.trigger_exists(self.class_name, kind, self.config.application_id)

    async def run_before_trigger(self) -> None:
        if not self._has_trigger(TriggerType.before_save):
            return

        extra = self._trigger_extra()
        original = None
        if "objectId" in extra:
            original = inflate(extra, self.original_data)
        updated = inflate(extra, self.original_data)
        updated.set(copy.deepcopy(self.data))

        replacement = await self.config.triggers.maybe_run_trigger(
            TriggerType.before_save, self.auth, updated, original, self.config.application_id
        )
        if replacement is not None:
            self.data = replacement
            self.storage["changed_by_trigger"] = True
            if "objectId" in extra:
                self.data.pop("objectId", None)

    async def set_required_fields_if_needed(self) -> None:
        self.data["updatedAt"] = self.updated_at
        if not self.query:
            self.data["createdAt"] = self.updated_at
            if not self.data.get("objectId"):
                self.data["objectId"] = new_object_id()

    async def expand_files_for_existing_objects(self) -> None:
        # 短路响应不会经过数据库，文件引用需在这里补全
        if self.response is None or self.response.response is None:
            return
        if self.config.files_controller is not None:
            self.config.files_controller.expand_files_in_object(self.config, self.response.response)

    async def run_database_operation(self) -> None:
        if self.class_name == USER_CLASS and self.query and not self.auth.could_update_user_id(self.query.get("objectId")):
            raise CloudStoreError(ErrorCode.SESSION_MISSING, f"cannot modify user {self.query.get('objectId')}")

        if self.class_name == PRODUCT_CLASS and isinstance(self.data.get("download"), dict):
            self.data["downloadName"] = self.data["download"].get("name")

        acl = self.data.get("ACL")
        if isinstance(acl, dict) and acl.get("*unresolved"):
            raise CloudStoreError(ErrorCode.INVALID_ACL, "Invalid ACL.")

        database = self.config.database
        if self.query:
            updated = dict(await database.update(self.class_name, self.query, self.data, self.run_options) or {})
            updated["updatedAt"] = self.updated_at
            self.response = WriteResult(response=updated)
            return

        if not acl and self.class_name == USER_CLASS:
            self.data["ACL"] = {
                self.data["objectId"]: {"read": True, "write": True},
                "*": {"read": True, "write": False},
            }
        await database.create(self.class_name, self.data, self.run_options)

        resp: Dict[str, Any] = {"objectId": self.data["objectId"], "createdAt": self.data["createdAt"]}
        if self.storage.get("changed_by_trigger"):
            resp.update(strip_internal_fields(copy.deepcopy(self.data)))
        if self.storage.get("token"):
            resp["sessionToken"] = self.storage["token"]
        self.response = WriteResult(response=resp, status=201, location=self.location())

    async def handle_followup(self) -> None:
        background = self.config.background
        if self.storage.pop("clear_sessions", False):
            query = {"user": user_pointer(self.object_id())}
            background.spawn(
                self.config.database.destroy(SESSION_CLASS, query),
                name=f"clear-sessions:{self.object_id()}",
            )
        if self.storage.pop("send_verification_email", False) and self.config.user_controller is not None:
            background.spawn(
                self.config.user_controller.send_verification_email(copy.deepcopy(self.data)),
                name=f"verify-email:{self.object_id()}",
            )

    async def run_after_trigger(self) -> None:
        # 不等待触发器执行完成
        if self.response is None or self.response.response is None:
            return
        if not self._has_trigger(TriggerType.after_save):
            return

        extra = self._trigger_extra()
        original = None
        if "objectId" in extra:
            original = inflate(extra, self.original_data)
        updated = inflate(extra, self.original_data)
        updated.set(copy.deepcopy(self.data))
        updated.handle_save_response(self.response.response, self.response.status_code)

        self.config.background.spawn(
            self.config.triggers.maybe_run_trigger(
                TriggerType.after_save, self.auth, updated, original, self.config.application_id
            ),
            name=f"after-save:{self.class_name}",
        )

    # ------------------------------------------------------------------ #
    # 工具
    # ------------------------------------------------------------------ #

    def location(self) -> str:
        middle = "/users/" if self.class_name == USER_CLASS else f"/classes/{self.class_name}/"
        return f"{self.config.mount}{middle}{self.data.get('objectId')}"

    def object_id(self) -> Optional[str]:
        return self.data.get("objectId") or (self.query or {}).get("objectId")


async def run_write(
    config: "Config",
    auth: Auth,
    class_name: str,
    query: Optional[Dict[str, Any]],
    data: Optional[Dict[str, Any]],
    original_data: Optional[Dict[str, Any]] = None,
) -> Optional[WriteResult]:
    return await RestWrite(config, auth, class_name, query, data, original_data).execute()
