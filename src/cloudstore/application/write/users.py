"""
_User 写入的特殊处理：第三方 authData 关联/登录、密码哈希、
用户名与邮箱唯一性、新账号的会话签发。
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING, Any, Dict, List

from cloudstore.application.write.result import WriteResult
from cloudstore.core.errors import CloudStoreError, ErrorCode, account_already_linked, unsupported_service
from cloudstore.domain.crypto_utils import new_session_token, new_token, random_string
from cloudstore.domain.encoding import (
    SESSION_CLASS,
    USER_CLASS,
    encode_date,
    one_year_from,
    strip_internal_fields,
    user_pointer,
    utcnow,
)
from cloudstore.domain.password import hash_password

if TYPE_CHECKING:  # pragma: no cover
    from cloudstore.application.write.rest_write import RestWrite

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r".+@.+")
RANDOM_USERNAME_LENGTH = 25


# ---------------------------------------------------------------------- #
# authData
# ---------------------------------------------------------------------- #


async def validate_auth_data(write: "RestWrite") -> None:
    data = write.data
    if not write.query and not data.get("authData"):
        if not isinstance(data.get("username"), str):
            raise CloudStoreError(ErrorCode.USERNAME_MISSING, "bad or missing username")
        if not isinstance(data.get("password"), str):
            raise CloudStoreError(ErrorCode.PASSWORD_MISSING, "password is required")

    auth_data = data.get("authData")
    if not auth_data:
        return
    if not isinstance(auth_data, dict):
        raise unsupported_service()

    # 每个 provider 要么带 id，要么显式为 null（解除关联）
    for provider_data in auth_data.values():
        if provider_data is None:
            continue
        if not isinstance(provider_data, dict) or not provider_data.get("id"):
            raise unsupported_service()

    await handle_auth_data(write, auth_data)


async def _validate_providers(write: "RestWrite", auth_data: Dict[str, Any]) -> None:
    manager = write.config.auth_data_manager
    validations = []
    for provider, provider_data in auth_data.items():
        if provider_data is None:
            continue
        validator = manager.get_validator_for_provider(provider) if manager is not None else None
        if validator is None:
            raise unsupported_service()
        validations.append(validator(provider_data))
    if validations:
        await asyncio.gather(*validations)


async def find_users_with_auth_data(write: "RestWrite", auth_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    clauses = [
        {f"authData.{provider}.id": provider_data["id"]}
        for provider, provider_data in auth_data.items()
        if provider_data
    ]
    if not clauses:
        return []
    return await write.config.database.find(USER_CLASS, {"$or": clauses}, {})


async def handle_auth_data(write: "RestWrite", auth_data: Dict[str, Any]) -> None:
    await _validate_providers(write, auth_data)
    results = await find_users_with_auth_data(write, auth_data)
    if len(results) > 1:
        raise account_already_linked()

    write.storage["auth_provider"] = ",".join(auth_data.keys())

    if not results:
        if not write.query:
            write.data["username"] = new_token()
        return

    match = results[0]
    if not write.query:
        # 已关联过的第三方账号：按登录处理，直接短路返回该用户
        user = strip_internal_fields(dict(match))
        write.data["objectId"] = user["objectId"]
        write.response = WriteResult(response=user, location=write.location())
        logger.info("auth data login for user %s via %s", user["objectId"], write.storage["auth_provider"])
        return

    if match.get("objectId") != write.query.get("objectId"):
        raise account_already_linked()


# ---------------------------------------------------------------------- #
# 密码 / 用户名 / 邮箱
# ---------------------------------------------------------------------- #


async def _issue_login_session(write: "RestWrite") -> None:
    token = new_session_token()
    write.storage["token"] = token
    session_data: Dict[str, Any] = {
        "sessionToken": token,
        "user": user_pointer(write.object_id()),
        "createdWith": {
            "action": "login",
            "authProvider": write.storage.get("auth_provider") or "password",
        },
        "restricted": False,
        "expiresAt": encode_date(one_year_from(utcnow())),
    }
    if write.data.get("installationId"):
        session_data["installationId"] = write.data["installationId"]
    if write.response is not None and write.response.response is not None:
        write.response.response["sessionToken"] = token
    await write.run_nested(SESSION_CLASS, session_data)


async def _ensure_unique(write: "RestWrite", field: str, code: ErrorCode, message: str) -> None:
    found = await write.config.database.find(
        USER_CLASS,
        {field: write.data[field], "objectId": {"$ne": write.object_id()}},
        {"limit": 1},
    )
    if found:
        raise CloudStoreError(code, message)


async def transform_user(write: "RestWrite") -> None:
    data = write.data

    if not write.query:
        await _issue_login_session(write)

    if data.get("password"):
        if write.query and not write.auth.is_master:
            write.storage["clear_sessions"] = True
        data["_hashed_password"] = await hash_password(str(data.pop("password")))
    else:
        # never store an empty plaintext password
        data.pop("password", None)

    if not data.get("username"):
        if not write.query:
            data["username"] = random_string(RANDOM_USERNAME_LENGTH)
    else:
        await _ensure_unique(write, "username", ErrorCode.USERNAME_TAKEN, "Account already exists for this username")

    email = data.get("email")
    if not email:
        return
    if not isinstance(email, str) or not EMAIL_RE.fullmatch(email):
        raise CloudStoreError(ErrorCode.INVALID_EMAIL_ADDRESS, "Email address format is invalid.")
    await _ensure_unique(write, "email", ErrorCode.EMAIL_TAKEN, "Account already exists for this email address")

    write.storage["send_verification_email"] = True
    if write.config.user_controller is not None:
        write.config.user_controller.set_email_verify_token(data)
