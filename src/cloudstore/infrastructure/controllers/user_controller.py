"""
用户控制器：邮箱验证 token 的生成与验证邮件的发送
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional
from urllib.parse import urlencode

from cloudstore.domain.crypto_utils import random_string

if TYPE_CHECKING:  # pragma: no cover
    from cloudstore.application.ports import EmailAdapterPort
    from cloudstore.config.config import Config

logger = logging.getLogger(__name__)

VERIFY_TOKEN_LENGTH = 25


class UserController:
    def __init__(self, config: "Config", adapter: Optional["EmailAdapterPort"] = None):
        self.config = config
        self.adapter = adapter

    @property
    def should_verify_emails(self) -> bool:
        return bool(self.config.verify_user_emails)

    def set_email_verify_token(self, user: Dict[str, Any]) -> None:
        """在保存前为用户写入验证 token，并标记邮箱未验证"""
        if not self.should_verify_emails:
            return
        user["_email_verify_token"] = random_string(VERIFY_TOKEN_LENGTH)
        user["emailVerified"] = False

    def verification_link(self, user: Dict[str, Any]) -> str:
        query = urlencode({"token": user.get("_email_verify_token", ""), "username": user.get("username", "")})
        return f"{self.config.verify_email_url}?{query}"

    async def send_verification_email(self, user: Dict[str, Any]) -> None:
        if not self.should_verify_emails or self.adapter is None:
            return
        email = user.get("email")
        if not email or not user.get("_email_verify_token"):
            logger.debug("skip verification email: no address or token")
            return
        app_name = self.config.app_name or "your app"
        text = (
            f"Hi,\n\nYou are being asked to confirm the e-mail address {email} with {app_name}\n\n"
            f"Click here to confirm it:\n{self.verification_link(user)}"
        )
        await self.adapter.send_mail(email, f"Please verify your e-mail for {app_name}", text)
        logger.info("verification email queued for %s", email)
