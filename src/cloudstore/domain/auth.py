"""
Caller identity for a request: master, an authenticated user, or nobody.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from cloudstore.core.errors import CloudStoreError, ErrorCode
from cloudstore.domain.encoding import ROLE_CLASS, SESSION_CLASS, USER_CLASS, decode_date, strip_internal_fields, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from cloudstore.config.config import Config

logger = logging.getLogger(__name__)


@dataclass
class Auth:
    config: Optional["Config"] = None
    is_master: bool = False
    user: Optional[Dict[str, Any]] = None
    installation_id: Optional[str] = None
    _roles: Optional[List[str]] = field(default=None, repr=False)

    @property
    def user_id(self) -> Optional[str]:
        if not self.user:
            return None
        return self.user.get("objectId")

    def could_update_user_id(self, user_id: Optional[str]) -> bool:
        if self.is_master:
            return True
        return bool(self.user_id) and self.user_id == user_id

    async def get_user_roles(self) -> List[str]:
        """Role names (`role:<name>`) the user holds, directly or through parent roles."""
        if self.is_master or not self.user_id or self.config is None or self.config.database is None:
            return []
        if self._roles is None:
            self._roles = await self._load_roles()
        return list(self._roles)

    async def _load_roles(self) -> List[str]:
        database = self.config.database
        found: Dict[str, str] = {}
        frontier = await database.find(ROLE_CLASS, {"users": self.user_id}, {})
        while frontier:
            new_ids = []
            for role in frontier:
                role_id = role.get("objectId")
                if role_id and role_id not in found:
                    found[role_id] = role.get("name", "")
                    new_ids.append(role_id)
            if not new_ids:
                break
            # roles listing a found role as a child are inherited as well
            frontier = await database.find(ROLE_CLASS, {"roles": {"$in": new_ids}}, {})
        roles = [f"role:{name}" for name in found.values() if name]
        logger.debug("resolved %d roles for user %s", len(roles), self.user_id)
        return roles


def master(config: Optional["Config"]) -> Auth:
    return Auth(config=config, is_master=True)


def nobody(config: Optional["Config"]) -> Auth:
    return Auth(config=config, is_master=False)


async def get_auth_for_session_token(
    config: "Config", session_token: str, installation_id: Optional[str] = None
) -> Auth:
    """Resolve a session token into an Auth bound to that session's user."""
    invalid = CloudStoreError(ErrorCode.INVALID_SESSION_TOKEN, "invalid session token")
    sessions = await config.database.find(SESSION_CLASS, {"sessionToken": session_token}, {"limit": 1})
    if not sessions:
        raise invalid
    session = sessions[0]

    expires_at = decode_date(session.get("expiresAt"))
    if expires_at is not None and expires_at < utcnow():
        raise CloudStoreError(ErrorCode.INVALID_SESSION_TOKEN, "Session token is expired.")

    user_ref = session.get("user") or {}
    user_id = user_ref.get("objectId") if isinstance(user_ref, dict) else None
    if not user_id:
        raise invalid
    users = await config.database.find(USER_CLASS, {"objectId": user_id}, {"limit": 1})
    if not users:
        raise invalid

    user = strip_internal_fields(dict(users[0]))
    user["sessionToken"] = session_token
    return Auth(config=config, is_master=False, user=user, installation_id=installation_id)
