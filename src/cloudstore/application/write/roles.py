from __future__ import annotations

from typing import TYPE_CHECKING

from cloudstore.core.errors import CloudStoreError, ErrorCode, session_token_required

if TYPE_CHECKING:  # pragma: no cover
    from cloudstore.application.write.rest_write import RestWrite


async def handle_role(write: "RestWrite") -> None:
    if not write.auth.user and not write.auth.is_master:
        raise session_token_required()
    # updates may leave the name untouched
    if not write.query and not write.data.get("name"):
        raise CloudStoreError(ErrorCode.INVALID_ROLE_NAME, "Invalid role name.")
