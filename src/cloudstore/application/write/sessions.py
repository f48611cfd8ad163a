from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Dict

from cloudstore.application.write.result import WriteResult
from cloudstore.core.errors import CloudStoreError, ErrorCode, invalid_key_name, session_token_required
from cloudstore.domain.crypto_utils import new_session_token
from cloudstore.domain.encoding import SESSION_CLASS, encode_date, one_year_from, user_pointer, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from cloudstore.application.write.rest_write import RestWrite


async def handle_session(write: "RestWrite") -> None:
    """
    Sessions need a signed-in (or master) caller and never take an ACL.

    A client creating its own session gets a restricted one issued by a
    nested master write; master creates and updates go straight through.
    """
    auth = write.auth
    if not auth.user and not auth.is_master:
        raise session_token_required()

    if "ACL" in write.data:
        raise invalid_key_name("Cannot set ACL on a Session.")

    if write.query or auth.is_master:
        return

    session_data: Dict[str, Any] = {
        "sessionToken": new_session_token(),
        "user": user_pointer(auth.user_id),
        "createdWith": {"action": "create"},
        "restricted": True,
        "expiresAt": encode_date(one_year_from(utcnow())),
    }
    for key, value in write.data.items():
        if key == "objectId":
            continue
        session_data[key] = copy.deepcopy(value)

    result = await write.run_nested(SESSION_CLASS, session_data)
    if result is None or not result.response:
        raise CloudStoreError(ErrorCode.INTERNAL_SERVER_ERROR, "Error creating session.")

    session_data["objectId"] = result.response["objectId"]
    write.response = WriteResult(response=session_data, status=201, location=result.location)
