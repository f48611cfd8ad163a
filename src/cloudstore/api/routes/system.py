"""
Dedicated endpoints for the system classes (/users, /sessions, ...).
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from cloudstore.application import rest
from cloudstore.api.deps import RequestContext, request_context
from cloudstore.api.responses import write_response
from cloudstore.domain.encoding import INSTALLATION_CLASS, ROLE_CLASS, SESSION_CLASS, USER_CLASS

router = APIRouter()

SYSTEM_ROUTES = {
    "users": USER_CLASS,
    "sessions": SESSION_CLASS,
    "installations": INSTALLATION_CLASS,
    "roles": ROLE_CLASS,
}


def _add_routes(path: str, class_name: str) -> None:
    async def create_system_object(
        body: Dict[str, Any] = Body(...),
        ctx: RequestContext = Depends(request_context),
    ):
        return write_response(await rest.create(ctx.config, ctx.auth, class_name, body))

    async def update_system_object(
        object_id: str,
        body: Dict[str, Any] = Body(...),
        ctx: RequestContext = Depends(request_context),
    ):
        return write_response(await rest.update(ctx.config, ctx.auth, class_name, object_id, body))

    router.add_api_route(f"/{path}", create_system_object, methods=["POST"], name=f"create_{path}")
    router.add_api_route(f"/{path}/{{object_id}}", update_system_object, methods=["PUT"], name=f"update_{path}")


for _path, _class_name in SYSTEM_ROUTES.items():
    _add_routes(_path, _class_name)
