"""
Generic object writes: /classes/{class_name}
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from cloudstore.application import rest
from cloudstore.api.deps import RequestContext, request_context
from cloudstore.api.responses import write_response

router = APIRouter()


@router.post("/classes/{class_name}")
async def create_object(
    class_name: str,
    body: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(request_context),
):
    result = await rest.create(ctx.config, ctx.auth, class_name, body)
    return write_response(result)


@router.put("/classes/{class_name}/{object_id}")
async def update_object(
    class_name: str,
    object_id: str,
    body: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(request_context),
):
    result = await rest.update(ctx.config, ctx.auth, class_name, object_id, body)
    return write_response(result)
