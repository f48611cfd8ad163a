from __future__ import annotations

from typing import Optional

from fastapi.responses import JSONResponse

from cloudstore.application.write import WriteResult
from cloudstore.core.errors import CloudStoreError, ErrorCode

_STATUS_BY_CODE = {
    ErrorCode.OBJECT_NOT_FOUND: 404,
    ErrorCode.OPERATION_FORBIDDEN: 403,
    ErrorCode.INTERNAL_SERVER_ERROR: 500,
}


def http_status_for(error: CloudStoreError) -> int:
    try:
        return _STATUS_BY_CODE.get(ErrorCode(error.code), 400)
    except ValueError:
        return 400


def error_response(error: CloudStoreError) -> JSONResponse:
    return JSONResponse(status_code=http_status_for(error), content=error.to_dict())


def write_response(result: Optional[WriteResult]) -> JSONResponse:
    if result is None:
        return JSONResponse(status_code=200, content={})
    headers = {"Location": result.location} if result.location else None
    return JSONResponse(status_code=result.status_code, content=result.response or {}, headers=headers)
