"""
云代码使用的出站 HTTP 请求工具

- body 按 Content-Type 编码（JSON / 表单），其他类型原样发送
- 默认不跟随重定向
- 状态码 <200 或 >=400 视为失败
"""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from urllib.parse import parse_qsl, quote

import aiohttp
from aiohttp import ClientTimeout

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
# left unescaped in form values, like encodeURIComponent
FORM_SAFE_CHARS = "!'()*"


@dataclass
class HTTPResponse:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    buffer: bytes = b""
    text: str = ""
    data: Any = None
    cookies: Optional[List[str]] = None


class HTTPResponseError(Exception):
    """非 2xx/3xx 响应；`response` 保留完整的响应对象"""

    def __init__(self, response: HTTPResponse):
        super().__init__(f"HTTP {response.status}")
        self.response = response


def _flatten_headers(raw: Mapping[str, str]) -> Dict[str, str]:
    """重复的响应头合并为逗号分隔的一个值（Set-Cookie 另见 cookies）"""
    merged: Dict[str, str] = {}
    for key, value in raw.items():
        merged[key] = f"{merged[key]}, {value}" if key in merged else value
    return merged


def _content_type(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    matches = [v for k, v in (headers or {}).items() if k.lower() == "content-type"]
    if len(matches) != 1:
        return None
    return str(matches[0])


def encode_body(body: Any, headers: Optional[Mapping[str, str]] = None) -> Any:
    """按请求头编码 body；非 dict/list 直接返回"""
    if not isinstance(body, (dict, list)):
        return body
    content_type = _content_type(headers)
    if content_type is None:
        return body
    lowered = content_type.lower()
    if "application/json" in lowered:
        return json.dumps(body)
    if "application/x-www-form-urlencoded" in lowered and isinstance(body, dict):
        return "&".join(f"{key}={quote(str(value), safe='')}" for key, value in body.items())
    return body


def parse_params(params: Union[None, str, Mapping[str, Any]]) -> Optional[Dict[str, str]]:
    if params is None:
        return None
    if isinstance(params, str):
        return dict(parse_qsl(params.lstrip("?"), keep_blank_values=True))
    return {str(k): str(v) for k, v in params.items()}


async def _call(callback: Optional[Callable[[Any], Any]], value: Any) -> None:
    if callback is None:
        return
    result = callback(value)
    if inspect.isawaitable(result):
        await result


async def http_request(
    options: Dict[str, Any],
    *,
    session: Optional[aiohttp.ClientSession] = None,
) -> HTTPResponse:
    """
    发送一次 HTTP 请求

    Args:
        options: method / url / headers / body / params / follow_redirects /
            success / error
        session: 可选的复用 session；未提供时为本次请求单独创建

    Returns:
        HTTPResponse；失败状态码抛出 HTTPResponseError
    """
    options = dict(options)
    success = options.pop("success", None)
    error = options.pop("error", None)
    options.pop("uri", None)  # 不支持

    method = str(options.get("method") or "GET").upper()
    url = options["url"]
    headers = dict(options.get("headers") or {})
    body = encode_body(options.get("body"), headers)
    params = parse_params(options.get("params"))
    follow_redirects = options.get("follow_redirects") is True

    kwargs: Dict[str, Any] = {
        "headers": headers,
        "params": params,
        "allow_redirects": follow_redirects,
    }
    if isinstance(body, (dict, list)):
        kwargs["json"] = body
    elif body is not None:
        kwargs["data"] = body

    own_session = session is None
    if own_session:
        session = aiohttp.ClientSession(timeout=ClientTimeout(total=DEFAULT_TIMEOUT))
    try:
        async with session.request(method, url, **kwargs) as resp:
            raw = await resp.read()
            response = HTTPResponse(
                status=resp.status,
                headers=_flatten_headers(resp.headers),
                buffer=raw,
                text=raw.decode(resp.charset or "utf-8", errors="replace"),
                cookies=resp.headers.getall("Set-Cookie", None),
            )
    except aiohttp.ClientError as exc:
        logger.warning(f"http_request failed: {method} {url} - {exc}")
        await _call(error, exc)
        raise
    finally:
        if own_session:
            await session.close()

    try:
        response.data = json.loads(response.text)
    except ValueError:
        response.data = None

    if response.status < 200 or response.status >= 400:
        logger.info(f"http_request {method} {url} -> {response.status}")
        await _call(error, response)
        raise HTTPResponseError(response)
    await _call(success, response)
    return response


__all__ = ["HTTPResponse", "HTTPResponseError", "encode_body", "http_request", "parse_params"]
