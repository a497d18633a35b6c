"""响应体组装。

成功：`{request_id, data, meta}`；失败：`{error: {code, message, details}}`。
错误体不带请求 ID、路径与时间戳，同一种失败在任何请求上逐字节一致，
请求 ID 只通过 `X-Request-Id` 响应头返回。
"""

from datetime import datetime, timezone
from time import perf_counter
from typing import Any

from fastapi import Request

DEFAULT_ERROR_MESSAGE = "internal server error"


def _elapsed_ms(request: Request) -> int | None:
    started_at = getattr(request.state, "request_started_at", None)
    if started_at is None:
        return None
    return int((perf_counter() - started_at) * 1000)


def success(request: Request, data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """构造成功响应，`meta` 中的键覆盖默认元信息。"""
    return {
        "request_id": getattr(request.state, "request_id", None),
        "data": data,
        "meta": {
            "method": request.method,
            "path": request.url.path,
            "served_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "process_ms": _elapsed_ms(request),
            **(meta or {}),
        },
    }


def error_payload(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details or {}}}
