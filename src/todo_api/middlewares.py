"""请求级中间件：追踪 ID、耗时与访问日志。"""

import logging
import re
import uuid
from time import perf_counter

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"
# 只沿用形如 UUID/短标识的上游追踪 ID，其余情况重新生成。
_INBOUND_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{8,64}$")


def _resolve_request_id(request: Request) -> str:
    inbound = request.headers.get(REQUEST_ID_HEADER)
    if inbound and _INBOUND_REQUEST_ID.match(inbound):
        return inbound
    return uuid.uuid4().hex


async def request_context_middleware(request: Request, call_next):
    """写入请求 ID 与开始时间，响应后记录访问日志。

    日志里只记录用户 ID，不记录 Authorization 头。
    """
    request_id = _resolve_request_id(request)
    request.state.request_id = request_id
    request.state.request_started_at = perf_counter()

    response = await call_next(request)

    elapsed_ms = round((perf_counter() - request.state.request_started_at) * 1000, 2)
    response.headers[REQUEST_ID_HEADER] = request_id
    response.headers["X-Process-Time-Ms"] = str(elapsed_ms)

    identity = getattr(request.state, "identity", None)
    logger.info(
        "%s %s %s %.2fms request_id=%s user_id=%s",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request_id,
        identity.user_id if identity else "-",
    )
    return response


def register_middlewares(app: FastAPI) -> None:
    app.middleware("http")(request_context_middleware)
