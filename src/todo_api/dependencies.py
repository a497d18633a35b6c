"""请求上下文依赖。

职责:
1. 从 Authorization 头提取并校验访问令牌（认证闸门）。
2. 生成后续路由统一使用的 RequestIdentity。
3. 按请求组装存储与认证服务，启动时构建的只读组件从 app.state 注入。
"""

import logging
from collections.abc import Callable, Coroutine
from typing import Any

from fastapi import Depends, Request, Response
from fastapi.routing import APIRoute
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from todo_api.core.config import Settings
from todo_api.core.errors import UnauthorizedError
from todo_api.core.passwords import PasswordHasher
from todo_api.core.security import (
    MalformedAuthorizationHeader,
    MissingAuthorizationHeader,
    RequestIdentity,
    TokenCodec,
    TokenError,
    extract_bearer_token,
)
from todo_api.db.session import get_db
from todo_api.repositories.base import TaskStore
from todo_api.repositories.tasks import SqlTaskStore
from todo_api.repositories.users import SqlUserStore
from todo_api.services.local_auth import IdentityIssuer

logger = logging.getLogger(__name__)

# 读取原始头部值，格式校验由认证闸门自行完成。
authorization_header = APIKeyHeader(name="Authorization", auto_error=False, description="Bearer 访问令牌。")

HEADER_REQUIRED_MESSAGE = "authorization header required"
HEADER_FORMAT_MESSAGE = "invalid authorization header format"
INVALID_TOKEN_MESSAGE = "invalid token"


def get_app_settings(request: Request) -> Settings:
    """返回应用启动时加载的配置。"""
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    """返回应用级令牌编解码器。"""
    return request.app.state.token_codec


def get_password_hasher(request: Request) -> PasswordHasher:
    """返回应用级口令哈希器。"""
    return request.app.state.password_hasher


def authenticate_request(request: Request, authorization: str | None, codec: TokenCodec) -> RequestIdentity:
    """校验 Bearer 令牌并把身份写入请求状态，失败时抛出 401。"""
    try:
        token = extract_bearer_token(authorization)
    except MissingAuthorizationHeader:
        raise UnauthorizedError(HEADER_REQUIRED_MESSAGE) from None
    except MalformedAuthorizationHeader:
        raise UnauthorizedError(HEADER_FORMAT_MESSAGE) from None

    try:
        user_id = codec.verify(token)
    except TokenError as exc:
        logger.info("token rejected: reason=%s path=%s", exc.reason, request.url.path)
        raise UnauthorizedError(INVALID_TOKEN_MESSAGE) from exc

    identity = RequestIdentity(user_id=user_id)
    request.state.identity = identity
    return identity


def get_request_identity(
    request: Request,
    authorization: str | None = Depends(authorization_header),
    codec: TokenCodec = Depends(get_token_codec),
) -> RequestIdentity:
    """认证闸门：校验失败直接返回 401，路由处理函数不会被调用。"""
    identity = getattr(request.state, "identity", None)
    if isinstance(identity, RequestIdentity):
        return identity
    return authenticate_request(request, authorization, codec)


class AuthenticatedRoute(APIRoute):
    """在读取请求体之前执行认证闸门的路由。

    未认证请求即使携带无法解析的请求体也返回 401。
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def gated_handler(request: Request) -> Response:
            authenticate_request(request, request.headers.get("Authorization"), get_token_codec(request))
            return await handler(request)

        return gated_handler


def get_task_store(db: Session = Depends(get_db)) -> TaskStore:
    """按请求会话构造任务存储。"""
    return SqlTaskStore(db)


def get_identity_issuer(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    codec: TokenCodec = Depends(get_token_codec),
) -> IdentityIssuer:
    """按请求会话构造注册/登录服务。"""
    return IdentityIssuer(SqlUserStore(db), hasher, codec)
