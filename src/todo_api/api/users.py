"""用户注册与登录接口。"""

from fastapi import APIRouter, Depends, Request, status

from todo_api.dependencies import get_identity_issuer
from todo_api.schemas.auth import AuthLoginRequest, AuthRegisterRequest
from todo_api.schemas.common import ErrorResponse, SuccessResponse
from todo_api.schemas.responses import AuthTokenData
from todo_api.services.local_auth import IdentityIssuer, IssuedIdentity
from todo_api.utils.response import success

router = APIRouter(prefix="/users", tags=["users"])


def _auth_view(issued: IssuedIdentity) -> dict:
    user = issued.user
    return {
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "created_at": user.created_at,
        },
        "token": issued.token.token,
        "token_type": "bearer",
        "expires_at": issued.token.expires_at,
        "expires_in": issued.token.expires_in,
    }


@router.post(
    "/register",
    summary="注册本地账号",
    description="创建用户名/邮箱/密码账号，并直接返回 Bearer 访问令牌。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[AuthTokenData],
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def register(
    payload: AuthRegisterRequest,
    request: Request,
    issuer: IdentityIssuer = Depends(get_identity_issuer),
):
    """注册本地账号并签发令牌。"""
    issued = issuer.register(username=payload.username, email=payload.email, password=payload.password)
    return success(request, _auth_view(issued))


@router.post(
    "/login",
    summary="本地账号登录",
    description="使用邮箱密码登录，返回 Bearer 访问令牌。邮箱不存在与密码错误返回相同结果。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AuthTokenData],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def login(
    payload: AuthLoginRequest,
    request: Request,
    issuer: IdentityIssuer = Depends(get_identity_issuer),
):
    """本地账号登录并签发访问令牌。"""
    issued = issuer.login(email=payload.email, password=payload.password)
    return success(request, _auth_view(issued))
