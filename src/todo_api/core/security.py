"""访问令牌签发与校验工具。"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from jwt import (
    DecodeError,
    ExpiredSignatureError,
    ImmatureSignatureError,
    InvalidAlgorithmError,
    InvalidIssuedAtError,
    InvalidTokenError,
    MissingRequiredClaimError,
)
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaValidationError

from todo_api.core.config import HMAC_ALGORITHMS

# 令牌中必须出现的声明。
REQUIRED_CLAIMS = ("uid", "iat", "exp")

# 已注册的 JWS 算法名。头部声明其中的非 HMAC 算法才算算法错误，
# 其余无法识别的取值说明头部被改动，按签名错误处理。
JWS_ALGORITHMS = frozenset(
    {
        "none",
        "HS256",
        "HS384",
        "HS512",
        "RS256",
        "RS384",
        "RS512",
        "ES256",
        "ES256K",
        "ES384",
        "ES512",
        "PS256",
        "PS384",
        "PS512",
        "EdDSA",
    }
)


class TokenError(Exception):
    """令牌校验失败基类。"""

    reason = "invalid_token"


class TokenSignatureError(TokenError):
    """签名不匹配或令牌结构无法解码。"""

    reason = "invalid_signature"


class TokenAlgorithmError(TokenError):
    """令牌声明的签名算法不在允许范围内。"""

    reason = "unexpected_algorithm"


class TokenExpiredError(TokenError):
    """令牌已过期。"""

    reason = "token_expired"


class TokenClaimsError(TokenError):
    """声明缺失或类型不符。"""

    reason = "invalid_claims"


def _advertised_algorithm(token: str) -> str | None:
    """读取未经校验的头部 `alg`，头部无法解析时返回 None。"""
    try:
        algorithm = jwt.get_unverified_header(token).get("alg")
    except InvalidTokenError:
        return None
    return algorithm if isinstance(algorithm, str) else None


class TokenClaims(BaseModel):
    """令牌载荷结构，主体 ID 直接按整数解码。"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # 主体用户 ID。
    uid: int = Field(strict=True, ge=1)
    # 签发时间（Unix 秒）。
    iat: int = Field(strict=True)
    # 过期时间（Unix 秒）。
    exp: int = Field(strict=True)


@dataclass(frozen=True)
class RequestIdentity:
    """已通过令牌校验的调用方身份。

    路由层显式声明该参数获取当前用户，不从请求上下文中做无类型查找。
    """

    # 令牌中的主体用户 ID。
    user_id: int


@dataclass(frozen=True)
class IssuedToken:
    """签发结果。"""

    token: str
    subject_id: int
    issued_at: datetime
    expires_at: datetime

    @property
    def expires_in(self) -> int:
        """距过期剩余秒数。"""
        return max(0, int((self.expires_at - datetime.now(timezone.utc)).total_seconds()))


class TokenCodec:
    """无状态访问令牌编解码器。

    密钥与有效期在构造时注入，之后只读；校验只依赖签名与过期时间，
    不查询数据库。
    """

    def __init__(
        self,
        secret: str,
        ttl: timedelta,
        *,
        algorithm: str = "HS256",
        leeway_seconds: int = 0,
    ) -> None:
        if not secret:
            raise ValueError("token signing secret is required")
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"unsupported signing algorithm: {algorithm}")
        self._secret = secret
        self.ttl = ttl
        self.algorithm = algorithm
        self.leeway_seconds = leeway_seconds

    def __repr__(self) -> str:
        return f"TokenCodec(algorithm={self.algorithm!r}, ttl={self.ttl!r})"

    def issue(self, subject_id: int, ttl: timedelta | None = None) -> IssuedToken:
        """签发访问令牌，`ttl` 缺省时使用构造时的有效期。"""
        now = datetime.now(timezone.utc).replace(microsecond=0)
        expires_at = now + (self.ttl if ttl is None else ttl)
        claims = {
            "uid": subject_id,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self._secret, algorithm=self.algorithm)
        return IssuedToken(token=token, subject_id=subject_id, issued_at=now, expires_at=expires_at)

    def decode(self, token: str) -> TokenClaims:
        """校验签名、算法与过期时间，并按固定结构解码声明。"""
        try:
            payload = jwt.decode(
                token,
                key=self._secret,
                # 只接受 HMAC 系列，防止算法混淆。
                algorithms=list(HMAC_ALGORITHMS),
                leeway=self.leeway_seconds,
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except InvalidAlgorithmError as exc:
            if _advertised_algorithm(token) in JWS_ALGORITHMS:
                raise TokenAlgorithmError(str(exc)) from exc
            raise TokenSignatureError(str(exc)) from exc
        except ExpiredSignatureError as exc:
            raise TokenExpiredError(str(exc)) from exc
        except (MissingRequiredClaimError, InvalidIssuedAtError, ImmatureSignatureError) as exc:
            raise TokenClaimsError(str(exc)) from exc
        except DecodeError as exc:
            raise TokenSignatureError(str(exc)) from exc
        except InvalidTokenError as exc:
            raise TokenError(str(exc)) from exc

        try:
            return TokenClaims.model_validate(payload)
        except SchemaValidationError as exc:
            raise TokenClaimsError("token claims do not match the expected schema") from exc

    def verify(self, token: str) -> int:
        """校验令牌并返回主体用户 ID。"""
        return self.decode(token).uid


class MissingAuthorizationHeader(Exception):
    """请求未携带 Authorization 头。"""


class MalformedAuthorizationHeader(Exception):
    """Authorization 头不是 `Bearer <token>` 格式。"""


def extract_bearer_token(authorization: str | None) -> str:
    """从 Authorization 头中提取 Bearer 凭据。

    头部必须恰好是 `Bearer <token>` 两段，否则视为格式错误。
    """
    if not authorization:
        raise MissingAuthorizationHeader
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise MalformedAuthorizationHeader
    return parts[1]
