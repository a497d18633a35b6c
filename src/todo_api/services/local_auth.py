"""本地账号注册与登录。

注册与登录成功后都签发新的访问令牌；登录失败不区分“用户不存在”与“密码错误”。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from jwt import PyJWTError

from todo_api.core.errors import ConflictError, InternalError, UnauthorizedError, ValidationError
from todo_api.core.passwords import HashingError, PasswordHasher
from todo_api.core.security import IssuedToken, TokenCodec
from todo_api.models.user import EMAIL_MAX_LENGTH, USERNAME_MAX_LENGTH, USERNAME_MIN_LENGTH, User
from todo_api.repositories.base import CredentialStore, DuplicateIdentityError, StoreError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
INVALID_CREDENTIALS_MESSAGE = "invalid credentials"


@dataclass(frozen=True)
class IssuedIdentity:
    """注册或登录结果。"""

    user: User
    token: IssuedToken


def normalize_email(email: str) -> str:
    """统一邮箱格式，避免大小写与空白导致重复账号。"""
    return email.strip().lower()


def _validate_registration(username: str, email: str) -> None:
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"username should be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters",
            details={"field": "username"},
        )
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError(
            f"email should be at most {EMAIL_MAX_LENGTH} characters",
            details={"field": "email"},
        )
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("email is not valid", details={"field": "email"})


class IdentityIssuer:
    """把已校验的凭据换成新的访问令牌。"""

    def __init__(self, store: CredentialStore, hasher: PasswordHasher, codec: TokenCodec) -> None:
        self.store = store
        self.hasher = hasher
        self.codec = codec

    def register(self, *, username: str, email: str, password: str) -> IssuedIdentity:
        """注册本地账号并签发令牌。"""
        username = username.strip()
        email = normalize_email(email)
        _validate_registration(username, email)
        try:
            self.hasher.check_policy(password)
        except ValueError as exc:
            raise ValidationError(str(exc), details={"field": "password"}) from exc

        try:
            password_hash = self.hasher.hash(password)
        except HashingError as exc:
            logger.exception("password hashing failed during registration")
            raise InternalError() from exc

        try:
            user = self.store.create_identity(username=username, email=email, password_hash=password_hash)
        except DuplicateIdentityError as exc:
            raise ConflictError(
                f"{exc.field or 'username or email'} already registered",
                details={"field": exc.field} if exc.field else None,
            ) from exc
        except StoreError as exc:
            logger.exception("credential store failed during registration")
            raise InternalError() from exc

        logger.info("user registered: user_id=%s", user.id)
        return IssuedIdentity(user=user, token=self._issue(user))

    def login(self, *, email: str, password: str) -> IssuedIdentity:
        """校验邮箱密码并签发令牌。"""
        email = normalize_email(email)
        try:
            user = self.store.find_identity_by_email(email)
        except StoreError as exc:
            logger.exception("credential store failed during login")
            raise InternalError() from exc

        try:
            if user is None:
                # 未知邮箱同样完成一次哈希校验，响应耗时与密码错误一致。
                matched = self.hasher.dummy_verify(password)
            else:
                matched = self.hasher.verify(password, user.password_hash)
        except HashingError as exc:
            logger.exception("stored password hash could not be verified")
            raise InternalError() from exc

        if user is None or not matched:
            logger.info("login rejected")
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        return IssuedIdentity(user=user, token=self._issue(user))

    def _issue(self, user: User) -> IssuedToken:
        try:
            return self.codec.issue(user.id)
        except (PyJWTError, TypeError, ValueError) as exc:
            logger.exception("token signing failed: user_id=%s", user.id)
            raise InternalError() from exc
