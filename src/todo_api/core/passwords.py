"""口令哈希与校验。"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets

PBKDF2_ALGORITHM = "pbkdf2_sha256"
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


class HashingError(Exception):
    """哈希计算失败。"""


class MalformedHashError(HashingError):
    """存储的哈希无法解析。"""


class PasswordHasher:
    """PBKDF2-SHA256 口令哈希器。

    输出格式为 `pbkdf2_sha256$<iterations>$<salt_b64>$<digest_b64>`，
    迭代次数随哈希一起保存，调整配置后旧哈希仍可校验。
    """

    def __init__(self, iterations: int = 390000, salt_bytes: int = 16) -> None:
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations
        self.salt_bytes = salt_bytes
        # 未知邮箱登录时用它做一次完整校验，使耗时与密码错误一致。
        self._dummy_hash = self.hash(secrets.token_urlsafe(16))

    def check_policy(self, password: str) -> None:
        """校验口令策略，不满足时抛出 ValueError。"""
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"password should be at least {PASSWORD_MIN_LENGTH} characters")
        if len(password) > PASSWORD_MAX_LENGTH:
            raise ValueError(f"password should be at most {PASSWORD_MAX_LENGTH} characters")

    def hash(self, password: str) -> str:
        """生成加盐口令哈希，同一明文每次结果不同。"""
        try:
            salt = secrets.token_bytes(self.salt_bytes)
            digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, self.iterations)
        except (ValueError, OSError, UnicodeError) as exc:
            raise HashingError("failed to hash password") from exc
        salt_b64 = base64.b64encode(salt).decode("ascii")
        digest_b64 = base64.b64encode(digest).decode("ascii")
        return f"{PBKDF2_ALGORITHM}${self.iterations}${salt_b64}${digest_b64}"

    def verify(self, password: str, password_hash: str) -> bool:
        """校验口令是否匹配，不匹配返回 False，哈希格式非法时抛出 MalformedHashError。"""
        try:
            algorithm, iterations_text, salt_b64, expected_digest_b64 = password_hash.split("$", 3)
            iterations = int(iterations_text)
            salt = base64.b64decode(salt_b64.encode("ascii"), validate=True)
            expected_digest = base64.b64decode(expected_digest_b64.encode("ascii"), validate=True)
        except (ValueError, TypeError, AttributeError, binascii.Error) as exc:
            raise MalformedHashError("stored password hash is malformed") from exc
        if algorithm != PBKDF2_ALGORITHM or iterations < 1 or not salt or not expected_digest:
            raise MalformedHashError("stored password hash is malformed")

        try:
            actual_digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
        except (ValueError, UnicodeError) as exc:
            raise HashingError("failed to hash password") from exc
        return hmac.compare_digest(actual_digest, expected_digest)

    def dummy_verify(self, password: str) -> bool:
        """对内置哈希做一次校验，结果恒为 False。"""
        self.verify(password, self._dummy_hash)
        return False
