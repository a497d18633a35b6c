"""注册与登录请求结构。"""

from pydantic import BaseModel, Field

# 与注册/登录共用的邮箱格式约束。
EMAIL_FIELD_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class AuthRegisterRequest(BaseModel):
    """本地账号注册请求。"""

    username: str = Field(min_length=3, max_length=20, description="登录名。", examples=["alice"])
    email: str = Field(
        min_length=5,
        max_length=100,
        pattern=EMAIL_FIELD_PATTERN,
        description="登录邮箱。",
        examples=["alice@example.com"],
    )
    password: str = Field(min_length=8, max_length=128, description="登录密码。", examples=["StrongPassw0rd!"])


class AuthLoginRequest(BaseModel):
    """本地账号登录请求。"""

    email: str = Field(
        min_length=5,
        max_length=100,
        pattern=EMAIL_FIELD_PATTERN,
        description="登录邮箱。",
        examples=["alice@example.com"],
    )
    password: str = Field(min_length=1, max_length=128, description="登录密码。", examples=["StrongPassw0rd!"])
