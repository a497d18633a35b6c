"""用户身份模型。"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.models.base import Record

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
EMAIL_MAX_LENGTH = 100


class User(Record):
    """本地账号，任务的唯一归属主体。"""

    __tablename__ = "users"

    # 登录名，全局唯一。
    username: Mapped[str] = mapped_column(String(USERNAME_MAX_LENGTH), nullable=False, unique=True)
    # 登录邮箱，全局唯一。
    email: Mapped[str] = mapped_column(String(EMAIL_MAX_LENGTH), nullable=False, unique=True)
    # 口令哈希，不存明文。
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
