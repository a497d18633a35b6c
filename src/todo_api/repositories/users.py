"""基于 SQLAlchemy 的凭据存储。"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from todo_api.models.user import User
from todo_api.repositories.base import CredentialStore, DuplicateIdentityError, StoreError


class SqlUserStore(CredentialStore):
    """用户表读写。"""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create_identity(self, *, username: str, email: str, password_hash: str) -> User:
        try:
            # 先查重给出冲突字段，并发写入时仍以唯一约束兜底。
            if self.db.execute(select(User.id).where(User.username == username)).first():
                raise DuplicateIdentityError("username")
            if self.db.execute(select(User.id).where(User.email == email)).first():
                raise DuplicateIdentityError("email")

            user = User(username=username, email=email, password_hash=password_hash)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateIdentityError() from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError("failed to create identity") from exc
        return user

    def find_identity_by_email(self, email: str) -> User | None:
        try:
            return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError("failed to find identity by email") from exc
