"""存储契约。

认证核心只依赖这里的抽象接口：凭据存储负责按邮箱查找与创建用户，
资源存储负责按 ID 读取任务（核心只关心其中的归属用户字段）。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from todo_api.models.task import Task
from todo_api.models.user import User


class StoreError(Exception):
    """存储层不可用或执行失败。"""


class DuplicateIdentityError(StoreError):
    """用户名或邮箱已被占用。"""

    def __init__(self, field: str | None = None) -> None:
        self.field = field
        super().__init__(f"{field or 'identity'} already registered")


class CredentialStore(ABC):
    """用户凭据存储。"""

    @abstractmethod
    def create_identity(self, *, username: str, email: str, password_hash: str) -> User:
        """持久化新用户，唯一性冲突时抛出 DuplicateIdentityError。"""

    @abstractmethod
    def find_identity_by_email(self, email: str) -> User | None:
        """按邮箱查找用户，不存在返回 None。"""


class TaskStore(ABC):
    """任务存储。"""

    @abstractmethod
    def find_task(self, task_id: int) -> Task | None:
        """按 ID 读取任务，不存在返回 None。"""

    @abstractmethod
    def create_task(self, *, owner_id: int, name: str, description: str, deadline: datetime) -> Task:
        """创建任务。"""

    @abstractmethod
    def list_tasks_for_owner(self, owner_id: int, *, limit: int, offset: int) -> list[Task]:
        """按创建时间倒序列出用户任务。"""

    @abstractmethod
    def update_task(self, task_id: int, changes: dict[str, Any]) -> Task | None:
        """按 ID 局部更新任务，不存在返回 None。"""

    @abstractmethod
    def delete_task(self, task_id: int) -> bool:
        """按 ID 删除任务，返回是否删除成功。"""
