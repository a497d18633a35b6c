"""基于 SQLAlchemy 的任务存储。"""

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from todo_api.models.enums import TaskStatus
from todo_api.models.task import Task
from todo_api.repositories.base import StoreError, TaskStore

# 允许通过更新接口修改的字段，归属用户不在其中。
MUTABLE_TASK_FIELDS = frozenset({"name", "description", "deadline", "status"})
# 主键为 64 位有符号整数，超出范围的 ID 不可能存在。
MAX_TASK_ID = 2**63 - 1


def _is_storable_id(task_id: int) -> bool:
    return 1 <= task_id <= MAX_TASK_ID


class SqlTaskStore(TaskStore):
    """任务表读写。"""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_task(self, task_id: int) -> Task | None:
        if not _is_storable_id(task_id):
            return None
        try:
            return self.db.get(Task, task_id)
        except SQLAlchemyError as exc:
            raise StoreError("failed to get task by id") from exc

    def create_task(self, *, owner_id: int, name: str, description: str, deadline: datetime) -> Task:
        task = Task(
            user_id=owner_id,
            name=name,
            description=description,
            deadline=deadline,
            status=TaskStatus.PENDING,
        )
        try:
            self.db.add(task)
            self.db.commit()
            self.db.refresh(task)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError("failed to create task") from exc
        return task

    def list_tasks_for_owner(self, owner_id: int, *, limit: int, offset: int) -> list[Task]:
        stmt = (
            select(Task)
            .where(Task.user_id == owner_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .limit(limit)
            .offset(offset)
        )
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise StoreError("failed to list tasks") from exc

    def update_task(self, task_id: int, changes: dict[str, Any]) -> Task | None:
        unknown = set(changes) - MUTABLE_TASK_FIELDS
        if unknown:
            raise ValueError(f"immutable task fields: {', '.join(sorted(unknown))}")
        if not _is_storable_id(task_id):
            return None
        try:
            task = self.db.get(Task, task_id)
            if task is None:
                return None
            for field, value in changes.items():
                setattr(task, field, value)
            self.db.commit()
            self.db.refresh(task)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError("failed to update task") from exc
        return task

    def delete_task(self, task_id: int) -> bool:
        if not _is_storable_id(task_id):
            return False
        try:
            task = self.db.get(Task, task_id)
            if task is None:
                return False
            self.db.delete(task)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError("failed to delete task") from exc
        return True
