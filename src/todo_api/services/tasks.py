"""任务读写服务。

所有针对单个任务的读、改、删都先经过归属校验；创建时归属直接取调用方身份。
"""

import logging
from datetime import datetime, timezone
from typing import Any

from todo_api.core.errors import InternalError, ValidationError
from todo_api.core.security import RequestIdentity
from todo_api.models.task import Task
from todo_api.repositories.base import StoreError, TaskStore
from todo_api.services.ownership import load_owned_task, task_not_found

logger = logging.getLogger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def ensure_future_deadline(deadline: datetime, *, now: datetime | None = None) -> datetime:
    """截止时间必须严格晚于当前时间，不带时区时按 UTC 处理。"""
    if deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)
    current = now or datetime.now(timezone.utc)
    if deadline <= current:
        raise ValidationError("deadline can't be earlier than current time", details={"field": "deadline"})
    return deadline


def _parse_page_value(value: int | str | None) -> int | None:
    """解析分页参数，非整数或超出 64 位范围时返回 None。"""
    if value is None:
        return None
    try:
        parsed = int(value)
    except ValueError:
        return None
    if not INT64_MIN <= parsed <= INT64_MAX:
        return None
    return parsed


def clamp_page(
    limit: int | str | None,
    offset: int | str | None,
    *,
    default_limit: int,
    max_limit: int,
) -> tuple[int, int]:
    """无法解析或超出范围的分页参数回退到默认值。"""
    limit = _parse_page_value(limit)
    offset = _parse_page_value(offset)
    if limit is None or limit <= 0 or limit > max_limit:
        limit = default_limit
    if offset is None or offset < 0:
        offset = 0
    return limit, offset


def create_task(
    store: TaskStore,
    identity: RequestIdentity,
    *,
    name: str,
    description: str,
    deadline: datetime,
) -> Task:
    """为调用方创建任务。"""
    deadline = ensure_future_deadline(deadline)
    try:
        task = store.create_task(owner_id=identity.user_id, name=name, description=description, deadline=deadline)
    except StoreError as exc:
        logger.exception("failed to create task: user_id=%s", identity.user_id)
        raise InternalError() from exc
    logger.info("task created: task_id=%s user_id=%s", task.id, identity.user_id)
    return task


def list_tasks(store: TaskStore, identity: RequestIdentity, *, limit: int, offset: int) -> list[Task]:
    """列出调用方自己的任务。"""
    try:
        return store.list_tasks_for_owner(identity.user_id, limit=limit, offset=offset)
    except StoreError as exc:
        logger.exception("failed to list tasks: user_id=%s", identity.user_id)
        raise InternalError() from exc


def get_task(store: TaskStore, identity: RequestIdentity, task_id: int) -> Task:
    """读取单个任务。"""
    return load_owned_task(store, task_id, identity)


def update_task(store: TaskStore, identity: RequestIdentity, task_id: int, changes: dict[str, Any]) -> Task:
    """局部更新任务，状态之间不做流转限制。"""
    load_owned_task(store, task_id, identity)
    if "deadline" in changes:
        changes = {**changes, "deadline": ensure_future_deadline(changes["deadline"])}
    if not changes:
        return load_owned_task(store, task_id, identity)

    try:
        task = store.update_task(task_id, changes)
    except StoreError as exc:
        logger.exception("failed to update task: task_id=%s", task_id)
        raise InternalError() from exc
    if task is None:
        # 校验之后被并发删除。
        raise task_not_found()
    return task


def delete_task(store: TaskStore, identity: RequestIdentity, task_id: int) -> None:
    """删除任务。"""
    load_owned_task(store, task_id, identity)
    try:
        deleted = store.delete_task(task_id)
    except StoreError as exc:
        logger.exception("failed to delete task: task_id=%s", task_id)
        raise InternalError() from exc
    if not deleted:
        raise task_not_found()
    logger.info("task deleted: task_id=%s user_id=%s", task_id, identity.user_id)
