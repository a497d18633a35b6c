"""任务归属校验。

任务只允许归属用户读写删。非归属访问与资源不存在返回完全相同的结果，
调用方无法借此探测他人任务 ID 是否存在。
"""

import logging

from todo_api.core.errors import InternalError, NotFoundOrForbiddenError
from todo_api.core.security import RequestIdentity
from todo_api.models.task import Task
from todo_api.repositories.base import StoreError, TaskStore

logger = logging.getLogger(__name__)

TASK_NOT_FOUND_MESSAGE = "task not found"


def authorize(owner_id: int, caller_id: int) -> bool:
    """归属判定：仅当记录的归属用户与调用方完全一致时放行。"""
    return owner_id == caller_id


def task_not_found() -> NotFoundOrForbiddenError:
    """统一 404 异常。"""
    return NotFoundOrForbiddenError(TASK_NOT_FOUND_MESSAGE)


def load_owned_task(store: TaskStore, task_id: int, identity: RequestIdentity) -> Task:
    """读取任务并校验归属，读、改、删之前都必须调用。"""
    try:
        task = store.find_task(task_id)
    except StoreError as exc:
        logger.exception("task store failed: task_id=%s", task_id)
        raise InternalError() from exc

    if task is None:
        raise task_not_found()
    if not authorize(task.user_id, identity.user_id):
        logger.warning("ownership check denied: task_id=%s caller_id=%s", task_id, identity.user_id)
        raise task_not_found()
    return task
