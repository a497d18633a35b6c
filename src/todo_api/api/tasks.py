"""任务管理接口。

路由类在读取请求体之前先执行认证闸门，未通过时不会解析请求体，也不会访问任何存储。
"""

from fastapi import APIRouter, Depends, Query, Request, status

from todo_api.core.config import Settings
from todo_api.core.security import RequestIdentity
from todo_api.dependencies import AuthenticatedRoute, get_app_settings, get_request_identity, get_task_store
from todo_api.models.task import Task
from todo_api.repositories.base import TaskStore
from todo_api.schemas.common import ErrorResponse, PageResponse, SuccessResponse
from todo_api.schemas.responses import TaskData, TaskDeleteData
from todo_api.schemas.task import TaskCreateRequest, TaskUpdateRequest
from todo_api.services import tasks as task_service
from todo_api.utils.response import success

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    route_class=AuthenticatedRoute,
    dependencies=[Depends(get_request_identity)],
)

_AUTH_ERRORS = {400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
_OWNED_ERRORS = {**_AUTH_ERRORS, 404: {"model": ErrorResponse}}


def _task_view(task: Task) -> dict:
    return {
        "id": task.id,
        "owner_id": task.user_id,
        "name": task.name,
        "description": task.description,
        "status": task.status,
        "deadline": task.deadline,
        "created_at": task.created_at,
        "updated_at": task.updated_at,
    }


@router.post(
    "",
    summary="创建任务",
    description="为当前用户创建任务，初始状态为 pending。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[TaskData],
    responses=_AUTH_ERRORS,
)
def create_task(
    payload: TaskCreateRequest,
    request: Request,
    identity: RequestIdentity = Depends(get_request_identity),
    store: TaskStore = Depends(get_task_store),
):
    """创建任务，归属直接取自令牌身份。"""
    task = task_service.create_task(
        store,
        identity,
        name=payload.name,
        description=payload.description,
        deadline=payload.deadline,
    )
    return success(request, _task_view(task))


@router.get(
    "",
    summary="查询我的任务",
    description="按创建时间倒序返回当前用户的任务，limit 超出 1-100 时回退为默认值。",
    status_code=status.HTTP_200_OK,
    response_model=PageResponse[TaskData],
    responses=_AUTH_ERRORS,
)
def list_tasks(
    request: Request,
    limit: str | None = Query(default=None, description="返回条数上限，无法解析时使用默认值。"),
    offset: str | None = Query(default=None, description="跳过条数，无法解析时按 0 处理。"),
    identity: RequestIdentity = Depends(get_request_identity),
    store: TaskStore = Depends(get_task_store),
    settings: Settings = Depends(get_app_settings),
):
    """列出当前用户的任务。"""
    limit, offset = task_service.clamp_page(
        limit,
        offset,
        default_limit=settings.tasks_default_page_size,
        max_limit=settings.tasks_max_page_size,
    )
    tasks = task_service.list_tasks(store, identity, limit=limit, offset=offset)
    return success(
        request,
        [_task_view(task) for task in tasks],
        meta={"pagination": {"limit": limit, "offset": offset, "count": len(tasks)}},
    )


@router.get(
    "/{task_id}",
    summary="查询任务详情",
    description="非归属用户与任务不存在均返回 404。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[TaskData],
    responses=_OWNED_ERRORS,
)
def get_task(
    task_id: int,
    request: Request,
    identity: RequestIdentity = Depends(get_request_identity),
    store: TaskStore = Depends(get_task_store),
):
    """查询单个任务。"""
    task = task_service.get_task(store, identity, task_id)
    return success(request, _task_view(task))


@router.patch(
    "/{task_id}",
    summary="更新任务",
    description="局部更新名称、描述、截止时间或状态；归属用户不可修改。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[TaskData],
    responses=_OWNED_ERRORS,
)
def update_task(
    task_id: int,
    payload: TaskUpdateRequest,
    request: Request,
    identity: RequestIdentity = Depends(get_request_identity),
    store: TaskStore = Depends(get_task_store),
):
    """更新任务。"""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    task = task_service.update_task(store, identity, task_id, changes)
    return success(request, _task_view(task))


@router.delete(
    "/{task_id}",
    summary="删除任务",
    description="删除当前用户的任务。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[TaskDeleteData],
    responses=_OWNED_ERRORS,
)
def delete_task(
    task_id: int,
    request: Request,
    identity: RequestIdentity = Depends(get_request_identity),
    store: TaskStore = Depends(get_task_store),
):
    """删除任务。"""
    task_service.delete_task(store, identity, task_id)
    return success(request, {"deleted": True})
