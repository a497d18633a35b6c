"""接口路由汇总，统一挂载在 `api_prefix` 之下。"""

from fastapi import APIRouter

from . import health, tasks, users

api_router = APIRouter()

for _module in (health, users, tasks):
    api_router.include_router(_module.router)
