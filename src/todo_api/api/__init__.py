"""路由模块导出集合。"""

from . import health, tasks, users

__all__ = [
    "health",
    "tasks",
    "users",
]
