"""ORM 模型导出集合。

导入本包即可让 `Base.metadata` 收集全部数据表。
"""

from todo_api.models.base import Base
from todo_api.models.task import Task
from todo_api.models.user import User

__all__ = [
    "Base",
    "Task",
    "User",
]
