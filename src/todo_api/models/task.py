"""任务模型。"""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.models.base import Record
from todo_api.models.enums import TaskStatus

TASK_NAME_MAX_LENGTH = 30
TASK_DESCRIPTION_MAX_LENGTH = 150


class Task(Record):
    """个人任务，只有归属用户可读写。"""

    __tablename__ = "tasks"

    # 归属用户 ID（逻辑关联 users.id，不声明数据库外键），创建后不可修改。
    user_id: Mapped[int] = mapped_column(nullable=False, index=True)
    # 任务名称。
    name: Mapped[str] = mapped_column(String(TASK_NAME_MAX_LENGTH), nullable=False)
    # 任务描述。
    description: Mapped[str] = mapped_column(String(TASK_DESCRIPTION_MAX_LENGTH), nullable=False, default="")
    # 截止时间，创建时必须晚于当前时间。
    deadline: Mapped[datetime] = mapped_column(nullable=False)
    # 任务状态（pending/in-progress/failed/completed）。
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=TaskStatus.PENDING)
