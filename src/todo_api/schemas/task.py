"""任务请求结构。"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from todo_api.models.enums import TaskStatus


class TaskCreateRequest(BaseModel):
    """创建任务请求体。"""

    name: str = Field(min_length=1, max_length=30, description="任务名称。", examples=["Write report"])
    description: str = Field(default="", max_length=150, description="任务描述。")
    deadline: datetime = Field(description="截止时间，必须晚于当前时间；不带时区按 UTC 处理。")


class TaskUpdateRequest(BaseModel):
    """更新任务请求体，只修改显式传入的字段。"""

    # 归属用户不可修改，多余字段直接拒绝。
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=30, description="新的任务名称。")
    description: str | None = Field(default=None, max_length=150, description="新的任务描述。")
    deadline: datetime | None = Field(default=None, description="新的截止时间，必须晚于当前时间。")
    status: TaskStatus | None = Field(
        default=None,
        description="新的任务状态，任意状态之间均可切换。",
        examples=["in-progress"],
    )
