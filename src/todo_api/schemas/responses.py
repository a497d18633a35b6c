"""接口成功响应 `data` 字段结构定义。

所有业务接口统一返回 `SuccessResponse[data=...]`，本文件只定义 `data` 中的业务字段。
"""

from datetime import datetime

from pydantic import Field

from todo_api.schemas.common import BaseSchema


class HealthStatusData(BaseSchema):
    """健康检查返回结构。"""

    status: str = Field(description="健康状态值，常见为 ok 或 ready。")


class UserProfileData(BaseSchema):
    """用户基础资料，不含口令哈希。"""

    id: int = Field(description="用户主键 ID。")
    username: str = Field(description="登录名。")
    email: str = Field(description="登录邮箱。")
    created_at: datetime = Field(description="注册时间。")


class AuthTokenData(BaseSchema):
    """注册与登录返回结构。"""

    user: UserProfileData = Field(description="当前用户资料。")
    token: str = Field(description="Bearer 访问令牌。")
    token_type: str = Field(default="bearer", description="令牌类型。")
    expires_at: datetime = Field(description="令牌过期时间（UTC）。")
    expires_in: int = Field(description="距过期剩余秒数。")


class TaskData(BaseSchema):
    """任务详情。"""

    id: int = Field(description="任务 ID。")
    owner_id: int = Field(description="归属用户 ID。")
    name: str = Field(description="任务名称。")
    description: str = Field(description="任务描述。")
    status: str = Field(description="任务状态（pending/in-progress/failed/completed）。")
    deadline: datetime = Field(description="截止时间。")
    created_at: datetime = Field(description="创建时间。")
    updated_at: datetime = Field(description="最后更新时间。")


class TaskDeleteData(BaseSchema):
    """删除任务结果。"""

    deleted: bool = Field(description="是否已删除。")
