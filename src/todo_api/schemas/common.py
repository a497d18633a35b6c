"""响应包裹结构。

成功返回 `{request_id, data, meta}`，失败返回 `{error}`；
这里只描述在线接口文档中的结构，实际组装见 `todo_api.utils.response`。
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class BaseSchema(BaseModel):
    """允许直接从 ORM 对象读取属性。"""

    model_config = ConfigDict(from_attributes=True)


class ErrorBody(BaseSchema):
    code: str = Field(description="错误码，如 VALIDATION_ERROR、UNAUTHORIZED、NOT_FOUND。")
    message: str = Field(description="面向调用方的通用错误信息，不含内部细节。")
    details: dict[str, Any] = Field(default_factory=dict, description="字段级错误等补充信息。")


class ErrorResponse(BaseSchema):
    """错误响应，相同失败结果的响应体完全一致。"""

    error: ErrorBody


class SuccessResponse(BaseSchema, Generic[T]):
    """单对象成功响应。"""

    request_id: str | None = Field(default=None, description="请求追踪 ID，同时通过 X-Request-Id 头返回。")
    data: T
    meta: dict[str, Any] = Field(default_factory=dict, description="请求方法、路径、耗时等元信息。")


class PageInfo(BaseSchema):
    limit: int = Field(description="生效的分页大小。")
    offset: int = Field(description="生效的偏移量。")
    count: int = Field(description="本页条数。")


class PageMeta(BaseSchema):
    """列表元信息，在通用元信息之外附带分页信息。"""

    model_config = ConfigDict(from_attributes=True, extra="allow")

    pagination: PageInfo


class PageResponse(BaseSchema, Generic[T]):
    """列表成功响应。"""

    request_id: str | None = Field(default=None, description="请求追踪 ID。")
    data: list[T]
    meta: PageMeta
