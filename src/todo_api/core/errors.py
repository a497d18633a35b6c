"""业务异常分类。

路由与服务层只抛出这里的异常，由 `todo_api.exceptions` 统一映射为 HTTP 响应。
消息保持通用，内部细节只进日志。
"""

from fastapi import status


class AppError(Exception):
    """业务异常基类。"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    default_message: str = "internal server error"

    def __init__(self, message: str | None = None, *, details: dict[str, object] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """输入不合法，调用方可修正。"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_message = "validation failed"


class UnauthorizedError(AppError):
    """令牌缺失、无效、过期或凭据错误。"""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_message = "unauthorized"


class NotFoundOrForbiddenError(AppError):
    """资源不存在与无权访问合并为同一结果。"""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "not found"


class ConflictError(AppError):
    """唯一性冲突。"""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "conflict"


class InternalError(AppError):
    """哈希、签名或存储失败。"""


class ServiceUnavailableError(AppError):
    """依赖的外部服务暂不可用。"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_UNAVAILABLE"
    default_message = "service unavailable"
