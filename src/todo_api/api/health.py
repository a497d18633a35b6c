"""存活与就绪探针，不需要认证。"""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from todo_api.core.errors import ServiceUnavailableError
from todo_api.db.session import get_db
from todo_api.schemas.common import ErrorResponse, SuccessResponse
from todo_api.schemas.responses import HealthStatusData
from todo_api.utils.response import success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "/live",
    summary="存活探针",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[HealthStatusData],
)
def live(request: Request):
    return success(request, {"status": "ok"})


@router.get(
    "/ready",
    summary="就绪探针",
    description="数据库可执行 `select 1` 时返回 ready，否则返回 503。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[HealthStatusData],
    responses={503: {"model": ErrorResponse}},
)
def ready(request: Request, db: Session = Depends(get_db)):
    try:
        db.execute(text("select 1"))
    except SQLAlchemyError as exc:
        logger.error("readiness check failed: %r", exc)
        raise ServiceUnavailableError("database unavailable") from exc
    return success(request, {"status": "ready"})
