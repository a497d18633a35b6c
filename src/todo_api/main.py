"""FastAPI 应用入口点。"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from todo_api.api.router import api_router
from todo_api.core.config import Settings, get_settings
from todo_api.core.logging_setup import setup_logging
from todo_api.core.passwords import PasswordHasher
from todo_api.core.security import TokenCodec
from todo_api.models import Base
from todo_api.db.session import build_engine, build_session_factory
from todo_api.exceptions import register_exception_handlers
from todo_api.middlewares import register_middlewares

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if settings.db_auto_create:
        Base.metadata.create_all(bind=app.state.engine)
    logger.info("%s started: env=%s", settings.app_name, settings.app_env)
    yield
    app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """创建并配置 FastAPI 应用实例。

    签名密钥、令牌有效期等只读配置在这里一次性加载，并构造为各组件的依赖。
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        debug=settings.app_debug,
        lifespan=lifespan,
        description=(
            "个人任务管理接口。\n\n"
            "所有业务接口统一返回：`{request_id, data, meta}`，错误返回：`{error}`。\n"
            "除注册、登录与健康检查外，接口均需携带 `Authorization: Bearer <token>`。\n"
            "任务只对归属用户可见，非归属访问按不存在处理。"
        ),
        openapi_tags=[
            {"name": "health", "description": "服务存活与就绪探针。"},
            {"name": "users", "description": "注册与登录，换取访问令牌。"},
            {"name": "tasks", "description": "当前用户的任务增删改查。"},
        ],
    )

    engine = build_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_codec = TokenCodec(
        settings.auth_jwt_secret,
        settings.auth_access_token_ttl,
        algorithm=settings.auth_jwt_algorithm,
        leeway_seconds=settings.auth_jwt_leeway_seconds,
    )
    app.state.password_hasher = PasswordHasher(iterations=settings.auth_password_hash_iterations)

    register_middlewares(app)
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
