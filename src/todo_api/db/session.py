"""数据库会话管理。"""

from collections.abc import Generator

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def build_engine(database_url: str) -> Engine:
    """按连接地址创建数据库引擎。"""
    if database_url.startswith("sqlite"):
        options: dict[str, object] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite+pysqlite:"):
            # 内存库需要所有连接共享同一个底层连接。
            options["poolclass"] = StaticPool
        return create_engine(database_url, future=True, **options)
    # 开启连接预检查以减少僵尸连接影响。
    return create_engine(database_url, future=True, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """统一会话工厂，路由层通过依赖注入获取短生命周期会话。"""
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)


def get_db(request: Request) -> Generator[Session, None, None]:
    """为每个请求提供独立数据库会话。"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
