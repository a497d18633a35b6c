import os
from collections.abc import Generator

# 必填配置需在导入应用之前就绪。
os.environ.setdefault("TODO_AUTH_JWT_SECRET", "unit-test-secret-key-at-least-32-bytes")
os.environ.setdefault("TODO_AUTH_ACCESS_TOKEN_TTL_SECONDS", "900")
os.environ.setdefault("TODO_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("TODO_AUTH_PASSWORD_HASH_ITERATIONS", "1000")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from todo_api.core.config import Settings
from todo_api.core.passwords import PasswordHasher
from todo_api.core.security import TokenCodec
from todo_api.main import create_app
from todo_api.models import Base

TEST_SECRET = "unit-test-secret-key-at-least-32-bytes"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+pysqlite:///:memory:",
        auth_jwt_secret=TEST_SECRET,
        auth_access_token_ttl_seconds=900,
        auth_password_hash_iterations=1000,
        db_auto_create=True,
    )


@pytest.fixture
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    # 进入上下文才会执行 lifespan 建表。
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    local_session = sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)
    db = local_session()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(iterations=1000)


@pytest.fixture
def codec(settings: Settings) -> TokenCodec:
    return TokenCodec(settings.auth_jwt_secret, settings.auth_access_token_ttl)
