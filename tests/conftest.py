import asyncio
import os
import tempfile
from pathlib import Path

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault(
    "JWT_KEY_FILE", str(Path(tempfile.gettempdir()) / "flashcards-test-jwt.pem")
)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from app.apis.deps import get_llm_model  # noqa: E402
from app.core.db.base import Base, get_session  # noqa: E402
from app.core.db.schemas import User  # noqa: E402
from app.modules.auth import current_active_user  # noqa: E402
from main import create_app  # noqa: E402


@pytest.fixture
def session_maker(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool
    )

    async def init():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(init())
    yield async_sessionmaker(engine, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest.fixture
def users(session_maker):
    async def create():
        async with session_maker() as session:
            created = [
                User(
                    email=email,
                    hashed_password="not-a-real-hash",
                    is_active=True,
                    is_superuser=False,
                    is_verified=True,
                )
                for email in ("alice@example.com", "bob@example.com")
            ]
            session.add_all(created)
            await session.commit()
            return created

    return asyncio.run(create())


@pytest.fixture
def app(session_maker, users):
    application = create_app()

    async def override_session():
        async with session_maker() as session:
            yield session
            await session.commit()

    application.dependency_overrides[get_session] = override_session
    application.dependency_overrides[current_active_user] = lambda: users[0]
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def login_as(app):
    """Switch the authenticated user for subsequent requests."""

    def switch(user):
        app.dependency_overrides[current_active_user] = lambda: user

    return switch


@pytest.fixture
def llm_output(app):
    """Serve model completions from a pydantic-ai TestModel."""
    from pydantic_ai.models.test import TestModel

    def use(text=None, args=None):
        model = TestModel(custom_output_text=text, custom_output_args=args)
        app.dependency_overrides[get_llm_model] = lambda: model
        return model

    return use
