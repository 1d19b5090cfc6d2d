from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.pool import StaticPool

from restbone.core.database import create_sessionmaker, get_session
from restbone.models import ModelRegistry
from restbone.rest import create_routes
from test.blog_models import Author, Comment, Journal, Post, Tag, Entry

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database with every blog table."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """A session for seeding and inspecting the test database."""
    async with create_sessionmaker(test_engine)() as session:
        yield session


@pytest.fixture
def registry() -> ModelRegistry:
    registry = ModelRegistry()
    registry.register(Post, embedded={"comments": Comment, "tags": Tag})
    registry.register(Author)
    registry.register(Journal, embedded={"entries": Entry})
    return registry


def override_session(app: FastAPI, engine: AsyncEngine) -> None:
    """Serve every request from its own session on the test engine."""
    session_maker = create_sessionmaker(engine)

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override


def add_test_user(app: FastAPI) -> None:
    """Take the current user from the ``X-User`` header."""

    @app.middleware("http")
    async def user_from_header(request: Request, call_next):
        request.state.user = request.headers.get("x-user")
        return await call_next(request)


@pytest.fixture
def app(registry: ModelRegistry, test_engine: AsyncEngine) -> FastAPI:
    """A JSON-only application with the blog routes."""
    app = FastAPI()
    add_test_user(app)
    create_routes(app, registry=registry)
    override_session(app, test_engine)
    return app


@pytest_asyncio.fixture(name="client")
async def client_fixture(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def post(session: AsyncSession) -> Post:
    """A saved post with two comments and a tag."""
    post = Post(
        title="Hello World",
        slug="hello-world",
        body="First post",
        comments=[Comment(body="Nice", author="ann"), Comment(body="Meh", author="bob")],
        tags=[Tag(label="intro")],
    )
    session.add(post)
    await session.commit()
    await session.refresh(post)
    return post
