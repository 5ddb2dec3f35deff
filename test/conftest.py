# test/conftest.py
import pytest_asyncio
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from crud_blog.context import AppContext, get_repository, get_session
from crud_blog.main import create_app
from crud_blog.repository import PostRepository
from crud_blog.settings_loader import Settings
from crud_blog.store import build_engine, init_db

# StaticPool keeps the single in-memory connection alive so every session in
# a test sees the same database.
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def context():
    """
    A fresh in-memory database and AppContext for each test function.
    """
    engine = build_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    ctx = AppContext(Settings(database_url=TEST_DB_URL, page_size=3), engine=engine)
    await init_db(engine)

    yield ctx

    await ctx.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(context):
    async with context.session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def repo(db_session):
    return PostRepository(db_session)


@pytest_asyncio.fixture(scope="function")
async def fresh_repo(context):
    """
    Opens a new session per call, so reads are not served from the identity
    map of a session that has gone stale while the app handled a request.
    """
    sessions = []

    def _make():
        session = context.session_maker()
        sessions.append(session)
        return PostRepository(session)

    yield _make

    for session in sessions:
        await session.close()


@pytest_asyncio.fixture(scope="function")
async def app(context):
    app = create_app(context=context)
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app):
    """
    An AsyncClient talking to an app built around the test context.
    ASGITransport does not run the lifespan; the context fixture has
    already created the tables.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class NullTitleRepository(PostRepository):
    """Writes title=None on update so the NOT NULL constraint rejects it."""

    async def update(self, post_id, fields):
        return await super().update(post_id, {**fields, "title": None})


@pytest_asyncio.fixture(scope="function")
async def failing_updates(app):
    def _repository(session: AsyncSession = Depends(get_session)) -> PostRepository:
        return NullTitleRepository(session)

    app.dependency_overrides[get_repository] = _repository
    yield
    app.dependency_overrides.pop(get_repository, None)
