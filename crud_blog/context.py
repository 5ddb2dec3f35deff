from collections.abc import AsyncGenerator
from pathlib import Path

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from crud_blog.repository import PostRepository
from crud_blog.settings_loader import Settings
from crud_blog.store import build_engine

TEMPLATE_DIR = Path(__file__).parent / "templates"


class AppContext:
    """
    Everything a request handler needs: settings, the engine and its
    session factory, and the template renderer. Built once per app by
    ``create_app`` and kept on ``app.state.context``.
    """

    def __init__(
        self,
        settings: Settings,
        engine: AsyncEngine | None = None,
        templates: Jinja2Templates | None = None,
    ):
        self.settings = settings
        self.engine = engine or build_engine(
            settings.database_url, echo=settings.echo_sql
        )
        self.session_maker = async_sessionmaker(self.engine, expire_on_commit=False)
        self.templates = templates or Jinja2Templates(directory=str(TEMPLATE_DIR))

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_context(request: Request) -> AppContext:
    return request.app.state.context


async def get_session(
    context: AppContext = Depends(get_context),
) -> AsyncGenerator[AsyncSession, None]:
    async with context.session_maker() as session:
        yield session


def get_repository(session: AsyncSession = Depends(get_session)) -> PostRepository:
    return PostRepository(session)
