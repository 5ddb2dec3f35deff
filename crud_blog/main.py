import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crud_blog.context import AppContext
from crud_blog.errors import register_error_handlers
from crud_blog.perf import configure_logging, performance_middleware
from crud_blog.routes import api, posts
from crud_blog.settings_loader import Settings, load_settings
from crud_blog.store import init_db

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None, context: AppContext | None = None
) -> FastAPI:
    """
    Builds the application around an explicit AppContext.

    Pass ``context`` to supply a ready-made engine (tests do this with an
    in-memory database); otherwise one is built from ``settings``, which in
    turn default to the environment.
    """
    if context is None:
        context = AppContext(settings or load_settings())
    settings = context.settings

    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Connecting to {settings.safe_database_url()}")
        await init_db(context.engine)
        yield
        await context.dispose()

    app = FastAPI(title="crud_blog", lifespan=lifespan)
    app.state.context = context

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.middleware("http")(performance_middleware)

    register_error_handlers(app)
    app.include_router(posts.router)
    app.include_router(api.router)
    return app


app = create_app()
