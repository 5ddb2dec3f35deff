import os
from typing import Mapping, NamedTuple

import dotenv
from sqlalchemy.engine import URL, make_url

DEFAULT_DB_URL = "sqlite+aiosqlite:///./crud_blog.db"
DEFAULT_DB_DRIVER = "postgresql+asyncpg"

_TRUTHY = {"1", "true", "yes", "on"}


class DatabaseConfig(NamedTuple):
    driver: str
    host: str
    port: int | None
    name: str | None
    user: str | None
    password: str | None

    def url(self) -> URL:
        return URL.create(
            drivername=self.driver,
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.name,
        )


class Settings(NamedTuple):
    database_url: str | URL
    echo_sql: bool = False
    cors_origins: tuple[str, ...] = ()
    log_level: str = "INFO"
    page_size: int = 20

    def safe_database_url(self) -> str:
        """The database URL with the password masked, for logs."""
        return make_url(self.database_url).render_as_string(hide_password=True)


def load_database_config(environ: Mapping[str, str]) -> DatabaseConfig | None:
    """
    Builds connection parameters from DB_HOST / DB_PORT / DB_NAME /
    DB_USER / DB_PASSWORD. Returns None when DB_HOST is not set.
    """
    host = environ.get("DB_HOST")
    if not host:
        return None

    port = environ.get("DB_PORT")
    return DatabaseConfig(
        driver=environ.get("DB_DRIVER", DEFAULT_DB_DRIVER),
        host=host,
        port=int(port) if port else None,
        name=environ.get("DB_NAME") or None,
        user=environ.get("DB_USER") or None,
        password=environ.get("DB_PASSWORD") or None,
    )


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Reads settings from the environment (and a .env file when present).

    DB_URL takes precedence over the individual DB_* parameters; with
    neither, a local SQLite file is used.
    """
    if environ is None:
        dotenv.load_dotenv()
        environ = os.environ

    database_url: str | URL
    if environ.get("DB_URL"):
        database_url = environ["DB_URL"]
    else:
        db_config = load_database_config(environ)
        database_url = db_config.url() if db_config else DEFAULT_DB_URL

    page_size = int(environ.get("PAGE_SIZE", "20"))
    if page_size < 1:
        raise ValueError(f"PAGE_SIZE must be at least 1, got {page_size}")

    origins = tuple(
        origin.strip()
        for origin in environ.get("CORS_ORIGINS", "").split(",")
        if origin.strip()
    )

    return Settings(
        database_url=database_url,
        echo_sql=environ.get("DB_ECHO", "").lower() in _TRUTHY,
        cors_origins=origins,
        log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        page_size=page_size,
    )
