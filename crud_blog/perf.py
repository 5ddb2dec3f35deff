# crud_blog/perf.py
import functools
import logging
import time
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import Request

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig()
    logging.getLogger("crud_blog").setLevel(level)


@asynccontextmanager
async def async_perf_log(operation: str, logger: logging.Logger = logger):
    """Async context manager for timing async operations"""
    start: float = time.perf_counter()
    logger.debug(f"Starting: {operation}")
    try:
        yield
    except Exception as e:
        elapsed: float = time.perf_counter() - start
        logger.warning(f"Failed: {operation} after {elapsed:.3f}s - {e!r}")
        raise
    else:
        elapsed = time.perf_counter() - start
        logger.info(f"Completed: {operation} in {elapsed:.3f}s")


def time_async_function(func: Callable) -> Callable:
    """Decorator to time async functions"""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        async with async_perf_log(f"Function: {func.__qualname__}"):
            return await func(*args, **kwargs)

    return wrapper


# Middleware to log all requests
async def performance_middleware(request: Request, call_next):
    """FastAPI middleware to log request timing"""
    start_time: float = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception as e:
        elapsed: float = time.perf_counter() - start_time
        logger.error(
            f"Request failed: {request.method} {request.url.path} "
            f"Error: {str(e)} Time: {elapsed:.3f}s"
        )
        raise

    elapsed = time.perf_counter() - start_time
    logger.info(
        f"{request.method} {request.url.path} "
        f"Status: {response.status_code} Time: {elapsed:.3f}s"
    )
    response.headers["X-Process-Time"] = f"{elapsed:.3f}"
    return response
