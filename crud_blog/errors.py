# crud_blog/errors.py
import logging
from typing import Any, Mapping

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Submitted fields were rejected. Carries per-field messages and the input."""

    status_code = 422

    def __init__(self, errors: Mapping[str, list[str]], old: Mapping[str, Any]):
        super().__init__("The given data was invalid.")
        self.errors: dict[str, list[str]] = dict(errors)
        self.old: dict[str, Any] = dict(old)


class NotFound(Exception):
    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class NotPersisted(Exception):
    """The store rejected a write. The transaction has been rolled back."""

    status_code = 500


def _wants_json(request: Request) -> bool:
    return request.url.path.startswith("/api/")


def render_error(request: Request, status_code: int, message: str) -> Response:
    if _wants_json(request):
        return JSONResponse({"detail": message}, status_code=status_code)

    templates = request.app.state.context.templates
    return templates.TemplateResponse(
        request,
        "errors/error.html",
        {"status_code": status_code, "message": message},
        status_code=status_code,
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> Response:
    if _wants_json(request):
        return JSONResponse(
            {"detail": str(exc), "errors": exc.errors},
            status_code=exc.status_code,
        )
    return render_error(request, exc.status_code, str(exc))


async def not_found_handler(request: Request, exc: NotFound) -> Response:
    logger.info(f"Not found: {request.method} {request.url.path} ({exc})")
    return render_error(request, exc.status_code, str(exc))


async def not_persisted_handler(request: Request, exc: NotPersisted) -> Response:
    logger.error(f"Write failed: {request.method} {request.url.path} - {exc}")
    return render_error(request, exc.status_code, str(exc))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(NotPersisted, not_persisted_handler)
