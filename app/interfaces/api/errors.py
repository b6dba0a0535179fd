"""Translate errors into JSON responses shaped as ``{"message": ...}``.

No stack traces or internal details are exposed to clients.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.domain.exceptions import NotFoundError, TransientIOError, ValidationError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def register_error_handlers(app: FastAPI) -> None:
    """Register the notification error handlers on ``app``."""

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_response(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(ValidationError)
    async def handle_validation(_request: Request, exc: ValidationError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(TransientIOError)
    async def handle_transient(_request: Request, exc: TransientIOError) -> JSONResponse:
        logger.error("Store unavailable: %s", exc.message, exc_info=exc.__cause__)
        return _error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE, "Notification store is unavailable"
        )
