"""Error types and structured error responses: consistent JSON format for all errors."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("sprig")


class NotFoundError(LookupError):
    """No row with the requested id exists in the entity's table."""

    def __init__(self, item_id: str, table: str) -> None:
        self.item_id = item_id
        self.table = table
        super().__init__(f"Cannot find item ({item_id}) in {table.replace('_', ' ').title()}")


class ConfigMissing(RuntimeError):
    """A required setting is not configured."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name.upper()} is not defined.")


class Redirect(Exception):
    """Ends the current request with a redirect to ``location``."""

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(location)


def _error_body(request: Request, status_code: int, detail) -> dict:
    return {
        "error": True,
        "status_code": status_code,
        "detail": detail,
        "request_id": getattr(request.state, "request_id", None),
    }


def error_response(request: Request, status_code: int, detail) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=_error_body(request, status_code, detail))


def config_missing_response(request: Request, exc: ConfigMissing) -> JSONResponse:
    """500 naming the missing setting. Also used where app handlers cannot reach."""
    logger.error("Missing configuration: %s", exc.name)
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, exc.detail),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        content = _error_body(request, 422, "Validation error")
        content["errors"] = exc.errors()
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=content)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(request, 404, str(exc)),
        )

    @app.exception_handler(ConfigMissing)
    async def config_missing_handler(request: Request, exc: ConfigMissing):
        return config_missing_response(request, exc)

    @app.exception_handler(Redirect)
    async def redirect_handler(request: Request, exc: Redirect):
        return RedirectResponse(exc.location, status_code=status.HTTP_302_FOUND)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        # Only errors raised outside SessionMiddleware get here; they carry no session cookies.
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(request, 500, "Internal server error"),
        )
