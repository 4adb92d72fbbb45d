from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from messagely.core.errors import MessagelyError, StorageError


def register_exception_handlers(app: FastAPI, logger: logging.Logger) -> None:
    """
    Render every failure as {"error": message} with the matching status code.
    Storage faults are logged with their cause and answered opaquely.
    """

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(
            "Storage failure on %s %s: %r", request.method, request.url.path, exc.cause,
            exc_info=exc.cause
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": StorageError.default_message}
        )

    @app.exception_handler(MessagelyError)
    async def messagely_error_handler(request: Request, exc: MessagelyError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        fields = ", ".join(".".join(str(p) for p in err["loc"] if p != "body") for err in errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": f"Invalid or missing fields: {fields}"}
        )
