"""Maps core exceptions onto HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bluecarbon.exceptions import (
    NoConnectionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from bluecarbon.utils import log

logger = log.get_logger(__name__)


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "field": exc.field, "fields": exc.fields},
    )


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _no_connection(request: Request, exc: NoConnectionError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


async def _persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed to persist: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Could not save to local storage"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(NoConnectionError, _no_connection)
    app.add_exception_handler(PersistenceError, _persistence_error)
