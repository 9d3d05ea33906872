"""
Error taxonomy and the global exception handlers.

Route handlers raise these (they are plain ``HTTPException`` subclasses, so
FastAPI treats them exactly like the ``HTTPException`` calls used elsewhere).
The handlers below turn every failure into ``{"message": ...}`` JSON.

    Unauthorized      401  no or invalid session
    Forbidden         403  authenticated but not entitled to the resource
    NotFound          404  absent, or owned by another organization
    ValidationFailed  400  schema / business-rule rejection, with field errors
    Conflict          409  row still referenced elsewhere
    Internal          500  unexpected data-store or runtime failure
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ValidationFailed(HTTPException):
    """400 carrying optional ``{field: [messages]}`` detail."""

    def __init__(
        self,
        detail: str = "Validation failed",
        errors: Optional[Dict[str, List[str]]] = None,
    ):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
        self.errors = errors or {}


class Conflict(HTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class Internal(HTTPException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def field_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Flatten pydantic error dicts into ``{"price": ["..."], ...}``.

    The leading ``body``/``query`` location segment is dropped so the keys
    match the client's field names.
    """
    flattened: Dict[str, List[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        key = ".".join(loc) or "__root__"
        flattened.setdefault(key, []).append(err.get("msg", "Invalid value"))
    return flattened


# ==================================================================
#  Handlers
# ==================================================================
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body: Dict[str, Any] = {"message": exc.detail}
    errors = getattr(exc, "errors", None)
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = field_errors(exc.errors())
    logger.info("Validation failed on %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation failed", "errors": errors},
    )


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
