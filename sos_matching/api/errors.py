"""Error envelopes and exception handlers.

Every error response has the shape::

    {"error": {"code": "...", "message": "...", "details": [...]}}

``details`` is present only for validation errors.
"""

from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sos_matching.logging import get_logger
from sos_matching.persistence.exceptions import MatchNotFoundError, PersistenceError

logger = get_logger(__name__, component="api")

VALIDATION_ERROR = "VALIDATION_ERROR"
MISSING_PARAMETER = "MISSING_PARAMETER"
NOT_FOUND = "NOT_FOUND"
INTERNAL_ERROR = "INTERNAL_ERROR"

MATCH_NOT_FOUND_MESSAGE = "Match not found or unauthorized"


class APIError(Exception):
    """Raised by route handlers to return a specific error envelope."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


def error_body(code: str, message: str, details: Optional[List[str]] = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"error": error}


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[str]:
    """Render pydantic errors as ``field.path: message`` strings.

    The leading ``body`` / ``query`` location segment is dropped.
    """
    messages = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        field = ".".join(loc) or "body"
        messages.append(f"{field}: {err.get('msg', 'Invalid value')}")
    return messages


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-producing handlers on app."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = format_validation_errors(exc.errors())
        logger.warning(
            f"Validation error on {request.method} {request.url.path}",
            extra={"event": "api.request.invalid", "errors": details},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(VALIDATION_ERROR, "Invalid request data", details),
        )

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(MatchNotFoundError)
    async def match_not_found_handler(request: Request, exc: MatchNotFoundError):
        # The reason stays in the logs; callers cannot tell the cases apart
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=error_body(NOT_FOUND, MATCH_NOT_FOUND_MESSAGE),
        )

    @app.exception_handler(PersistenceError)
    async def persistence_exception_handler(request: Request, exc: PersistenceError):
        logger.error(
            f"Database error on {request.method} {request.url.path}",
            exc_info=exc,
            extra={"event": "api.request.database_error", "error_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(INTERNAL_ERROR, "An internal error occurred"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            body = error_body(NOT_FOUND, "Route not found")
        else:
            body = error_body(f"HTTP_{exc.status_code}", str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}",
            exc_info=exc,
            extra={"event": "api.request.unhandled", "error_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(INTERNAL_ERROR, "An internal error occurred"),
        )
