"""Error codes for RPC error responses.

Maps service exceptions to Connect-style error codes and HTTP statuses so
clients get ``{"code": ..., "message": ...}`` bodies they can switch on.
"""

import logging
from enum import Enum
from typing import Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from myawesomelist.core.tracing import TracingContext
from myawesomelist.services.exceptions import (
    AwesomeError,
    CollectionDecodeError,
    EmbeddingConfigurationError,
    EmbeddingError,
    InvalidArgumentError,
    PersistenceError,
)
from myawesomelist.services.github.exceptions import (
    GithubError,
    GithubNotFoundError,
    GithubRateLimitError,
    GithubRetryableError,
)

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """RPC error codes."""

    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    UNIMPLEMENTED = "unimplemented"
    UNAVAILABLE = "unavailable"
    INTERNAL = "internal"


# ErrorCode to HTTP status code mapping
ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_ARGUMENT: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.RESOURCE_EXHAUSTED: 429,
    ErrorCode.UNIMPLEMENTED: 501,
    ErrorCode.UNAVAILABLE: 503,
    ErrorCode.INTERNAL: 500,
}

# Most specific classes first
_EXCEPTION_CODES: Tuple[Tuple[type, ErrorCode], ...] = (
    (InvalidArgumentError, ErrorCode.INVALID_ARGUMENT),
    (GithubNotFoundError, ErrorCode.NOT_FOUND),
    (GithubRateLimitError, ErrorCode.RESOURCE_EXHAUSTED),
    (GithubRetryableError, ErrorCode.UNAVAILABLE),
    (EmbeddingConfigurationError, ErrorCode.UNIMPLEMENTED),
    (CollectionDecodeError, ErrorCode.INTERNAL),
    (PersistenceError, ErrorCode.UNAVAILABLE),
    (EmbeddingError, ErrorCode.UNAVAILABLE),
    (GithubError, ErrorCode.INTERNAL),
)


def get_error_code(exc: Exception) -> ErrorCode:
    """Get ErrorCode for a service exception."""
    for exc_type, code in _EXCEPTION_CODES:
        if isinstance(exc, exc_type):
            return code
    return ErrorCode.INTERNAL


def get_status_code(code: ErrorCode) -> int:
    return ERROR_CODE_TO_STATUS.get(code, 500)


def error_response(exc: Exception) -> JSONResponse:
    code = get_error_code(exc)
    status = get_status_code(code)
    headers = {}
    retry_after = getattr(exc, "retry_after", None)
    if isinstance(exc, GithubRateLimitError) and retry_after:
        headers["Retry-After"] = str(int(retry_after))
    correlation_id = TracingContext.get_correlation_id()
    if correlation_id:
        headers["X-Request-ID"] = correlation_id
    return JSONResponse(
        status_code=status,
        content={"code": code.value, "message": str(exc)},
        headers=headers,
    )


async def _handle_service_error(request: Request, exc: Exception) -> JSONResponse:
    code = get_error_code(exc)
    if get_status_code(code) >= 500:
        logger.error(
            "%s %s failed with %s: %s",
            request.method,
            request.url.path,
            code.value,
            exc,
        )
    else:
        logger.info(
            "%s %s rejected with %s: %s",
            request.method,
            request.url.path,
            code.value,
            exc,
        )
    return error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AwesomeError, _handle_service_error)
    app.add_exception_handler(GithubError, _handle_service_error)
