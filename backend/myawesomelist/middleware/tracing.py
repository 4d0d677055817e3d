"""Request tracing middleware: one correlation id per HTTP request."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from myawesomelist.core.tracing import TracingContext

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        correlation_id = (
            request.headers.get(REQUEST_ID_HEADER)
            or TracingContext.generate_correlation_id()
        )
        TracingContext.set(correlation_id=correlation_id)
        try:
            response = await call_next(request)
        finally:
            TracingContext.clear()
        response.headers[REQUEST_ID_HEADER] = correlation_id
        return response
