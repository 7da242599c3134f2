import time
import uuid

import structlog
import structlog.contextvars
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from backend.config import settings

logger = structlog.get_logger(__name__)

CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization, X-API-Token"
CORS_MAX_AGE = "86400"


async def structured_logging_middleware(request: Request, call_next):
    """
    Context injection and request/response logging, one line per request.
    """
    structlog.contextvars.clear_contextvars()
    start_time = time.time()

    correlation_id = request.headers.get("x-correlation-id") or str(uuid.uuid4())
    structlog.contextvars.bind_contextvars(
        correlation_id=correlation_id,
        remote_addr=request.client.host if request.client else None,
        request_path=request.url.path,
        request_method=request.method,
        origin=request.headers.get("origin"),
        user_agent=request.headers.get("user-agent"),
    )

    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        status_code = response.status_code

        log_event = logger.info if 200 <= status_code < 400 else logger.warning

        log_details = {
            "status_code": status_code,
            "processing_time_ms": round(process_time * 1000, 2),
        }

        if status_code == 401:
            log_details["auth_error"] = "Invalid or missing API token"

        log_event("Request completed", **log_details)

        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}s"
        return response

    except Exception:
        process_time = time.time() - start_time
        logger.exception(
            "Request failed with unhandled exception",
            processing_time_ms=round(process_time * 1000, 2),
        )
        raise
    finally:
        structlog.contextvars.clear_contextvars()


def resolve_allowed_origin(origin: str | None) -> str:
    """Echoes an allow-listed origin, otherwise answers with the first allowed one."""
    allowed = settings.allowed_origins
    if origin in allowed:
        return origin
    return allowed[0]


def apply_cors_headers(response: Response, origin: str) -> Response:
    response.headers["Access-Control-Allow-Origin"] = origin
    response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    response.headers["Vary"] = "Origin"
    return response


async def cors_middleware(request: Request, call_next):
    """
    Adds CORS headers to every response and answers preflight requests.

    Origins outside the allow-list get the first allowed origin back instead of
    a wildcard, so browsers on other sites are refused.
    """
    allowed_origin = resolve_allowed_origin(request.headers.get("origin"))

    if request.method == "OPTIONS":
        response = apply_cors_headers(Response(status_code=200), allowed_origin)
        response.headers["Access-Control-Max-Age"] = CORS_MAX_AGE
        return response

    response = await call_next(request)
    return apply_cors_headers(response, allowed_origin)


async def error_boundary_middleware(request: Request, call_next):
    """
    Turns any exception escaping a route into a JSON 500.
    Installed innermost so the CORS and logging middleware still see the response.
    """
    try:
        return await call_next(request)
    except Exception as e:
        logger.exception("An unhandled exception occurred", error=str(e))
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": str(e)},
        )
