from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.config import settings
from backend.plugins import init_plugins
from backend.utils.exceptions import ServiceError
from backend.utils.middleware import (
    cors_middleware,
    error_boundary_middleware,
    structured_logging_middleware,
)
from backend.utils.redis_client import close_redis_client, init_redis_client
from dashkv_core.logging_config import setup_structlog
from dashkv_core.tracing import setup_tracing

setup_structlog(
    json_logs=settings.json_logs,
    log_level=settings.log_level,
    service_name=settings.service_name,
    environment=settings.environment,
)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage the application's lifespan.
    Connects to Redis on startup and disconnects on shutdown.
    """
    setup_tracing(
        service_name=settings.service_name, exporter_enabled=settings.tracing_enabled
    )
    HTTPXClientInstrumentor().instrument()
    logger.info("Application starting up...", service=settings.service_name)

    if not settings.api_token:
        logger.warning("API_TOKEN is not set, write endpoints accept every request")

    instrumentator.expose(app, include_in_schema=False)
    logger.info("Prometheus metrics endpoint exposed at /metrics.")

    app.state.redis = await init_redis_client()

    yield

    logger.info("Application shutting down...")
    await close_redis_client()
    logger.info("Redis connection closed.")


app = FastAPI(
    version="1.0.0",
    title="Dashboard Config Service",
    description="Stores the dashboard's conf.yml in Redis behind a small token-protected API.",
    lifespan=lifespan,
)

FastAPIInstrumentor.instrument_app(app)

instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/metrics", "/api/health"],
)

instrumentator.instrument(app, metric_namespace="dashkv", metric_subsystem="config_service")


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    logger.warning(
        "Service error occurred, returning HTTP response",
        error=exc.error,
        detail=exc.message,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and known paths with the wrong method both list the API.
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "availableEndpoints": plugins.available_endpoints(),
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=exc.headers,
    )


# Last added runs first: logging wraps CORS, CORS wraps the error boundary.
app.middleware("http")(error_boundary_middleware)
app.middleware("http")(cors_middleware)
app.middleware("http")(structured_logging_middleware)

plugins = init_plugins(app)


def run():
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
