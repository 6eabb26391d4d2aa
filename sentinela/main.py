"""Main application module for the Sentinela face search backend."""
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sentinela.api import router as api_v1_router
from sentinela.core.config import settings
from sentinela.core.container import ServiceContainer, container
from sentinela.core.exceptions import ServiceNotInitializedError, UnauthorizedError
from sentinela.core.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from sentinela.infrastructure.dependencies import get_container

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[Any, None]:
    """Handle application startup and shutdown events.

    Args:
        app: FastAPI application instance

    Returns:
        AsyncGenerator[Any, None]: Async context manager for app lifecycle
    """
    logger.info(
        "Starting up Sentinela",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        vector_backend=settings.VECTOR_BACKEND,
    )

    await container.initialize()
    logger.info("Initialized application services")

    yield

    logger.info("Shutting down Sentinela")
    await container.cleanup()
    logger.info("Cleaned up application resources")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Bind a request id to every log line of the request and echo it back."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    clear_request_context()
    bind_request_context(request_id=request_id, method=request.method, path=request.url.path)

    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "Request handled",
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1)
    )
    return response


app.include_router(api_v1_router, prefix=settings.API_V1_STR)


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> JSONResponse:
    logger.warning("Rejected request without caller identity", path=request.url.path)
    return JSONResponse(status_code=401, content={"detail": exc.message})


@app.exception_handler(ServiceNotInitializedError)
async def not_initialized_handler(request: Request, exc: ServiceNotInitializedError) -> JSONResponse:
    logger.error("Service not initialized", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=503, content={"detail": "Service unavailable"})


@app.get("/health")
async def health_check(cont: ServiceContainer = Depends(get_container)) -> dict:
    """Health check endpoint.

    Returns:
        dict: Health status, embedding service reachability and ingestion queue counters
    """
    embedding_ok = await cont.embedding_client.is_available()
    logger.info("Health check requested", embedding_service=embedding_ok)
    return {
        "status": "healthy",
        "embedding_service": embedding_ok,
        "ingest_queue": cont.ingest_queue.stats(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("sentinela.main:app", host=settings.HOST, port=settings.PORT)
