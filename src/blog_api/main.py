"""FastAPI application entrypoint."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from blog_api.config import Settings
from blog_api.posts import router as posts_router
from blog_api.redis_store import create_store
from blog_api.telemetry import (
    add_trace_context,
    configure_stdlib_logging,
    init_telemetry,
    shutdown_telemetry,
)

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_trace_context,  # type: ignore[list-item]
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(),
    ],
)

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_telemetry()
    settings = Settings()
    configure_stdlib_logging(settings.log_level)
    app.state.settings = settings
    app.state.store = create_store(
        settings.store_backend, settings.redis_url, settings.store_key_prefix
    )
    await log.ainfo("service started", store_backend=settings.store_backend)
    yield

    await app.state.store.aclose()
    await log.ainfo("service stopped")
    shutdown_telemetry()


app = FastAPI(title="Blog Post API", version="0.1.0", lifespan=lifespan)
app.include_router(posts_router)
FastAPIInstrumentor.instrument_app(app)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
