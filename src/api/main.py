from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from src.api.routes import register_routes
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.domain.services.ai_summary import AssessmentSummarizer
from src.domain.services.registry import AssessmentRegistry
from src.infrastructure.cache import LocalCache
from src.infrastructure.db import dispose_engine, get_session_factory
from src.infrastructure.repositories.assessment_store import SqlAssessmentStore
from src.libs.gpt_client import OpenAIClient
from starlette.responses import Response
from structlog.contextvars import bind_contextvars, clear_contextvars

logger = structlog.get_logger()


def build_registry(settings: Settings) -> AssessmentRegistry:
    """Wire the registry to the local snapshot and, when enabled, the remote table."""
    remote = None
    if settings.remote_sync_enabled:
        remote = SqlAssessmentStore(
            get_session_factory(), optimistic=settings.optimistic_concurrency
        )
    return AssessmentRegistry(
        LocalCache(settings.local_cache_path),
        remote,
        remote_sync_enabled=settings.remote_sync_enabled,
    )


def build_summarizer(settings: Settings) -> AssessmentSummarizer | None:
    if not settings.openai_api_key:
        return None
    return AssessmentSummarizer(OpenAIClient())


def create_app() -> FastAPI:
    """Application factory for the appraisal API."""
    setup_logging(json_logs=get_settings().environment not in ("local", "development"))
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "service_startup",
            service=settings.app_name,
            environment=settings.environment,
            version=settings.version,
            remote_sync=settings.remote_sync_enabled,
        )
        registry = build_registry(settings)
        await registry.load()
        app.state.registry = registry
        app.state.summarizer = build_summarizer(settings)
        try:
            yield
        finally:
            await dispose_engine()
            logger.info("service_shutdown", service=settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

    cors_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]

    # Allow all origins in local/development environment
    if settings.environment in ["local", "development"]:
        cors_origins.append("*")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if "*" not in cors_origins else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)

    @app.middleware("http")
    async def correlation_id_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid4()))
        bind_contextvars(
            request_id=request_id,
            path=str(request.url.path),
            method=request.method,
        )
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_contextvars()

    return app


app = create_app()
