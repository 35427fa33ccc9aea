from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional
import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from ..domain.errors import GenerationError, ValidationError
from ..observability.metrics import metrics_middleware_factory
from .deps import Engine, build_engine
from .routers.assistant import router as assistant_router
from .routers.reports import router as reports_router

load_dotenv()  # Load environment variables from .env if present (GEMINI_API_KEY, OPENAI_API_KEY, etc.)

logger = logging.getLogger(__name__)

API_NAME = "Lekhan Report Engine API"
API_VERSION = "0.1.0"


def _cors_origins() -> list[str]:
    raw = os.getenv("LEKHAN_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


async def _generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    logger.warning("Generation failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": exc.to_dict()})


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    app = FastAPI(title=API_NAME, version=API_VERSION)
    app.state.engine = engine or build_engine()

    # Observability: request latency histogram
    app.middleware("http")(metrics_middleware_factory())

    app.add_exception_handler(GenerationError, _generation_error_handler)
    app.add_exception_handler(ValidationError, _validation_error_handler)

    app.include_router(reports_router)
    app.include_router(assistant_router)
    # Also expose the same routers under /api for the web client
    app.include_router(reports_router, prefix="/api")
    app.include_router(assistant_router, prefix="/api")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        return {"name": API_NAME, "version": API_VERSION}

    @app.get("/health")
    def health():
        backend = app.state.engine.backend
        inner = getattr(backend, "inner", backend)
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "components": {
                "api": "ok",
                "llm_provider": getattr(inner, "provider", None) or "unconfigured",
                "chat_store": type(app.state.engine.store).__name__,
            },
        }

    @app.get("/metrics")
    def metrics() -> Response:
        # Expose Prometheus metrics
        data = generate_latest(REGISTRY)
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
