# src/api/app.py — v2
"""FastAPI application: /analyze, /define, /define-batch, /health, /languages, /stats.

Build with ``create_app()``; the service is created on startup unless one
is passed in (tests inject a pre-wired service).
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from readlearn.api.models import AnalyzeRequest, DefineBatchRequest, DefineRequest
from readlearn.api.service import ReadLearnService, build_service
from readlearn.api.validation import (
    InputValidationError,
    validate_analyze_request,
    validate_define_batch_request,
    validate_define_request,
)
from readlearn.classification.errors import (
    ClassificationParseError,
    ClassificationTransportError,
)
from readlearn.config.languages import SUPPORTED_LANGUAGES
from readlearn.config.settings import Settings, load_settings
from readlearn.logging.context import clear_context, set_request_context
from readlearn.logging.logger import setup_logging

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Propagates X-Request-ID and binds it to the logging context."""

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable):
        action = request.url.path.strip("/") or "root"
        request_id = set_request_context(action, request.headers.get(self.header_name))
        try:
            response = await call_next(request)
        finally:
            clear_context()
        response.headers[self.header_name] = request_id
        return response


def get_service(request: Request) -> ReadLearnService:
    return request.app.state.service


def create_app(
    service: ReadLearnService | None = None,
    settings: Settings | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Construct the FastAPI application.

    Args:
        service: Pre-wired service. Built from settings on startup if None.
        settings: Application settings. Taken from the service, or loaded
            from .env, if None.
        configure_logging: Apply LOG_* settings to the readlearn logger.
    """
    if settings is None:
        settings = service.settings if service is not None else load_settings()
    if configure_logging:
        setup_logging(
            level=settings.log_level,
            log_format=settings.log_format,
            log_file=settings.log_file,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = getattr(app.state, "service", None) is None
        if owned:
            app.state.service = build_service(settings)
        await app.state.service.startup()
        try:
            yield
        finally:
            if owned:
                app.state.service.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    if service is not None:
        app.state.service = service
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request"
        loc = ".".join(str(p) for p in errors[0]["loc"][1:]) if errors else ""
        return JSONResponse(
            status_code=400,
            content={"error": f"{loc}: {message}" if loc else message},
        )

    @app.exception_handler(InputValidationError)
    async def _invalid_input(request: Request, exc: InputValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.post("/analyze")
    async def analyze(
        body: AnalyzeRequest, service: ReadLearnService = Depends(get_service)
    ):
        req = validate_analyze_request(body, service.settings)
        try:
            result = await service.analyze(
                req.text, url=req.url, language=req.language, use_cache=req.use_cache
            )
        except ClassificationTransportError as e:
            logger.error("Analysis transport failure: %s", e)
            return JSONResponse(status_code=502, content={"error": "Analysis service error"})
        except ClassificationParseError as e:
            logger.error("Analysis parse failure: %s", e)
            return JSONResponse(status_code=502, content={"error": "Failed to parse analysis"})
        return result.to_public_dict()

    @app.post("/define")
    async def define(
        body: DefineRequest, service: ReadLearnService = Depends(get_service)
    ):
        req = validate_define_request(body, service.settings)
        try:
            result = await service.define(
                req.word, context=req.context, language=req.language, force_ai=req.force_ai
            )
        except ClassificationTransportError as e:
            logger.error("Definition transport failure: %s", e)
            return JSONResponse(status_code=502, content={"error": "Definition service error"})
        except ClassificationParseError as e:
            logger.error("Definition parse failure: %s", e)
            return JSONResponse(status_code=502, content={"error": "Failed to parse definition"})
        return result.model_dump()

    @app.post("/define-batch")
    async def define_batch(
        body: DefineBatchRequest, service: ReadLearnService = Depends(get_service)
    ):
        req = validate_define_batch_request(body, service.settings)
        try:
            results = await service.define_batch(req.word_list(), language=req.language)
        except ClassificationTransportError as e:
            logger.error("Batch definition transport failure: %s", e)
            return JSONResponse(status_code=502, content={"error": "Definition service error"})
        return {"results": [r.model_dump() for r in results], "total": len(results)}

    @app.get("/health")
    async def health(service: ReadLearnService = Depends(get_service)):
        return service.health()

    @app.get("/languages")
    async def languages(service: ReadLearnService = Depends(get_service)):
        return {
            "languages": SUPPORTED_LANGUAGES,
            "total": len(SUPPORTED_LANGUAGES),
            "default": service.settings.default_language,
        }

    @app.get("/stats")
    async def stats(service: ReadLearnService = Depends(get_service)):
        try:
            return await service.stats()
        except Exception as e:
            logger.error("Failed to fetch stats: %s", e)
            return JSONResponse(status_code=500, content={"error": "Failed to fetch stats"})

    return app
