"""FastAPI application exposing componentkb services."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from componentkb.api.schemas import (
    EnvelopeResponse,
    ErrorResponse,
    ExampleSearchRequest,
    GuidanceSearchRequest,
    SearchRequest,
    SearchResponse,
    ValidateRequest,
    ValidationResponse,
)
from componentkb.config import Settings, get_settings
from componentkb.metrics.observability import bind_correlation_id, clear_correlation_id, configure_logging, get_logger
from componentkb.results import ErrorCode, Failure
from componentkb.retrieval import ExampleFilters, GuidanceFilters, SearchFilters, SQLiteCorpusStore
from componentkb.retrieval.service import CandidateStore
from componentkb.services import SearchService, ValidationService

FAILURE_STATUS = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.COMPONENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.SEARCH_ERROR: status.HTTP_502_BAD_GATEWAY,
}


@dataclass(frozen=True)
class AppDependencies:
    store: CandidateStore
    search_service: SearchService
    validation_service: ValidationService


def _build_dependencies(settings: Settings) -> AppDependencies:
    store = SQLiteCorpusStore(settings.database_path)
    return AppDependencies(
        store=store,
        search_service=SearchService.from_settings(store, settings),
        validation_service=ValidationService.from_settings(settings, store=store),
    )


def _failure_response(request: Request, failure: Failure) -> JSONResponse:
    correlation_id = getattr(request.state, "correlation_id", uuid4().hex)
    payload = failure.to_dict()
    body = ErrorResponse(errors=payload["errors"], metadata=payload["metadata"], correlation_id=correlation_id)
    return JSONResponse(
        status_code=FAILURE_STATUS.get(failure.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content=body.model_dump(),
    )


def create_app(*, settings: Settings | None = None, dependencies: AppDependencies | None = None) -> FastAPI:
    settings = settings or get_settings()
    deps = dependencies or _build_dependencies(settings)

    configure_logging(settings.log_level)
    logger = get_logger("api")
    app = FastAPI(title="componentkb API", version="0.1.0")
    app.state.dependencies = deps

    # Optional CORS
    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_allow_origins),
            allow_credentials=settings.cors_allow_credentials,
            allow_methods=list(settings.cors_allow_methods),
            allow_headers=list(settings.cors_allow_headers),
        )

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next):  # type: ignore[override]
        correlation_id = request.headers.get("X-Request-ID", uuid4().hex)
        request.state.correlation_id = correlation_id
        bind_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers["X-Correlation-ID"] = correlation_id
        return response

    def require_api_key(request: Request) -> None:
        expected = settings.api_key
        if not expected:
            return
        provided = request.headers.get("X-API-Key")
        if provided != expected:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        correlation_id = getattr(request.state, "correlation_id", uuid4().hex)
        logger.error("unhandled.error", correlation_id=correlation_id, detail=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error", "correlation_id": correlation_id},
        )

    def get_dependencies(request: Request) -> AppDependencies:
        return request.app.state.dependencies

    def get_search_service(dep: AppDependencies = Depends(get_dependencies)) -> SearchService:
        return dep.search_service

    def get_validation_service(dep: AppDependencies = Depends(get_dependencies)) -> ValidationService:
        return dep.validation_service

    @app.post("/search", response_model=SearchResponse)
    async def search_components(
        payload: SearchRequest,
        request: Request,
        service: SearchService = Depends(get_search_service),
        _auth: None = Depends(require_api_key),
    ):
        filters = SearchFilters(
            category=payload.category,
            tag=payload.tag,
            complexity=payload.complexity,
            requires_js=payload.requires_js,
        )
        result = service.search_components(payload.query, filters=filters, limit=payload.limit)
        if isinstance(result, Failure):
            return _failure_response(request, result)
        body = result.to_dict()
        return SearchResponse(**body["data"], metadata=body["metadata"])

    @app.get("/components/{name}", response_model=EnvelopeResponse)
    async def component_details(
        name: str,
        request: Request,
        service: SearchService = Depends(get_search_service),
        _auth: None = Depends(require_api_key),
    ):
        result = service.get_component_details(name)
        if isinstance(result, Failure):
            return _failure_response(request, result)
        return EnvelopeResponse(**result.to_dict())

    @app.get("/components/{name}/guidance", response_model=EnvelopeResponse)
    async def component_guidance(
        name: str,
        request: Request,
        service: SearchService = Depends(get_search_service),
        _auth: None = Depends(require_api_key),
    ):
        result = service.get_component_guidance(name)
        if isinstance(result, Failure):
            return _failure_response(request, result)
        return EnvelopeResponse(**result.to_dict())

    @app.post("/examples/search", response_model=EnvelopeResponse)
    async def search_code_examples(
        payload: ExampleSearchRequest,
        request: Request,
        service: SearchService = Depends(get_search_service),
        _auth: None = Depends(require_api_key),
    ):
        filters = ExampleFilters(
            component=payload.component,
            language=payload.language,
            complexity=payload.complexity,
            complete_only=payload.complete_only,
            interactive_only=payload.interactive_only,
        )
        result = service.search_code_examples(payload.query, filters=filters, limit=payload.limit)
        if isinstance(result, Failure):
            return _failure_response(request, result)
        return EnvelopeResponse(**result.to_dict())

    @app.post("/guidance/search", response_model=EnvelopeResponse)
    async def search_guidance(
        payload: GuidanceSearchRequest,
        request: Request,
        service: SearchService = Depends(get_search_service),
        _auth: None = Depends(require_api_key),
    ):
        filters = GuidanceFilters(kind=payload.kind, component=payload.component)
        result = service.search_guidance(payload.query, filters=filters, limit=payload.limit)
        if isinstance(result, Failure):
            return _failure_response(request, result)
        return EnvelopeResponse(**result.to_dict())

    @app.post("/validate", response_model=ValidationResponse)
    async def validate_component(
        payload: ValidateRequest,
        request: Request,
        service: ValidationService = Depends(get_validation_service),
        _auth: None = Depends(require_api_key),
    ):
        result = service.validate_component(payload.component, payload.html)
        if isinstance(result, Failure):
            return _failure_response(request, result)
        body = result.to_dict()
        return ValidationResponse(**body["data"], notices=body["notices"], metadata=body["metadata"])

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        from componentkb import __version__

        return {"status": "ok", "version": __version__, "environment": settings.environment}

    @app.head("/healthz")
    async def healthcheck_head() -> Response:
        return Response(status_code=status.HTTP_200_OK)

    @app.get("/livez")
    async def liveness() -> dict[str, str]:
        return {"status": "alive"}

    @app.get("/healthz/ready")
    async def readiness(dep: AppDependencies = Depends(get_dependencies)) -> dict[str, str]:
        try:
            documents = dep.store.count()
        except Exception as exc:
            return {"status": "error", "detail": str(exc)}
        return {"status": "ready", "documents": str(documents)}

    return app
