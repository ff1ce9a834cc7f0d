from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from devkit.observability import configure_logging, configure_otel, configure_health_check_access_log_filter
from playground_search.exceptions import AuthorizationError

from playground_api.dependencies import get_prometheus_collector, get_settings
from playground_api.errors import ApiError
from playground_api.middleware import ObservabilityMiddleware
from playground_api.observability import CompositeApiMetricsCollector, InMemoryApiMetricsCollector
from playground_api.response import error_response, success_response
from playground_api.routers.me import router as me_router
from playground_api.routers.photos import router as photos_router
from playground_api.routers.places_proxy import router as places_proxy_router
from playground_api.routers.playgrounds import router as playgrounds_router
from playground_api.routers.search import router as search_router


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Playground Explorer API", version="0.1.0")
    configure_logging(settings.LOG_LEVEL)
    configure_otel(service_name="playground-api")
    configure_health_check_access_log_filter()
    app.state.api_metrics = InMemoryApiMetricsCollector()
    app.state.prom_metrics = get_prometheus_collector()
    app.state.composite_metrics = CompositeApiMetricsCollector(
        [app.state.api_metrics, app.state.prom_metrics]
    )
    app.add_middleware(ObservabilityMiddleware, collector=app.state.composite_metrics)
    # /search and /top must be matched before /{playground_id}.
    app.include_router(search_router)
    app.include_router(playgrounds_router)
    app.include_router(photos_router)
    app.include_router(me_router)
    app.include_router(places_proxy_router)
    app.mount(
        settings.PHOTO_PUBLIC_BASE_URL,
        StaticFiles(directory=settings.PHOTO_STORAGE_DIR, check_dir=False),
        name="photos",
    )

    @app.get("/healthz")
    async def healthz() -> dict:
        return success_response({"status": "ok"}, meta={})

    @app.get("/readyz")
    async def readyz() -> dict:
        return success_response({"status": "ready"}, meta={})

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = app.state.prom_metrics.render()
        return Response(content=payload, media_type="text/plain; version=0.0.4")

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(_: Request, exc: AuthorizationError) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content=error_response(
                "AUTH_REQUIRED",
                "Sign in to continue",
                {"redirect_to": settings.SIGN_IN_PATH},
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(
            status_code=422,
            content=error_response("VALIDATION_ERROR", message),
        )

    return app


app = create_app()
