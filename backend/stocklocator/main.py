import logging
import sys
from typing import Optional, Set

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import ConfigurationError, Settings
from .core.errors import StockLocatorError
from .core.logging import setup_logging
from .routes.health import router as health_router
from .routes.variants import router as variants_router
from .services.variants import VariantLocationService
from .shopify.client import GraphQLExecutor, ShopifyGraphQLClient
from .telemetry.otel import setup_otel

# --------------------------------------------------
# Custom metrics must be registered in the process
# registry before the first scrape
# --------------------------------------------------
import stocklocator.telemetry.metrics  # noqa: F401

logger = logging.getLogger("stocklocator")


def allowed_methods(app: FastAPI, path: str) -> Set[str]:
    methods: Set[str] = set()
    for route in app.router.routes:
        if isinstance(route, APIRoute) and route.path == path:
            methods |= route.methods
    return methods


def create_app(settings: Settings, executor: Optional[GraphQLExecutor] = None) -> FastAPI:
    setup_logging(settings)

    app = FastAPI(
        title=settings.project_name,
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.variant_service = VariantLocationService(
        executor or ShopifyGraphQLClient(settings),
        page_size=settings.lookup_page_size,
    )

    # --------------------------------------------------
    # Error translation: {"error": ...} bodies only
    # --------------------------------------------------
    @app.exception_handler(StockLocatorError)
    def handle_stocklocator_error(request: Request, exc: StockLocatorError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.info("Rejected malformed body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(StarletteHTTPException)
    def handle_http_error(request: Request, exc: StarletteHTTPException):
        # unmatched API paths fall through to the static mount as 404s
        status_code, headers, message = exc.status_code, exc.headers, exc.detail
        if status_code == 404:
            allowed = allowed_methods(request.app, request.url.path)
            if allowed:
                status_code, message = 405, "Method Not Allowed"
                headers = {"Allow": ", ".join(sorted(allowed))}
        return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)

    # --------------------------------------------------
    # OpenTelemetry
    # --------------------------------------------------
    if settings.otel_enabled:
        setup_otel(app, settings)

    # --------------------------------------------------
    # API Routes
    # --------------------------------------------------
    app.include_router(health_router)
    app.include_router(variants_router)

    # --------------------------------------------------
    # Prometheus request-level instrumentation
    # --------------------------------------------------
    if settings.metrics_enabled:
        Instrumentator(
            should_group_status_codes=False,
            should_ignore_untemplated=True,
            excluded_handlers=["/metrics", "/health"],
        ).instrument(app)

        @app.get("/metrics", include_in_schema=False)
        def metrics():
            return Response(
                content=generate_latest(),
                media_type=CONTENT_TYPE_LATEST,
            )

    # --------------------------------------------------
    # Bundled front-end (mounted last so API routes win)
    # --------------------------------------------------
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.warning("Static directory %s not found; front-end disabled", settings.static_dir)

    return app


def run() -> None:
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.error("%s", exc)
        sys.exit(1)

    app = create_app(settings)
    logger.info(
        "Variant location server listening on http://%s:%s (shop %s, API %s)",
        settings.host,
        settings.port,
        settings.shopify_shop,
        settings.shopify_api_version,
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
