# landval/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from landval.clients.valuation_api import ValuationApiClient
from landval.core.config import settings
from landval.core.logging_config import configure_logging
from landval.middleware.request_logging import RequestLoggingMiddleware
from landval.routers.health import router as health_router
from landval.routers.root import router as root_router
from landval.routers.valuations import router as valuations_router
from landval.core.exception_handlers import app_error_handler, unhandled_exception_handler
from landval.core import AppError
from landval.services.valuation_service import ValuationService

configure_logging()


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def create_app(*, api_client: ValuationApiClient | None = None, poll_interval_seconds: float | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = api_client or ValuationApiClient()
        app.state.valuation_service = ValuationService(client, poll_interval_seconds=poll_interval_seconds)
        try:
            yield
        finally:
            # Cancel every poller and tracker timer before the loop goes away
            await app.state.valuation_service.shutdown()
            await client.aclose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.add_middleware(RequestLoggingMiddleware)

    # ---- CORS (env-driven) ----
    # CORS_ALLOW_ORIGINS="http://localhost:5173,https://yourapp.vercel.app"
    allow_origins = _split_csv(settings.CORS_ALLOW_ORIGINS)

    cors_kwargs = dict(
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.CORS_ALLOW_VERCEL_PREVIEWS:
        # Allows https://<anything>.vercel.app
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"^https:\/\/.*\.vercel\.app$",
            **cors_kwargs,
        )
    else:
        if not allow_origins:
            allow_origins = ["http://localhost:5173"]

        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            **cors_kwargs,
        )

    # Exception handlers
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers
    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(valuations_router)

    return app


app = create_app()
