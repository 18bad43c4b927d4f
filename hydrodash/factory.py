from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from hydrodash.api.router import api_router
from hydrodash.clients.rapt import RaptClient
from hydrodash.core.config import Settings, load_settings
from hydrodash.core.logging_setup import setup_logging
from hydrodash.services.dashboard import ViewRegistry
from hydrodash.services.seed import SeedLoader, SeedStore
from hydrodash.web.router import ui_router

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.rapt_client = RaptClient(
            timeout_seconds=settings.rapt_timeout_seconds,
            auth_url=str(settings.rapt_auth_url),
            api_url=str(settings.rapt_api_url),
        )
        app.state.seed_store = SeedStore(
            loader=SeedLoader(
                client=app.state.rapt_client,
                client_id=settings.rapt_client_id,
                username=settings.rapt_username,
                password=settings.rapt_portal_secret,
            ),
            revalidate_seconds=settings.seed_revalidate_seconds,
        )
        if not settings.rapt_portal_secret:
            logger.warning("RAPT portal secret is not set; the dashboard cannot load")
        logger.info("hydrodash started (env=%s)", settings.env)

        yield
        app.state.rapt_client.close()

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="hydrodash",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.view_registry = ViewRegistry(max_views=settings.max_views)

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.is_production,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    if settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
            )
        return response

    @app.get("/", tags=["meta"])
    def root():
        return {"name": "hydrodash", "status": "ok"}

    app.include_router(api_router)
    app.include_router(ui_router)

    static_dir = Path(__file__).resolve().parent / "web" / "static"
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
    return app
