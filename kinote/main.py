from contextlib import asynccontextmanager
from fastapi import FastAPI

from kinote.infrastructure.db.pool import close_pool, open_pool
from kinote.infrastructure.email.http_smtp_adapter import HttpSmtpEmailAdapter
from kinote.infrastructure.http.client import (
    close_http_client,
    get_http_client,
    open_http_client,
)
from kinote.infrastructure.memory.registry import RegistrationStores
from kinote.logging import setup_logging
from kinote.presentation.api import api
from kinote.settings import Settings, get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    await open_pool()

    await open_http_client()

    # Create ONE shared Email adapter, using the shared HTTP client
    email_adapter = HttpSmtpEmailAdapter(
        base_url=app.state.settings.smtp_base_url,
        client=get_http_client(),
    )
    app.state.email_adapter = email_adapter  # expose to dependencies

    stores: RegistrationStores = app.state.registration_stores
    stores.scheduler.start()

    try:
        yield
    finally:
        # shutdown
        await stores.scheduler.stop()
        await email_adapter.aclose()  # it won't close the shared client
        await close_http_client()  # closes the shared client
        await close_pool()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    # interactive docs are for dev and staging only
    docs = settings.app_env != "prod"
    app = FastAPI(
        title="Kinote Registration API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
    )
    app.state.settings = settings
    # one set of auth stores per process
    app.state.registration_stores = RegistrationStores.create(
        registration_ttl_seconds=settings.registration_ttl_seconds,
        code_ttl_seconds=settings.code_ttl_seconds,
        password_reset_ttl_seconds=settings.password_reset_ttl_seconds,
        cleanup_interval_seconds=settings.cleanup_interval_seconds,
    )
    app.include_router(api)
    return app


app = create_app()
