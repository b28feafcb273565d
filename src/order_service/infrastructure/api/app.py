from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from order_service.infrastructure.api.errors import register_exception_handlers
from order_service.infrastructure.api.routes import health_router, router
from order_service.infrastructure.bootstrap import Container, build_container
from order_service.infrastructure.config import Settings
from order_service.infrastructure.logging import configure_logging, get_logger


def create_app(settings: Settings | None = None, container: Container | None = None) -> FastAPI:
    """Build the ASGI app.

    Pass *container* to run against pre-built collaborators (tests do this
    with in-memory fakes); otherwise one is built from *settings*.
    """
    if container is not None:
        settings = container.settings
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, json=settings.log_json)
    log = get_logger("api")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.container = container or build_container(settings)
        await app.state.container.startup()
        log.info("service_started", env=settings.app_env, port=settings.port)
        try:
            yield
        finally:
            await app.state.container.aclose()
            log.info("service_stopped")

    app = FastAPI(title="Order Service", version="0.1.0", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(router, tags=["orders"])
    return app
