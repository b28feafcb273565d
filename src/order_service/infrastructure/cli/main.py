"""Operational commands: run the API server, prepare the database."""

from __future__ import annotations

import asyncio

import click

from order_service.domain.exceptions import DomainException
from order_service.infrastructure.config import Settings
from order_service.infrastructure.logging import configure_logging, get_logger
from order_service.infrastructure.persistence.database import create_schema, make_engine


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except DomainException as exc:
        raise click.ClickException(str(exc))


@click.group()
def cli() -> None:
    """Order Service: purchase order lifecycle API"""


@cli.command("serve")
@click.option("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Port (default: $PORT or 3000).")
@click.option("--reload", is_flag=True, default=False, help="Reload on code changes.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP API."""
    import uvicorn

    settings = _load_settings()
    uvicorn.run(
        "order_service.infrastructure.api.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command("init-db")
def init_db() -> None:
    """Create the orders tables if they do not exist."""
    settings = _load_settings()
    configure_logging(settings.log_level, json=settings.log_json)

    async def _run() -> None:
        engine = make_engine(settings.database_url)
        try:
            await create_schema(engine)
        finally:
            await engine.dispose()

    asyncio.run(_run())
    get_logger("cli").info("schema_created")
    click.echo("Database schema is up to date.")
