"""Command-line interface for SchemaBase.

This module provides the CLI commands for running and managing
the SchemaBase application.
"""

import asyncio
from typing import NoReturn

import click

from schemabase import __version__
from schemabase.core.config import get_settings
from schemabase.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="SchemaBase")
def cli() -> None:
    """SchemaBase - runtime schema registry and schema-driven data service.

    Settings are read from SCHEMABASE_* environment variables and .env.
    """


@cli.command()
@click.option(
    "--host",
    type=str,
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the SchemaBase server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    if bind_workers > 1 and settings.is_sqlite:
        raise click.UsageError(
            "SQLite does not support multiple worker processes. "
            "Use --workers 1 or switch to PostgreSQL."
        )

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting SchemaBase server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "schemabase.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def init_db(force: bool) -> None:
    """Create the schemas and documents tables.

    Use this only in development. In production, use migrations instead.
    """
    from schemabase.infrastructure.persistence.database import DatabaseManager

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize() -> None:
        db = DatabaseManager(settings)
        try:
            if not await db.check_connection():
                raise click.ClickException("Failed to connect to database")
            await db.create_tables()
            click.echo("Database initialized successfully.")
        finally:
            await db.disconnect()

    asyncio.run(initialize())


@cli.command()
def info() -> None:
    """Display SchemaBase configuration."""
    settings = get_settings()

    click.echo(f"""
SchemaBase v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}
  Echo:         {settings.db_echo}
  Auto-create:  {settings.auto_create_tables}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `schemabase` command is run
    or when using `python -m schemabase`.
    """
    cli()


if __name__ == "__main__":
    main()
