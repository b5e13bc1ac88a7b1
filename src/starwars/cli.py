#!/usr/bin/env python3
"""
Main CLI entry point for the Star Wars GraphQL server.
"""

import os
import sys
from pathlib import Path

import click
import uvicorn

from starwars import __version__
from starwars.config import settings
from starwars.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="starwars")
def cli() -> None:
    """Star Wars CLI - serve the GraphQL API and inspect its schema."""
    pass


@cli.command()
@click.option(
    "--host",
    default=settings.api_host,
    help=f"Host to bind to (default: {settings.api_host})",
)
@click.option(
    "--port",
    default=settings.api_port,
    type=int,
    help=f"Port to bind to (default: {settings.api_port})",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
@click.option(
    "--seed",
    is_flag=True,
    default=False,
    help="Load demo characters and starships at startup",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, reload: bool, seed: bool, log_level: str) -> None:
    """Start the GraphQL API server."""
    configure_logging(debug=(log_level == "debug"))

    logger.info(
        "Starting Star Wars GraphQL server",
        host=host,
        port=port,
        reload=reload,
        seed=seed,
        log_level=log_level,
    )

    # The app reads these when it is imported by uvicorn
    if log_level == "debug":
        os.environ["STARWARS_DEBUG"] = "true"
        os.environ["STARWARS_LOG_LEVEL"] = "debug"
    else:
        os.environ.setdefault("STARWARS_DEBUG", "false")
        os.environ.setdefault("STARWARS_LOG_LEVEL", log_level)
    if seed:
        os.environ["STARWARS_SEED_DEMO_DATA"] = "true"

    try:
        uvicorn.run(
            "starwars.api.app:app",
            host=host,
            port=port,
            reload=reload,
            log_level=log_level,
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.command("export-schema")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the SDL to this file instead of stdout",
)
def export_schema(output: Path | None) -> None:
    """Print the GraphQL schema definition language."""
    from starwars.graphql.schema import schema, validate_schema

    validate_schema(schema)
    sdl = schema.as_str()

    if output is None:
        click.echo(sdl)
        return

    output.write_text(sdl + "\n", encoding="utf-8")
    click.echo(f"Schema written to {output}")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
