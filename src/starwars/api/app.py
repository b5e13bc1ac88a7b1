"""
Main FastAPI application for the Star Wars GraphQL API
"""

from contextlib import asynccontextmanager

import strawberry
from fastapi import FastAPI

from .. import __version__
from ..config import settings
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware
from ..services import Services, build_services

# Configure logging before creating logger
configure_logging(debug=settings.debug)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Star Wars GraphQL API...")

    if settings.seed_demo_data:
        from ..seed_data import seed_demo_data

        seed_demo_data(app.state.services)

    yield

    logger.info("Shutting down Star Wars GraphQL API...")


def create_app(
    services: Services | None = None, schema: strawberry.Schema | None = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Repositories live as long as the application; pass ``services`` to share
    them with the caller (tests do).
    """
    app = FastAPI(
        title="Star Wars GraphQL API",
        description="Characters and starships over GraphQL",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.services = services if services is not None else build_services()

    app.add_middleware(LoggingContextMiddleware)

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    try:
        from ..graphql.schema import create_graphql_router, validate_schema
        from ..graphql.schema import schema as default_schema

        target = schema or default_schema

        # Fail before serving when the schema or its wiring is broken
        logger.info("Validating GraphQL schema...")
        validate_schema(target)

        graphql_router = create_graphql_router(app.state.services, target)
        app.include_router(graphql_router, prefix="")
        logger.info("GraphQL endpoint initialized successfully", endpoint="/graphql")
    except Exception as e:
        logger.error("Failed to initialize GraphQL endpoint", error=str(e))
        raise

    return app


# Create the main application instance
app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "starwars.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
