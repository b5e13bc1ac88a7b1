"""
Configuration management for the Star Wars GraphQL API
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="STARWARS_",
        case_sensitive=False,
        extra="ignore",
    )

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_reload: bool = False
    graphiql: bool = True

    # Query limits
    max_query_complexity: int = 100
    max_query_depth: int = 13
    list_size_estimate: int = 5  # assumed element count for list fields when costing

    # Demo data loaded into the repositories at startup
    seed_demo_data: bool = False

    # Environment
    environment: str = "development"  # 'development', 'staging', 'production'
    debug: bool = True
    log_level: str = "INFO"


# Global settings instance
settings = Settings()

# Debug: Log settings initialization (only in debug mode)
if settings.debug:
    from .logging import get_logger

    _logger = get_logger(__name__)
    _logger.debug(
        "Settings initialized",
        environment=settings.environment,
        max_query_complexity=settings.max_query_complexity,
        max_query_depth=settings.max_query_depth,
    )
