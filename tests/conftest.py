"""
Shared pytest fixtures and configuration for all tests.
"""

import pytest

from starwars.graphql.engine import QueryExecutor
from starwars.graphql.schema import build_schema
from starwars.repositories import CharacterRepository, StarshipRepository
from starwars.services import Services, build_services


@pytest.fixture
def character_repository() -> CharacterRepository:
    return CharacterRepository()


@pytest.fixture
def starship_repository() -> StarshipRepository:
    return StarshipRepository()


@pytest.fixture
def services(
    character_repository: CharacterRepository, starship_repository: StarshipRepository
) -> Services:
    """Fresh services over empty repositories."""
    return build_services(character_repository, starship_repository)


@pytest.fixture
def schema():
    """Schema with the default limits."""
    return build_schema(max_complexity=100, max_depth=13, list_size_estimate=5)


@pytest.fixture
def executor(schema, services: Services) -> QueryExecutor:
    return QueryExecutor(schema, services)
