"""
Main GraphQL schema definition using Strawberry
"""

from collections.abc import Callable
from typing import Any

import strawberry
from fastapi import Request
from graphql import GraphQLInterfaceType, GraphQLObjectType
from graphql import validate_schema as gql_validate_schema
from strawberry.extensions import SchemaExtension
from strawberry.extensions.query_depth_limiter import IgnoreContext
from strawberry.fastapi import GraphQLRouter
from strawberry.http import GraphQLHTTPResponse
from strawberry.types import ExecutionResult

from ..config import settings
from ..errors import ConfigurationError
from ..logging import get_logger
from ..services import Services
from .extensions import (
    BatchDispatchExtension,
    ErrorCodeExtension,
    FieldComplexityCalculator,
    MaxQueryComplexityLimiter,
    MaxQueryDepthLimiter,
)
from .loaders import build_context
from .mutations.root import Mutation
from .queries.root import Query
from .types.character import Biological, Droid

logger = get_logger(__name__)


def _is_introspection(ignore: IgnoreContext) -> bool:
    return ignore.field_name.startswith("__")


def _per_operation(
    extension_class: type[SchemaExtension], **options: Any
) -> Callable[..., SchemaExtension]:
    """Factory building a fresh extension instance for every operation."""

    def create(**_: Any) -> SchemaExtension:
        return extension_class(**options)

    return create


def build_schema(
    max_complexity: int | None = None,
    max_depth: int | None = None,
    list_size_estimate: int | None = None,
) -> strawberry.Schema:
    """Create the executable schema with its instrumentation chain.

    Limits default to the values in settings.
    """
    calculator = FieldComplexityCalculator(
        list_size_estimate=(
            list_size_estimate if list_size_estimate is not None else settings.list_size_estimate
        )
    )
    return strawberry.Schema(
        query=Query,
        mutation=Mutation,
        # Concrete Character types are only reachable through the interface
        types=[Biological, Droid],
        extensions=[
            _per_operation(
                MaxQueryComplexityLimiter,
                max_complexity=(
                    max_complexity if max_complexity is not None else settings.max_query_complexity
                ),
                calculator=calculator,
            ),
            _per_operation(
                MaxQueryDepthLimiter,
                max_depth=max_depth if max_depth is not None else settings.max_query_depth,
                should_ignore=_is_introspection,
            ),
            BatchDispatchExtension,
            ErrorCodeExtension,
        ],
    )


# Create the GraphQL schema
schema = build_schema()


def _is_composite(field_type: Any) -> bool:
    while hasattr(field_type, "of_type"):
        field_type = field_type.of_type
    return hasattr(field_type, "__strawberry_definition__")


def find_unbound_fields(target: strawberry.Schema) -> list[str]:
    """List object and interface fields that return a composite type without a resolver."""
    unbound: list[str] = []
    for type_name, graphql_type in target._schema.type_map.items():
        if type_name.startswith("__"):
            continue
        if not isinstance(graphql_type, (GraphQLObjectType, GraphQLInterfaceType)):
            continue

        definition = target.get_type_by_name(type_name)
        for field in getattr(definition, "fields", ()):
            if field.base_resolver is None and _is_composite(field.type):
                unbound.append(f"{type_name}.{field.python_name}")
    return unbound


def validate_schema(target: strawberry.Schema | None = None) -> None:
    """Validate the GraphQL schema at startup.

    Checks graphql-core schema validity, that introspection works, and that
    every relationship field is bound to a resolver, so that the server fails
    fast instead of returning nulls at runtime.

    Raises:
        ConfigurationError: If the schema is invalid or a relationship field is unbound
    """
    target = target or schema
    try:
        graphql_schema = target._schema

        errors = gql_validate_schema(graphql_schema)
        if errors:
            error_messages = [str(e) for e in errors]
            raise ConfigurationError(
                f"GraphQL schema validation failed: {'; '.join(error_messages)}"
            )

        from graphql import get_introspection_query, graphql_sync

        result = graphql_sync(graphql_schema, get_introspection_query())
        if result.errors:
            error_messages = [str(e) for e in result.errors]
            raise ConfigurationError(f"GraphQL introspection failed: {'; '.join(error_messages)}")

        unbound = find_unbound_fields(target)
        if unbound:
            raise ConfigurationError(
                f"Relationship fields without a resolver: {', '.join(sorted(unbound))}"
            )

        logger.info("GraphQL schema validation successful")

    except Exception as e:
        logger.error("GraphQL schema validation failed", error=str(e))
        raise


def format_result(result: ExecutionResult) -> GraphQLHTTPResponse:
    """Shape an execution result as the response envelope; ``errors`` is always present."""
    data: GraphQLHTTPResponse = {
        "data": result.data,
        "errors": [error.formatted for error in result.errors or []],
    }
    if result.extensions:
        data["extensions"] = result.extensions
    return data


class StarWarsGraphQLRouter(GraphQLRouter[dict[str, Any], None]):
    async def process_result(
        self, request: Request, result: ExecutionResult
    ) -> GraphQLHTTPResponse:
        return format_result(result)


# Create the GraphQL router for FastAPI integration
def create_graphql_router(
    services: Services, target: strawberry.Schema | None = None
) -> StarWarsGraphQLRouter:
    """Create a GraphQL router for FastAPI."""

    async def get_context(request: Request) -> dict[str, Any]:
        """Get the context for GraphQL resolvers, with fresh loaders per request."""
        return build_context(services, request=request)

    return StarWarsGraphQLRouter(
        target or schema,
        path="/graphql",
        graphiql=settings.graphiql,
        allow_queries_via_get=False,
        context_getter=get_context,
    )
