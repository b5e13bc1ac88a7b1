"""
Execution entry point independent of the HTTP transport.
"""

from __future__ import annotations

from typing import Any

import strawberry
from graphql import GraphQLError
from strawberry.types import ExecutionResult

from ..logging import get_logger
from ..services import Services
from .loaders import build_context
from .schema import format_result

logger = get_logger(__name__)


class QueryExecutor:
    """Execute GraphQL documents against a schema and the shared services.

    ``execute`` always returns an envelope: parse and validation failures come
    back with ``data`` set to None, and unexpected exceptions are logged and
    reported as a single error.
    """

    def __init__(self, schema: strawberry.Schema, services: Services) -> None:
        self.schema = schema
        self.services = services

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> dict[str, Any]:
        context = build_context(self.services)
        try:
            result = await self.schema.execute(
                query,
                variable_values=variables,
                operation_name=operation_name,
                context_value=context,
            )
        except Exception as e:
            logger.error(
                "GraphQL execution failed", operation=operation_name, error=str(e), exc_info=True
            )
            result = ExecutionResult(data=None, errors=[GraphQLError("Internal server error")])

        if result.errors:
            logger.info(
                "GraphQL execution completed with errors",
                operation=operation_name,
                error_count=len(result.errors),
            )
        return dict(format_result(result))
