"""
Tests for the complexity limiter, depth limit and error codes
"""

from unittest.mock import patch

import pytest
from graphql import OperationDefinitionNode, TypeInfo, parse
from graphql.validation import ValidationContext

from starwars.graphql.engine import QueryExecutor
from starwars.graphql.extensions import (
    REQUEST_REJECTED,
    FieldComplexityCalculator,
    MaxQueryComplexityLimiter,
    calculate_complexity,
)
from starwars.graphql.schema import build_schema


def nested_friends(levels: int) -> str:
    selection = "name"
    for _ in range(levels):
        selection = f"friends {{ {selection} }}"
    return selection


def aliased_names(count: int) -> str:
    return " ".join(f"name{index}: name" for index in range(count))


def complexity_of(query: str, calculator: FieldComplexityCalculator | None = None) -> int:
    graphql_schema = build_schema()._schema
    document = parse(query)
    context = ValidationContext(
        graphql_schema, document, TypeInfo(graphql_schema), lambda error: None
    )
    operation = next(
        definition
        for definition in document.definitions
        if isinstance(definition, OperationDefinitionNode)
    )
    return calculate_complexity(context, operation, calculator or FieldComplexityCalculator())


class TestFieldComplexityCalculator:
    """Tests for the per-field cost function."""

    def test_scalar_and_object_fields(self):
        calculator = FieldComplexityCalculator()

        assert calculator("Character", "name", False, 0) == 1
        assert calculator("Query", "getCharacterById", False, 7) == 8

    def test_list_field_multiplies_child_cost(self):
        calculator = FieldComplexityCalculator(list_size_estimate=5)

        assert calculator("Character", "friends", True, 1) == 6

    def test_field_cost_override(self):
        calculator = FieldComplexityCalculator(field_costs={"Biological.starship": 4})

        assert calculator("Biological", "starship", False, 1) == 5


class TestCalculateComplexity:
    """Tests for static operation costing."""

    def test_simple_query(self):
        assert complexity_of('{ getCharacterById(id: "c1") { name } }') == 2

    def test_list_field(self):
        assert complexity_of('{ getCharacterById(id: "c1") { name friends { name } } }') == 8

    def test_typename_is_free(self):
        assert complexity_of('{ getCharacterById(id: "c1") { __typename name } }') == 2

    def test_named_fragment(self):
        query = """
            query { getCharacterById(id: "c1") { ...Parts } }
            fragment Parts on Character { name friends { name } }
        """
        assert complexity_of(query) == 8

    def test_inline_fragment(self):
        query = '{ getCharacterById(id: "c1") { name ... on Biological { starship { name } } } }'
        assert complexity_of(query) == 4

    def test_custom_list_size_estimate(self):
        calculator = FieldComplexityCalculator(list_size_estimate=2)
        query = '{ getCharacterById(id: "c1") { name friends { name } } }'

        assert complexity_of(query, calculator) == 5

    def test_mutation(self):
        assert complexity_of('mutation { saveStarship(input: {name: "X-Wing"}) { id name } }') == 3

    def test_aliases_are_counted(self):
        query = f'{{ getCharacterById(id: "c1") {{ {aliased_names(99)} }} }}'

        assert complexity_of(query) == 100

    def test_three_levels_of_friends(self):
        query = f'{{ getCharacterById(id: "c1") {{ {nested_friends(3)} }} }}'

        assert complexity_of(query) == 157


class TestMaxQueryComplexityLimiter:
    """Tests for rejecting expensive operations."""

    def test_defaults(self):
        limiter = MaxQueryComplexityLimiter(max_complexity=100)

        assert limiter.max_complexity == 100
        assert limiter.calculator.list_size_estimate == 5

    @pytest.mark.asyncio
    async def test_expensive_query_is_rejected_before_execution(
        self, executor, character_repository
    ):
        """Test that no repository access happens for a rejected operation."""
        query = f'query Deep {{ getCharacterById(id: "c1") {{ {nested_friends(3)} }} }}'

        with patch.object(
            character_repository, "get_many", wraps=character_repository.get_many
        ) as spy:
            result = await executor.execute(query)

        assert result["data"] is None
        assert len(result["errors"]) == 1
        error = result["errors"][0]
        assert error["message"] == "'Deep' has a complexity of 157, exceeding the maximum of 100"
        assert error["extensions"]["code"] == REQUEST_REJECTED
        spy.assert_not_called()

    @pytest.mark.asyncio
    async def test_anonymous_operation_name(self, executor):
        query = f'{{ getCharacterById(id: "c1") {{ {nested_friends(3)} }} }}'

        result = await executor.execute(query)

        assert result["errors"][0]["message"].startswith("'anonymous' has a complexity of 157")

    @pytest.mark.asyncio
    async def test_cost_at_limit_executes(self, executor):
        """Test that an operation costing exactly the maximum is accepted."""
        query = f'{{ getCharacterById(id: "c1") {{ {aliased_names(99)} }} }}'

        result = await executor.execute(query)

        assert result == {"data": {"getCharacterById": None}, "errors": []}

    @pytest.mark.asyncio
    async def test_cost_one_over_limit_is_rejected(self, executor):
        query = f'{{ getCharacterById(id: "c1") {{ {aliased_names(100)} }} }}'

        result = await executor.execute(query)

        assert result["data"] is None
        assert result["errors"][0]["message"] == (
            "'anonymous' has a complexity of 101, exceeding the maximum of 100"
        )
        assert result["errors"][0]["extensions"]["code"] == REQUEST_REJECTED

    @pytest.mark.asyncio
    async def test_query_within_limit_executes(self, executor):
        query = f'{{ getCharacterById(id: "c1") {{ {nested_friends(2)} }} }}'

        result = await executor.execute(query)

        assert result == {"data": {"getCharacterById": None}, "errors": []}


class TestDepthLimit:
    """Tests for the operation depth limit."""

    @pytest.mark.asyncio
    async def test_deep_query_is_rejected(self, services):
        executor = QueryExecutor(build_schema(max_complexity=10**18, max_depth=13), services)
        query = f'{{ getCharacterById(id: "c1") {{ {nested_friends(20)} }} }}'

        result = await executor.execute(query)

        assert result["data"] is None
        assert len(result["errors"]) == 1
        error = result["errors"][0]
        assert "exceeds maximum operation depth of 13" in error["message"]
        assert error["extensions"]["code"] == REQUEST_REJECTED

    @pytest.mark.asyncio
    async def test_depth_at_limit(self, services):
        """Test that the deepest leaf may sit exactly at the maximum depth."""
        executor = QueryExecutor(build_schema(max_complexity=10**18, max_depth=13), services)
        query = f'{{ getCharacterById(id: "c1") {{ {nested_friends(12)} }} }}'

        result = await executor.execute(query)

        assert result == {"data": {"getCharacterById": None}, "errors": []}

    @pytest.mark.asyncio
    async def test_one_level_over_limit(self, services, character_repository):
        executor = QueryExecutor(build_schema(max_complexity=10**18, max_depth=13), services)
        query = f'{{ getCharacterById(id: "c1") {{ {nested_friends(13)} }} }}'

        with patch.object(
            character_repository, "get_many", wraps=character_repository.get_many
        ) as spy:
            result = await executor.execute(query)

        assert result["data"] is None
        assert result["errors"] == [
            {
                "message": "'anonymous' exceeds maximum operation depth of 13",
                "locations": result["errors"][0]["locations"],
                "extensions": {"code": REQUEST_REJECTED},
            }
        ]
        spy.assert_not_called()

    @pytest.mark.asyncio
    async def test_moderate_depth_is_allowed(self, services):
        executor = QueryExecutor(build_schema(max_complexity=10**18, max_depth=13), services)
        query = f'{{ getCharacterById(id: "c1") {{ {nested_friends(6)} }} }}'

        result = await executor.execute(query)

        assert result == {"data": {"getCharacterById": None}, "errors": []}

    @pytest.mark.asyncio
    async def test_introspection_is_not_limited(self, executor):
        query = "{ __schema { types { name fields { name type { name ofType { name } } } } } }"

        result = await executor.execute(query)

        assert result["errors"] == []
        assert result["data"]["__schema"]["types"]
