"""
Schema extensions forming the instrumentation chain.

Order on the schema matters: the complexity and depth limiters are validation
rules, so both run before any resolver, and both report ``REQUEST_REJECTED``.
Batch dispatch wraps every resolver at execution time; error codes are
attached once the operation completes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import asdict
from inspect import isawaitable
from typing import Any

from graphql import (
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLError,
    GraphQLNamedType,
    InlineFragmentNode,
    OperationDefinitionNode,
    OperationType,
    SelectionSetNode,
    get_named_type,
    get_nullable_type,
    is_list_type,
)
from graphql.validation import ValidationContext, ValidationRule
from strawberry.extensions import AddValidationRules, QueryDepthLimiter, SchemaExtension
from strawberry.extensions.query_depth_limiter import IgnoreContext

from ..errors import StarWarsError
from ..logging import get_logger
from .dataloader import BatchDispatcher

logger = get_logger(__name__)

REQUEST_REJECTED = "REQUEST_REJECTED"


class FieldComplexityCalculator:
    """Cost of a single field given the cost of its selection set.

    Every field costs one unit unless ``field_costs`` overrides it (keyed by
    ``"Type.field"``); list fields multiply their child cost by
    ``list_size_estimate``.
    """

    def __init__(
        self, list_size_estimate: int = 5, field_costs: Mapping[str, int] | None = None
    ) -> None:
        self.list_size_estimate = list_size_estimate
        self.field_costs = dict(field_costs or {})

    def __call__(
        self, parent_type: str, field_name: str, is_list: bool, child_complexity: int
    ) -> int:
        unit = self.field_costs.get(f"{parent_type}.{field_name}", 1)
        if is_list:
            return unit + self.list_size_estimate * child_complexity
        return unit + child_complexity


def calculate_complexity(
    context: ValidationContext,
    operation: OperationDefinitionNode,
    calculator: FieldComplexityCalculator,
) -> int:
    """Statically compute the cost of one operation."""
    schema = context.schema
    root_types = {
        OperationType.QUERY: schema.query_type,
        OperationType.MUTATION: schema.mutation_type,
        OperationType.SUBSCRIPTION: schema.subscription_type,
    }
    fragments = {
        definition.name.value: definition
        for definition in context.document.definitions
        if isinstance(definition, FragmentDefinitionNode)
    }

    def selection_cost(
        selection_set: SelectionSetNode,
        parent_type: GraphQLNamedType | None,
        visited: frozenset[str],
    ) -> int:
        total = 0
        for selection in selection_set.selections:
            if isinstance(selection, FieldNode):
                total += field_cost(selection, parent_type, visited)
            elif isinstance(selection, InlineFragmentNode):
                fragment_type = parent_type
                if selection.type_condition is not None:
                    fragment_type = schema.get_type(selection.type_condition.name.value)
                total += selection_cost(selection.selection_set, fragment_type, visited)
            elif isinstance(selection, FragmentSpreadNode):
                name = selection.name.value
                fragment = fragments.get(name)
                # Unknown and cyclic spreads are reported by the standard rules
                if fragment is None or name in visited:
                    continue
                total += selection_cost(
                    fragment.selection_set,
                    schema.get_type(fragment.type_condition.name.value),
                    visited | {name},
                )
        return total

    def field_cost(
        node: FieldNode, parent_type: GraphQLNamedType | None, visited: frozenset[str]
    ) -> int:
        # Introspection and __typename are free
        if node.name.value.startswith("__"):
            return 0

        fields = getattr(parent_type, "fields", None) or {}
        field_def = fields.get(node.name.value)
        field_type = field_def.type if field_def is not None else None

        child_complexity = 0
        if node.selection_set is not None:
            child_type = get_named_type(field_type) if field_type is not None else None
            child_complexity = selection_cost(node.selection_set, child_type, visited)

        is_list = field_type is not None and is_list_type(get_nullable_type(field_type))
        parent_name = parent_type.name if parent_type is not None else ""
        return calculator(parent_name, node.name.value, is_list, child_complexity)

    return selection_cost(operation.selection_set, root_types.get(operation.operation), frozenset())


def create_complexity_validator(
    max_complexity: int,
    calculator: FieldComplexityCalculator,
    callback: Callable[[dict[str, int]], None] | None = None,
) -> type[ValidationRule]:
    class MaxComplexityValidator(ValidationRule):
        def __init__(self, validation_context: ValidationContext) -> None:
            super().__init__(validation_context)

            complexities: dict[str, int] = {}
            for definition in validation_context.document.definitions:
                if not isinstance(definition, OperationDefinitionNode):
                    continue
                name = definition.name.value if definition.name else "anonymous"
                complexity = calculate_complexity(validation_context, definition, calculator)
                complexities[name] = complexity

                if complexity > max_complexity:
                    logger.info(
                        "Rejected operation over complexity limit",
                        operation=name,
                        complexity=complexity,
                        max_complexity=max_complexity,
                    )
                    self.report_error(
                        GraphQLError(
                            f"'{name}' has a complexity of {complexity}, "
                            f"exceeding the maximum of {max_complexity}",
                            definition,
                            extensions={"code": REQUEST_REJECTED},
                        )
                    )

            if callable(callback):
                callback(complexities)

    return MaxComplexityValidator


class MaxQueryComplexityLimiter(AddValidationRules):
    """Reject operations whose static cost exceeds ``max_complexity``.

    Example:

    >>> schema = strawberry.Schema(
    ...     Query,
    ...     extensions=[lambda **_: MaxQueryComplexityLimiter(max_complexity=100)],
    ... )
    """

    def __init__(
        self,
        max_complexity: int,
        calculator: FieldComplexityCalculator | None = None,
        callback: Callable[[dict[str, int]], None] | None = None,
    ) -> None:
        self.max_complexity = max_complexity
        self.calculator = calculator or FieldComplexityCalculator()
        validator = create_complexity_validator(max_complexity, self.calculator, callback)
        super().__init__([validator])


class _RejectionContext:
    """Validation context proxy that tags every reported error as a rejection."""

    def __init__(self, context: ValidationContext) -> None:
        self._context = context

    def __getattr__(self, name: str) -> Any:
        return getattr(self._context, name)

    def report_error(self, error: GraphQLError) -> None:
        error.extensions = {**(error.extensions or {}), "code": REQUEST_REJECTED}
        self._context.report_error(error)


def _as_rejection(rule: type[ValidationRule]) -> type[ValidationRule]:
    class RejectionRule(rule):  # type: ignore[valid-type, misc]
        def __init__(self, validation_context: ValidationContext) -> None:
            super().__init__(_RejectionContext(validation_context))

    return RejectionRule


class MaxQueryDepthLimiter(QueryDepthLimiter):
    """Strawberry's depth limiter, reporting with the ``REQUEST_REJECTED`` code."""

    def __init__(
        self,
        max_depth: int,
        callback: Callable[[dict[str, int]], None] | None = None,
        should_ignore: Callable[[IgnoreContext], bool] | None = None,
    ) -> None:
        super().__init__(max_depth=max_depth, callback=callback, should_ignore=should_ignore)
        self.max_depth = max_depth
        self.validation_rules = [_as_rejection(rule) for rule in self.validation_rules]


def _dispatcher_from(context: Any) -> BatchDispatcher | None:
    if isinstance(context, dict):
        loaders = context.get("loaders")
    else:
        loaders = getattr(context, "loaders", None)
    return getattr(loaders, "dispatcher", None)


class BatchDispatchExtension(SchemaExtension):
    """Count resolvers in flight for the request's dispatch barrier."""

    def on_execute(self) -> Iterator[None]:
        yield
        dispatcher = _dispatcher_from(self.execution_context.context)
        if dispatcher is not None and dispatcher.statistics.dispatches:
            logger.debug("Batch loader statistics", **asdict(dispatcher.statistics))

    def resolve(self, _next: Callable[..., Any], root: Any, info: Any, *args: Any, **kwargs: Any) -> Any:
        dispatcher = _dispatcher_from(info.context)
        if dispatcher is None:
            return _next(root, info, *args, **kwargs)

        dispatcher.enter()
        try:
            result = _next(root, info, *args, **kwargs)
        except BaseException:
            dispatcher.leave()
            raise

        if isawaitable(result):
            return self._track(dispatcher, result)

        dispatcher.leave()
        return result

    @staticmethod
    async def _track(dispatcher: BatchDispatcher, result: Any) -> Any:
        try:
            return await result
        finally:
            dispatcher.leave()


class ErrorCodeExtension(SchemaExtension):
    """Copy the ``code`` of domain exceptions into GraphQL error extensions."""

    def on_operation(self) -> Iterator[None]:
        yield
        result = getattr(self.execution_context, "result", None)
        if result is None or not result.errors:
            return

        for error in result.errors:
            original = getattr(error, "original_error", None)
            if isinstance(original, StarWarsError):
                error.extensions = {**(error.extensions or {}), "code": original.code}
