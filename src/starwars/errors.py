"""
Domain and startup exceptions.

Exceptions raised from services surface as field-level GraphQL errors; the
``code`` attribute is copied into the error's ``extensions`` by
``ErrorCodeExtension``.
"""


class StarWarsError(Exception):
    """Base exception for domain failures surfaced through GraphQL."""

    code = "INTERNAL_ERROR"


class InputValidationError(StarWarsError):
    """A mutation input violates a domain invariant; nothing is stored."""

    code = "VALIDATION_ERROR"


class UnknownReferenceError(InputValidationError):
    """A mutation input references an entity that does not exist."""

    code = "REFERENCE_ERROR"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} '{entity_id}' does not exist")
        self.entity = entity
        self.entity_id = entity_id


class TypeResolutionError(StarWarsError):
    """A character record carries a missing or unrecognized discriminator."""

    code = "TYPE_RESOLUTION_ERROR"


class ConfigurationError(Exception):
    """The executable schema cannot be built; the server must not start."""

    pass
