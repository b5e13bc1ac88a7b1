"""
Starship GraphQL type definitions
"""

import strawberry


@strawberry.type
class Starship:
    """Starship type for GraphQL API."""

    id: strawberry.ID
    name: str
