"""
Root GraphQL query definitions
"""

import strawberry

from ..types.character import Character
from ..types.starship import Starship


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field(name="getCharacterById")
    async def get_character_by_id(self, info: strawberry.Info, id: strawberry.ID) -> Character | None:
        """Get a character by ID."""
        from ..resolvers.character import resolve_character_by_id

        return await resolve_character_by_id(info, id)

    @strawberry.field(name="getStarshipById")
    async def get_starship_by_id(self, info: strawberry.Info, id: strawberry.ID) -> Starship | None:
        """Get a starship by ID."""
        from ..resolvers.starship import resolve_starship_by_id

        return await resolve_starship_by_id(info, id)
