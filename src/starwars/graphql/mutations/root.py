"""
Root GraphQL mutation definitions
"""

import strawberry

from ..types.character import Biological, Droid
from ..types.starship import Starship


# Input types for mutations
@strawberry.input
class DroidCharacterInput:
    """Input for saving a droid. Omitting ``id`` creates a new droid."""

    name: str
    id: strawberry.ID | None = None
    friend_ids: list[strawberry.ID] | None = None


@strawberry.input
class BiologicalCharacterInput:
    """Input for saving a Biological character. Omitting ``id`` creates a new one."""

    name: str
    id: strawberry.ID | None = None
    friend_ids: list[strawberry.ID] | None = None
    starship_id: strawberry.ID | None = None


@strawberry.input
class StarshipInput:
    """Input for saving a starship. Omitting ``id`` creates a new starship."""

    name: str
    id: strawberry.ID | None = None


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    # Character mutations
    @strawberry.mutation(name="saveDroidCharacter")
    async def save_droid_character(
        self, info: strawberry.Info, input: DroidCharacterInput
    ) -> Droid | None:
        """Insert or replace a droid."""
        from ..resolvers.character import save_droid_character

        return await save_droid_character(info, input)

    @strawberry.mutation(name="saveBiologicalCharacter")
    async def save_biological_character(
        self, info: strawberry.Info, input: BiologicalCharacterInput
    ) -> Biological | None:
        """Insert or replace a Biological character."""
        from ..resolvers.character import save_biological_character

        return await save_biological_character(info, input)

    @strawberry.mutation(name="deleteCharacterById")
    async def delete_character_by_id(self, info: strawberry.Info, id: strawberry.ID) -> bool | None:
        """Delete a character."""
        from ..resolvers.character import delete_character_by_id

        return await delete_character_by_id(info, id)

    @strawberry.mutation(name="deleteAllCharacters")
    async def delete_all_characters(self, info: strawberry.Info) -> bool | None:
        """Delete every character."""
        from ..resolvers.character import delete_all_characters

        return await delete_all_characters(info)

    # Starship mutations
    @strawberry.mutation(name="saveStarship")
    async def save_starship(self, info: strawberry.Info, input: StarshipInput) -> Starship | None:
        """Insert or replace a starship."""
        from ..resolvers.starship import save_starship

        return await save_starship(info, input)

    @strawberry.mutation(name="deleteStarshipById")
    async def delete_starship_by_id(self, info: strawberry.Info, id: strawberry.ID) -> bool | None:
        """Delete a starship."""
        from ..resolvers.starship import delete_starship_by_id

        return await delete_starship_by_id(info, id)

    @strawberry.mutation(name="deleteAllStarships")
    async def delete_all_starships(self, info: strawberry.Info) -> bool | None:
        """Delete every starship."""
        from ..resolvers.starship import delete_all_starships

        return await delete_all_starships(info)
