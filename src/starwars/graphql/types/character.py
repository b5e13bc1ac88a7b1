"""
Character GraphQL type definitions

Resolvers return domain records rather than instances of these classes; the
``Character`` interface picks the concrete type from the record discriminator.
"""

from __future__ import annotations

from typing import Any

import strawberry

from ...models import CharacterKind, character_type_name, is_character_kind
from .starship import Starship


@strawberry.interface
class Character:
    """A character in the Star Wars universe."""

    id: strawberry.ID
    name: str

    @strawberry.field
    async def friends(self, info: strawberry.Info) -> list[Character | None] | None:
        """Get the friends of this character that still exist, in friend list order."""
        from ..resolvers.character import resolve_character_friends

        return await resolve_character_friends(self, info)

    @classmethod
    def resolve_type(cls, obj: Any, info: Any, type_: Any) -> str:
        return character_type_name(obj)


@strawberry.type
class Biological(Character):
    """A living character."""

    @strawberry.field
    async def starship(self, info: strawberry.Info) -> Starship | None:
        """Get the starship assigned to this character."""
        from ..resolvers.starship import resolve_character_starship

        return await resolve_character_starship(self, info)

    @classmethod
    def is_type_of(cls, obj: Any, info: Any) -> bool:
        return is_character_kind(obj, CharacterKind.BIOLOGICAL)


@strawberry.type
class Droid(Character):
    """A mechanical character."""

    @classmethod
    def is_type_of(cls, obj: Any, info: Any) -> bool:
        return is_character_kind(obj, CharacterKind.DROID)
