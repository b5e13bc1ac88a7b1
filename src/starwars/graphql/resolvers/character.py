from __future__ import annotations

from typing import TYPE_CHECKING, Any

import strawberry

from ...logging import get_logger
from ...models import BiologicalCharacter, CharacterRecord, DroidCharacter
from ..loaders import get_loaders, get_services

if TYPE_CHECKING:
    from ..mutations.root import BiologicalCharacterInput, DroidCharacterInput

logger = get_logger(__name__)


# Query resolvers
async def resolve_character_by_id(info: strawberry.Info, id: str) -> CharacterRecord | None:
    """
    Resolve a character by its ID.

    A missing character resolves to null without an error.
    """
    character = await get_loaders(info).character_loader.load(id)
    if character is None:
        logger.info("Character not found", character_id=id)
    return character


# Field resolvers
async def resolve_character_friends(character: Any, info: strawberry.Info) -> list[CharacterRecord]:
    """
    Resolve the friends of a character in friend list order.

    Friend ids that no longer resolve are dropped from the result.
    """
    friend_ids = list(getattr(character, "friend_ids", ()))
    if not friend_ids:
        return []

    friends = await get_loaders(info).character_loader.load_many(friend_ids)
    resolved = [friend for friend in friends if friend is not None]

    if len(resolved) != len(friend_ids):
        logger.debug(
            "Dropped dangling friend references",
            character_id=character.id,
            missing=[fid for fid, friend in zip(friend_ids, friends) if friend is None],
        )
    return resolved


# Mutation resolvers
async def save_droid_character(info: strawberry.Info, input: DroidCharacterInput) -> DroidCharacter:
    """Insert or replace a droid."""
    droid = DroidCharacter(
        id=input.id,
        name=input.name,
        friend_ids=tuple(input.friend_ids or ()),
    )
    saved = get_services(info).characters.save_droid(droid)
    get_loaders(info).clear_all()
    return saved


async def save_biological_character(
    info: strawberry.Info, input: BiologicalCharacterInput
) -> BiologicalCharacter:
    """Insert or replace a Biological character; its starship must exist."""
    biological = BiologicalCharacter(
        id=input.id,
        name=input.name,
        friend_ids=tuple(input.friend_ids or ()),
        starship_id=input.starship_id,
    )
    saved = get_services(info).characters.save_biological(biological)
    get_loaders(info).clear_all()
    return saved


async def delete_character_by_id(info: strawberry.Info, id: str) -> bool:
    """Delete a character. Deleting a missing id still succeeds."""
    get_services(info).characters.delete_character(id)
    get_loaders(info).clear_all()
    return True


async def delete_all_characters(info: strawberry.Info) -> bool:
    """Delete every character."""
    get_services(info).characters.delete_all_characters()
    get_loaders(info).clear_all()
    return True
