from __future__ import annotations

from typing import TYPE_CHECKING, Any

import strawberry

from ...logging import get_logger
from ...models import StarshipRecord
from ..loaders import get_loaders, get_services

if TYPE_CHECKING:
    from ..mutations.root import StarshipInput

logger = get_logger(__name__)


async def resolve_starship_by_id(info: strawberry.Info, id: str) -> StarshipRecord | None:
    """Resolve a starship by its ID, or null when it does not exist."""
    starship = await get_loaders(info).starship_loader.load(id)
    if starship is None:
        logger.info("Starship not found", starship_id=id)
    return starship


async def resolve_character_starship(character: Any, info: strawberry.Info) -> StarshipRecord | None:
    """Resolve the starship of a Biological character; dangling ids resolve to null."""
    starship_id = getattr(character, "starship_id", None)
    if starship_id is None:
        return None
    return await get_loaders(info).starship_loader.load(starship_id)


async def save_starship(info: strawberry.Info, input: StarshipInput) -> StarshipRecord:
    saved = get_services(info).starships.save_starship(StarshipRecord(id=input.id, name=input.name))
    get_loaders(info).clear_all()
    return saved


async def delete_starship_by_id(info: strawberry.Info, id: str) -> bool:
    get_services(info).starships.delete_starship(id)
    get_loaders(info).clear_all()
    return True


async def delete_all_starships(info: strawberry.Info) -> bool:
    get_services(info).starships.delete_all_starships()
    get_loaders(info).clear_all()
    return True
