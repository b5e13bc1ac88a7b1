from __future__ import annotations

from functools import partial
from typing import Any

import strawberry

from ..models import CharacterRecord, StarshipRecord
from ..services import CharacterService, Services, StarshipService
from .dataloader import BatchDispatcher, BatchLoader


async def load_characters(
    service: CharacterService, keys: list[str]
) -> list[CharacterRecord | None]:
    """Batch load characters by ID."""
    return service.get_characters(keys)


async def load_starships(service: StarshipService, keys: list[str]) -> list[StarshipRecord | None]:
    """Batch load starships by ID."""
    return service.get_starships(keys)


class Loaders:
    """Loaders of one request, sharing a single dispatch barrier."""

    def __init__(self, services: Services):
        self.dispatcher = BatchDispatcher()
        self.character_loader: BatchLoader[str, CharacterRecord | None] = BatchLoader(
            partial(load_characters, services.characters), self.dispatcher, name="characters"
        )
        self.starship_loader: BatchLoader[str, StarshipRecord | None] = BatchLoader(
            partial(load_starships, services.starships), self.dispatcher, name="starships"
        )

    def clear_all(self) -> None:
        self.character_loader.clear_all()
        self.starship_loader.clear_all()


def build_context(services: Services, request: Any = None) -> dict[str, Any]:
    """Build the context for one GraphQL execution."""
    return {
        "request": request,
        "services": services,
        "loaders": Loaders(services),
    }


def get_services(info: strawberry.Info) -> Services:
    return info.context["services"]


def get_loaders(info: strawberry.Info) -> Loaders:
    return info.context["loaders"]
