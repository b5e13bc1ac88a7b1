"""
Domain services wrapping the repositories.

The services own every cross-entity rule: reference checks on save, variant
stability of character ids, friend list constraints, and the crew index that
maps a starship to the Biological characters assigned to it.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from .errors import InputValidationError, UnknownReferenceError
from .logging import get_logger
from .models import (
    BiologicalCharacter,
    CharacterRecord,
    DroidCharacter,
    StarshipRecord,
)
from .repositories import CharacterRepository, StarshipRepository

logger = get_logger(__name__)


def _natural_key(value: str) -> list[int | str]:
    return [int(part) if part.isdigit() else part for part in re.split(r"(\d+)", value)]


class StarshipCrewIndex:
    """Inverse of ``BiologicalCharacter.starship_id``.

    ``lock`` is shared by both services so that a Biological save and a
    starship deletion never interleave.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._crews: dict[str, set[str]] = {}
        self._assignments: dict[str, str] = {}

    def assign(self, character_id: str, starship_id: str | None) -> None:
        with self.lock:
            self.unassign(character_id)
            if starship_id is None:
                return
            self._assignments[character_id] = starship_id
            self._crews.setdefault(starship_id, set()).add(character_id)

    def unassign(self, character_id: str) -> None:
        with self.lock:
            previous = self._assignments.pop(character_id, None)
            if previous is None:
                return
            crew = self._crews.get(previous)
            if crew is not None:
                crew.discard(character_id)
                if not crew:
                    del self._crews[previous]

    def drop_starship(self, starship_id: str) -> set[str]:
        """Forget a starship; its crew keeps a dangling ``starship_id``."""
        with self.lock:
            crew = self._crews.pop(starship_id, set())
            for character_id in crew:
                self._assignments.pop(character_id, None)
            return crew

    def clear(self) -> None:
        with self.lock:
            self._crews.clear()
            self._assignments.clear()

    def crew_of(self, starship_id: str) -> set[str]:
        with self.lock:
            return set(self._crews.get(starship_id, ()))

    def starship_of(self, character_id: str) -> str | None:
        with self.lock:
            return self._assignments.get(character_id)


class CharacterService:
    """Character reads and writes."""

    def __init__(
        self,
        characters: CharacterRepository,
        starships: StarshipRepository,
        crew_index: StarshipCrewIndex,
    ) -> None:
        self._characters = characters
        self._starships = starships
        self._crew_index = crew_index

    def get_character(self, character_id: str) -> CharacterRecord | None:
        return self._characters.get(character_id)

    def get_characters(self, character_ids: Iterable[str]) -> list[CharacterRecord | None]:
        return self._characters.get_many(character_ids)

    def get_all_characters(self) -> list[CharacterRecord]:
        return self._characters.get_all()

    def save_droid(self, droid: DroidCharacter) -> DroidCharacter:
        with self._crew_index.lock:
            self._check_character(droid)
            saved = self._characters.save(droid)
            # A droid never holds a starship assignment
            self._crew_index.unassign(saved.id)

        logger.info("Droid saved", character_id=saved.id, friend_count=len(saved.friend_ids))
        return saved

    def save_biological(self, biological: BiologicalCharacter) -> BiologicalCharacter:
        """Upsert a Biological character.

        Raises:
            UnknownReferenceError: If ``starship_id`` does not name a stored starship
            InputValidationError: If the friend list or variant is invalid
        """
        with self._crew_index.lock:
            self._check_character(biological)
            if biological.starship_id is not None and not self._starships.exists(
                biological.starship_id
            ):
                logger.info(
                    "Rejected Biological save with unknown starship",
                    character_id=biological.id,
                    starship_id=biological.starship_id,
                )
                raise UnknownReferenceError("Starship", biological.starship_id)

            saved = self._characters.save(biological)
            self._crew_index.assign(saved.id, saved.starship_id)

        logger.info(
            "Biological saved",
            character_id=saved.id,
            starship_id=saved.starship_id,
            friend_count=len(saved.friend_ids),
        )
        return saved

    def delete_character(self, character_id: str) -> bool:
        with self._crew_index.lock:
            deleted = self._characters.delete_by_id(character_id)
            self._crew_index.unassign(character_id)

        logger.info("Character delete requested", character_id=character_id, deleted=deleted)
        return deleted

    def delete_all_characters(self) -> int:
        with self._crew_index.lock:
            count = self._characters.delete_all()
            self._crew_index.clear()

        logger.info("All characters deleted", count=count)
        return count

    def _check_character(self, character: CharacterRecord) -> None:
        seen: set[str] = set()
        for friend_id in character.friend_ids:
            if friend_id in seen:
                raise InputValidationError(f"Duplicate friend id '{friend_id}'")
            seen.add(friend_id)

        if character.id is None:
            return

        if character.id in seen:
            raise InputValidationError(f"Character '{character.id}' cannot befriend itself")

        existing = self._characters.get(character.id)
        existing_kind = getattr(existing, "kind", None)
        if existing is not None and existing_kind != character.kind:
            raise InputValidationError(
                f"Character '{character.id}' is stored as "
                f"{getattr(existing_kind, 'value', existing_kind)} "
                f"and cannot be saved as {character.kind.value}"
            )


class StarshipService:
    """Starship reads and writes."""

    def __init__(
        self,
        starships: StarshipRepository,
        characters: CharacterRepository,
        crew_index: StarshipCrewIndex,
    ) -> None:
        self._starships = starships
        self._characters = characters
        self._crew_index = crew_index

    def get_starship(self, starship_id: str) -> StarshipRecord | None:
        return self._starships.get(starship_id)

    def get_starships(self, starship_ids: Iterable[str]) -> list[StarshipRecord | None]:
        return self._starships.get_many(starship_ids)

    def get_all_starships(self) -> list[StarshipRecord]:
        return self._starships.get_all()

    def get_crew(self, starship_id: str) -> list[CharacterRecord]:
        """Biological characters currently assigned to a starship.

        Ordered by id, with numeric runs compared as numbers (c2 before c10).
        """
        crew_ids = sorted(self._crew_index.crew_of(starship_id), key=_natural_key)
        return [
            character
            for character in self._characters.get_many(crew_ids)
            if character is not None
        ]

    def save_starship(self, starship: StarshipRecord) -> StarshipRecord:
        saved = self._starships.save(starship)
        logger.info("Starship saved", starship_id=saved.id)
        return saved

    def delete_starship(self, starship_id: str) -> bool:
        with self._crew_index.lock:
            deleted = self._starships.delete_by_id(starship_id)
            crew = self._crew_index.drop_starship(starship_id)

        logger.info(
            "Starship delete requested",
            starship_id=starship_id,
            deleted=deleted,
            orphaned_crew=sorted(crew),
        )
        return deleted

    def delete_all_starships(self) -> int:
        with self._crew_index.lock:
            count = self._starships.delete_all()
            self._crew_index.clear()

        logger.info("All starships deleted", count=count)
        return count


@dataclass
class Services:
    """Service layer shared by every request."""

    characters: CharacterService
    starships: StarshipService


def build_services(
    character_repository: CharacterRepository | None = None,
    starship_repository: StarshipRepository | None = None,
) -> Services:
    """Wire repositories, crew index and services together."""
    characters = character_repository if character_repository is not None else CharacterRepository()
    starships = starship_repository if starship_repository is not None else StarshipRepository()
    crew_index = StarshipCrewIndex()

    return Services(
        characters=CharacterService(characters, starships, crew_index),
        starships=StarshipService(starships, characters, crew_index),
    )
