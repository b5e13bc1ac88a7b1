"""
Domain records for characters and starships.

Characters form a closed tagged union: every record carries a ``kind``
discriminator, and ``character_type_name`` is the only place that maps it to a
GraphQL object type name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import TypeResolutionError


class CharacterKind(str, Enum):
    """Discriminator stored on every character record."""

    BIOLOGICAL = "biological"
    DROID = "droid"


@dataclass(frozen=True)
class BiologicalCharacter:
    """A living character, optionally assigned to a starship."""

    id: str | None
    name: str
    friend_ids: tuple[str, ...] = ()
    starship_id: str | None = None
    kind: CharacterKind = field(default=CharacterKind.BIOLOGICAL, init=False)


@dataclass(frozen=True)
class DroidCharacter:
    """A droid character."""

    id: str | None
    name: str
    friend_ids: tuple[str, ...] = ()
    kind: CharacterKind = field(default=CharacterKind.DROID, init=False)


CharacterRecord = BiologicalCharacter | DroidCharacter


@dataclass(frozen=True)
class StarshipRecord:
    """A starship."""

    id: str | None
    name: str


_TYPE_NAMES: dict[CharacterKind, str] = {
    CharacterKind.BIOLOGICAL: "Biological",
    CharacterKind.DROID: "Droid",
}


def character_type_name(record: Any) -> str:
    """Return the GraphQL object type name for a character record.

    Raises:
        TypeResolutionError: If the discriminator is missing or unrecognized
    """
    kind = getattr(record, "kind", None)
    try:
        return _TYPE_NAMES[CharacterKind(kind)]
    except (KeyError, ValueError) as e:
        record_id = getattr(record, "id", None)
        raise TypeResolutionError(
            f"Cannot resolve Character type for record '{record_id}': "
            f"unrecognized discriminator {kind!r}"
        ) from e


def is_character_kind(record: Any, kind: CharacterKind) -> bool:
    return getattr(record, "kind", None) == kind
