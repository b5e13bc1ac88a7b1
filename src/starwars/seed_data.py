"""
Demo data for local development.
"""

from __future__ import annotations

from .logging import get_logger
from .models import BiologicalCharacter, DroidCharacter, StarshipRecord
from .services import Services

logger = get_logger(__name__)


def seed_demo_data(services: Services) -> dict[str, str]:
    """Store a few well-known characters and starships.

    Returns a mapping of display name to assigned id.
    """
    x_wing = services.starships.save_starship(StarshipRecord(id=None, name="X-Wing"))
    falcon = services.starships.save_starship(StarshipRecord(id=None, name="Millennium Falcon"))

    r2 = services.characters.save_droid(DroidCharacter(id=None, name="R2-D2"))
    c3po = services.characters.save_droid(
        DroidCharacter(id=None, name="C-3PO", friend_ids=(r2.id,))
    )
    luke = services.characters.save_biological(
        BiologicalCharacter(
            id=None, name="Luke Skywalker", friend_ids=(r2.id, c3po.id), starship_id=x_wing.id
        )
    )
    han = services.characters.save_biological(
        BiologicalCharacter(
            id=None, name="Han Solo", friend_ids=(luke.id,), starship_id=falcon.id
        )
    )
    services.characters.save_droid(
        DroidCharacter(id=r2.id, name=r2.name, friend_ids=(luke.id, c3po.id))
    )

    ids = {
        x_wing.name: x_wing.id,
        falcon.name: falcon.id,
        r2.name: r2.id,
        c3po.name: c3po.id,
        luke.name: luke.id,
        han.name: han.id,
    }
    logger.info("Demo data seeded", ids=ids)
    return ids
