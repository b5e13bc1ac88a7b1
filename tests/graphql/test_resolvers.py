"""
Unit tests for character and starship resolver functions
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import strawberry

from starwars.errors import UnknownReferenceError
from starwars.graphql.loaders import build_context
from starwars.graphql.resolvers.character import (
    delete_all_characters,
    delete_character_by_id,
    resolve_character_by_id,
    resolve_character_friends,
    save_biological_character,
    save_droid_character,
)
from starwars.graphql.resolvers.starship import (
    delete_starship_by_id,
    resolve_character_starship,
    resolve_starship_by_id,
    save_starship,
)
from starwars.models import BiologicalCharacter, DroidCharacter, StarshipRecord


@pytest.fixture
def mock_info(services):
    """Create a mock GraphQL info object with a request context."""
    info = MagicMock(spec=strawberry.Info)
    info.context = build_context(services)
    return info


async def resolve(info, coro):
    """Run a resolver the way the schema's dispatch extension counts it."""
    dispatcher = info.context["loaders"].dispatcher
    dispatcher.enter()
    try:
        return await coro
    finally:
        dispatcher.leave()


class TestCharacterQueryResolvers:
    """Tests for character read resolvers."""

    @pytest.mark.asyncio
    async def test_resolve_character_by_id(self, mock_info, services):
        luke = services.characters.save_biological(BiologicalCharacter(id=None, name="Luke"))

        result = await resolve(mock_info, resolve_character_by_id(mock_info, luke.id))

        assert result == luke

    @pytest.mark.asyncio
    async def test_resolve_missing_character(self, mock_info):
        assert await resolve(mock_info, resolve_character_by_id(mock_info, "c404")) is None

    @pytest.mark.asyncio
    async def test_friends_keep_order_and_drop_missing(self, mock_info, services):
        r2 = services.characters.save_droid(DroidCharacter(id="c1", name="R2-D2"))
        c3po = services.characters.save_droid(DroidCharacter(id="c2", name="C-3PO"))
        luke = BiologicalCharacter(id="c3", name="Luke", friend_ids=("c2", "c9", "c1"))

        result = await resolve(mock_info, resolve_character_friends(luke, mock_info))

        assert result == [c3po, r2]

    @pytest.mark.asyncio
    async def test_friends_of_friendless_character(self, mock_info):
        droid = DroidCharacter(id="c1", name="R2-D2")

        assert await resolve_character_friends(droid, mock_info) == []

    @pytest.mark.asyncio
    async def test_sibling_friend_lists_share_a_batch(self, mock_info, services):
        for character_id in ("c1", "c2", "c3"):
            services.characters.save_droid(DroidCharacter(id=character_id, name=character_id))
        first = DroidCharacter(id="c4", name="First", friend_ids=("c1", "c2"))
        second = DroidCharacter(id="c5", name="Second", friend_ids=("c2", "c3"))

        await asyncio.gather(
            resolve(mock_info, resolve_character_friends(first, mock_info)),
            resolve(mock_info, resolve_character_friends(second, mock_info)),
        )

        statistics = mock_info.context["loaders"].dispatcher.statistics
        assert statistics.dispatches == 1
        assert statistics.keys == 3


class TestCharacterMutationResolvers:
    """Tests for character mutation resolvers."""

    @pytest.mark.asyncio
    async def test_save_droid_character(self, mock_info):
        droid_input = SimpleNamespace(id=None, name="R2-D2", friend_ids=["c7"])

        saved = await save_droid_character(mock_info, droid_input)

        assert saved == DroidCharacter(id="c1", name="R2-D2", friend_ids=("c7",))

    @pytest.mark.asyncio
    async def test_save_biological_unknown_starship(self, mock_info, services):
        biological_input = SimpleNamespace(
            id=None, name="Luke", friend_ids=None, starship_id="s1"
        )

        with pytest.raises(UnknownReferenceError):
            await save_biological_character(mock_info, biological_input)

        assert services.characters.get_all_characters() == []

    @pytest.mark.asyncio
    async def test_save_clears_loader_cache(self, mock_info, services):
        services.characters.save_droid(DroidCharacter(id="c1", name="R2-D2"))
        await resolve(mock_info, resolve_character_by_id(mock_info, "c1"))

        await save_droid_character(
            mock_info, SimpleNamespace(id="c1", name="Artoo", friend_ids=None)
        )
        result = await resolve(mock_info, resolve_character_by_id(mock_info, "c1"))

        assert result.name == "Artoo"

    @pytest.mark.asyncio
    async def test_deletes_always_succeed(self, mock_info, services):
        services.characters.save_droid(DroidCharacter(id="c1", name="R2-D2"))

        assert await delete_character_by_id(mock_info, "c1") is True
        assert await delete_character_by_id(mock_info, "c1") is True
        assert await delete_all_characters(mock_info) is True


class TestStarshipResolvers:
    """Tests for starship resolvers."""

    @pytest.mark.asyncio
    async def test_save_and_resolve_starship(self, mock_info):
        saved = await save_starship(mock_info, SimpleNamespace(id=None, name="X-Wing"))

        assert saved == StarshipRecord(id="s1", name="X-Wing")
        assert await resolve(mock_info, resolve_starship_by_id(mock_info, "s1")) == saved

    @pytest.mark.asyncio
    async def test_character_without_starship(self, mock_info):
        luke = BiologicalCharacter(id="c1", name="Luke")

        assert await resolve_character_starship(luke, mock_info) is None

    @pytest.mark.asyncio
    async def test_dangling_starship_resolves_to_none(self, mock_info, services):
        x_wing = services.starships.save_starship(StarshipRecord(id=None, name="X-Wing"))
        luke = services.characters.save_biological(
            BiologicalCharacter(id=None, name="Luke", starship_id=x_wing.id)
        )

        assert await delete_starship_by_id(mock_info, x_wing.id) is True
        assert await resolve(mock_info, resolve_character_starship(luke, mock_info)) is None
