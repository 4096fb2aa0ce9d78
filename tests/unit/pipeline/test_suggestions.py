"""
Tests for the suggestion composer.

Covers ranking and deduplication of suggestions, the keystroke flow with
background live searches, and dropping of late search results.
"""
import pytest
from unittest.mock import MagicMock

from textcrm.core.logging_manager import CrmLogger
from textcrm.dataclasses import MentionType, Place, PlaceSearchResult
from textcrm.pipeline.suggestions import (
    MentionToken,
    SuggestionComposer,
    compose_suggestions,
    current_token,
)
from textcrm.sources.places import StaticPlaceSearch


def names(items):
    return [item.name for item in items]


class TestCurrentToken:
    def test_token_after_last_marker(self):
        assert current_token("Lunch with @Alice at @Lu") == MentionToken(offset=21, partial="Lu")

    def test_bare_marker(self):
        assert current_token("Call @") == MentionToken(offset=5, partial="")

    def test_whitespace_ends_token(self):
        assert current_token("Call @Alice ") is None

    def test_no_marker(self):
        assert current_token("plain text") is None


class TestComposeSuggestions:
    """Tests for ordering and deduplication."""

    def test_contacts_before_places(self):
        items = compose_suggestions("Al", ["Bob", "Alice"], ["Albany", "Alps Bar"])
        assert names(items) == ["Alice", "Albany", "Alps Bar"]
        assert [i.kind for i in items] == [
            MentionType.PERSON,
            MentionType.PLACE,
            MentionType.PLACE,
        ]

    def test_prefix_match_is_case_insensitive(self):
        assert names(compose_suggestions("aL", ["Alice"], [])) == ["Alice"]

    def test_place_overlapping_contact_excluded(self):
        items = compose_suggestions("Al", ["Alice"], ["Alice's Deli", "Al", "Alps Bar"])
        assert names(items) == ["Alice", "Alps Bar"]

    def test_place_kept_when_no_contact_matches(self):
        items = compose_suggestions("Al", ["Bob"], ["Alice's Deli"])
        assert names(items) == ["Alice's Deli"]

    def test_duplicate_contacts_collapsed(self):
        assert names(compose_suggestions("al", ["Alice", "ALICE"], [])) == ["Alice"]

    def test_live_results_appended_by_exact_name(self):
        live = [
            PlaceSearchResult(name="Alps Bar", address="1 Main St"),
            PlaceSearchResult(name="Alps bar", address="2 Main St"),
            PlaceSearchResult(name="Alamo", address="3 Main St"),
        ]
        items = compose_suggestions("Al", ["Alice"], ["Alps Bar"], live)
        assert names(items) == ["Alice", "Alps Bar", "Alps bar", "Alamo"]
        assert items[-1].subtitle == "3 Main St"

    def test_live_results_ignored_for_short_partial(self):
        live = [PlaceSearchResult(name="Alamo", address="3 Main St")]
        assert names(compose_suggestions("A", ["Alice"], [], live)) == ["Alice"]

    def test_capped_at_eight(self):
        contacts = [f"Al {i}" for i in range(10)]
        live = [PlaceSearchResult(name=f"Alley {i}", address="x") for i in range(5)]
        items = compose_suggestions("Al", contacts, [], live)
        assert len(items) == 8
        assert all(i.kind is MentionType.PERSON for i in items)

    def test_known_place_objects_carry_coordinates(self, deli_coordinate):
        place = Place(id="d", name="Deli", coordinate=deli_coordinate)
        items = compose_suggestions("De", [], [place])
        assert items[0].coordinate == deli_coordinate


class TestSuggestionComposer:
    """Tests for the keystroke-driven composer."""

    @pytest.mark.asyncio
    async def test_live_results_merged_after_local(self, controlled_search, luigis_result):
        search = controlled_search([luigis_result])
        composer = SuggestionComposer(search)
        emitted = []
        composer.subscribe(emitted.append)

        local = composer.update("Dinner at @Lu", ["Lucy"], [])
        assert names(local) == ["Lucy"]

        search.release.set()
        await composer.wait_pending()

        assert [names(batch) for batch in emitted] == [["Lucy"], ["Lucy", "Luigi Trattoria"]]
        assert composer.suggestions[-1].subtitle == luigis_result.address

    @pytest.mark.asyncio
    async def test_confirmed_token_drops_late_results(self, controlled_search, luigis_result):
        search = controlled_search([luigis_result])
        composer = SuggestionComposer(search)
        emitted = []
        composer.subscribe(emitted.append)

        composer.update("Dinner at @Lu", ["Lucy"], [])
        text = composer.confirm(emitted[-1][0], "Dinner at @Lu")

        search.release.set()
        await composer.wait_pending()

        assert text == "Dinner at @Lucy "
        assert emitted == [emitted[0], []]
        assert composer.suggestions == []

    @pytest.mark.asyncio
    async def test_newer_keystroke_supersedes_search(self, controlled_search, luigis_result):
        search = controlled_search([luigis_result])
        composer = SuggestionComposer(search)
        emitted = []
        composer.subscribe(emitted.append)

        composer.update("Dinner at @Lu", ["Lucy"], [])
        composer.update("Dinner at @Lui", ["Lucy"], [])
        search.release.set()
        await composer.wait_pending()

        assert search.queries == ["Lu", "Lui"]
        assert [names(batch) for batch in emitted] == [["Lucy"], [], ["Luigi Trattoria"]]

    @pytest.mark.asyncio
    async def test_search_failure_keeps_local_suggestions(
        self, controlled_search, search_failure
    ):
        search = controlled_search(error=search_failure)
        logger = MagicMock(spec=CrmLogger)
        composer = SuggestionComposer(search, logger=logger)
        emitted = []
        composer.subscribe(emitted.append)

        composer.update("@Lu", ["Lucy"], ["Lugano"])
        search.release.set()
        await composer.wait_pending()

        assert names(emitted[-1]) == ["Lucy", "Lugano"]
        logger.log_warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_short_partial_skips_search(self, controlled_search):
        search = controlled_search()
        composer = SuggestionComposer(search)
        composer.update("@L", ["Lucy"], [])
        await composer.wait_pending()
        assert search.queries == []

    def test_update_without_event_loop_is_local_only(self, luigis_result):
        composer = SuggestionComposer(StaticPlaceSearch([luigis_result]))
        assert names(composer.update("@Lu", ["Lucy"], [])) == ["Lucy"]
        assert composer.token == MentionToken(offset=0, partial="Lu")

    def test_update_without_token_clears(self):
        composer = SuggestionComposer()
        emitted = []
        composer.subscribe(emitted.append)
        composer.update("@Lu", ["Lucy"], [])
        composer.update("@Lucy ", ["Lucy"], [])
        assert emitted[-1] == []
        assert composer.token is None

    def test_unsubscribe(self):
        composer = SuggestionComposer()
        emitted = []
        unsubscribe = composer.subscribe(emitted.append)
        unsubscribe()
        composer.update("@Lu", ["Lucy"], [])
        assert emitted == []

    def test_take_confirmed_resets(self, luigis_result):
        composer = SuggestionComposer()
        composer.update("Dinner at @Lu", [], ["Lugano"])
        item = composer.suggestions[0]
        composer.confirm(item, "Dinner at @Lu")

        selections = composer.take_confirmed()
        assert [(s.name, s.kind) for s in selections] == [("Lugano", MentionType.PLACE)]
        assert composer.confirmed == []
        assert composer.token is None

    @pytest.mark.asyncio
    async def test_one_shot_suggest(self, luigis_result):
        composer = SuggestionComposer(StaticPlaceSearch([luigis_result]))
        items = await composer.suggest("lu", ["Lucy"], [])
        assert names(items) == ["Lucy", "Luigi Trattoria"]

    @pytest.mark.asyncio
    async def test_one_shot_suggest_without_search(self):
        composer = SuggestionComposer(None)
        assert names(await composer.suggest("lu", ["Lucy"], ["Lugano"])) == ["Lucy", "Lugano"]
