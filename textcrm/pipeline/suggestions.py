#!/usr/bin/env python3
"""
suggestions.py
--------------
Completion suggestions for the mention being typed.

Ordering rules:
    1. Contacts whose name starts with the partial text.
    2. Known places that start with the partial text, unless the name
       overlaps (substring, either direction) a contact already listed.
    3. Live search results not already listed by exact name, only once
       the partial text is long enough to search.
    4. At most ``limit`` items.

The composer never touches the message log. It emits local suggestions
at once and re-emits when the live search resolves, unless the token has
since been confirmed or replaced by a newer keystroke; such late results
are dropped.

Usage:
    composer = SuggestionComposer(place_search)
    composer.subscribe(render)
    composer.update("Dinner at @Lu", contacts, registry.places)
    ...
    text = composer.confirm(item, "Dinner at @Lu")   # "Dinner at @Luigi Trattoria "
    selections = composer.take_confirmed()
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import asyncio
from dataclasses import dataclass, field
from itertools import count
from typing import Callable, Iterable, List, Optional, Sequence, Set, Union

# --- Local imports ---
from textcrm.core.config import MIN_SEARCH_LENGTH, SUGGESTION_LIMIT
from textcrm.core.logging_manager import CrmLogger, safe_logger
from textcrm.dataclasses import (
    ConfirmedSelection,
    MentionType,
    Place,
    PlaceSearchResult,
    SuggestionItem,
)
from textcrm.sources.places import PlaceSearch
from textcrm.utils.name_matching import MENTION_MARKER, name_key, overlaps, starts_with

SuggestionListener = Callable[[List[SuggestionItem]], None]


@dataclass(frozen=True)
class MentionToken:
    """The mention currently being typed: marker position and text after it."""

    offset: int
    partial: str


@dataclass(eq=False)
class _TokenState:
    token: MentionToken
    generation: int
    confirmed: bool = False
    task: Optional["asyncio.Task[None]"] = field(default=None, repr=False)


def current_token(text: str) -> Optional[MentionToken]:
    """
    Locate the mention being typed at the end of the input.

    The token is the text after the last marker, as long as it contains
    no whitespace yet.
    """
    index = text.rfind(MENTION_MARKER)
    if index < 0:
        return None
    partial = text[index + len(MENTION_MARKER):]
    if any(ch.isspace() for ch in partial):
        return None
    return MentionToken(offset=index, partial=partial)


def compose_suggestions(
    partial: str,
    contacts: Iterable[str],
    known_places: Iterable[Union[str, Place]],
    live_results: Sequence[PlaceSearchResult] = (),
    limit: int = SUGGESTION_LIMIT,
    min_search_length: int = MIN_SEARCH_LENGTH,
) -> List[SuggestionItem]:
    """
    Build the ranked, deduplicated suggestion list.

    Args:
        partial: Text typed after the marker
        contacts: Contact display names
        known_places: Registry places (or their names)
        live_results: Results of a live search for ``partial``
        limit: Maximum number of suggestions
        min_search_length: Partial length from which live results count

    Returns:
        Suggestions, contacts first, then known places, then live places
    """
    items: List[SuggestionItem] = []
    seen: Set[str] = set()

    contact_items: List[SuggestionItem] = []
    for contact in contacts:
        key = name_key(contact)
        if not key or key in seen or not starts_with(contact, partial):
            continue
        seen.add(key)
        contact_items.append(SuggestionItem(name=contact, kind=MentionType.PERSON))
    items.extend(contact_items)

    for place in known_places:
        name = place.name if isinstance(place, Place) else place
        key = name_key(name)
        if not key or key in seen or not starts_with(name, partial):
            continue
        if any(overlaps(name, c.name) for c in contact_items):
            continue
        seen.add(key)
        items.append(
            SuggestionItem(
                name=name,
                kind=MentionType.PLACE,
                coordinate=place.coordinate if isinstance(place, Place) else None,
            )
        )

    if len(partial) >= min_search_length:
        listed = {item.name for item in items}
        for result in live_results:
            if result.name in listed:
                continue
            listed.add(result.name)
            items.append(SuggestionItem.from_search_result(result))

    return items[:limit]


class SuggestionComposer:
    """
    Keystroke-driven suggestion state for one draft message.

    Attributes:
        place_search: Live search collaborator (None disables it)
        limit: Maximum suggestions per emission
        min_search_length: Partial length that triggers a live search
        suggestions: Most recently emitted list
    """

    def __init__(
        self,
        place_search: Optional[PlaceSearch] = None,
        limit: int = SUGGESTION_LIMIT,
        min_search_length: int = MIN_SEARCH_LENGTH,
        logger: Optional[CrmLogger] = None,
    ) -> None:
        self.place_search = place_search
        self.limit = limit
        self.min_search_length = min_search_length
        self.logger = logger
        self.suggestions: List[SuggestionItem] = []
        self._listeners: List[SuggestionListener] = []
        self._state: Optional[_TokenState] = None
        self._generations = count(1)
        self._confirmed: List[ConfirmedSelection] = []
        self._pending: Set["asyncio.Task[None]"] = set()

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, listener: SuggestionListener) -> Callable[[], None]:
        """
        Register a listener for emitted suggestion lists.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, items: List[SuggestionItem]) -> None:
        self.suggestions = list(items)
        for listener in list(self._listeners):
            listener(list(items))

    # -------------------------------------------------------------------------
    # Live search
    # -------------------------------------------------------------------------

    async def search_places(self, query: str) -> List[PlaceSearchResult]:
        """
        Run the live search, treating any failure as zero results.

        A failed search must never hold back contact and place
        suggestions, so errors are logged and swallowed here.
        """
        if self.place_search is None or len(query) < self.min_search_length:
            return []
        try:
            return list(await self.place_search.search(query))
        except Exception as e:
            safe_logger(self.logger).log_warning(
                "Place search failed, using no live results",
                {"query": query, "error": f"{type(e).__name__}: {e}"},
            )
            return []

    async def suggest(
        self,
        partial: str,
        contacts: Iterable[str],
        known_places: Iterable[Union[str, Place]],
    ) -> List[SuggestionItem]:
        """
        One-shot suggestion list including awaited live results.

        Does not touch the keystroke state.
        """
        contacts = list(contacts)
        known_places = list(known_places)
        live = await self.search_places(partial)
        return compose_suggestions(
            partial,
            contacts,
            known_places,
            live,
            limit=self.limit,
            min_search_length=self.min_search_length,
        )

    # -------------------------------------------------------------------------
    # Keystroke flow
    # -------------------------------------------------------------------------

    @property
    def token(self) -> Optional[MentionToken]:
        return self._state.token if self._state else None

    def update(
        self,
        text: str,
        contacts: Iterable[str],
        known_places: Iterable[Union[str, Place]],
    ) -> List[SuggestionItem]:
        """
        React to an input change.

        Emits local suggestions immediately. When an event loop is
        running and the partial is long enough, a live search is started
        in the background and its results are merged in later.

        Returns:
            The local suggestions just emitted
        """
        token = current_token(text)
        if token is None:
            self._state = None
            self._emit([])
            return []

        contacts = list(contacts)
        known_places = list(known_places)
        state = _TokenState(token=token, generation=next(self._generations))
        self._state = state

        local = compose_suggestions(
            token.partial,
            contacts,
            known_places,
            limit=self.limit,
            min_search_length=self.min_search_length,
        )
        self._emit(local)

        if self.place_search is not None and len(token.partial) >= self.min_search_length:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                safe_logger(self.logger).log_debug(
                    "No running event loop, skipping live search",
                    {"partial": token.partial},
                )
                return local
            state.task = loop.create_task(self._complete(state, contacts, known_places))
            self._pending.add(state.task)
            state.task.add_done_callback(self._pending.discard)

        return local

    async def _complete(
        self,
        state: _TokenState,
        contacts: List[str],
        known_places: List[Union[str, Place]],
    ) -> None:
        results = await self.search_places(state.token.partial)

        if state is not self._state or state.confirmed:
            safe_logger(self.logger).log_debug(
                "Discarding stale place search results",
                {
                    "partial": state.token.partial,
                    "generation": state.generation,
                    "confirmed": state.confirmed,
                },
            )
            return

        self._emit(
            compose_suggestions(
                state.token.partial,
                contacts,
                known_places,
                results,
                limit=self.limit,
                min_search_length=self.min_search_length,
            )
        )

    async def wait_pending(self) -> None:
        """Wait for every in-flight live search to settle."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def confirm(self, item: SuggestionItem, text: str) -> str:
        """
        Accept a suggestion for the current token.

        Marks the token confirmed so late search results are dropped,
        records the selection for the next sent message and clears the
        suggestion list.

        Args:
            item: Selected suggestion
            text: Current input text

        Returns:
            Input text with the token replaced by ``@name ``
        """
        state = self._state
        token = current_token(text)
        if state is not None:
            state.confirmed = True

        self._confirmed.append(ConfirmedSelection.from_item(item))
        self._emit([])

        if token is None:
            return text
        return f"{text[:token.offset]}{MENTION_MARKER}{item.name} "

    @property
    def confirmed(self) -> List[ConfirmedSelection]:
        return list(self._confirmed)

    def take_confirmed(self) -> List[ConfirmedSelection]:
        """Hand over the draft's selections and reset for the next message."""
        selections, self._confirmed = self._confirmed, []
        self._state = None
        self._emit([])
        return selections
