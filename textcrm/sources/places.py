#!/usr/bin/env python3
"""
places.py
---------
Live place search collaborators.

``PlaceSearch`` is the capability the suggestion composer consumes.
``NominatimPlaceSearch`` implements it against an OpenStreetMap Nominatim
endpoint with ``requests``; the blocking call runs in a worker thread so
the event loop stays responsive.

Usage:
    search = NominatimPlaceSearch(user_agent="textcrm/0.3 (me@example.com)")
    results = await search.search("Luigi Trattoria")
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import asyncio
from typing import Any, Dict, Iterable, List, Optional, Protocol

# --- Third party imports ---
import requests

# --- Local imports ---
from textcrm.core.config import DEFAULT_SEARCH_URL, DEFAULT_USER_AGENT, SEARCH_RESULT_LIMIT
from textcrm.core.exceptions import SearchError, ValidationError
from textcrm.core.logging_manager import CrmLogger, safe_logger
from textcrm.dataclasses import Coordinate, PlaceSearchResult

ADDRESS_NOT_AVAILABLE = "Address not available"


class PlaceSearch(Protocol):
    """Asynchronous place lookup by free-text query."""

    async def search(self, query: str) -> List[PlaceSearchResult]:
        ...


class StaticPlaceSearch:
    """
    Place search over a fixed list of results.

    Matches results whose name contains the query, case-insensitively.
    Handy for offline use and tests.
    """

    def __init__(self, results: Iterable[PlaceSearchResult] = ()) -> None:
        self.results = list(results)

    async def search(self, query: str) -> List[PlaceSearchResult]:
        needle = query.casefold()
        return [r for r in self.results if needle in r.name.casefold()]


def format_address(address: Dict[str, Any]) -> str:
    """
    Build a one-line address from Nominatim address components.

    Format: "number street, city, state", skipping missing parts.
    """
    components: List[str] = []

    street = address.get("road") or address.get("pedestrian")
    number = address.get("house_number")
    if street and number:
        components.append(f"{number} {street}")
    elif street:
        components.append(street)

    city = address.get("city") or address.get("town") or address.get("village")
    if city:
        components.append(city)

    state = address.get("state")
    if state:
        components.append(state)

    return ", ".join(components) if components else ADDRESS_NOT_AVAILABLE


def parse_result(item: Dict[str, Any]) -> Optional[PlaceSearchResult]:
    """
    Convert one Nominatim JSON record, or None when it has no usable name.
    """
    name = item.get("name") or (item.get("display_name") or "").split(",")[0].strip()
    if not name:
        return None

    try:
        coordinate = Coordinate(latitude=item.get("lat"), longitude=item.get("lon"))
    except ValidationError:
        coordinate = None

    return PlaceSearchResult(
        name=name,
        address=format_address(item.get("address") or {}),
        coordinate=coordinate,
    )


class NominatimPlaceSearch:
    """
    Place search backed by the OpenStreetMap Nominatim API.

    Attributes:
        url: Search endpoint
        user_agent: Identifying User-Agent (required by the public API)
        timeout: Request timeout in seconds
        limit: Maximum results kept per query
    """

    def __init__(
        self,
        url: str = DEFAULT_SEARCH_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 5.0,
        limit: int = SEARCH_RESULT_LIMIT,
        logger: Optional[CrmLogger] = None,
    ) -> None:
        self.url = url
        self.user_agent = user_agent
        self.timeout = timeout
        self.limit = limit
        self.logger = logger

    def _get(self, query: str) -> requests.Response:
        response = requests.get(
            self.url,
            params={
                "q": query,
                "format": "jsonv2",
                "addressdetails": 1,
                "limit": self.limit,
            },
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def search_sync(self, query: str) -> List[PlaceSearchResult]:
        """
        Blocking search.

        Raises:
            SearchError: On transport errors, HTTP errors or bad JSON
        """
        query = query.strip()
        if not query:
            return []

        try:
            payload = self._get(query).json()
        except (requests.exceptions.RequestException, ValueError) as e:
            safe_logger(self.logger).log_warning(
                "Place search request failed", {"query": query, "error": str(e)}
            )
            raise SearchError(f"Place search failed for '{query}': {e}") from e

        if not isinstance(payload, list):
            raise SearchError(f"Unexpected place search payload for '{query}'")

        results = [r for r in (parse_result(item) for item in payload) if r is not None]
        safe_logger(self.logger).log_debug(
            "Place search completed", {"query": query, "results": len(results)}
        )
        return results[: self.limit]

    async def search(self, query: str) -> List[PlaceSearchResult]:
        return await asyncio.to_thread(self.search_sync, query)
