"""
External collaborators consumed by the core: contacts and place search.
"""
from .contacts import ContactSource, StaticContactSource, YamlContactSource, format_contact_name
from .places import NominatimPlaceSearch, PlaceSearch, StaticPlaceSearch

__all__ = [
    "ContactSource",
    "StaticContactSource",
    "YamlContactSource",
    "format_contact_name",
    "NominatimPlaceSearch",
    "PlaceSearch",
    "StaticPlaceSearch",
]
