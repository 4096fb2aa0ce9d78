#!/usr/bin/env python3
"""
contacts.py
-----------
Contact book collaborators.

The core only needs display names. ``YamlContactSource`` reads them from
a YAML file and appends to it when a contact is added explicitly.

Example contacts.yaml:
    contacts:
      - Alice
      - nickname: Bobby
      - given_name: Carol
        family_name: Danvers

Display names prefer the nickname, then "given family", then whichever
of the two is present.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

# --- Third party imports ---
import yaml

# --- Local imports ---
from textcrm.core.exceptions import ValidationError
from textcrm.core.logging_manager import CrmLogger, safe_logger
from textcrm.core.validators import DataValidator
from textcrm.utils.name_matching import find_name


class ContactSource(Protocol):
    """Provider of contact display names."""

    def list_contacts(self) -> List[str]:
        ...

    def add_contact(self, name: str) -> str:
        ...


def format_contact_name(entry: Union[str, Dict[str, Any]]) -> Optional[str]:
    """
    Display name for a contact record.

    Args:
        entry: Plain name or mapping with nickname/given_name/family_name

    Returns:
        Display name, or None for an empty record
    """
    if isinstance(entry, str):
        return DataValidator.normalize_string(entry)
    if not isinstance(entry, dict):
        return None

    nickname = DataValidator.normalize_string(entry.get("nickname"))
    if nickname:
        return nickname

    given = DataValidator.normalize_string(entry.get("given_name"))
    family = DataValidator.normalize_string(entry.get("family_name"))
    if given and family:
        return f"{given} {family}"
    return given or family


def _dedupe(names: Iterable[str]) -> List[str]:
    result: List[str] = []
    for name in names:
        if name and find_name(name, result) is None:
            result.append(name)
    return result


class StaticContactSource:
    """In-memory contact list."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names = _dedupe(DataValidator.normalize_string(n) for n in names)

    def list_contacts(self) -> List[str]:
        return list(self._names)

    def add_contact(self, name: str) -> str:
        display = DataValidator.normalize_string(name)
        if not display:
            raise ValidationError("Contact name cannot be empty")
        existing = find_name(display, self._names)
        if existing is not None:
            return existing
        self._names.append(display)
        return display


class YamlContactSource:
    """
    Contact list persisted in a YAML file.

    The file is read once per session, on first use, and rewritten when a
    contact is added.
    """

    def __init__(self, path: Path, logger: Optional[CrmLogger] = None) -> None:
        self.path = Path(path)
        self.logger = logger
        self._entries: Optional[List[Any]] = None

    def _load(self) -> List[Any]:
        if self._entries is not None:
            return self._entries

        if not self.path.exists():
            self._entries = []
            return self._entries

        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise ValidationError(f"Cannot parse contacts file {self.path}: {e}") from e

        entries = data.get("contacts") if isinstance(data, dict) else data
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise ValidationError(f"'contacts' in {self.path} must be a list")

        self._entries = entries
        safe_logger(self.logger).log_debug(
            "Loaded contacts", {"path": str(self.path), "count": len(entries)}
        )
        return self._entries

    def list_contacts(self) -> List[str]:
        return _dedupe(format_contact_name(entry) for entry in self._load())

    def add_contact(self, name: str) -> str:
        """
        Add a contact and persist the file.

        Returns:
            The stored display name (the existing spelling if already present)
        """
        display = DataValidator.normalize_string(name)
        if not display:
            raise ValidationError("Contact name cannot be empty")

        existing = find_name(display, self.list_contacts())
        if existing is not None:
            return existing

        entries = self._load()
        entries.append(display)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            yaml.safe_dump({"contacts": entries}, fh, allow_unicode=True, sort_keys=False)

        safe_logger(self.logger).log_operation("contact_added", {"name": display})
        return display
