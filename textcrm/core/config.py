#!/usr/bin/env python3
"""
config.py
---------
Runtime configuration for TextCRM.

Settings live in a small YAML file; every key is optional and falls back
to the defaults below.

Example config.yaml:
    suggestion_limit: 8
    min_search_length: 2
    search:
      url: https://nominatim.openstreetmap.org/search
      user_agent: textcrm/0.3
      timeout: 5.0
      result_limit: 10

Usage:
    from textcrm.core.config import load_config

    config = load_config(Path("data/config.yaml"))
    composer = SuggestionComposer(search, limit=config.suggestion_limit)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

# --- Third party imports ---
import yaml

# --- Local imports ---
from .exceptions import ConfigError, ValidationError
from .validators import DataValidator

SUGGESTION_LIMIT = 8
MIN_SEARCH_LENGTH = 2
SEARCH_RESULT_LIMIT = 10
DEFAULT_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_USER_AGENT = "textcrm/0.3"


@dataclass
class SearchConfig:
    """Live place search settings."""

    url: str = DEFAULT_SEARCH_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 5.0
    result_limit: int = SEARCH_RESULT_LIMIT


@dataclass
class CrmConfig:
    """
    Top-level configuration.

    Attributes:
        suggestion_limit: Maximum suggestions emitted per keystroke
        min_search_length: Partial length that triggers a live search
        search: Live place search settings
    """

    suggestion_limit: int = SUGGESTION_LIMIT
    min_search_length: int = MIN_SEARCH_LENGTH
    search: SearchConfig = field(default_factory=SearchConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrmConfig":
        """
        Build a configuration from a parsed YAML mapping.

        Raises:
            ConfigError: On unknown keys or invalid values
        """
        known = {"suggestion_limit", "min_search_length", "search"}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {sorted(unknown)}")

        search_data = data.get("search") or {}
        if not isinstance(search_data, dict):
            raise ConfigError("'search' must be a mapping")
        unknown_search = set(search_data) - {"url", "user_agent", "timeout", "result_limit"}
        if unknown_search:
            raise ConfigError(f"Unknown search keys: {sorted(unknown_search)}")

        try:
            search = SearchConfig(
                url=DataValidator.normalize_string(search_data.get("url"))
                or DEFAULT_SEARCH_URL,
                user_agent=DataValidator.normalize_string(search_data.get("user_agent"))
                or DEFAULT_USER_AGENT,
                timeout=_positive(
                    DataValidator.normalize_float(search_data.get("timeout")), 5.0, "search.timeout"
                ),
                result_limit=_positive(
                    DataValidator.normalize_int(search_data.get("result_limit")),
                    SEARCH_RESULT_LIMIT,
                    "search.result_limit",
                ),
            )
            return cls(
                suggestion_limit=_positive(
                    DataValidator.normalize_int(data.get("suggestion_limit")),
                    SUGGESTION_LIMIT,
                    "suggestion_limit",
                ),
                min_search_length=_positive(
                    DataValidator.normalize_int(data.get("min_search_length")),
                    MIN_SEARCH_LENGTH,
                    "min_search_length",
                ),
                search=search,
            )
        except ValidationError as e:
            raise ConfigError(str(e)) from e


def _positive(value: Optional[float], default: Any, name: str) -> Any:
    if value is None:
        return default
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def load_config(path: Optional[Path]) -> CrmConfig:
    """
    Load configuration from YAML, or defaults when the file is absent.

    Args:
        path: Path to config.yaml (None means defaults)

    Returns:
        CrmConfig instance

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values
    """
    if path is None or not Path(path).exists():
        return CrmConfig()

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    return CrmConfig.from_dict(data)
