"""Tests for configuration loading."""
import pytest

from textcrm.core.config import (
    DEFAULT_SEARCH_URL,
    MIN_SEARCH_LENGTH,
    SUGGESTION_LIMIT,
    CrmConfig,
    load_config,
)
from textcrm.core.exceptions import ConfigError


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_gives_defaults(self, tmp_dir):
        config = load_config(tmp_dir / "absent.yaml")
        assert config.suggestion_limit == SUGGESTION_LIMIT == 8
        assert config.min_search_length == MIN_SEARCH_LENGTH == 2
        assert config.search.url == DEFAULT_SEARCH_URL

    def test_none_gives_defaults(self):
        assert load_config(None) == CrmConfig()

    def test_reads_values(self, tmp_dir):
        path = tmp_dir / "config.yaml"
        path.write_text(
            "suggestion_limit: 5\n"
            "search:\n"
            "  user_agent: tests/1.0\n"
            "  timeout: 2.5\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.suggestion_limit == 5
        assert config.min_search_length == 2
        assert config.search.user_agent == "tests/1.0"
        assert config.search.timeout == 2.5
        assert config.search.result_limit == 10

    def test_empty_file_gives_defaults(self, tmp_dir):
        path = tmp_dir / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == CrmConfig()

    def test_invalid_yaml(self, tmp_dir):
        path = tmp_dir / "config.yaml"
        path.write_text("suggestion_limit: [1, 2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Cannot parse"):
            load_config(path)

    def test_non_mapping(self, tmp_dir):
        path = tmp_dir / "config.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)


class TestCrmConfigFromDict:
    """Tests for CrmConfig.from_dict validation."""

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown configuration keys"):
            CrmConfig.from_dict({"suggestions": 3})

    def test_unknown_search_key(self):
        with pytest.raises(ConfigError, match="Unknown search keys"):
            CrmConfig.from_dict({"search": {"api_key": "x"}})

    def test_non_positive_value(self):
        with pytest.raises(ConfigError, match="must be positive"):
            CrmConfig.from_dict({"suggestion_limit": 0})

    def test_non_numeric_value(self):
        with pytest.raises(ConfigError):
            CrmConfig.from_dict({"min_search_length": "two"})
