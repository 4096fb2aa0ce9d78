"""Tests for name matching helpers."""
import pytest

from textcrm.utils.name_matching import (
    clean_mention_name,
    find_name,
    key_set,
    name_key,
    names_match,
    overlaps,
    starts_with,
)


class TestCleanMentionName:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("@Alice", "Alice"),
            ("  @Alice  ", "Alice"),
            ("Alice", "Alice"),
            ("@Mary   Jane", "Mary Jane"),
            ("@", ""),
            ("", ""),
        ],
    )
    def test_cleaning(self, raw, expected):
        assert clean_mention_name(raw) == expected


class TestKeys:
    def test_name_key_is_case_insensitive(self):
        assert name_key("@ALICE") == name_key("alice") == "alice"

    def test_hyphen_is_significant(self):
        assert not names_match("Bob-Smith", "Bob Smith")

    def test_blank_names_never_match(self):
        assert not names_match("@", "")

    def test_key_set_skips_blanks(self):
        assert key_set(["Alice", "", "@", "DELI"]) == {"alice", "deli"}


class TestSuggestionMatching:
    def test_starts_with(self):
        assert starts_with("Alice", "al")
        assert not starts_with("Alice", "li")

    def test_overlaps_either_direction(self):
        assert overlaps("Al", "Alice")
        assert overlaps("Alice's Deli", "alice")
        assert not overlaps("Deli", "Alice")

    def test_find_name_returns_stored_spelling(self):
        assert find_name("alice", ["Bob", "Alice"]) == "Alice"
        assert find_name("Carol", ["Bob", "Alice"]) is None
