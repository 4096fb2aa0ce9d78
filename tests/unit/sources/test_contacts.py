"""Tests for contact sources."""
import pytest
import yaml

from textcrm.core.exceptions import ValidationError
from textcrm.sources.contacts import StaticContactSource, YamlContactSource, format_contact_name


class TestFormatContactName:
    @pytest.mark.parametrize(
        "entry,expected",
        [
            ("Alice", "Alice"),
            ({"nickname": "Bobby", "given_name": "Robert"}, "Bobby"),
            ({"given_name": "Carol", "family_name": "Danvers"}, "Carol Danvers"),
            ({"family_name": "Danvers"}, "Danvers"),
            ({"nickname": "  ", "given_name": "Eve"}, "Eve"),
            ({}, None),
            (42, None),
        ],
    )
    def test_formatting(self, entry, expected):
        assert format_contact_name(entry) == expected


class TestStaticContactSource:
    def test_dedupes_and_skips_blanks(self):
        source = StaticContactSource(["Alice", "alice", "", "Bob"])
        assert source.list_contacts() == ["Alice", "Bob"]

    def test_add_returns_existing_spelling(self):
        source = StaticContactSource(["Alice"])
        assert source.add_contact("ALICE") == "Alice"
        assert source.list_contacts() == ["Alice"]

    def test_add_blank_fails(self):
        with pytest.raises(ValidationError):
            StaticContactSource().add_contact("  ")


class TestYamlContactSource:
    """Tests for the YAML-backed contact book."""

    def test_missing_file_is_empty(self, tmp_dir):
        assert YamlContactSource(tmp_dir / "contacts.yaml").list_contacts() == []

    def test_reads_mixed_entries(self, tmp_dir):
        path = tmp_dir / "contacts.yaml"
        path.write_text(
            "contacts:\n"
            "  - Alice\n"
            "  - nickname: Bobby\n"
            "  - given_name: Carol\n"
            "    family_name: Danvers\n",
            encoding="utf-8",
        )
        assert YamlContactSource(path).list_contacts() == ["Alice", "Bobby", "Carol Danvers"]

    def test_bare_list(self, tmp_dir):
        path = tmp_dir / "contacts.yaml"
        path.write_text("- Alice\n- Bob\n", encoding="utf-8")
        assert YamlContactSource(path).list_contacts() == ["Alice", "Bob"]

    def test_invalid_yaml(self, tmp_dir):
        path = tmp_dir / "contacts.yaml"
        path.write_text("contacts: [Alice\n", encoding="utf-8")
        with pytest.raises(ValidationError, match="Cannot parse"):
            YamlContactSource(path).list_contacts()

    def test_contacts_not_a_list(self, tmp_dir):
        path = tmp_dir / "contacts.yaml"
        path.write_text("contacts: Alice\n", encoding="utf-8")
        with pytest.raises(ValidationError, match="must be a list"):
            YamlContactSource(path).list_contacts()

    def test_add_contact_persists(self, tmp_dir):
        path = tmp_dir / "nested" / "contacts.yaml"
        source = YamlContactSource(path)

        assert source.add_contact(" Dave ") == "Dave"
        assert source.add_contact("dave") == "Dave"

        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data == {"contacts": ["Dave"]}
        assert YamlContactSource(path).list_contacts() == ["Dave"]
