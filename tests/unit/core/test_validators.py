"""Tests for DataValidator."""
from datetime import datetime, timedelta, timezone

import pytest

from textcrm.core.exceptions import ValidationError
from textcrm.core.validators import DataValidator


class TestRequiredFields:
    def test_present_fields_pass(self):
        DataValidator.validate_required_fields({"id": "1", "text": "hi"}, ["id", "text"])

    @pytest.mark.parametrize("data", [{}, {"text": None}, {"text": ""}])
    def test_missing_or_empty_fields_fail(self, data):
        with pytest.raises(ValidationError, match="text"):
            DataValidator.validate_required_fields(data, ["text"])


class TestNormalizeString:
    def test_strips_whitespace(self):
        assert DataValidator.normalize_string("  Alice ") == "Alice"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_becomes_none(self, value):
        assert DataValidator.normalize_string(value) is None


class TestNormalizeDatetime:
    def test_naive_datetime_is_utc(self):
        result = DataValidator.normalize_datetime(datetime(2024, 1, 15, 12, 0))
        assert result == datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def test_aware_datetime_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        result = DataValidator.normalize_datetime(datetime(2024, 1, 15, 14, 0, tzinfo=plus_two))
        assert result == datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc

    def test_iso_string(self):
        result = DataValidator.normalize_datetime("2024-01-15T12:00:00+00:00")
        assert result == datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def test_epoch_seconds(self):
        result = DataValidator.normalize_datetime(0)
        assert result == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_garbage_string_fails(self):
        with pytest.raises(ValidationError):
            DataValidator.normalize_datetime("next tuesday")

    def test_unsupported_type_fails(self):
        with pytest.raises(ValidationError):
            DataValidator.normalize_datetime(["2024"])


class TestNumbers:
    def test_float_conversion(self):
        assert DataValidator.normalize_float("40.5") == 40.5
        assert DataValidator.normalize_float("") is None

    def test_bool_is_rejected(self):
        with pytest.raises(ValidationError):
            DataValidator.normalize_int(True)
        with pytest.raises(ValidationError):
            DataValidator.normalize_float(False)

    def test_int_conversion_failure(self):
        with pytest.raises(ValidationError):
            DataValidator.normalize_int("eight")


class TestCoordinate:
    def test_valid_pair(self):
        assert DataValidator.validate_coordinate("40.7", -73.9) == (40.7, -73.9)

    @pytest.mark.parametrize("lat,lon", [(91, 0), (-91, 0), (0, 181), (0, -181)])
    def test_out_of_range(self, lat, lon):
        with pytest.raises(ValidationError):
            DataValidator.validate_coordinate(lat, lon)

    def test_missing_half(self):
        with pytest.raises(ValidationError, match="both"):
            DataValidator.validate_coordinate(40.7, None)
