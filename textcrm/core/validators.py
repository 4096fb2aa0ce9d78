#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities for TextCRM operations.

Provides type-safe conversion, validation and normalization used by the
dataclasses, the message store and the configuration loader.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError


class DataValidator:
    """Centralized data validation."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-empty.

        Args:
            data: Data dictionary to validate
            required_fields: List of required field names

        Raises:
            ValidationError: If validation fails
        """
        for field in required_fields:
            if field not in data or data[field] is None or data[field] == "":
                raise ValidationError(f"Required field '{field}' missing or empty")

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """
        Normalize string value: strip and collapse to None when blank.

        Args:
            value: Value to normalize

        Returns:
            Stripped string or None
        """
        if value is None:
            return None
        result = str(value).strip()
        return result or None

    @staticmethod
    def normalize_datetime(value: Any) -> Optional[datetime]:
        """
        Normalize timestamps to timezone-aware UTC datetimes.

        Accepts datetime objects, ISO 8601 strings and epoch seconds.
        Naive datetimes are assumed to be UTC.

        Args:
            value: Datetime, ISO string, int/float epoch seconds

        Returns:
            Aware datetime in UTC, or None

        Raises:
            ValidationError: If the value cannot be parsed
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        elif isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.strip())
            except ValueError:
                try:
                    return datetime.fromtimestamp(float(value), tz=timezone.utc)
                except ValueError:
                    raise ValidationError(f"Cannot parse timestamp: '{value}'")
        else:
            raise ValidationError(f"Unsupported timestamp type: {type(value).__name__}")

        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    @staticmethod
    def normalize_float(value: Any) -> Optional[float]:
        """
        Convert value to float safely.

        Raises:
            ValidationError: If conversion fails
        """
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            raise ValidationError(f"Cannot convert boolean '{value}' to float")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Cannot convert '{value}' to float")

    @staticmethod
    def normalize_int(value: Any) -> Optional[int]:
        """
        Convert value to integer safely.

        Raises:
            ValidationError: If conversion fails
        """
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValidationError(f"Cannot convert boolean '{value}' to integer")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Cannot convert '{value}' to integer")

    @staticmethod
    def validate_coordinate(latitude: Any, longitude: Any) -> tuple:
        """
        Validate a latitude/longitude pair.

        Args:
            latitude: Value convertible to float within [-90, 90]
            longitude: Value convertible to float within [-180, 180]

        Returns:
            Tuple of (latitude, longitude) floats

        Raises:
            ValidationError: If either value is missing or out of range
        """
        lat = DataValidator.normalize_float(latitude)
        lon = DataValidator.normalize_float(longitude)
        if lat is None or lon is None:
            raise ValidationError("Coordinate requires both latitude and longitude")
        if not -90.0 <= lat <= 90.0:
            raise ValidationError(f"Latitude must be within [-90, 90], got {lat}")
        if not -180.0 <= lon <= 180.0:
            raise ValidationError(f"Longitude must be within [-180, 180], got {lon}")
        return lat, lon
