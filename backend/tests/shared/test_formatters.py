"""
Tests for shared formatters.
"""

from runrealm.shared.formatters import (
    format_coordinate,
    format_distance_km,
    format_duration_minutes,
)


class TestFormatters:
    """Tests for territory text formatters."""

    def test_distance_km(self):
        """Distances are shown in km with one decimal."""
        assert format_distance_km(1234) == "1.2km"
        assert format_distance_km(0) == "0.0km"

    def test_duration_minutes(self):
        """Durations are rounded to whole minutes."""
        assert format_duration_minutes(25 * 60_000) == "25 minutes"
        assert format_duration_minutes(90_000) == "2 minutes"

    def test_negative_duration(self):
        """Negative durations show a placeholder."""
        assert format_duration_minutes(-1) == "—"

    def test_coordinate_hemispheres(self):
        """Southern/western coordinates get S/W, not a minus sign."""
        assert format_coordinate(40.7128, -74.0060) == "40.713°N 74.006°W"
        assert format_coordinate(-33.8688, 151.2093) == "33.869°S 151.209°E"
