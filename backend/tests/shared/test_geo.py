"""
Tests for shared geographic functions.

Tests the haversine distance, bearings and compass buckets.
"""

import pytest

from runrealm.features.territory import LatLngPoint
from runrealm.shared.geo import (
    haversine,
    distance,
    bearing,
    compass_direction,
    direction_between,
    calculate_total_distance,
    envelope,
    EARTH_RADIUS_M,
)


def p(lat, lng):
    return LatLngPoint(lat=lat, lng=lng)


# =============================================================================
# Test Haversine Distance
# =============================================================================

class TestHaversine:
    """Tests for haversine function."""

    def test_same_point(self):
        """Distance between same point should be 0."""
        assert haversine(43.0, 76.0, 43.0, 76.0) == 0.0

    def test_known_distance_almaty_astana(self):
        """Test with known distance (Almaty to Astana ~974km)."""
        dist = haversine(43.238949, 76.945465, 51.169392, 71.449074)
        assert 950_000 < dist < 1_000_000

    def test_small_distance(self):
        """0.001 degree latitude is about 111 meters."""
        dist = haversine(43.0, 76.0, 43.001, 76.0)
        assert dist == pytest.approx(111.2, abs=0.5)

    def test_symmetry(self):
        """Distance A->B should equal B->A."""
        dist_ab = haversine(43.0, 76.0, 44.0, 77.0)
        dist_ba = haversine(44.0, 77.0, 43.0, 76.0)
        assert dist_ab == pytest.approx(dist_ba, rel=0.0001)

    def test_east_west_distance(self):
        """At equator, 1 degree longitude is about 111 km."""
        dist = haversine(0.0, 0.0, 0.0, 1.0)
        assert 110_000 < dist < 112_000

    def test_earth_radius_constant(self):
        """Mean Earth radius in meters."""
        assert EARTH_RADIUS_M == 6_371_000.0

    def test_cross_hemisphere(self):
        """90 degrees of latitude is a quarter meridian (~10,000 km)."""
        dist = haversine(45.0, 0.0, -45.0, 0.0)
        assert 9_900_000 < dist < 10_100_000

    def test_antipodal_points(self):
        """Antipodal points stay finite (half the circumference)."""
        dist = haversine(0.0, 0.0, 0.0, 180.0)
        assert dist == pytest.approx(20_015_087, rel=0.001)

    def test_distance_uses_lat_lng_objects(self):
        """distance() agrees with haversine on raw coordinates."""
        assert distance(p(43.0, 76.0), p(43.001, 76.0)) == haversine(43.0, 76.0, 43.001, 76.0)


# =============================================================================
# Test Bearings and Compass Directions
# =============================================================================

class TestBearing:
    """Tests for bearing and compass bucketing."""

    def test_due_north(self):
        """Bearing to a point due north is 0."""
        assert bearing(p(0, 0), p(1, 0)) == pytest.approx(0.0)

    def test_due_east(self):
        """Bearing to a point due east is 90."""
        assert bearing(p(0, 0), p(0, 1)) == pytest.approx(90.0)

    def test_due_west_is_normalized(self):
        """Negative atan2 results are mapped into [0, 360)."""
        assert bearing(p(0, 0), p(0, -1)) == pytest.approx(270.0)

    @pytest.mark.parametrize("degrees,expected", [
        (0, "N"),
        (22.4, "N"),
        (22.5, "NE"),
        (90, "E"),
        (180, "S"),
        (225, "SW"),
        (337.5, "N"),
        (359.9, "N"),
    ])
    def test_compass_buckets(self, degrees, expected):
        """Bearings round to the nearest of eight directions."""
        assert compass_direction(degrees) == expected

    def test_direction_between(self):
        """Direction from one point towards another."""
        assert direction_between(p(0, 0), p(-1, -1)) == "SW"


# =============================================================================
# Test Total Distance and Envelope
# =============================================================================

class TestCalculateTotalDistance:
    """Tests for calculate_total_distance function."""

    def test_single_point(self):
        """Single point has zero total distance."""
        assert calculate_total_distance([p(43.0, 76.0)]) == 0.0

    def test_empty_list(self):
        """Empty list has zero total distance."""
        assert calculate_total_distance([]) == 0.0

    def test_multiple_points(self):
        """Total is the sum of consecutive legs."""
        points = [p(43.0, 76.0), p(43.001, 76.0), p(43.002, 76.0)]
        expected = haversine(43.0, 76.0, 43.001, 76.0) + haversine(43.001, 76.0, 43.002, 76.0)
        assert calculate_total_distance(points) == pytest.approx(expected)

    def test_round_trip(self):
        """Out-and-back is twice the one-way distance."""
        points = [p(43.0, 76.0), p(43.01, 76.0), p(43.0, 76.0)]
        one_way = haversine(43.0, 76.0, 43.01, 76.0)
        assert calculate_total_distance(points) == pytest.approx(2 * one_way)


class TestEnvelope:

    def test_envelope(self):
        """Envelope spans all points."""
        north, south, east, west = envelope([p(1, 5), p(-2, 3), p(0, 7)])
        assert (north, south, east, west) == (1, -2, 7, 3)

    def test_empty_raises(self):
        """Envelope of nothing is an error."""
        with pytest.raises(ValueError):
            envelope([])
