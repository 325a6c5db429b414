"""
Tests for territory eligibility (distance + loop closure).
"""

from runrealm.features.tracking import RunPoint, RunSession, TrackingConfig
from runrealm.features.tracking import eligibility
from runrealm.shared.geo import calculate_total_distance


CONFIG = TrackingConfig()


def points_from(fixes):
    return [RunPoint.from_fix(f) for f in fixes]


class TestEvaluate:
    """Tests for eligibility.evaluate."""

    def test_closed_loop_over_minimum_is_eligible(self, square_loop):
        """A closed 640m loop qualifies."""
        points = points_from(square_loop())
        result = eligibility.evaluate(points, calculate_total_distance(points), CONFIG)

        assert result.eligible
        assert result.meets_distance
        assert result.is_loop
        assert result.loop_deviation < 1.0
        assert result.reason is None

    def test_short_loop_reports_distance(self, square_loop):
        """A short loop explains the missing distance."""
        points = points_from(square_loop(side_m=100))
        total = calculate_total_distance(points)

        result = eligibility.evaluate(points, total, CONFIG)

        assert not result.eligible
        assert not result.meets_distance
        assert result.is_loop
        assert result.required_distance == 500
        assert "below the required 500m" in result.reason

    def test_open_route_reports_deviation(self, make_fix):
        """Straight 600m line: long enough, but not a loop."""
        points = points_from([make_fix(north_m=i * 50, step=i) for i in range(13)])
        total = calculate_total_distance(points)

        result = eligibility.evaluate(points, total, CONFIG)

        assert not result.eligible
        assert result.meets_distance
        assert not result.is_loop
        assert result.loop_deviation > 590
        assert "from its start" in result.reason

    def test_single_point_not_eligible(self, make_fix):
        """One point cannot form a loop."""
        result = eligibility.evaluate(points_from([make_fix()]), 0.0, CONFIG)

        assert not result.eligible
        assert result.loop_deviation is None
        assert result.reason


class TestApply:
    """Tests for stamping eligibility onto a session."""

    def test_eligible_session_gets_region_id(self, square_loop):
        """Eligible sessions get a region id from the start point and time."""
        points = points_from(square_loop())
        session = RunSession(
            id="run_1",
            start_time=123,
            points=points,
            total_distance=calculate_total_distance(points),
        )

        eligibility.apply(session, CONFIG)

        assert session.territory_eligible
        assert session.geohash == "40.0000_-74.0000_123"
        assert session.eligibility.eligible

    def test_ineligible_session_has_no_region_id(self, make_fix):
        """Ineligible sessions get no region id."""
        session = RunSession(id="run_1", start_time=123, points=points_from([make_fix()]))

        eligibility.apply(session, CONFIG)

        assert not session.territory_eligible
        assert session.geohash is None
