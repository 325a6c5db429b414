"""
Tests for external activity import (encoded polyline and GPX).
"""

import polyline
import pytest

from runrealm.features.tracking import ActivityImportError, ExternalActivity, TrackingConfig
from runrealm.features.tracking import importer
from runrealm.shared import events
from runrealm.shared.constants import ActivitySource, RunStatus


CONFIG = TrackingConfig()
START_MS = 1_700_000_000_000


def make_activity(encoded, **overrides):
    data = dict(
        id="strava_1",
        source=ActivitySource.STRAVA,
        name="Lunch Loop",
        start_time=START_MS,
        distance=700.0,
        duration=180_000,
        polyline=encoded,
        average_speed=3.5,
    )
    data.update(overrides)
    return ExternalActivity(**data)


# =============================================================================
# Test Polyline Import
# =============================================================================

class TestPolylineImport:
    """Tests for import_external_activity."""

    def test_decode_polyline(self):
        """Decoded points carry no timing."""
        points = importer.decode_polyline_to_points(polyline.encode([(40.0, -74.0), (40.001, -74.001)], 5))

        assert len(points) == 2
        assert points[1].lat == pytest.approx(40.001)
        assert all(p.timestamp == 0 for p in points)

    def test_empty_polyline_has_no_points(self):
        """Missing polylines decode to nothing."""
        assert importer.decode_polyline_to_points(None) == []
        assert importer.decode_polyline_to_points("") == []

    def test_imported_loop_is_eligible(self, square_loop):
        """An imported loop completes with the activity's timing."""
        encoded = polyline.encode([(f.lat, f.lng) for f in square_loop()], 5)

        session = importer.import_external_activity(make_activity(encoded), CONFIG)

        assert session.status == RunStatus.COMPLETED
        assert session.territory_eligible
        assert session.geohash is not None
        assert session.end_time == START_MS + 180_000
        assert session.total_duration == 180_000
        assert session.external_activity.name == "Lunch Loop"

    def test_distance_matches_live_run(self, square_loop, run_route):
        """Same points give the same distance as a live run, not the platform's figure."""
        fixes = square_loop()
        live = run_route(fixes)
        encoded = polyline.encode([(f.lat, f.lng) for f in fixes], 5)

        session = importer.import_external_activity(make_activity(encoded), CONFIG)

        assert session.total_distance == pytest.approx(live.total_distance, rel=0.02)
        assert session.territory_eligible == live.territory_eligible

    def test_speeds_from_activity_without_timing(self, square_loop):
        """Untimed imports take speeds from the activity."""
        encoded = polyline.encode([(f.lat, f.lng) for f in square_loop()], 5)

        session = importer.import_external_activity(
            make_activity(encoded, average_speed=3.5, max_speed=5.0),
            CONFIG,
        )

        assert session.average_speed == 3.5
        assert session.max_speed == 5.0

    def test_activity_without_polyline_not_eligible(self):
        """An import without points is not eligible."""
        session = importer.import_external_activity(make_activity(None), CONFIG)

        assert session.points == []
        assert not session.territory_eligible
        assert session.eligibility.reason


# =============================================================================
# Test GPX Import
# =============================================================================

class TestGpxImport:
    """Tests for parse_gpx / import_gpx."""

    def test_parse_gpx(self, square_loop, make_gpx):
        """Track points, name, duration and distance are read from GPX."""
        fixes = square_loop()
        activity, points = importer.parse_gpx(make_gpx(fixes))

        assert activity.source == ActivitySource.GPX
        assert activity.name == "Morning Loop"
        assert activity.distance == pytest.approx(640, rel=0.01)
        assert activity.duration == 5_000 * (len(fixes) - 1)
        assert len(points) == len(fixes)
        assert points[0].altitude == 10

    def test_import_gpx_uses_real_timing(self, square_loop, make_gpx):
        """GPX timestamps drive speeds and the activity summary."""
        session = importer.import_gpx(make_gpx(square_loop()), CONFIG)

        assert session.territory_eligible
        assert session.average_speed > 0
        assert session.external_activity.distance == pytest.approx(session.total_distance)
        assert session.external_activity.average_speed == pytest.approx(
            session.total_distance / (session.total_duration / 1000)
        )

    def test_route_points_fallback(self):
        content = b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="runrealm-tests" xmlns="http://www.topografix.com/GPX/1/1">
  <rte>
    <rtept lat="40.0" lon="-74.0"></rtept>
    <rtept lat="40.001" lon="-74.0"></rtept>
  </rte>
</gpx>"""
        activity, points = importer.parse_gpx(content, name="route.gpx")

        assert len(points) == 2
        assert activity.name == "route.gpx"

    def test_invalid_gpx(self):
        """Unparseable content raises an import error."""
        with pytest.raises(ActivityImportError):
            importer.parse_gpx(b"this is not gpx")

    def test_gpx_without_points(self):
        content = b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="runrealm-tests" xmlns="http://www.topografix.com/GPX/1/1">
</gpx>"""
        with pytest.raises(ActivityImportError, match="no track or route points"):
            importer.parse_gpx(content)


# =============================================================================
# Test Tracker Import Entry Points
# =============================================================================

class TestTrackerImport:

    def test_import_saves_and_emits(self, tracker, event_bus, state, square_loop):
        """Tracker imports are saved and announced."""
        encoded = polyline.encode([(f.lat, f.lng) for f in square_loop()], 5)

        session = tracker.import_external_activity(make_activity(encoded))

        assert state.load_last_run().id == session.id
        payload = event_bus.payloads(events.RUN_IMPORTED)[0]
        assert payload["source"] == "strava"
        assert tracker.current_run is None

    def test_import_gpx_through_tracker(self, tracker, event_bus, square_loop, make_gpx):
        """GPX imports go through the tracker too."""
        session = tracker.import_gpx(make_gpx(square_loop()), "loop.gpx")

        assert session.territory_eligible
        assert event_bus.payloads(events.RUN_IMPORTED)[0]["source"] == "gpx"
