"""Test activity_mapper translates Strava activities into Fitbit payloads."""

from activity_mapper import STRAVA_TO_FITBIT, map_activity, map_activity_type
from models import StravaActivity


def _activity(**overrides):
    data = {
        "id": 123,
        "name": "Morning Run",
        "type": "Run",
        "sport_type": "Run",
        "start_date": "2026-02-20T07:00:00Z",
        "elapsed_time": 3600,
        "moving_time": 3500,
        "distance": 10000.0,
        "total_elevation_gain": 42.0,
    }
    data.update(overrides)
    return StravaActivity.from_api(data)


# ---------------------------------------------------------------------------
# Type lookup
# ---------------------------------------------------------------------------

def test_ride_maps_to_bike():
    assert map_activity(_activity(type="Ride")).activity_name == "Bike"


def test_unknown_type_defaults_to_sport():
    assert map_activity(_activity(type="UnknownXYZ")).activity_name == "Sport"


def test_lookup_table_entries():
    assert map_activity_type("WeightTraining") == "Weights"
    assert map_activity_type("Workout") == "Sport"
    assert map_activity_type("Yoga") == "Yoga"
    assert len(STRAVA_TO_FITBIT) == 8


# ---------------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------------

def test_distance_meters_to_km():
    payload = map_activity(_activity(distance=10000))
    assert payload.distance_km == 10
    assert payload.distance_unit == "Kilometer"


def test_duration_seconds_to_millis():
    assert map_activity(_activity(elapsed_time=3600)).duration_millis == 3600000


def test_description_uses_activity_name():
    payload = map_activity(_activity(name="Morning Run", description="Legs felt heavy"))
    assert payload.description == "Imported from Strava: Morning Run"


def test_start_time_copied():
    assert map_activity(_activity()).start_time == "2026-02-20T07:00:00Z"


def test_mapping_is_deterministic():
    activity = _activity()
    assert map_activity(activity) == map_activity(activity)
    assert map_activity(activity).to_api() == map_activity(_activity()).to_api()


# ---------------------------------------------------------------------------
# Missing or malformed numbers
# ---------------------------------------------------------------------------

def test_missing_distance_drops_distance_fields():
    payload = map_activity(_activity(distance=None))
    assert payload.distance_km is None
    body = payload.to_api()
    assert "distance" not in body
    assert "distanceUnit" not in body


def test_non_numeric_distance_is_not_nan():
    payload = map_activity(_activity(distance="far"))
    assert payload.distance_km is None


def test_missing_elapsed_time_falls_back_to_moving_time():
    assert map_activity(_activity(elapsed_time=None)).duration_millis == 3500000


def test_missing_all_durations_is_zero():
    assert map_activity(_activity(elapsed_time=None, moving_time=None)).duration_millis == 0


def test_to_api_wire_keys():
    body = map_activity(_activity()).to_api()
    assert body == {
        "activityName": "Run",
        "startTime": "2026-02-20T07:00:00Z",
        "durationMillis": 3600000,
        "distance": 10.0,
        "distanceUnit": "Kilometer",
        "description": "Imported from Strava: Morning Run",
    }


def test_extra_fields_preserved_on_source_activity():
    activity = _activity(kudos_count=7, map={"id": "a1"})
    assert activity.to_dict()["kudos_count"] == 7
    assert activity.to_dict()["map"] == {"id": "a1"}
