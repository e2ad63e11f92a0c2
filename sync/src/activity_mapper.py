"""Translate a Strava activity into a Fitbit manual-activity payload."""

from __future__ import annotations

import math

from models import FitbitActivityPayload, StravaActivity

# Strava activity type -> Fitbit activity name
STRAVA_TO_FITBIT = {
    "Run": "Run",
    "Ride": "Bike",
    "Swim": "Swim",
    "Walk": "Walk",
    "Hike": "Hike",
    "WeightTraining": "Weights",
    "Workout": "Sport",
    "Yoga": "Yoga",
}

DEFAULT_FITBIT_ACTIVITY = "Sport"
DISTANCE_UNIT = "Kilometer"
DESCRIPTION_PREFIX = "Imported from Strava: "


def map_activity_type(strava_type: str) -> str:
    """Fitbit activity name for a Strava type, 'Sport' when unknown."""
    return STRAVA_TO_FITBIT.get(strava_type, DEFAULT_FITBIT_ACTIVITY)


def _number(value) -> float | None:
    """Finite float for value, or None when missing or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _duration_millis(activity: StravaActivity) -> int:
    # elapsed_time, then moving_time, then zero
    for seconds in (activity.elapsed_time, activity.moving_time):
        value = _number(seconds)
        if value is not None:
            return int(round(value * 1000))
    return 0


def map_activity(activity: StravaActivity) -> FitbitActivityPayload:
    """Build the Fitbit payload for one Strava activity.

    Never raises. Unusable distance values drop the distance fields from
    the payload instead of sending NaN.
    """
    distance_m = _number(activity.distance)
    distance_km = distance_m / 1000 if distance_m is not None else None
    return FitbitActivityPayload(
        activity_name=map_activity_type(activity.type),
        start_time=activity.start_date,
        duration_millis=_duration_millis(activity),
        distance_km=distance_km,
        distance_unit=DISTANCE_UNIT if distance_km is not None else None,
        description=f"{DESCRIPTION_PREFIX}{activity.name}",
    )
