"""Records passed between the webhook, the clients and the mapper."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AccessToken:
    """Short-lived bearer token for one platform, plus the refresh token it came with."""

    platform: str
    value: str
    expires_at: int = 0
    refresh_token: str = ""


@dataclass(frozen=True)
class WebhookEvent:
    """Strava push-subscription event."""

    object_type: str
    aspect_type: str
    object_id: str | None
    owner_id: str | None = None
    event_time: int | None = None
    updates: dict = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict) -> "WebhookEvent":
        object_id = data.get("object_id")
        owner_id = data.get("owner_id")
        return cls(
            object_type=data.get("object_type") or "",
            aspect_type=data.get("aspect_type") or "",
            object_id=str(object_id) if object_id is not None else None,
            owner_id=str(owner_id) if owner_id is not None else None,
            event_time=data.get("event_time"),
            updates=data.get("updates") or {},
        )

    def is_actionable(self) -> bool:
        """Only newly created activities are synced."""
        return self.object_type == "activity" and self.aspect_type == "create"

    def client_payload(self) -> dict:
        return {
            "object_id": self.object_id,
            "owner_id": self.owner_id,
            "event_time": self.event_time,
            "updates": self.updates,
        }


@dataclass(frozen=True)
class StravaActivity:
    """Detailed Strava activity. ``raw`` keeps the full API response untouched."""

    id: Any
    name: str
    type: str
    start_date: str | None
    elapsed_time: Any
    moving_time: Any
    distance: Any
    total_elevation_gain: Any
    sport_type: str | None
    description: str | None = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, data: dict) -> "StravaActivity":
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            type=data.get("type") or "",
            start_date=data.get("start_date"),
            elapsed_time=data.get("elapsed_time"),
            moving_time=data.get("moving_time"),
            distance=data.get("distance"),
            total_elevation_gain=data.get("total_elevation_gain"),
            sport_type=data.get("sport_type"),
            description=data.get("description"),
            raw=dict(data),
        )

    def to_dict(self) -> dict:
        return dict(self.raw)


@dataclass(frozen=True)
class FitbitActivityPayload:
    """Body for Fitbit's log-activity endpoint."""

    activity_name: str
    start_time: str | None
    duration_millis: int
    distance_km: float | None = None
    distance_unit: str | None = None
    description: str | None = None

    def to_api(self) -> dict:
        body = {
            "activityName": self.activity_name,
            "startTime": self.start_time,
            "durationMillis": self.duration_millis,
            "distance": self.distance_km,
            "distanceUnit": self.distance_unit,
            "description": self.description,
        }
        return {k: v for k, v in body.items() if v is not None}
