"""Error taxonomy and result types shared by every pipeline step.

Each step returns a ``Result`` instead of raising, so the orchestrator can
stop at the first failure and report it without unwinding through
exception handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import requests

T = TypeVar("T")


class SyncError(Exception):
    """Base class for terminal sync failures."""

    kind = "sync_error"

    def __init__(self, message: str, upstream: Any = None):
        super().__init__(message)
        self.message = message
        self.upstream = upstream

    def __str__(self):
        if self.upstream is None:
            return self.message
        return f"{self.message}: {self.upstream}"


class ConfigurationError(SyncError):
    """Missing credentials, activity id, or unreadable event payload."""

    kind = "configuration_error"


class UpstreamAuthError(SyncError):
    """Token refresh rejected by a platform."""

    kind = "upstream_auth_error"


class UpstreamFetchError(SyncError):
    """Strava refused or failed the activity read."""

    kind = "upstream_fetch_error"


class UpstreamUploadError(SyncError):
    """Fitbit refused or failed the activity write."""

    kind = "upstream_upload_error"


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T | None = None
    error: SyncError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SyncError) -> "Result[T]":
        return cls(error=error)


def upstream_detail(exc: Exception):
    """Return the upstream response body for a requests error, else its message."""
    response = getattr(exc, "response", None)
    if isinstance(exc, requests.RequestException) and response is not None:
        try:
            return response.json()
        except ValueError:
            return response.text
    return str(exc)


@dataclass
class SyncOutcome:
    """Terminal state of one sync run."""

    status: str
    activity_id: str | None = None
    activity_name: str | None = None
    fitbit_log_id: Any = None
    error: SyncError | None = field(default=None)

    @property
    def exit_code(self) -> int:
        return 0 if self.status == "synced" else 1

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "activity_id": self.activity_id,
            "activity_name": self.activity_name,
            "fitbit_log_id": self.fitbit_log_id,
            "error": str(self.error) if self.error else None,
            "error_kind": self.error.kind if self.error else None,
        }
