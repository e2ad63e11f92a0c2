"""Strava API v3 client with OAuth2 token refresh."""

from __future__ import annotations

import logging

import requests

from config import STRAVA_BASE_URL, STRAVA_TOKEN_URL, DEFAULT_REQUEST_TIMEOUT
from models import StravaActivity
from results import Result, UpstreamFetchError, upstream_detail

logger = logging.getLogger(__name__)


class StravaClient:
    """Strava API client. One instance per sync run."""

    def __init__(self, access_token=None, refresh_token=None,
                 client_id=None, client_secret=None, base_url=None,
                 timeout=DEFAULT_REQUEST_TIMEOUT):
        self.access_token = access_token or ""
        self.refresh_token = refresh_token or ""
        self.client_id = client_id or ""
        self.client_secret = client_secret or ""
        self.base_url = (base_url or STRAVA_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.expires_at = 0

        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        })

    def _update_auth_header(self):
        """Update session Authorization header after token refresh."""
        self.session.headers["Authorization"] = f"Bearer {self.access_token}"

    def refresh_tokens(self):
        """Exchange the refresh token for a new access token.

        Strava may hand back a new refresh token; it replaces the old one on
        the client.
        """
        resp = self.session.post(
            STRAVA_TOKEN_URL,
            json={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": self.refresh_token,
                "grant_type": "refresh_token",
            },
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        self.access_token = data["access_token"]
        self.refresh_token = data.get("refresh_token") or self.refresh_token
        self.expires_at = data.get("expires_at", 0)
        self._update_auth_header()
        return data

    def _get(self, path, params=None):
        url = f"{self.base_url}{path}"
        resp = self.session.get(url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def get_activity(self, activity_id):
        """Get detailed information for a single activity."""
        logger.info("Fetching Strava activity %s", activity_id)
        return self._get(f"/activities/{activity_id}")


def fetch_activity(activity_id, access_token, timeout=DEFAULT_REQUEST_TIMEOUT,
                   client=None) -> Result[StravaActivity]:
    """Fetch one activity with a bearer token. No retry."""
    client = client or StravaClient(access_token=access_token, timeout=timeout)
    try:
        data = client.get_activity(activity_id)
    except (requests.RequestException, ValueError) as exc:
        detail = upstream_detail(exc)
        logger.error("Error fetching activity from Strava: %s", detail)
        return Result.failure(UpstreamFetchError(
            "Failed to fetch activity details from Strava", upstream=detail,
        ))
    activity = StravaActivity.from_api(data)
    logger.info("Retrieved activity: %s (%s)", activity.name, activity.type)
    return Result.success(activity)
