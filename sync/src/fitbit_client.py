"""Fitbit Web API client: OAuth2 token refresh and manual activity logging."""

from __future__ import annotations

import logging
import time

import requests

from config import FITBIT_BASE_URL, FITBIT_TOKEN_URL, DEFAULT_REQUEST_TIMEOUT
from models import FitbitActivityPayload
from results import Result, UpstreamUploadError, upstream_detail

logger = logging.getLogger(__name__)


class FitbitClient:
    """Fitbit API client. One instance per sync run."""

    def __init__(self, access_token=None, refresh_token=None,
                 client_id=None, client_secret=None, base_url=None,
                 timeout=DEFAULT_REQUEST_TIMEOUT):
        self.access_token = access_token or ""
        self.refresh_token = refresh_token or ""
        self.client_id = client_id or ""
        self.client_secret = client_secret or ""
        self.base_url = (base_url or FITBIT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.expires_at = 0

        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        })

    def _update_auth_header(self):
        self.session.headers["Authorization"] = f"Bearer {self.access_token}"

    def refresh_tokens(self):
        """Exchange the refresh token using HTTP Basic client authentication.

        Fitbit refresh tokens are single use: the response carries a new one,
        which is kept on the client so the caller can persist it.
        """
        resp = self.session.post(
            FITBIT_TOKEN_URL,
            data={
                "grant_type": "refresh_token",
                "refresh_token": self.refresh_token,
            },
            auth=(self.client_id, self.client_secret),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        self.access_token = data["access_token"]
        self.refresh_token = data.get("refresh_token") or self.refresh_token
        expires_in = data.get("expires_in")
        self.expires_at = int(time.time()) + int(expires_in) if expires_in else 0
        self._update_auth_header()
        return data

    def create_activity(self, payload: dict) -> dict:
        """Log a manual activity. Returns the created activity log record."""
        url = f"{self.base_url}/activities.json"
        resp = self.session.post(url, json=payload, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()


def upload_activity(payload: FitbitActivityPayload, access_token,
                    timeout=DEFAULT_REQUEST_TIMEOUT, client=None) -> Result[dict]:
    """Create the activity on Fitbit with a bearer token. No retry."""
    client = client or FitbitClient(access_token=access_token, timeout=timeout)
    logger.info("Uploading to Fitbit as: %s", payload.activity_name)
    try:
        record = client.create_activity(payload.to_api())
    except (requests.RequestException, ValueError) as exc:
        detail = upstream_detail(exc)
        logger.error("Error uploading to Fitbit: %s", detail)
        return Result.failure(UpstreamUploadError(
            "Failed to upload activity to Fitbit", upstream=detail,
        ))
    logger.info("Successfully uploaded to Fitbit")
    return Result.success(record)
