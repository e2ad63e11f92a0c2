"""Trigger the sync workflow through GitHub's repository_dispatch API."""

from __future__ import annotations

import logging

import requests

from config import DEFAULT_REQUEST_TIMEOUT, GITHUB_API_URL
from results import ConfigurationError, Result, SyncError, upstream_detail

logger = logging.getLogger(__name__)

EVENT_TYPE = "strava_activity"


def trigger_repository_dispatch(client_payload: dict, github_token: str, repo: str,
                                timeout=DEFAULT_REQUEST_TIMEOUT, session=None) -> Result[dict]:
    """Ask GitHub to start the workflow listening for ``strava_activity``."""
    if not github_token or not repo:
        return Result.failure(ConfigurationError("Missing GitHub token or repository"))

    http = session or requests
    try:
        resp = http.post(
            f"{GITHUB_API_URL}/repos/{repo}/dispatches",
            json={"event_type": EVENT_TYPE, "client_payload": client_payload},
            headers={
                "Authorization": f"Bearer {github_token}",
                "Accept": "application/vnd.github.v3+json",
            },
            timeout=timeout,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        detail = upstream_detail(exc)
        logger.error("Failed to trigger GitHub Action: %s", detail)
        return Result.failure(SyncError("Failed to trigger GitHub Action", upstream=detail))

    logger.info("GitHub Action triggered for activity %s", client_payload.get("object_id"))
    return Result.success(client_payload)
