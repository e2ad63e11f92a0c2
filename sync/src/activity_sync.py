"""Sync one Strava activity to Fitbit.

Invoked by the ``strava_activity`` repository_dispatch workflow, which puts
the event payload in the file named by GITHUB_EVENT_PATH. For local runs,
set TEST_ACTIVITY_ID or pass --activity-id.

Usage:
    python -m activity_sync [--activity-id ID] [--event-path PATH] [--json]
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from activity_mapper import map_activity
from config import SyncConfig, load_sync_config
from credentials import FITBIT, STRAVA, CredentialProvider
from db import TokenStore
from fitbit_client import upload_activity
from results import ConfigurationError, Result, SyncOutcome
from strava_client import fetch_activity

logger = logging.getLogger(__name__)


def load_event(event_path: str | None = None, test_activity_id: str | None = None) -> Result[dict]:
    """Load the trigger payload from the CI event file, else from a test activity id."""
    if event_path:
        try:
            with open(event_path, encoding="utf-8") as f:
                event = json.load(f)
        except (OSError, ValueError) as exc:
            return Result.failure(ConfigurationError(
                f"Error loading event data from {event_path}", upstream=str(exc),
            ))
        logger.info("Event data loaded from: %s", event_path)
        return Result.success(event)

    if test_activity_id:
        logger.info("Using test activity ID from environment")
        return Result.success({"client_payload": {"object_id": test_activity_id}})

    return Result.failure(ConfigurationError(
        "No event file (GITHUB_EVENT_PATH) or TEST_ACTIVITY_ID configured"
    ))


def resolve_activity_id(event) -> Result[str]:
    """Pull the activity id out of a raw id, a dispatch envelope or a webhook event."""
    activity_id = None
    if isinstance(event, (str, int)) and not isinstance(event, bool):
        activity_id = event
    elif isinstance(event, dict):
        payload = event.get("client_payload")
        if isinstance(payload, dict):
            activity_id = payload.get("object_id")
        if activity_id in (None, ""):
            activity_id = event.get("object_id")

    if activity_id in (None, ""):
        return Result.failure(ConfigurationError("No activity ID found in event payload"))
    return Result.success(str(activity_id))


def _failed(activity_id, error, activity_name=None) -> SyncOutcome:
    logger.error("Sync failed: %s", error)
    return SyncOutcome(status="error", activity_id=activity_id,
                       activity_name=activity_name, error=error)


def run_sync(event, config: SyncConfig, provider: CredentialProvider | None = None,
             strava=None, fitbit=None) -> SyncOutcome:
    """Run the pipeline for one activity; the first failing step ends the run.

    ``strava`` and ``fitbit`` are optional pre-built clients, used for both
    the token exchange and the API call on their platform.
    """
    resolved = resolve_activity_id(event)
    if not resolved.ok:
        return _failed(None, resolved.error)
    activity_id = resolved.value
    logger.info("Processing Strava activity ID: %s", activity_id)

    provider = provider or CredentialProvider(config)

    strava_token = provider.access_token(STRAVA, client=strava)
    if not strava_token.ok:
        return _failed(activity_id, strava_token.error)

    fitbit_token = provider.access_token(FITBIT, client=fitbit)
    if not fitbit_token.ok:
        return _failed(activity_id, fitbit_token.error)

    fetched = fetch_activity(activity_id, strava_token.value.value,
                             timeout=config.request_timeout, client=strava)
    if not fetched.ok:
        return _failed(activity_id, fetched.error)
    activity = fetched.value

    payload = map_activity(activity)

    uploaded = upload_activity(payload, fitbit_token.value.value,
                               timeout=config.request_timeout, client=fitbit)
    if not uploaded.ok:
        return _failed(activity_id, uploaded.error, activity.name)

    record = uploaded.value or {}
    log_id = (record.get("activityLog") or {}).get("logId")
    logger.info('Successfully synced activity "%s" from Strava to Fitbit!', activity.name)
    return SyncOutcome(status="synced", activity_id=activity_id,
                       activity_name=activity.name, fitbit_log_id=log_id)


def _record_outcome(store: TokenStore | None, outcome: SyncOutcome):
    if store is None:
        return
    try:
        store.record_run(
            "success" if outcome.exit_code == 0 else "error",
            records=1 if outcome.exit_code == 0 else 0,
            error=str(outcome.error) if outcome.error else None,
        )
    except Exception as exc:
        logger.warning("Failed to write sync log: %s", exc)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Sync a Strava activity to Fitbit")
    parser.add_argument("--activity-id", help="Strava activity ID (overrides the event payload)")
    parser.add_argument("--event-path", help="Path to a repository_dispatch event JSON file")
    parser.add_argument("--json", action="store_true", help="Print the outcome as JSON")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("Starting Strava to Fitbit sync...")

    config = load_sync_config()
    store = TokenStore(config.database_url) if config.database_url else None

    if args.activity_id:
        outcome = run_sync(args.activity_id, config,
                           provider=CredentialProvider(config, token_store=store))
    else:
        loaded = load_event(
            args.event_path or os.environ.get("GITHUB_EVENT_PATH"),
            os.environ.get("TEST_ACTIVITY_ID"),
        )
        if loaded.ok:
            outcome = run_sync(loaded.value, config,
                               provider=CredentialProvider(config, token_store=store))
        else:
            outcome = _failed(None, loaded.error)

    _record_outcome(store, outcome)
    if args.json:
        print(json.dumps(outcome.as_dict()))
    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
