"""Exchange refresh tokens for access tokens on Strava and Fitbit."""

from __future__ import annotations

import logging

import requests

from config import DEFAULT_REQUEST_TIMEOUT, PlatformCredentials, SyncConfig
from fitbit_client import FitbitClient
from models import AccessToken
from results import ConfigurationError, Result, UpstreamAuthError, upstream_detail
from strava_client import StravaClient

logger = logging.getLogger(__name__)

STRAVA = "strava"
FITBIT = "fitbit"

_CLIENTS = {
    STRAVA: StravaClient,
    FITBIT: FitbitClient,
}


def _label(platform: str) -> str:
    return platform.capitalize()


def refresh_access_token(platform, client_id, client_secret, refresh_token,
                         timeout=DEFAULT_REQUEST_TIMEOUT, client=None) -> Result[AccessToken]:
    """Refresh an access token for ``platform``.

    Missing credentials fail before any request is made. A rejected exchange
    fails with the upstream error body attached.
    """
    client_cls = _CLIENTS.get(platform)
    if client_cls is None:
        return Result.failure(ConfigurationError(f"Unknown platform {platform!r}"))

    creds = PlatformCredentials(client_id or "", client_secret or "", refresh_token or "")
    missing = creds.missing()
    if missing:
        return Result.failure(ConfigurationError(
            f"Missing {_label(platform)} credentials: {', '.join(missing)}"
        ))

    if client is None:
        client = client_cls(timeout=timeout)
    client.client_id = client_id
    client.client_secret = client_secret
    client.refresh_token = refresh_token

    try:
        data = client.refresh_tokens()
    except (requests.RequestException, KeyError, ValueError) as exc:
        detail = upstream_detail(exc)
        logger.error("Error refreshing %s token: %s", _label(platform), detail)
        return Result.failure(UpstreamAuthError(
            f"Failed to get {_label(platform)} access token", upstream=detail,
        ))

    if data.get("refresh_token") and data["refresh_token"] != refresh_token:
        logger.info("%s issued a new refresh token", _label(platform))
    return Result.success(AccessToken(
        platform=platform,
        value=client.access_token,
        expires_at=client.expires_at or 0,
        refresh_token=client.refresh_token,
    ))


class CredentialProvider:
    """Hands out fresh access tokens built from one injected ``SyncConfig``.

    With a token store, the stored refresh token wins over the configured
    one until the configured token changes, and every rotated refresh
    token is written back.
    """

    def __init__(self, config: SyncConfig, token_store=None):
        self.config = config
        self.token_store = token_store

    def _credentials(self, platform: str) -> PlatformCredentials:
        if platform == STRAVA:
            return self.config.strava
        if platform == FITBIT:
            return self.config.fitbit
        return PlatformCredentials()

    def _refresh_token(self, platform: str, configured: str) -> tuple[str, bool]:
        """Refresh token to exchange, and whether it came from the store.

        A stored token wins unless the configured token has changed since the
        stored one was saved, which means the platform was re-authorized.
        """
        if self.token_store is None:
            return configured, False
        try:
            stored = self.token_store.load_tokens(platform)
        except Exception as exc:
            logger.warning("Could not read stored %s token, using configured one: %s",
                           _label(platform), exc)
            return configured, False
        if not stored or not stored.get("refresh_token"):
            return configured, False
        if configured and stored.get("configured_refresh_token") != configured:
            logger.info("Configured %s refresh token changed, ignoring stored one",
                        _label(platform))
            return configured, False
        return stored["refresh_token"], True

    def access_token(self, platform: str, client=None) -> Result[AccessToken]:
        creds = self._credentials(platform)
        refresh_token, from_store = self._refresh_token(platform, creds.refresh_token)
        result = refresh_access_token(
            platform, creds.client_id, creds.client_secret, refresh_token,
            timeout=self.config.request_timeout, client=client,
        )
        if result.ok:
            rotated = result.value.refresh_token != refresh_token
            self._persist(platform, result.value, creds.refresh_token,
                          changed=rotated or not from_store)
        return result

    def _persist(self, platform: str, token: AccessToken, configured: str, changed: bool):
        if self.token_store is None:
            if changed and token.refresh_token != configured and platform == FITBIT:
                logger.warning(
                    "Fitbit rotated its refresh token but no DATABASE_URL is set; "
                    "the next run will need the new token"
                )
            return
        if not changed:
            return
        try:
            self.token_store.save_tokens(platform, token, configured_refresh_token=configured)
        except Exception as exc:
            logger.warning("Failed to persist %s tokens: %s", _label(platform), exc)
