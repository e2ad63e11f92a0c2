"""Configuration loaded from environment variables into explicit config objects."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parents[2] / ".env")

STRAVA_TOKEN_URL = "https://www.strava.com/oauth/token"
STRAVA_BASE_URL = "https://www.strava.com/api/v3"
FITBIT_TOKEN_URL = "https://api.fitbit.com/oauth2/token"
FITBIT_BASE_URL = "https://api.fitbit.com/1/user/-"
GITHUB_API_URL = "https://api.github.com"

DEFAULT_GITHUB_REPO = "tenzincode/stravbit"
DEFAULT_REQUEST_TIMEOUT = 10.0


@dataclass(frozen=True)
class PlatformCredentials:
    """OAuth2 client id/secret and refresh token for one platform."""

    client_id: str = ""
    client_secret: str = ""
    refresh_token: str = ""

    def missing(self) -> list[str]:
        """Names of credential fields that are empty."""
        return [
            name for name in ("client_id", "client_secret", "refresh_token")
            if not getattr(self, name)
        ]


@dataclass(frozen=True)
class SyncConfig:
    strava: PlatformCredentials
    fitbit: PlatformCredentials
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    database_url: str = ""


@dataclass(frozen=True)
class WebhookConfig:
    verify_token: str = ""
    github_token: str = ""
    github_repo: str = DEFAULT_GITHUB_REPO
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def _timeout(env) -> float:
    raw = env.get("REQUEST_TIMEOUT", "")
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_REQUEST_TIMEOUT
    return value if math.isfinite(value) and value > 0 else DEFAULT_REQUEST_TIMEOUT


def load_sync_config(env=None) -> SyncConfig:
    """Build the sync configuration once, at process start."""
    env = os.environ if env is None else env
    return SyncConfig(
        strava=PlatformCredentials(
            client_id=env.get("STRAVA_CLIENT_ID", ""),
            client_secret=env.get("STRAVA_CLIENT_SECRET", ""),
            refresh_token=env.get("STRAVA_REFRESH_TOKEN", ""),
        ),
        fitbit=PlatformCredentials(
            client_id=env.get("FITBIT_CLIENT_ID", ""),
            client_secret=env.get("FITBIT_CLIENT_SECRET", ""),
            refresh_token=env.get("FITBIT_REFRESH_TOKEN", ""),
        ),
        request_timeout=_timeout(env),
        database_url=env.get("DATABASE_URL", ""),
    )


def load_webhook_config(env=None) -> WebhookConfig:
    """Build the webhook receiver configuration once, at process start."""
    env = os.environ if env is None else env
    return WebhookConfig(
        verify_token=env.get("STRAVA_VERIFY_TOKEN", ""),
        github_token=env.get("GITHUB_TOKEN", ""),
        github_repo=env.get("GITHUB_REPO") or DEFAULT_GITHUB_REPO,
        request_timeout=_timeout(env),
    )
