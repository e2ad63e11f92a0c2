"""Database connection and helpers for durable token storage and run logging."""

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone

import psycopg2
import psycopg2.extras

logger = logging.getLogger(__name__)


@contextmanager
def get_connection(database_url: str):
    """Yield a database connection, closing it on exit."""
    conn = psycopg2.connect(database_url)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def get_platform_credentials(conn, platform: str) -> dict | None:
    """Read stored credentials for a platform. Returns None if absent."""
    with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
        cur.execute(
            """
            SELECT platform, auth_type, credentials, expires_at, status
            FROM platform_credentials
            WHERE platform = %s
            """,
            (platform,),
        )
        row = cur.fetchone()
    if not row:
        return None
    row = dict(row)
    if isinstance(row.get("credentials"), str):
        row["credentials"] = json.loads(row["credentials"])
    return row


def upsert_platform_credentials(conn, platform: str, auth_type: str,
                                credentials: dict, expires_at=None):
    """Insert or replace a platform's credentials. Upsert on platform."""
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO platform_credentials (platform, auth_type, credentials, expires_at, status)
            VALUES (%s, %s, %s, %s, 'active')
            ON CONFLICT (platform)
            DO UPDATE SET auth_type = EXCLUDED.auth_type,
                          credentials = EXCLUDED.credentials,
                          expires_at = EXCLUDED.expires_at,
                          status = 'active',
                          updated_at = NOW()
            """,
            (platform, auth_type, json.dumps(credentials), expires_at),
        )


def log_sync(conn, sync_type: str, status: str, records: int = 0, error: str = None):
    """Write an entry to the sync_log table."""
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO sync_log (sync_type, status, records_synced, error_message, completed_at)
            VALUES (%s, %s, %s, %s, CASE WHEN %s IN ('success', 'error') THEN NOW() ELSE NULL END)
            """,
            (sync_type, status, records, error, status),
        )


class TokenStore:
    """Keeps the latest refresh token per platform in ``platform_credentials``.

    Each record also remembers the configured (env) refresh token it was
    derived from, so a re-authorized env token can be told apart from a
    stale one.
    """

    def __init__(self, database_url: str):
        self.database_url = database_url

    def load_tokens(self, platform: str) -> dict | None:
        """Stored credentials dict for an active platform, else None."""
        with get_connection(self.database_url) as conn:
            creds = get_platform_credentials(conn, platform)
        if not creds or creds.get("status") != "active":
            return None
        return creds.get("credentials") or None

    def save_tokens(self, platform: str, token, configured_refresh_token: str = "") -> None:
        """Persist the refresh token returned by an exchange (``AccessToken``)."""
        expires_dt = (
            datetime.fromtimestamp(token.expires_at, tz=timezone.utc)
            if token.expires_at else None
        )
        with get_connection(self.database_url) as conn:
            upsert_platform_credentials(
                conn, platform, "oauth2",
                {
                    "access_token": token.value,
                    "refresh_token": token.refresh_token,
                    "configured_refresh_token": configured_refresh_token,
                },
                expires_at=expires_dt,
            )

    def record_run(self, status: str, records: int = 0, error: str = None) -> None:
        with get_connection(self.database_url) as conn:
            log_sync(conn, "strava_to_fitbit", status, records, error)
