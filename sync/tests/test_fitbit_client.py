"""Test Fitbit API client with mocked HTTP requests."""

from unittest.mock import patch, MagicMock

import pytest
import requests

from fitbit_client import FitbitClient, upload_activity
from models import FitbitActivityPayload


PAYLOAD = FitbitActivityPayload(
    activity_name="Run",
    start_time="2026-02-20T07:00:00Z",
    duration_millis=1800000,
    distance_km=5.0,
    distance_unit="Kilometer",
    description="Imported from Strava: Morning Run",
)


@pytest.fixture
def client():
    return FitbitClient(access_token="fb_token")


def _mock_response(json_data, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_data
    resp.raise_for_status = MagicMock()
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(
            f"HTTP {status_code}", response=resp,
        )
    return resp


@patch("fitbit_client.time.time", return_value=1000)
def test_refresh_tokens_uses_basic_auth_and_form_body(_mock_time):
    client = FitbitClient(refresh_token="old_refresh", client_id="cid", client_secret="csecret")
    resp = _mock_response({
        "access_token": "new_access",
        "refresh_token": "rotated_refresh",
        "expires_in": 28800,
    })
    with patch.object(client.session, "post", return_value=resp) as mock_post:
        client.refresh_tokens()

    kwargs = mock_post.call_args[1]
    assert mock_post.call_args[0][0] == "https://api.fitbit.com/oauth2/token"
    assert kwargs["auth"] == ("cid", "csecret")
    assert kwargs["data"] == {"grant_type": "refresh_token", "refresh_token": "old_refresh"}
    assert "json" not in kwargs

    assert client.access_token == "new_access"
    assert client.refresh_token == "rotated_refresh"
    assert client.expires_at == 1000 + 28800
    assert client.session.headers["Authorization"] == "Bearer new_access"


def test_create_activity_posts_json(client):
    record = {"activityLog": {"logId": 555, "activityName": "Run"}}
    with patch.object(client.session, "post", return_value=_mock_response(record)) as mock_post:
        result = client.create_activity(PAYLOAD.to_api())

    assert result == record
    assert mock_post.call_args[0][0] == "https://api.fitbit.com/1/user/-/activities.json"
    assert mock_post.call_args[1]["json"]["activityName"] == "Run"
    assert mock_post.call_args[1]["json"]["distance"] == 5.0


def test_upload_activity_success(client):
    record = {"activityLog": {"logId": 555}}
    with patch.object(client.session, "post", return_value=_mock_response(record)):
        result = upload_activity(PAYLOAD, "fb_token", client=client)
    assert result.ok
    assert result.value["activityLog"]["logId"] == 555


def test_upload_activity_failure(client):
    body = {"errors": [{"errorType": "validation", "message": "Invalid startTime"}]}
    with patch.object(client.session, "post", return_value=_mock_response(body, 400)):
        result = upload_activity(PAYLOAD, "fb_token", client=client)

    assert not result.ok
    assert result.error.kind == "upstream_upload_error"
    assert result.error.upstream == body
