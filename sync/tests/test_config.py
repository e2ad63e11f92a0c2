from config import DEFAULT_GITHUB_REPO, DEFAULT_REQUEST_TIMEOUT, load_sync_config, load_webhook_config


def test_load_sync_config_from_env():
    config = load_sync_config({
        "STRAVA_CLIENT_ID": "s_id",
        "STRAVA_CLIENT_SECRET": "s_secret",
        "STRAVA_REFRESH_TOKEN": "s_refresh",
        "FITBIT_CLIENT_ID": "f_id",
        "REQUEST_TIMEOUT": "3",
    })
    assert config.strava.missing() == []
    assert config.fitbit.client_id == "f_id"
    assert config.fitbit.missing() == ["client_secret", "refresh_token"]
    assert config.request_timeout == 3.0
    assert config.database_url == ""


def test_bad_timeout_uses_default():
    assert load_sync_config({"REQUEST_TIMEOUT": "soon"}).request_timeout == DEFAULT_REQUEST_TIMEOUT
    assert load_sync_config({"REQUEST_TIMEOUT": "0"}).request_timeout == DEFAULT_REQUEST_TIMEOUT


def test_load_webhook_config_defaults():
    config = load_webhook_config({"STRAVA_VERIFY_TOKEN": "tok"})
    assert config.verify_token == "tok"
    assert config.github_repo == DEFAULT_GITHUB_REPO


def test_infinite_timeout_uses_default():
    assert load_sync_config({"REQUEST_TIMEOUT": "inf"}).request_timeout == DEFAULT_REQUEST_TIMEOUT
    assert load_webhook_config({"REQUEST_TIMEOUT": "nan"}).request_timeout == DEFAULT_REQUEST_TIMEOUT
