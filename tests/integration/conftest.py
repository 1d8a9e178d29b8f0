"""Pytest fixtures for integration tests."""

from unittest.mock import Mock, patch

import pytest
import yaml

from songshare.config import Config
from songshare.models import Credential

ENV_VARS = [
    "SLACK_APP_TOKEN",
    "SLACK_BOT_TOKEN",
    "SLACK_SIGNING_SECRET",
    "PORT",
    "SPOTIPY_CLIENT_ID",
    "SPOTIPY_CLIENT_SECRET",
    "SONGLINK_API_KEY",
]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep real credentials and the config singleton out of tests."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    Config.reset()
    yield
    Config.reset()


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file."""
    config_path = tmp_path / "config.yaml"
    config_data = {
        "slack": {
            "app_token": "xapp-test",
            "bot_token": "xoxb-test",
            "signing_secret": "test-secret",
        },
        "spotify": {"client_id": "test-id", "client_secret": "test-secret"},
        "songlink": {"user_country": "US"},
        "http": {"timeout": 2},
    }
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def test_config(temp_config_file):
    """Create a Config instance for testing."""
    return Config(config_path=temp_config_file)


@pytest.fixture
def mock_token():
    """Skip the accounts service; every acquisition returns a fresh token."""
    counter = {"n": 0}

    def acquire(self):
        counter["n"] += 1
        return Credential(token=f"token-{counter['n']}", expires_in=3600)

    with patch("songshare.credentials.CredentialManager._acquire", autospec=True) as mock_acquire:
        mock_acquire.side_effect = acquire
        yield mock_acquire


@pytest.fixture
def mock_spotify():
    """Mock the spotipy client used by the catalog."""
    with patch("songshare.catalog.Spotify") as mock_spotify_class:
        yield mock_spotify_class.return_value


@pytest.fixture
def mock_songlink_get():
    """Mock song.link HTTP responses."""
    with patch("songshare.songlink.requests.Session") as mock_session_class:
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.json.return_value = {"linksByPlatform": {}}
        mock_session_class.return_value.get.return_value = mock_response
        yield mock_session_class.return_value.get
