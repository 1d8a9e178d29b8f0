"""Configuration management for songshare."""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import yaml
except ImportError:
    print("Error: PyYAML not installed", file=sys.stderr)
    print("Install with: pip install pyyaml", file=sys.stderr)
    sys.exit(1)


USER_CONFIG_PATH = Path.home() / ".config" / "songshare" / "config.yaml"
PROJECT_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

DEFAULT_COMMANDS = {"/song": "track", "/album": "album", "/artist": "artist"}


class Config:
    """Songshare configuration."""

    _instance = None

    def __new__(cls, config_path: Optional[Path] = None):
        """Singleton pattern for config."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton for testing."""
        cls._instance = None

    def __init__(self, config_path: Optional[Path] = None):
        """Load configuration from YAML file.

        Args:
            config_path: Explicit config file. When omitted the user config
                and then the project config are tried; if neither exists the
                configuration is empty and only environment variables apply.
        """
        if self._initialized:
            return

        self.config_path = self._find_config(config_path)
        self.config = self._load_config()
        self._initialized = True

    def _find_config(self, config_path: Optional[Path]) -> Optional[Path]:
        """Pick the config file to read."""
        if config_path is not None:
            config_path = Path(config_path).expanduser()
            if not config_path.exists():
                print(f"Error: Configuration file not found: {config_path}", file=sys.stderr)
                print("Run 'songshare init' or copy config.example.yaml", file=sys.stderr)
                sys.exit(1)
            return config_path

        for candidate in (USER_CONFIG_PATH, PROJECT_CONFIG_PATH):
            if candidate.exists():
                return candidate
        return None

    def _load_config(self) -> dict:
        """Load and parse config file."""
        if self.config_path is None:
            return {}

        with open(self.config_path) as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            print(f"Error: {self.config_path} must contain a mapping", file=sys.stderr)
            sys.exit(1)

        return config

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value by dot-separated key."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def _env_or(self, env_var: str, key: str, default: Any = None) -> Any:
        """Environment variable first, then config value."""
        value = os.environ.get(env_var)
        if value:
            return value
        return self.get(key, default)

    @property
    def slack_app_token(self) -> Optional[str]:
        """Get Slack app-level token (enables socket mode)."""
        return self._env_or("SLACK_APP_TOKEN", "slack.app_token") or None

    @property
    def slack_bot_token(self) -> Optional[str]:
        """Get Slack bot token."""
        return self._env_or("SLACK_BOT_TOKEN", "slack.bot_token") or None

    @property
    def slack_signing_secret(self) -> Optional[str]:
        """Get Slack request signing secret."""
        return self._env_or("SLACK_SIGNING_SECRET", "slack.signing_secret") or None

    @property
    def port(self) -> int:
        """Get HTTP listening port (ignored in socket mode)."""
        return int(self._env_or("PORT", "slack.port", 3000))

    @property
    def commands(self) -> Dict[str, str]:
        """Get slash command name -> kind mapping."""
        return self.get("slack.commands") or dict(DEFAULT_COMMANDS)

    @property
    def spotify_client_id(self) -> Optional[str]:
        """Get Spotify client ID."""
        return self._env_or("SPOTIPY_CLIENT_ID", "spotify.client_id") or None

    @property
    def spotify_client_secret(self) -> Optional[str]:
        """Get Spotify client secret."""
        return self._env_or("SPOTIPY_CLIENT_SECRET", "spotify.client_secret") or None

    @property
    def refresh_margin(self) -> float:
        """Seconds before expiry at which the catalog token is renewed."""
        return float(self.get("spotify.refresh_margin", 60))

    @property
    def songlink_api_key(self) -> Optional[str]:
        """Get song.link API key (optional, raises the rate limit)."""
        return self._env_or("SONGLINK_API_KEY", "songlink.api_key") or None

    @property
    def user_country(self) -> Optional[str]:
        """Get two-letter country used for song.link lookups."""
        return self.get("songlink.user_country") or None

    @property
    def http_timeout(self) -> float:
        """Get timeout in seconds for every upstream HTTP call."""
        return float(self.get("http.timeout", 10))
