"""Slack Bolt app wiring and process bootstrap."""

import logging

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

from .catalog import CatalogClient
from .config import Config
from .credentials import CredentialManager
from .errors import SongshareError
from .handlers import handle_command, handle_link_shared
from .models import Kind
from .pipeline import Resolver
from .songlink import SongLinkClient

logger = logging.getLogger(__name__)


def build_credentials(config: Config) -> CredentialManager:
    """Create the catalog credential manager from configuration."""
    if not config.spotify_client_id or not config.spotify_client_secret:
        raise SongshareError(
            "Spotify API credentials not found "
            "(set SPOTIPY_CLIENT_ID and SPOTIPY_CLIENT_SECRET or spotify.* in config)"
        )

    return CredentialManager(
        config.spotify_client_id,
        config.spotify_client_secret,
        timeout=config.http_timeout,
        refresh_margin=config.refresh_margin,
    )


def build_resolver(config: Config, credentials: CredentialManager) -> Resolver:
    """Create the resolution pipeline from configuration."""
    catalog = CatalogClient(credentials, timeout=config.http_timeout)
    songlink = SongLinkClient(
        api_key=config.songlink_api_key,
        user_country=config.user_country,
        timeout=config.http_timeout,
    )
    return Resolver(catalog, songlink)


def _command_listener(resolver: Resolver, kind: Kind):
    # Bolt injects listener arguments by parameter name
    def listener(ack, command, respond, say):
        handle_command(resolver, kind, command, ack, respond, say)

    return listener


def create_app(config: Config, resolver: Resolver, **app_kwargs) -> App:
    """Create a Bolt app with the songshare listeners registered."""
    app = App(
        token=config.slack_bot_token,
        signing_secret=config.slack_signing_secret,
        **app_kwargs,
    )

    for name, kind in config.commands.items():
        app.command(name)(_command_listener(resolver, Kind(kind)))
        logger.debug("Registered %s for %s", name, kind)

    @app.event("link_shared")
    def on_link_shared(event, client):
        handle_link_shared(resolver, event, client)

    return app


def run(config: Config) -> None:
    """Start credential renewal and serve Slack until interrupted."""
    if not config.slack_bot_token:
        raise SongshareError("Slack bot token not found (set SLACK_BOT_TOKEN or slack.bot_token)")

    credentials = build_credentials(config)
    credentials.start()
    try:
        app = create_app(config, build_resolver(config, credentials))
        if config.slack_app_token:
            logger.info("Starting in socket mode")
            SocketModeHandler(app, config.slack_app_token).start()
        else:
            logger.info("Starting HTTP server on port %d", config.port)
            app.start(port=config.port)
    finally:
        credentials.stop()
