"""Command-line interface for songshare."""

import json
import logging
import shutil
import sys
from pathlib import Path
from typing import Optional

try:
    import click
except ImportError:
    print("Error: click not installed", file=sys.stderr)
    print("Install with: pip install click", file=sys.stderr)
    sys.exit(1)

from . import __version__
from .config import USER_CONFIG_PATH, Config
from .errors import SongshareError
from .models import Kind, Query


def _load_config(config_path: Optional[str]) -> Config:
    return Config(Path(config_path) if config_path else None)


@click.group()
@click.version_option(__version__)
@click.option("--config", "config_path", type=click.Path(), help="Config file to use")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path: Optional[str], verbose: bool):
    """Songshare - share music across streaming platforms from Slack."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.pass_context
def serve(ctx):
    """Run the Slack app.

    Uses socket mode when an app token is configured, otherwise listens
    for HTTP events on the configured port.
    """
    from .app import run

    config = _load_config(ctx.obj["config_path"])

    try:
        run(config)
    except KeyboardInterrupt:
        click.echo("\n👋 Stopped")
    except SongshareError as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("kind", type=click.Choice([k.value for k in Kind]))
@click.argument("query")
@click.option("--user", "-u", default="USLACKBOT", help="Slack user ID to credit")
@click.option("--json", "as_json", is_flag=True, help="Print the raw attachment payload")
@click.pass_context
def resolve(ctx, kind: str, query: str, user: str, as_json: bool):
    """Resolve QUERY (search text or Spotify link) and print the attachment."""
    from .app import build_credentials, build_resolver

    config = _load_config(ctx.obj["config_path"])

    try:
        resolver = build_resolver(config, build_credentials(config))
        # Pasted links carry their own kind; anything else is search text
        attachment = resolver.resolve_url(user, query)
        if attachment is None:
            attachment = resolver.resolve(Kind(kind), user, Query(query))
    except SongshareError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(attachment.to_dict(), indent=2))
        return

    click.echo(f"🎵 {attachment.title}")
    for entry in attachment.text.split("\t"):
        if entry:
            click.echo(f"   {entry}")


@cli.command("check-setup")
@click.pass_context
def check_setup(ctx):
    """Verify dependencies and credentials."""
    click.echo("🔍 Checking songshare setup...")
    click.echo()

    all_ok = True

    # Check requests
    try:
        import requests

        click.echo(f"✅ requests: {requests.__version__}")
    except ImportError:
        click.echo("❌ requests: Not installed", err=True)
        click.echo("   Install: pip install requests", err=True)
        all_ok = False

    # Check spotipy
    try:
        import spotipy

        click.echo("✅ spotipy: Installed")
    except ImportError:
        click.echo("❌ spotipy: Not installed", err=True)
        click.echo("   Install: pip install spotipy", err=True)
        all_ok = False

    # Check slack_bolt
    try:
        import slack_bolt

        click.echo("✅ slack_bolt: Installed")
    except ImportError:
        click.echo("❌ slack_bolt: Not installed", err=True)
        click.echo("   Install: pip install slack_bolt", err=True)
        all_ok = False

    config = _load_config(ctx.obj["config_path"])
    if config.config_path:
        click.echo(f"✅ Configuration: {config.config_path}")
    else:
        click.echo("⚠️ Configuration: no config file, using environment only")

    if config.spotify_client_id and config.spotify_client_secret:
        click.echo("✅ Spotify credentials: configured")
    else:
        click.echo("❌ Spotify credentials: missing", err=True)
        click.echo("   Set SPOTIPY_CLIENT_ID and SPOTIPY_CLIENT_SECRET", err=True)
        all_ok = False

    if config.slack_bot_token:
        click.echo("✅ Slack bot token: configured")
    else:
        click.echo("❌ Slack bot token: missing", err=True)
        click.echo("   Set SLACK_BOT_TOKEN", err=True)
        all_ok = False

    if config.slack_app_token:
        click.echo("✅ Slack mode: socket mode")
    elif config.slack_signing_secret:
        click.echo(f"✅ Slack mode: HTTP on port {config.port}")
    else:
        click.echo("❌ Slack: need SLACK_APP_TOKEN or SLACK_SIGNING_SECRET", err=True)
        all_ok = False

    click.echo()

    if all_ok:
        click.echo("🎉 Ready. Run: songshare serve")
    else:
        click.echo("⚠️ Setup incomplete, see above.", err=True)
        sys.exit(1)


@cli.command()
def init():
    """Initialize configuration file in ~/.config/songshare/."""
    config_path = USER_CONFIG_PATH

    if config_path.exists():
        click.echo(f"✅ Config already exists: {config_path}")
        click.echo()
        click.echo("To reconfigure, either:")
        click.echo(f"  1. Edit: {config_path}")
        click.echo("  2. Delete and run 'songshare init' again")
        return

    example = Path(__file__).parent.parent / "config.example.yaml"
    if not example.exists():
        click.echo(f"❌ Example config not found at {example}", err=True)
        click.echo("This might happen with certain installation methods.", err=True)
        sys.exit(1)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy(example, config_path)

    click.echo(f"✅ Created config: {config_path}")
    click.echo()
    click.echo("🔑 Fill in:")
    click.echo("  - Spotify: https://developer.spotify.com/dashboard")
    click.echo("  - Slack:   https://api.slack.com/apps (bot token + app token)")
    click.echo()
    click.echo("✅ Then run: songshare check-setup")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
