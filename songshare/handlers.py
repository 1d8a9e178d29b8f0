"""Slack listeners for slash commands and link unfurling.

These take Bolt's listener arguments explicitly so they can be driven by
mocks in tests; ``songshare.app`` wires them into a Bolt app.
"""

import logging
from typing import Any, Callable, Dict

from .errors import NotFound, SongshareError, UpstreamError
from .models import Kind, Query
from .pipeline import Resolver

logger = logging.getLogger(__name__)


def handle_command(
    resolver: Resolver,
    kind: Kind,
    command: Dict[str, Any],
    ack: Callable,
    respond: Callable,
    say: Callable,
) -> None:
    """Share the best match for a slash command query in the channel.

    Errors go back to the invoking user only.
    """
    ack()

    query = (command.get("text") or "").strip()
    if not query:
        respond(f"Usage: {command.get('command', '')} <{kind.noun} name>".strip())
        return

    user_id = command["user_id"]
    try:
        attachment = resolver.resolve(kind, user_id, Query(query))
    except NotFound as e:
        respond(str(e))
        return
    except UpstreamError as e:
        logger.warning("Failed to resolve %s %r for %s: %s", kind.value, query, user_id, e)
        respond(str(e))
        return

    say(text=attachment.fallback, attachments=[attachment.to_dict()])


def handle_link_shared(resolver: Resolver, event: Dict[str, Any], client: Any) -> None:
    """Unfurl recognized music links with a preview attachment.

    Nothing was explicitly requested, so failures are only logged.
    """
    user_id = event.get("user", "")
    unfurls = {}

    for link in event.get("links", []):
        url = link.get("url")
        if not url:
            continue
        try:
            attachment = resolver.resolve_url(user_id, url)
        except SongshareError as e:
            logger.info("Skipping unfurl for %s: %s", url, e)
            continue
        if attachment is None:
            continue
        unfurls[url] = attachment.to_dict()

    if not unfurls:
        return

    if event.get("source") == "composer" and event.get("unfurl_id"):
        client.chat_unfurl(
            unfurl_id=event["unfurl_id"], source=event["source"], unfurls=unfurls
        )
    else:
        client.chat_unfurl(channel=event["channel"], ts=event["message_ts"], unfurls=unfurls)
