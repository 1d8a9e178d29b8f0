"""Resolution pipeline: catalog lookup, link unification, attachment."""

import logging
from typing import Optional

from .attachments import build_artist_attachment, build_attachment
from .catalog import CatalogClient
from .links import parse_link
from .models import Attachment, Kind, Selector
from .songlink import SongLinkClient

logger = logging.getLogger(__name__)


class Resolver:
    """Turns a user's music reference into a shareable attachment."""

    def __init__(self, catalog: CatalogClient, songlink: SongLinkClient):
        """Initialize resolver.

        Args:
            catalog: Catalog lookup client
            songlink: Link unification client
        """
        self.catalog = catalog
        self.songlink = songlink

    def resolve(self, kind: Kind, user_id: str, selector: Selector) -> Attachment:
        """Resolve ``selector`` into an attachment.

        Raises:
            NotFound: If the catalog has no match
            UpstreamError: If the catalog or song.link fails
        """
        item = self.catalog.lookup(kind, selector)
        logger.info("Resolved %s %r to %s:%s", kind.value, str(selector), item.platform, item.id)

        if kind is Kind.ARTIST:
            return build_artist_attachment(user_id, item)

        links = self.songlink.unify(item.platform, kind, item.id)
        return build_attachment(user_id, kind, item, links)

    def resolve_url(self, user_id: str, url: str) -> Optional[Attachment]:
        """Resolve a pasted link; None if the URL is not a recognized music link."""
        request = parse_link(url)
        if request is None:
            return None
        return self.resolve(request.kind, user_id, request.selector)
