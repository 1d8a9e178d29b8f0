"""song.link integration for finding items across platforms."""

import logging
from typing import Optional

import requests

from . import __version__
from .errors import UpstreamError
from .models import Kind, UnifiedLinkSet

logger = logging.getLogger(__name__)


class SongLinkClient:
    """Client for song.link API."""

    API_BASE = "https://api.song.link/v1-alpha.1/links"

    def __init__(
        self,
        api_key: Optional[str] = None,
        user_country: Optional[str] = None,
        timeout: float = 10,
    ):
        """Initialize song.link client.

        Args:
            api_key: Optional song.link API key
            user_country: Optional two-letter country for regional links
            timeout: HTTP timeout in seconds
        """
        self.api_key = api_key
        self.user_country = user_country
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": f"songshare/{__version__}",
            }
        )

    def unify(self, platform: str, kind: Kind, catalog_id: str) -> UnifiedLinkSet:
        """Find an item on other platforms.

        Args:
            platform: song.link platform of the source item (e.g. "spotify")
            kind: Track or album
            catalog_id: ID of the item on ``platform``

        Returns:
            Platform -> URL mappings; may be empty

        Raises:
            UpstreamError: If the API request fails or returns garbage
        """
        if kind.songlink_type is None:
            raise ValueError(f"song.link cannot unify {kind.value} items")

        params = {
            "platform": platform,
            "type": kind.songlink_type,
            "id": catalog_id,
            "songIfSingle": "true",
        }
        if self.user_country:
            params["userCountry"] = self.user_country
        if self.api_key:
            params["key"] = self.api_key

        # Error text reaches Slack users, so it never includes the request URL
        # (the query string carries the API key)
        try:
            response = self.session.get(self.API_BASE, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            raise UpstreamError(f"song.link API error: {self._status(e.response)}") from e
        except requests.RequestException as e:
            raise UpstreamError(f"song.link request failed: {type(e).__name__}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("song.link returned invalid JSON") from e

        links = UnifiedLinkSet.from_songlink(catalog_id, data)
        logger.debug("song.link found %d platforms for %s:%s", len(links), platform, catalog_id)
        return links

    @staticmethod
    def _status(response: Optional[requests.Response]) -> str:
        if response is None:
            return "unknown status"
        return f"{response.status_code} {response.reason or ''}".strip()
