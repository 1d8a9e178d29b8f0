"""Data types passed between the pipeline stages."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .errors import UpstreamError


@dataclass(frozen=True)
class Credential:
    """Bearer token for the catalog API.

    Always replaced as a whole, never mutated, so a reader holding one
    sees a token together with its own TTL.
    """

    token: str
    """Opaque access token"""

    expires_in: int
    """Declared time-to-live in seconds"""

    acquired_at: float = field(default_factory=time.monotonic)
    """Monotonic timestamp of acquisition"""

    @classmethod
    def from_token_response(cls, data: Any) -> "Credential":
        """Build a credential from the accounts service token payload."""
        if not isinstance(data, dict):
            raise UpstreamError("Token response is not a JSON object")

        token = data.get("access_token")
        expires_in = data.get("expires_in")
        if not isinstance(token, str) or not token:
            raise UpstreamError("Token response has no access_token")
        if not isinstance(expires_in, int) or isinstance(expires_in, bool) or expires_in < 0:
            raise UpstreamError(f"Token response has invalid expires_in: {expires_in!r}")

        return cls(token=token, expires_in=expires_in)

    @property
    def expires_at(self) -> float:
        return self.acquired_at + self.expires_in

    def is_expired(self, now: Optional[float] = None) -> bool:
        if now is None:
            now = time.monotonic()
        return now >= self.expires_at


class Kind(Enum):
    """What the user is sharing."""

    TRACK = "track"
    ALBUM = "album"
    ARTIST = "artist"

    @property
    def noun(self) -> str:
        """Word used for this kind in user-facing text."""
        return "song" if self is Kind.TRACK else self.value

    @property
    def songlink_type(self) -> Optional[str]:
        """Entity type understood by song.link (artists are not unified)."""
        return {Kind.TRACK: "song", Kind.ALBUM: "album"}.get(self)


@dataclass(frozen=True)
class Query:
    """Free-text search selector."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class DirectId:
    """Catalog ID selector, e.g. taken from a pasted link."""

    id: str

    def __str__(self) -> str:
        return self.id


Selector = Union[Query, DirectId]


@dataclass(frozen=True)
class LookupRequest:
    """One user action: what to look up and how to find it."""

    kind: Kind
    selector: Selector


@dataclass(frozen=True)
class CatalogItem:
    """A track, album or artist as returned by the catalog."""

    id: str
    name: str
    artists: Tuple[str, ...]
    platform: str
    url: Optional[str] = None

    @classmethod
    def from_spotify(cls, data: Any, kind: Kind) -> "CatalogItem":
        """Validate a Spotify track/album/artist object.

        Args:
            data: Decoded catalog object
            kind: Kind that was requested; artists carry no credited artists

        Raises:
            UpstreamError: If required fields are missing or mistyped
        """
        if not isinstance(data, dict):
            raise UpstreamError("Catalog item is not a JSON object")

        item_id = data.get("id")
        name = data.get("name")
        if not isinstance(item_id, str) or not item_id:
            raise UpstreamError("Catalog item has no id")
        if not isinstance(name, str):
            raise UpstreamError(f"Catalog item {item_id} has no name")

        artists = []
        if kind is not Kind.ARTIST:
            raw_artists = data.get("artists")
            if not isinstance(raw_artists, list):
                raise UpstreamError(f"Catalog item {item_id} has no artists")
            for artist in raw_artists:
                if not isinstance(artist, dict) or not isinstance(artist.get("name"), str):
                    raise UpstreamError(f"Catalog item {item_id} has a malformed artist")
                artists.append(artist["name"])

        external_urls = data.get("external_urls") or {}
        if not isinstance(external_urls, dict):
            raise UpstreamError(f"Catalog item {item_id} has malformed external_urls")
        url = external_urls.get("spotify")
        if url is not None and not isinstance(url, str):
            raise UpstreamError(f"Catalog item {item_id} has a malformed url")

        return cls(id=item_id, name=name, artists=tuple(artists), platform="spotify", url=url)

    @property
    def artist_names(self) -> str:
        return ", ".join(self.artists)


@dataclass(frozen=True)
class UnifiedLinkSet:
    """Listening URLs for one catalog item, keyed by song.link platform id."""

    item_id: str
    links: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_songlink(cls, item_id: str, data: Any) -> "UnifiedLinkSet":
        """Validate a song.link ``/links`` response.

        Entries without a URL are skipped; anything structurally wrong
        raises UpstreamError.
        """
        if not isinstance(data, dict):
            raise UpstreamError("song.link response is not a JSON object")

        platforms = data.get("linksByPlatform")
        if not isinstance(platforms, dict):
            raise UpstreamError("song.link response has no linksByPlatform")

        links = {}
        for platform, info in platforms.items():
            if not isinstance(info, dict):
                raise UpstreamError(f"song.link entry for {platform} is malformed")
            url = info.get("url")
            if isinstance(url, str) and url:
                links[platform] = url

        return cls(item_id=item_id, links=links)

    def get(self, platform: str) -> Optional[str]:
        return self.links.get(platform)

    def __contains__(self, platform: str) -> bool:
        return platform in self.links

    def __len__(self) -> int:
        return len(self.links)


@dataclass(frozen=True)
class Attachment:
    """Slack message attachment for a shared item."""

    color: str
    fallback: str
    title: str
    text: str
    markdown: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Render as a Slack legacy attachment payload."""
        payload = {
            "color": self.color,
            "fallback": self.fallback,
            "title": self.title,
            "text": self.text,
        }
        if self.markdown:
            payload["mrkdwn_in"] = ["text"]
        return payload
