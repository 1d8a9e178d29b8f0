"""Spotify catalog lookups with one credential refresh on 401."""

import logging
from typing import Any, Callable, Optional, TypeVar

import requests
from spotipy import Spotify, SpotifyException

from .credentials import CredentialManager
from .errors import AuthExpired, NotFound, UpstreamError
from .models import CatalogItem, DirectId, Kind, Query, Selector

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CredentialAuth:
    """spotipy auth manager that reads the shared credential on every request."""

    def __init__(self, credentials: CredentialManager):
        self.credentials = credentials

    def get_access_token(self, as_dict: bool = False, check_cache: bool = True) -> str:
        return self.credentials.current_credential().token


class CatalogClient:
    """Looks up tracks, albums and artists on Spotify."""

    def __init__(
        self,
        credentials: CredentialManager,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        """Initialize catalog client.

        Args:
            credentials: Shared credential manager
            timeout: HTTP timeout in seconds for every catalog call
            session: HTTP session to reuse; a new one is created if omitted
        """
        self.credentials = credentials
        self.timeout = timeout
        # A plain session keeps spotipy from mounting its own retry adapter
        self.session = session or requests.Session()
        # One client for the lifetime of the session; spotipy closes the
        # session when a client is garbage collected
        self.spotify = Spotify(
            auth_manager=CredentialAuth(credentials),
            requests_session=self.session,
            requests_timeout=timeout,
        )

    def _call(self, request: Callable[[Spotify], T]) -> T:
        """Run one catalog request, translating library errors.

        Raises:
            AuthExpired: On HTTP 401
            UpstreamError: On any other failure
        """
        try:
            return request(self.spotify)
        except SpotifyException as e:
            if e.http_status == 401:
                raise AuthExpired(f"Spotify rejected the credential: {e.msg}") from e
            raise UpstreamError(f"Spotify API error ({e.http_status}): {e.msg}") from e
        except requests.RequestException as e:
            raise UpstreamError(f"Spotify API request failed: {e}") from e

    def _authenticated(self, request: Callable[[Spotify], T]) -> T:
        """Run ``request``; on 401 refresh the credential and run it once more."""
        try:
            return self._call(request)
        except AuthExpired:
            logger.info("Catalog credential expired, refreshing and retrying once")

        self.credentials.refresh()
        try:
            return self._call(request)
        except AuthExpired as e:
            raise UpstreamError(f"Spotify rejected a freshly refreshed credential: {e}") from e

    def lookup(self, kind: Kind, selector: Selector) -> CatalogItem:
        """Find the single best match for ``selector``.

        Args:
            kind: Track, album or artist
            selector: Query (search, first ranked hit) or DirectId (fetch)

        Returns:
            The matching catalog item

        Raises:
            NotFound: If nothing matches
            UpstreamError: If the catalog call fails
        """
        if isinstance(selector, DirectId):
            return self._fetch(kind, selector)
        if isinstance(selector, Query):
            return self._search(kind, selector)
        raise TypeError(f"Unsupported selector: {selector!r}")

    def _fetch(self, kind: Kind, selector: DirectId) -> CatalogItem:
        fetchers = {
            Kind.TRACK: lambda sp: sp.track(selector.id),
            Kind.ALBUM: lambda sp: sp.album(selector.id),
            Kind.ARTIST: lambda sp: sp.artist(selector.id),
        }
        try:
            data = self._authenticated(fetchers[kind])
        except UpstreamError as e:
            cause = e.__cause__
            if isinstance(cause, SpotifyException) and cause.http_status == 404:
                raise NotFound(kind, selector.id) from e
            raise

        if not data:
            raise NotFound(kind, selector.id)
        return CatalogItem.from_spotify(data, kind)

    def _search(self, kind: Kind, selector: Query) -> CatalogItem:
        data = self._authenticated(
            lambda sp: sp.search(q=selector.text, limit=1, type=kind.value)
        )
        items = self._search_items(kind, data)
        if not items:
            raise NotFound(kind, selector.text)
        return CatalogItem.from_spotify(items[0], kind)

    @staticmethod
    def _search_items(kind: Kind, data: Any) -> list:
        """Pull the result list for ``kind`` out of a search response."""
        key = f"{kind.value}s"
        if not isinstance(data, dict) or not isinstance(data.get(key), dict):
            raise UpstreamError(f"Spotify search response has no {key}")

        items = data[key].get("items")
        if not isinstance(items, list):
            raise UpstreamError(f"Spotify search response has no {key}.items")
        return [item for item in items if item is not None]
