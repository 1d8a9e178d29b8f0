"""Tests for the resolution pipeline."""

from unittest.mock import Mock

import pytest

from songshare.catalog import CatalogClient
from songshare.errors import NotFound, UpstreamError
from songshare.models import Attachment, CatalogItem, DirectId, Kind, Query, UnifiedLinkSet
from songshare.pipeline import Resolver
from songshare.songlink import SongLinkClient

QUEEN_TRACK = CatalogItem(
    id="4u7EnebtmKWzUH433cf5Qv",
    name="Bohemian Rhapsody",
    artists=("Queen",),
    platform="spotify",
)

QUEEN = CatalogItem(
    id="1dfeR4HaWDbWqFHLkxsg1d",
    name="Queen",
    artists=(),
    platform="spotify",
    url="https://open.spotify.com/artist/1dfeR4HaWDbWqFHLkxsg1d",
)


class TestResolver:
    """Test pipeline composition."""

    def setup_method(self):
        """Set up test fixtures."""
        self.catalog = Mock(spec=CatalogClient)
        self.songlink = Mock(spec=SongLinkClient)
        self.resolver = Resolver(self.catalog, self.songlink)

    def test_resolve_track(self):
        """Test the Bohemian Rhapsody scenario end to end."""
        self.catalog.lookup.return_value = QUEEN_TRACK
        self.songlink.unify.return_value = UnifiedLinkSet(
            QUEEN_TRACK.id,
            {"spotify": "https://open.spotify.com/track/url1", "deezer": "https://deezer.com/url2"},
        )

        attachment = self.resolver.resolve(Kind.TRACK, "U1", Query("Bohemian Rhapsody"))

        assert isinstance(attachment, Attachment)
        assert attachment.title == '<@U1> shared the song "Bohemian Rhapsody" by Queen!'
        assert attachment.text == "<https://open.spotify.com/track/url1|Spotify>"
        assert "deezer" not in attachment.text
        self.catalog.lookup.assert_called_once_with(Kind.TRACK, Query("Bohemian Rhapsody"))
        self.songlink.unify.assert_called_once_with("spotify", Kind.TRACK, QUEEN_TRACK.id)

    def test_not_found_skips_unifier(self):
        """Test a failed lookup never reaches song.link."""
        self.catalog.lookup.side_effect = NotFound(Kind.TRACK, "zzz")

        with pytest.raises(NotFound):
            self.resolver.resolve(Kind.TRACK, "U1", Query("zzz"))

        self.songlink.unify.assert_not_called()

    def test_unifier_failure_propagates(self):
        """Test song.link errors are not retried or swallowed."""
        self.catalog.lookup.return_value = QUEEN_TRACK
        self.songlink.unify.side_effect = UpstreamError("song.link down")

        with pytest.raises(UpstreamError):
            self.resolver.resolve(Kind.TRACK, "U1", Query("Bohemian Rhapsody"))

        self.catalog.lookup.assert_called_once()
        self.songlink.unify.assert_called_once()

    def test_artist_skips_unifier(self):
        """Test artists use their catalog profile only."""
        self.catalog.lookup.return_value = QUEEN

        attachment = self.resolver.resolve(Kind.ARTIST, "U1", Query("queen"))

        assert attachment.text == "<https://open.spotify.com/artist/1dfeR4HaWDbWqFHLkxsg1d|Spotify>"
        self.songlink.unify.assert_not_called()

    def test_resolve_url(self):
        """Test pasted links resolve by ID."""
        self.catalog.lookup.return_value = QUEEN_TRACK
        self.songlink.unify.return_value = UnifiedLinkSet(QUEEN_TRACK.id)

        attachment = self.resolver.resolve_url(
            "U1", "https://open.spotify.com/track/4u7EnebtmKWzUH433cf5Qv?si=x"
        )

        assert attachment is not None
        self.catalog.lookup.assert_called_once_with(
            Kind.TRACK, DirectId("4u7EnebtmKWzUH433cf5Qv")
        )

    def test_resolve_url_unrecognized(self):
        """Test other links are ignored."""
        assert self.resolver.resolve_url("U1", "https://example.com/") is None
        self.catalog.lookup.assert_not_called()
