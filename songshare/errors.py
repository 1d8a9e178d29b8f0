"""Exceptions raised by the resolution pipeline."""


class SongshareError(Exception):
    """Base class for all songshare errors."""


class NotFound(SongshareError):
    """The catalog returned nothing for the user's query."""

    def __init__(self, kind, query: str):
        self.kind = kind
        self.query = query
        super().__init__(f'No {kind.noun}s found for "{query}"!')


class UpstreamError(SongshareError):
    """An external service failed, timed out or sent something unusable."""


class AuthExpired(UpstreamError):
    """The catalog rejected the current credential (HTTP 401).

    Only raised inside the catalog client, which turns it into a single
    refresh and retry.
    """
