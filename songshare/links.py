"""Recognize music links pasted into chat messages."""

import re
from typing import Optional

from .models import DirectId, Kind, LookupRequest

PATTERNS = [
    re.compile(
        r"open\.spotify\.com/(?:intl-[a-zA-Z-]+/)?(?P<kind>track|album|artist)/(?P<id>[a-zA-Z0-9]+)"
    ),
    re.compile(r"spotify:(?P<kind>track|album|artist):(?P<id>[a-zA-Z0-9]+)"),
]


def parse_link(url: str) -> Optional[LookupRequest]:
    """Turn a Spotify URL or URI into a lookup request.

    Returns:
        LookupRequest with a DirectId selector, or None if not recognized
    """
    if not url:
        return None

    for pattern in PATTERNS:
        match = pattern.search(url)
        if match:
            return LookupRequest(
                kind=Kind(match.group("kind")), selector=DirectId(match.group("id"))
            )
    return None
