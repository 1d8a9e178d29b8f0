"""Slack attachment formatting for shared items."""

from .models import Attachment, CatalogItem, Kind, UnifiedLinkSet

COLOR = "#1DB954"

# song.link platform id -> label, in display order
PLATFORMS = (
    ("spotify", "Spotify"),
    ("appleMusic", "Apple Music"),
    ("youtubeMusic", "YouTube Music"),
    ("youtube", "YouTube"),
    ("tidal", "Tidal"),
    ("amazonMusic", "Amazon Music"),
    ("soundcloud", "SoundCloud"),
)


def mention(user_id: str) -> str:
    """Slack mention markup for a user ID."""
    return f"<@{user_id}>"


def hyperlink(url: str, label: str) -> str:
    """Slack mrkdwn hyperlink."""
    return f"<{url}|{label}>"


def link_line(links: UnifiedLinkSet) -> str:
    """Tab-separated hyperlinks for allow-listed platforms present in ``links``."""
    return "\t".join(
        hyperlink(links.get(platform), label)
        for platform, label in PLATFORMS
        if platform in links
    )


def build_attachment(
    user_id: str, kind: Kind, item: CatalogItem, links: UnifiedLinkSet
) -> Attachment:
    """Build the attachment for a shared track or album."""
    if kind is Kind.ARTIST:
        return build_artist_attachment(user_id, item)

    artists = item.artist_names
    return Attachment(
        color=COLOR,
        fallback=f"{item.name} by {artists}",
        title=f'{mention(user_id)} shared the {kind.noun} "{item.name}" by {artists}!',
        text=link_line(links),
    )


def build_artist_attachment(user_id: str, item: CatalogItem) -> Attachment:
    """Build the attachment for a shared artist.

    Artists are not unified; the catalog profile is the only link.
    """
    text = hyperlink(item.url, "Spotify") if item.url else ""
    return Attachment(
        color=COLOR,
        fallback=item.name,
        title=f"{mention(user_id)} shared {item.name}!",
        text=text,
    )
