"""
Album service.

Albums are links to externally hosted photo or video collections. Besides
CRUD this module resolves a card thumbnail for each album: a custom cover if
set, otherwise a thumbnail derived from the hosting platform's URL, otherwise
a platform placeholder image.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from familylinx.exceptions import AlbumNotFoundError, InvalidRequestError
from familylinx.models.media import Album
from familylinx.services.groups import require_family
from familylinx.utils import as_utc

logger = logging.getLogger(__name__)

ALBUM_TYPES = ("photo", "video")

_ALBUM_DATE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
_UPDATABLE_FIELDS = ("title", "description", "url", "type", "album_date", "cover_url")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# =============================================================================
# Platform detection and thumbnails
# =============================================================================

_PLATFORMS = (
    ("youtube", ("youtube.com", "youtu.be")),
    ("vimeo", ("vimeo.com",)),
    ("google-drive", ("drive.google.com",)),
    ("google-photos", ("photos.google.com", "photos.app.goo.gl")),
    ("onedrive", ("onedrive.live.com", "1drv.ms")),
    ("icloud", ("icloud.com",)),
    ("dropbox", ("dropbox.com",)),
    ("flickr", ("flickr.com",)),
    ("imgur", ("imgur.com",)),
)

THUMBNAIL_PLATFORMS = ("youtube", "vimeo", "google-drive", "dropbox", "imgur")

_YOUTUBE_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=)([a-zA-Z0-9_-]{11})"),
    re.compile(r"(?:youtu\.be/)([a-zA-Z0-9_-]{11})"),
    re.compile(r"(?:youtube\.com/embed/)([a-zA-Z0-9_-]{11})"),
    re.compile(r"(?:youtube\.com/shorts/)([a-zA-Z0-9_-]{11})"),
    re.compile(r"(?:youtube\.com/v/)([a-zA-Z0-9_-]{11})"),
)
_VIMEO_PATTERN = re.compile(r"vimeo\.com/(\d+)")
_DRIVE_FILE_PATTERN = re.compile(r"/d/([a-zA-Z0-9_-]+)")
_IMGUR_PATTERN = re.compile(r"imgur\.com/([a-zA-Z0-9]+)")
_DIRECT_IMAGE_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|webp|bmp)$", re.IGNORECASE)

PLACEHOLDERS = {
    "onedrive": {
        "video": "https://images.unsplash.com/photo-1611162617474-5b21e879e113?w=800&auto=format",
        "photo": "https://images.unsplash.com/photo-1633419461186-7d40a38105ec?w=800&auto=format",
    },
    "google-photos": {
        "video": "https://images.unsplash.com/photo-1611162616305-c69b3fa7fbe0?w=800&auto=format",
        "photo": "https://images.unsplash.com/photo-1501854140801-50d01698950b?w=800&auto=format",
    },
    "icloud": {
        "video": "https://images.unsplash.com/photo-1621768216002-5ac171876625?w=800&auto=format",
        "photo": "https://images.unsplash.com/photo-1516912481808-3406841bd33c?w=800&auto=format",
    },
    "default": {
        "video": "https://images.unsplash.com/photo-1536240478700-b869070f9279?w=800&auto=format",
        "photo": "https://images.unsplash.com/photo-1493246507139-91e8fad9978e?w=800&auto=format",
    },
}

THUMBNAIL_LIMITATIONS = {
    "onedrive": (
        "OneDrive shared links require authentication and don't provide public "
        "thumbnail access. Consider uploading a custom cover image."
    ),
    "google-photos": (
        "Google Photos shared albums don't expose direct image URLs for security "
        "reasons. Consider uploading a custom cover image."
    ),
    "icloud": (
        "iCloud shared albums require Apple authentication and don't support "
        "external embedding. Consider uploading a custom cover image."
    ),
    "flickr": "Flickr requires an API key for thumbnail access. Consider uploading a custom cover image.",
}


def detect_platform(url: str) -> str:
    """Hosting platform of an album URL, or ``unknown``."""
    for platform, markers in _PLATFORMS:
        if any(marker in url for marker in markers):
            return platform
    return "unknown"


def platform_supports_thumbnail(url: str) -> bool:
    return detect_platform(url) in THUMBNAIL_PLATFORMS


def _dropbox_direct_link(url: str) -> str:
    if "dropbox.com/s/" in url or "dropbox.com/scl/" in url:
        return (
            url.replace("www.dropbox.com", "dl.dropboxusercontent.com", 1)
            .replace("?dl=0", "", 1)
            .replace("?dl=1", "", 1)
        )
    return ""


def get_video_thumbnail_url(url: str) -> str:
    """
    Thumbnail for a video link.

    Supports YouTube (watch, youtu.be, embed, shorts and v links), Vimeo,
    single Google Drive files and Dropbox share links.

    Returns:
        Thumbnail URL, or an empty string when none can be derived
    """
    for pattern in _YOUTUBE_PATTERNS:
        match = pattern.search(url)
        if match:
            return f"https://img.youtube.com/vi/{match.group(1)}/hqdefault.jpg"

    match = _VIMEO_PATTERN.search(url)
    if match:
        return f"https://vumbnail.com/{match.group(1)}.jpg"

    if "drive.google.com" in url:
        match = _DRIVE_FILE_PATTERN.search(url)
        if match:
            return f"https://drive.google.com/thumbnail?id={match.group(1)}&sz=w1280"

    if "dropbox.com" in url:
        return _dropbox_direct_link(url)

    return ""


def get_photo_thumbnail_url(url: str) -> str:
    """
    Thumbnail for a photo link.

    Imgur albums and galleries, Flickr, OneDrive, Google Photos and iCloud
    links have no derivable thumbnail. Direct image links are used as-is.

    Returns:
        Thumbnail URL, or an empty string when none can be derived
    """
    if "drive.google.com" in url:
        match = _DRIVE_FILE_PATTERN.search(url)
        if match:
            return f"https://drive.google.com/thumbnail?id={match.group(1)}&sz=w800"

    if "dropbox.com" in url:
        direct = _dropbox_direct_link(url)
        if direct:
            return direct

    if "imgur.com" in url:
        if "/a/" in url or "/gallery/" in url:
            return ""
        match = _IMGUR_PATTERN.search(url)
        if match:
            return f"https://i.imgur.com/{match.group(1)}.jpg"

    if "flickr.com" in url:
        return ""

    if detect_platform(url) in ("onedrive", "google-photos", "icloud"):
        return ""

    if _DIRECT_IMAGE_PATTERN.search(url):
        return url

    return ""


def get_platform_placeholder(url: str, album_type: str) -> str:
    placeholders = PLACEHOLDERS.get(detect_platform(url), PLACEHOLDERS["default"])
    return placeholders["video"] if album_type == "video" else placeholders["photo"]


def get_thumbnail_limitation(url: str) -> Optional[str]:
    """Why a platform cannot provide thumbnails, or None."""
    return THUMBNAIL_LIMITATIONS.get(detect_platform(url))


def resolve_thumbnail(album: Album) -> str:
    """Custom cover, then platform thumbnail, then placeholder."""
    if album.cover_url:
        return album.cover_url

    if album.type == "video":
        thumbnail = get_video_thumbnail_url(album.url)
    else:
        thumbnail = get_photo_thumbnail_url(album.url)
    return thumbnail or get_platform_placeholder(album.url, album.type)


# =============================================================================
# Sorting and filtering
# =============================================================================


def sort_albums(albums: Iterable[Album]) -> list[Album]:
    """
    Newest first.

    Dated albums come before undated ones and are ordered by ``album_date``;
    undated albums are ordered by creation time.
    """
    albums = list(albums)
    dated = [a for a in albums if a.album_date]
    undated = [a for a in albums if not a.album_date]

    dated.sort(key=lambda a: a.album_date, reverse=True)
    undated.sort(key=lambda a: as_utc(a.created_at) or _EPOCH, reverse=True)
    return dated + undated


def album_years(albums: Iterable[Album]) -> list[str]:
    """Distinct years of dated albums, newest first."""
    years = {a.album_date.split("-")[0] for a in albums if a.album_date}
    return sorted(years, key=int, reverse=True)


def filter_albums(albums: Iterable[Album], query: str = "", year: Optional[str] = None) -> list[Album]:
    """Match the query against title, description or date; ``year`` prefixes the date."""
    result = []
    q = query.strip().lower()
    for album in albums:
        if q and not (
            q in album.title.lower()
            or q in (album.description or "").lower()
            or (album.album_date and query.strip() in album.album_date)
        ):
            continue
        if year and not (album.album_date and album.album_date.startswith(year)):
            continue
        result.append(album)
    return result


# =============================================================================
# CRUD
# =============================================================================


def _validate(values: dict[str, Any]) -> None:
    album_type = values.get("type")
    if album_type is not None and album_type not in ALBUM_TYPES:
        raise InvalidRequestError(f"Album type must be one of {ALBUM_TYPES}, got '{album_type}'")

    album_date = values.get("album_date")
    if album_date and not _ALBUM_DATE.match(album_date):
        raise InvalidRequestError(f"Album date must look like YYYY-MM, got '{album_date}'")


def get_albums(session: Session, family_id: str) -> list[Album]:
    stmt = select(Album).where(Album.family_id == family_id)
    return sort_albums(session.scalars(stmt).all())


def get_albums_by_type(session: Session, family_id: str, album_type: str) -> list[Album]:
    return [album for album in get_albums(session, family_id) if album.type == album_type]


def get_album(session: Session, family_id: str, album_id: str) -> Album:
    album = session.get(Album, album_id)
    if album is None or album.family_id != family_id:
        raise AlbumNotFoundError(f"Album {album_id} not found in family {family_id}")
    return album


def create_album(
    session: Session,
    family_id: str,
    title: str,
    url: str,
    album_type: str = "photo",
    description: str = "",
    album_date: Optional[str] = None,
    cover_url: Optional[str] = None,
) -> Album:
    """
    Create an album.

    Raises:
        FamilyNotFoundError: Family does not exist
        InvalidRequestError: Unknown type or malformed date
    """
    require_family(session, family_id)
    _validate({"type": album_type, "album_date": album_date})

    album = Album(
        family_id=family_id,
        title=title,
        url=url,
        type=album_type,
        description=description or "",
        album_date=album_date or None,
        cover_url=cover_url or None,
    )
    session.add(album)
    session.flush()

    logger.info(f"Created {album_type} album {album.id} ('{title}') in family {family_id}")
    return album


def update_album(session: Session, family_id: str, album_id: str, updates: dict[str, Any]) -> Album:
    """Apply the provided fields; empty strings clear date and cover."""
    album = get_album(session, family_id, album_id)
    values = {k: v for k, v in updates.items() if k in _UPDATABLE_FIELDS and v is not None}
    _validate(values)

    for key, value in values.items():
        if key in ("album_date", "cover_url"):
            value = value or None
        setattr(album, key, value)

    album.touch()
    session.flush()
    return album


def delete_album(session: Session, family_id: str, album_id: str) -> None:
    album = get_album(session, family_id, album_id)
    session.delete(album)
    session.flush()
    logger.info(f"Deleted album {album_id} from family {family_id}")


@dataclass
class AlbumCard:
    """An album with its resolved thumbnail."""

    album: Album
    thumbnail_url: str
    platform: str
    thumbnail_limitation: Optional[str]


def album_cards(albums: Sequence[Album]) -> list[AlbumCard]:
    return [
        AlbumCard(
            album=album,
            thumbnail_url=resolve_thumbnail(album),
            platform=detect_platform(album.url),
            thumbnail_limitation=get_thumbnail_limitation(album.url),
        )
        for album in albums
    ]
