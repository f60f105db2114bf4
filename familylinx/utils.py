"""
Utility helpers shared by services, the API and the command line tool.
"""

import random
import re
import string
import time
from datetime import datetime, timezone
from typing import Any, Optional, Sequence, TypeVar

_BASE36 = string.digits + string.ascii_lowercase

T = TypeVar("T")


def current_timestamp_ms() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to aware UTC; naive datetimes (as returned by SQLite) are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def generate_id(prefix: Optional[str] = None) -> str:
    """
    Generate a document id of the form ``{epoch_ms}-{9 base36 chars}``.

    Args:
        prefix: Optional type prefix (``album``, ``event``, ``photo``)

    Returns:
        New id, e.g. ``1735689600000-k3j9x0a1b`` or ``photo_1735689600000-k3j9x0a1b``
    """
    suffix = "".join(random.choices(_BASE36, k=9))
    base = f"{current_timestamp_ms()}-{suffix}"
    return f"{prefix}_{base}" if prefix else base


def generate_slug(name: str) -> str:
    """
    Turn a display name into a URL-friendly slug.

    Lowercases, collapses every run of non-alphanumerics into one dash and
    trims leading/trailing dashes.
    """
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower())
    return slug.strip("-")


def display_name_from_id(family_id: str) -> str:
    """``the-smiths`` -> ``The Smiths``."""
    return " ".join(word[:1].upper() + word[1:] for word in family_id.split("-"))


def calculate_age(
    year_of_birth: int,
    year_of_death: Optional[int] = None,
    current_year: Optional[int] = None,
) -> int:
    """Age in whole years, measured up to the year of death when known."""
    end_year = year_of_death or current_year or utcnow().year
    return end_year - year_of_birth


def get_age_display(
    year_of_birth: int,
    is_deceased: Optional[bool] = None,
    year_of_death: Optional[int] = None,
    current_year: Optional[int] = None,
) -> str:
    """
    Human readable age.

    Returns an empty string when the year of birth is unknown (0).
    """
    if year_of_birth == 0:
        return ""

    age = calculate_age(year_of_birth, year_of_death, current_year)
    if is_deceased and year_of_death:
        return f"{age} years ({year_of_birth} - {year_of_death})"
    return f"{age} years"


def sort_photos_by_year(photos: Sequence[T]) -> list[T]:
    """Photos ordered oldest first; works with models and plain dicts."""
    def _year(photo: Any) -> int:
        if isinstance(photo, dict):
            return photo.get("year_taken", 0)
        return photo.year_taken

    return sorted(photos, key=_year)


def remove_none(value: Any) -> Any:
    """Recursively drop ``None`` entries from dicts (and dicts inside lists)."""
    if isinstance(value, list):
        return [remove_none(item) for item in value]
    if isinstance(value, dict):
        return {k: remove_none(v) for k, v in value.items() if v is not None}
    return value
