"""
Album model.

Albums are links to externally hosted photo or video collections
(Google Photos, YouTube, Dropbox, ...), listed per family.
"""

from functools import partial
from typing import Optional, TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from familylinx.models.base import BaseModel
from familylinx.utils import generate_id

if TYPE_CHECKING:
    from familylinx.models.family import Family


class Album(BaseModel):
    """A shared photo or video album."""

    __tablename__ = "albums"

    id: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
        default=partial(generate_id, "album"),
    )

    family_id: Mapped[str] = mapped_column(
        ForeignKey("families.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    url: Mapped[str] = mapped_column(
        String(2000),
        nullable=False,
        doc="Link to the hosted album"
    )

    type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="photo",
        doc="Album type: 'photo' or 'video'"
    )

    album_date: Mapped[Optional[str]] = mapped_column(
        String(7),
        nullable=True,
        doc="Album month in YYYY-MM format"
    )

    cover_url: Mapped[Optional[str]] = mapped_column(
        String(2000),
        nullable=True,
        doc="Custom cover image"
    )

    family: Mapped["Family"] = relationship("Family", back_populates="albums")

    __table_args__ = (
        Index("idx_album_family", "family_id"),
        Index("idx_album_type", "type"),
    )

    def __repr__(self) -> str:
        return f"<Album(title='{self.title}', type='{self.type}')>"
