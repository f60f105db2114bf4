"""
Family and Group models.

Entities:
- Family: Top-level tenant owning groups, albums and calendar events
- Group: Node in a family's forest of groups; carries its members as a JSON array

Members are not rows of their own. Every member mutation rewrites the whole
``members`` array of the group, so concurrent writers resolve last-write-wins.
"""

from typing import Optional, TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from familylinx.models.base import BaseModel, get_json_type
from familylinx.models.documents import Person

if TYPE_CHECKING:
    from familylinx.models.media import Album
    from familylinx.models.calendar import CalendarEvent


class Family(BaseModel):
    """
    Top-level tenant.

    The id is chosen by the caller (usually a slug such as ``demo-family``)
    and doubles as the fallback first URL segment.
    """

    __tablename__ = "families"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        doc="Display name (e.g. 'The Smiths Family')"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        doc="Free-text description"
    )

    groups: Mapped[list["Group"]] = relationship(
        "Group",
        back_populates="family",
        cascade="all, delete-orphan",
        doc="All groups of this family (every tree of the forest)"
    )

    albums: Mapped[list["Album"]] = relationship(
        "Album",
        back_populates="family",
        cascade="all, delete-orphan",
    )

    calendar_events: Mapped[list["CalendarEvent"]] = relationship(
        "CalendarEvent",
        back_populates="family",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Family(id='{self.id}', name='{self.name}')>"


class Group(BaseModel):
    """
    A family or sub-family unit.

    Groups without ``parent_group_id`` are roots; their slug is the first URL
    segment. A child group is usually reached from the person whose
    ``sub_group_id`` points at it.
    """

    __tablename__ = "groups"

    family_id: Mapped[str] = mapped_column(
        ForeignKey("families.id", ondelete="CASCADE"),
        nullable=False,
        doc="Owning family"
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        doc="Group name"
    )

    slug: Mapped[Optional[str]] = mapped_column(
        String(200),
        nullable=True,
        doc="URL-friendly short name"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    members: Mapped[list] = mapped_column(
        get_json_type(),
        nullable=False,
        default=list,
        doc="Person documents (see familylinx.models.documents.Person)"
    )

    parent_group_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("groups.id"),
        nullable=True,
        doc="Parent group (NULL for roots)"
    )

    family: Mapped["Family"] = relationship(
        "Family",
        back_populates="groups",
    )

    parent: Mapped[Optional["Group"]] = relationship(
        "Group",
        remote_side="Group.id",
        back_populates="children",
    )

    children: Mapped[list["Group"]] = relationship(
        "Group",
        back_populates="parent",
    )

    __table_args__ = (
        Index("idx_group_family", "family_id"),
        Index("idx_group_family_slug", "family_id", "slug"),
        Index("idx_group_parent", "parent_group_id"),
    )

    @property
    def is_root(self) -> bool:
        return self.parent_group_id is None

    @property
    def persons(self) -> list[Person]:
        """Members parsed into Person documents (fresh copies on every access)."""
        return [Person.model_validate(member) for member in self.members or []]

    def replace_members(self, persons: list[Person]) -> None:
        """Overwrite the whole members array."""
        self.members = [person.to_document() for person in persons]
        self.touch()

    def to_document(self) -> dict:
        """Export form used by the JSON export/import."""
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "members": list(self.members or []),
            "parent_group_id": self.parent_group_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Group(name='{self.name}', slug='{self.slug}')>"
