"""
Embedded document schemas.

Persons live inside a group's ``members`` JSON array and photos inside a
person's ``photos`` array. They are validated with Pydantic on the way in and
dumped without ``None`` values on the way out.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from familylinx.utils import generate_id


class Photo(BaseModel):
    """A photo in a person's gallery."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=lambda: generate_id("photo"))
    url: str = Field(..., description="Blob storage URL")
    year_taken: int = Field(..., description="Year the photo was taken")
    caption: Optional[str] = None


class Person(BaseModel):
    """
    A member of a group.

    ``year_of_birth`` of 0 means unknown. ``sub_group_id`` links the person to
    the child group holding their own family.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=generate_id)
    name: str = Field(..., min_length=1, max_length=200)
    relationship: str = Field(default="", max_length=100)
    gender: Optional[Literal["male", "female"]] = None
    year_of_birth: int = Field(default=0, ge=0)
    is_deceased: Optional[bool] = None
    year_of_death: Optional[int] = Field(default=None, ge=0)
    photos: list[Photo] = Field(default_factory=list)
    sub_group_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    def to_document(self) -> dict:
        """Serialize for storage, omitting unset optional fields."""
        return self.model_dump(exclude_none=True)
