"""
SQLAlchemy models for FamilyLinX.

This module exports all database models for easy importing and
ensures Alembic can discover them for migrations.
"""

from familylinx.models.base import Base, BaseModel, get_json_type

# Import all models (must be imported for Alembic autogenerate)
from familylinx.models.family import Family, Group
from familylinx.models.media import Album
from familylinx.models.calendar import CalendarEvent, EVENT_CATEGORIES
from familylinx.models.documents import Person, Photo

__all__ = [
    # Base classes
    "Base",
    "BaseModel",
    "get_json_type",
    # Family tree
    "Family",
    "Group",
    # Embedded documents
    "Person",
    "Photo",
    # Media
    "Album",
    # Calendar
    "CalendarEvent",
    "EVENT_CATEGORIES",
]
