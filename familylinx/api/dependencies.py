"""
FastAPI dependency providers.

Request-scoped database sessions and the blob storage backend. Tests swap
both through ``app.dependency_overrides``.
"""

from typing import Generator

from sqlalchemy.orm import Session

from familylinx.database import get_db
from familylinx.storage import BlobStorage, get_blob_storage


def get_db_session() -> Generator[Session, None, None]:
    """Yield a session committed after the request, rolled back on error."""
    yield from get_db()


def get_storage() -> BlobStorage:
    return get_blob_storage()
