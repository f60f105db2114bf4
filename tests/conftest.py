"""
Pytest configuration and fixtures for FamilyLinX tests.

Provides database session fixtures, a sample family tree, a temporary blob
store and an API client wired to both.
"""

import os

# Point the application at throwaway locations before familylinx is imported
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["PYTHON_ENV"] = "development"

from dataclasses import dataclass
from typing import Generator

import pytest
import sqlalchemy as sa
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from familylinx.api.dependencies import get_db_session, get_storage
from familylinx.api.main import app
from familylinx.models.base import Base
from familylinx.models.documents import Person, Photo
from familylinx.models.family import Family, Group
from familylinx.services.families import create_family
from familylinx.services.groups import create_group
from familylinx.storage import LocalBlobStorage


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a clean database session for each test.

    Uses an in-memory SQLite database that is torn down after each test.
    StaticPool keeps one connection so API requests served from other
    threads see the same data.

    Yields:
        Session: SQLAlchemy session for database operations
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as connection:
            connection.execute(sa.text("PRAGMA foreign_keys=OFF"))
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def storage(tmp_path) -> LocalBlobStorage:
    """Blob storage rooted in a temporary directory."""
    return LocalBlobStorage(tmp_path / "blobs", base_url="/storage")


@pytest.fixture
def client(db_session: Session, storage: LocalBlobStorage) -> Generator[TestClient, None, None]:
    """API client using the test session and temporary storage."""

    def _session_override():
        yield db_session

    app.dependency_overrides[get_db_session] = _session_override
    app.dependency_overrides[get_storage] = lambda: storage
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def family(db_session: Session) -> Family:
    """
    An empty family.

    Returns:
        Family: A persisted family with id ``demo-family``
    """
    return create_family(db_session, "demo-family", "Demo Family", "For tests")


@dataclass
class SampleTree:
    """
    A three level family::

        toknggal (root)        Tok Nggal (1920-1990), Ngah Jusoh (1950)
        └── ngahjusoh          Ali Sulong (1980), Siti (1985)
            └── alisulong      Adam (2010)
    """

    family: Family
    root: Group
    ngah_group: Group
    ali_group: Group


@pytest.fixture
def sample_tree(db_session: Session, family: Family) -> SampleTree:
    root = create_group(
        db_session,
        family.id,
        name="Tok Nggal Family",
        slug="toknggal",
        group_id="g-root",
        members=[
            Person(
                id="p-tok",
                name="Tok Nggal",
                relationship="grandfather",
                gender="male",
                year_of_birth=1920,
                is_deceased=True,
                year_of_death=1990,
                photos=[
                    Photo(id="ph-tok-1", url="https://img.example/tok-1950.jpg", year_taken=1950),
                    Photo(id="ph-tok-2", url="https://img.example/tok-1970.jpg", year_taken=1970),
                ],
            ),
            Person(
                id="p-ngah",
                name="Ngah Jusoh",
                relationship="son",
                year_of_birth=1950,
                sub_group_id="g-ngah",
            ),
        ],
    )
    ngah_group = create_group(
        db_session,
        family.id,
        name="Ngah Jusoh's Family",
        slug="ngahjusoh",
        parent_group_id=root.id,
        group_id="g-ngah",
        members=[
            Person(
                id="p-ali",
                name="Ali Sulong",
                relationship="son",
                year_of_birth=1980,
                sub_group_id="g-ali",
                photos=[
                    Photo(id="ph-ali-1", url="https://img.example/ali-1985.jpg", year_taken=1985),
                    Photo(id="ph-ali-2", url="https://img.example/ali-2000.jpg", year_taken=2000),
                    Photo(id="ph-ali-3", url="https://img.example/ali-2020.jpg", year_taken=2020),
                ],
            ),
            Person(id="p-siti", name="Siti", relationship="daughter", year_of_birth=1985),
        ],
    )
    ali_group = create_group(
        db_session,
        family.id,
        name="Ali Sulong's Family",
        slug="alisulong",
        parent_group_id=ngah_group.id,
        group_id="g-ali",
        members=[
            Person(
                id="p-adam",
                name="Adam",
                relationship="son",
                year_of_birth=2010,
                photos=[Photo(id="ph-adam-1", url="https://img.example/adam-2020.jpg", year_taken=2020)],
            ),
        ],
    )
    db_session.commit()
    return SampleTree(family=family, root=root, ngah_group=ngah_group, ali_group=ali_group)
