"""
Member and photo service.

Members live inside their group's ``members`` array. Every mutation here
reads the group, rebuilds the whole array and writes it back, so two writers
touching the same group resolve last-write-wins.

Blob cleanup (deleting a removed photo's file) is best-effort: failures are
logged and never undo the document change.
"""

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Optional

from sqlalchemy.orm import Session

from familylinx.exceptions import InvalidRequestError, PersonNotFoundError, PhotoNotFoundError, StorageError
from familylinx.models.documents import Person, Photo
from familylinx.services.groups import require_group
from familylinx.storage import BlobStorage, build_photo_path
from familylinx.utils import current_timestamp_ms, generate_id

logger = logging.getLogger(__name__)

# Fields callers may not overwrite through update_person
_PROTECTED_FIELDS = {"id"}

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".heic"}


@dataclass
class PhotoUpload:
    """An uploaded file waiting to be stored."""

    filename: str
    data: bytes
    year_taken: int
    caption: Optional[str] = None
    content_type: Optional[str] = None


@dataclass
class UploadResult:
    """Outcome of uploading several photos for one person."""

    person: Person
    uploaded: list[Photo] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def is_image_file(filename: str, content_type: Optional[str] = None) -> bool:
    """
    Accept ``image/*`` content types, or a known image extension when the
    client sent no specific type. HEIC is accepted by extension alone.
    """
    extension = PurePosixPath(filename.lower()).suffix
    if extension == ".heic":
        return True
    if content_type and content_type != "application/octet-stream":
        return content_type.lower().startswith("image/")
    return extension in IMAGE_EXTENSIONS


def _find_index(persons: list[Person], person_id: str) -> int:
    for index, person in enumerate(persons):
        if person.id == person_id:
            return index
    return -1


def _delete_blob(storage: Optional[BlobStorage], url: str) -> None:
    """Remove a photo file, logging instead of raising."""
    if storage is None:
        return
    try:
        storage.delete(url)
    except StorageError as e:
        logger.error(f"Error deleting photo {url}: {e}")


# =============================================================================
# Person Operations
# =============================================================================


def get_person(session: Session, family_id: str, group_id: str, person_id: str) -> Person:
    group = require_group(session, family_id, group_id)
    for person in group.persons:
        if person.id == person_id:
            return person
    raise PersonNotFoundError(f"Person {person_id} not found in group {group_id}")


def add_person_to_group(session: Session, family_id: str, group_id: str, person: Person) -> Person:
    """
    Append a person to a group's members.

    Raises:
        GroupNotFoundError: Group does not exist
        InvalidRequestError: The group already has a person with this id
    """
    group = require_group(session, family_id, group_id)
    persons = group.persons
    if _find_index(persons, person.id) != -1:
        raise InvalidRequestError(f"Person {person.id} already exists in group {group_id}")

    group.replace_members(persons + [person])
    session.flush()

    logger.info(f"Added {person.name} ({person.id}) to group {group_id}")
    return person


def update_person(
    session: Session,
    family_id: str,
    group_id: str,
    person_id: str,
    updates: dict[str, Any],
) -> Person:
    """
    Shallow-merge ``updates`` into a person.

    ``None`` values are ignored, except that passing ``is_deceased`` as None or
    False clears both ``is_deceased`` and ``year_of_death``.

    Raises:
        GroupNotFoundError: Group does not exist
        PersonNotFoundError: Person is not a member of the group
    """
    group = require_group(session, family_id, group_id)
    persons = group.persons
    index = _find_index(persons, person_id)
    if index == -1:
        raise PersonNotFoundError(f"Person {person_id} not found in group {group_id}")

    merged = persons[index].to_document()
    merged.update({
        key: value
        for key, value in updates.items()
        if value is not None and key not in _PROTECTED_FIELDS
    })
    if "is_deceased" in updates and not updates["is_deceased"]:
        merged.pop("is_deceased", None)
        merged.pop("year_of_death", None)

    updated = Person.model_validate(merged)
    persons[index] = updated
    group.replace_members(persons)
    session.flush()

    logger.info(f"Updated person {person_id} in group {group_id}")
    return updated


def delete_person(
    session: Session,
    family_id: str,
    group_id: str,
    person_id: str,
    storage: Optional[BlobStorage] = None,
) -> Person:
    """
    Remove a person from a group.

    The person's photo files are deleted best-effort when ``storage`` is given.

    Returns:
        The removed person
    """
    group = require_group(session, family_id, group_id)
    persons = group.persons
    index = _find_index(persons, person_id)
    if index == -1:
        raise PersonNotFoundError(f"Person {person_id} not found in group {group_id}")

    removed = persons.pop(index)
    group.replace_members(persons)
    session.flush()

    for photo in removed.photos:
        _delete_blob(storage, photo.url)

    logger.info(f"Deleted person {person_id} ({removed.name}) from group {group_id}")
    return removed


# =============================================================================
# Photo Operations
# =============================================================================


def add_photo_to_person(
    session: Session,
    family_id: str,
    group_id: str,
    person_id: str,
    photo: Photo,
) -> Photo:
    group = require_group(session, family_id, group_id)
    persons = group.persons
    index = _find_index(persons, person_id)
    if index == -1:
        raise PersonNotFoundError(f"Person {person_id} not found in group {group_id}")

    persons[index].photos.append(photo)
    group.replace_members(persons)
    session.flush()
    return photo


def remove_photo_from_person(
    session: Session,
    family_id: str,
    group_id: str,
    person_id: str,
    photo_id: str,
    storage: Optional[BlobStorage] = None,
) -> Photo:
    """
    Remove a photo from a person's gallery and delete its file.

    A failure to delete the file is logged; the gallery change still stands.

    Raises:
        PersonNotFoundError: Person is not a member of the group
        PhotoNotFoundError: Person has no photo with this id
    """
    group = require_group(session, family_id, group_id)
    persons = group.persons
    index = _find_index(persons, person_id)
    if index == -1:
        raise PersonNotFoundError(f"Person {person_id} not found in group {group_id}")

    person = persons[index]
    photo = next((p for p in person.photos if p.id == photo_id), None)
    if photo is None:
        raise PhotoNotFoundError(f"Photo {photo_id} not found for person {person_id}")

    person.photos = [p for p in person.photos if p.id != photo_id]
    group.replace_members(persons)
    session.flush()

    _delete_blob(storage, photo.url)
    logger.info(f"Removed photo {photo_id} from person {person_id}")
    return photo


def upload_photo(
    storage: BlobStorage,
    family_id: str,
    person_id: str,
    filename: str,
    data: bytes,
    year_taken: int,
    caption: Optional[str] = None,
    content_type: Optional[str] = None,
) -> Photo:
    """
    Store a photo file and build its Photo document.

    The file goes to ``photos/{family_id}/{person_id}/{timestamp}_{filename}``.

    Raises:
        StorageError: The file could not be stored
    """
    timestamp = current_timestamp_ms()
    path = build_photo_path(family_id, person_id, filename, timestamp)
    url = storage.upload(path, data, content_type)

    return Photo(
        id=generate_id("photo"),
        url=url,
        year_taken=year_taken,
        caption=caption or None,
    )


def upload_photos_for_person(
    session: Session,
    storage: BlobStorage,
    family_id: str,
    group_id: str,
    person_id: str,
    uploads: list[PhotoUpload],
) -> UploadResult:
    """
    Upload several photos and append them to a person's gallery.

    Files that are not images or fail to store are logged and reported in
    ``failed``; the remaining files continue.
    """
    person = get_person(session, family_id, group_id, person_id)
    result = UploadResult(person=person)

    for upload in uploads:
        if not is_image_file(upload.filename, upload.content_type):
            logger.warning(f"Rejected {upload.filename}: not an image ({upload.content_type or 'unknown type'})")
            result.failed.append(upload.filename)
            continue
        try:
            photo = upload_photo(
                storage,
                family_id,
                person_id,
                upload.filename,
                upload.data,
                upload.year_taken,
                caption=upload.caption,
                content_type=upload.content_type,
            )
        except StorageError as e:
            logger.error(f"Failed to upload photo {upload.filename}: {e}")
            result.failed.append(upload.filename)
            continue
        result.uploaded.append(photo)

    if result.uploaded:
        group = require_group(session, family_id, group_id)
        persons = group.persons
        index = _find_index(persons, person_id)
        persons[index].photos.extend(result.uploaded)
        group.replace_members(persons)
        session.flush()
        result.person = persons[index]

    logger.info(
        f"Uploaded {len(result.uploaded)} photo(s) for person {person_id}"
        f" ({len(result.failed)} failed)"
    )
    return result
