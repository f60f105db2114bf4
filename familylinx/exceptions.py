"""
Custom exceptions for FamilyLinX operations.

Provides structured error handling with HTTP status codes and retryable flags.
"""


class FamilyLinxError(Exception):
    """Base exception for FamilyLinX operations."""

    status_code: int = 500
    error_type: str = "internal_error"
    retryable: bool = False

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class NotFoundError(FamilyLinxError):
    """A requested document does not exist."""

    status_code = 404
    error_type = "not_found"


class FamilyNotFoundError(NotFoundError):
    """Family document not found (by id or by root slug)."""


class GroupNotFoundError(NotFoundError):
    """Group not found in the family."""


class PersonNotFoundError(NotFoundError):
    """Person not found in the group's members."""


class PhotoNotFoundError(NotFoundError):
    """Photo not found in the person's gallery."""


class AlbumNotFoundError(NotFoundError):
    """Album not found in the family."""


class EventNotFoundError(NotFoundError):
    """Calendar event not found in the family."""


class FamilyExistsError(FamilyLinxError):
    """A family with the requested id already exists."""

    status_code = 409
    error_type = "conflict"


class SlugConflictError(FamilyLinxError):
    """
    Slug already in use.

    Root slugs must be unique across all families because they form the first
    URL segment; other slugs must be unique within their family.
    """

    status_code = 409
    error_type = "slug_conflict"


class HierarchyError(FamilyLinxError):
    """
    Operation would break the group forest.

    Causes:
    - Parent group missing or in another family
    - Deleting a group that still has child groups
    - Person already linked to a sub-group
    """

    status_code = 409
    error_type = "hierarchy_error"


class InvalidRequestError(FamilyLinxError):
    """Request data is well-formed but unusable (e.g. unknown country)."""

    status_code = 400
    error_type = "validation_error"


class StorageError(FamilyLinxError):
    """
    Blob storage failure.

    Retryable: storage failures are usually transient I/O problems.
    """

    status_code = 502
    error_type = "storage_error"
    retryable = True
