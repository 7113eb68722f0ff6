"""
Error taxonomy for the Family Tree application.
"""


class FamilyTreeError(Exception):
    """Base class for errors surfaced to the user."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FamilyTreeError):
    """A required field is missing or a value is unusable."""


class NotFoundError(FamilyTreeError):
    """An operation referenced an unknown member id."""

    status_code = 404


class FormatError(FamilyTreeError):
    """An imported document is not a valid family tree export."""


class StorageError(FamilyTreeError):
    """The durable key-value store could not be read or written."""

    status_code = 500
