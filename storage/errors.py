"""
storage/errors.py

Error taxonomy for the MedBook core.

Every error derives from both ``MedBookError`` and the closest builtin, so
callers that only know about ``ValueError`` / ``PermissionError`` /
``LookupError`` keep working.

Read paths never raise ``NotFound``; they return ``None`` (or a
``DocResult`` with ``exists=False``).  ``InvalidPath`` is raised inside the
document store only, logged there, and never reaches callers.
"""

from __future__ import annotations


class MedBookError(Exception):
    """Base class for all recoverable core errors."""


class DuplicateIdentity(MedBookError, ValueError):
    """An identity with the same email is already registered."""


class MissingField(MedBookError, ValueError):
    """A required argument or record field is empty."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"'{field}' is required.")


class InvalidRole(MedBookError, ValueError):
    """Role is not one of 'patient' / 'doctor'."""


class InvalidCredentials(MedBookError, PermissionError):
    """Email + password do not match a registered identity."""


class NotFound(MedBookError, LookupError):
    """A write targeted a record that does not exist."""


class InvalidPath(MedBookError, ValueError):
    """A document path is not of the form ``<collection>/<id>``."""
