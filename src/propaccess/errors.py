"""Exception hierarchy for property resolution."""

from __future__ import annotations


class PropertyAccessError(Exception):
    """Base class for all errors raised by propaccess."""


class InvalidArgumentError(PropertyAccessError, TypeError):
    """Raised when a subject or property name has the wrong shape."""


class PropertyNotAccessibleError(PropertyAccessError, LookupError):
    """Raised when no read strategy could resolve a property."""

    def __init__(self, message: str, *, property_name: str | int, subject_type: type) -> None:
        super().__init__(message)
        self.property_name = property_name
        self.subject_type = subject_type


class SubProcessError(PropertyAccessError, RuntimeError):
    """Raised when a worker sub process cannot be launched or detected."""
