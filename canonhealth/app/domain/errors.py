"""Error taxonomy surfaced to API callers."""
from fastapi import status


class CanonHealthError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CanonHealthError):
    """A required field is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(CanonHealthError):
    """A referenced id or health card has no matching record."""

    status_code = status.HTTP_404_NOT_FOUND


class UnknownHealthCard(NotFound):
    # Reported as a client error when the caller supplied the card in a write.
    status_code = status.HTTP_400_BAD_REQUEST


class Forbidden(CanonHealthError):
    """The visibility gate denied access."""

    status_code = status.HTTP_403_FORBIDDEN
