from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class AuthenticationError(AppError):
    """The bearer token could not be verified."""


class ForbiddenError(AppError):
    pass


class InvalidInputError(AppError):
    """A precondition of the operation failed; nothing was written."""


class StorageUnavailableError(AppError):
    """The storage collaborator could not be reached."""
