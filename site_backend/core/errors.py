"""Domain errors shared by services and mapped to HTTP codes by the routers."""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors raised by the services."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFoundError(AppError):
    pass


class InvalidInputError(AppError, ValueError):
    """Raised when a payload fails validation. `fields` lists the offending keys."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = list(fields or [])


class DuplicateEntityError(AppError):
    pass


class UnauthorizedError(AppError):
    pass
