"""Domain errors raised by the service layer.

Each error carries the HTTP status the API reports for it; the handlers in
``projectmgmt.errors`` turn them into the standard response envelope.
"""
from fastapi import status


class AppError(Exception):
    """Base class for failures reported verbatim to the caller."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    @classmethod
    def for_entity(cls, entity: str, field: str, value) -> "NotFoundError":
        return cls(f"{entity} not found with {field}: '{value}'")


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class InvalidRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
