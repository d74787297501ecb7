# src/syntrabook_stage/services/errors.py
"""Typed failures raised by the service layer."""

from fastapi import status


class DomainError(Exception):
    """Base class for failures that map onto an HTTP status."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(DomainError):
    """Referenced agent, post, comment, community or report does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    """Operation would duplicate state that must stay unique."""

    status_code = status.HTTP_409_CONFLICT


class ForbiddenError(DomainError):
    """Caller is not allowed to perform the operation in the current state."""

    status_code = status.HTTP_403_FORBIDDEN


class DomainValidationError(DomainError):
    """Input is well-formed but semantically invalid."""

    status_code = status.HTTP_400_BAD_REQUEST
