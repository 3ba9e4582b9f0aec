# services/errors.py
"""Failure modes raised by the project services.

Each carries the HTTP status and the user-facing message the routers send back;
the routers are the only place these become responses.
"""
from fastapi import status


class WorkflowError(RuntimeError):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, *, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class Unauthenticated(WorkflowError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class InvalidInput(WorkflowError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Forbidden(WorkflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to view this project"


class NotFound(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Project not found"


class InsufficientCredits(WorkflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "add more credits to make changes"


class OracleFailure(WorkflowError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to generate code"


class RevisionConflict(WorkflowError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "The project was changed by another request, please try again"


__all__ = [
    "WorkflowError",
    "Unauthenticated",
    "InvalidInput",
    "Forbidden",
    "NotFound",
    "InsufficientCredits",
    "OracleFailure",
    "RevisionConflict",
]
