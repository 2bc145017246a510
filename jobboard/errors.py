"""Error types shared by the API services and the client."""

from __future__ import annotations

from typing import Optional


class JobBoardError(Exception):
    """Base class for job board failures."""

    status_code = 500


class ValidationError(JobBoardError):
    """A request is missing required fields or carries malformed values."""

    status_code = 400


class ConflictError(JobBoardError):
    """An identity with the same email is already registered."""

    status_code = 409


class TransportError(JobBoardError):
    """The API could not be reached or answered with an unexpected status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
