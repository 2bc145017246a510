"""Service layer modules for the job board API."""

from . import credential_service, user_data_service

__all__ = [
    "credential_service",
    "user_data_service",
]
