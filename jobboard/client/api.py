"""Typed wrappers around the job board HTTP endpoints."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from jobboard.client.transport import ApiTransport
from jobboard.errors import ConflictError, TransportError, ValidationError


def _raise_for_status(status: int, body: Dict[str, Any], operation: str) -> None:
    message = body.get("error") or f"{operation} failed with status {status}"
    if status == 400:
        raise ValidationError(message)
    if status == 409:
        raise ConflictError(message)
    raise TransportError(message, status_code=status)


class JobBoardApi:
    """Client side of the login, signup and user data endpoints."""

    def __init__(self, transport: ApiTransport) -> None:
        self.transport = transport

    def login(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """Return the identity for valid credentials, or None on a mismatch."""
        status, body = self.transport.post("/api/auth", {"email": email, "password": password})
        if status == 401:
            return None
        if status != 200:
            _raise_for_status(status, body, "login")
        return body

    def signup(self, name: str, email: str, password: str, dob: str) -> Dict[str, Any]:
        """Register an identity; raises ConflictError when the email is taken."""
        status, body = self.transport.post(
            "/api/users",
            {"name": name, "email": email, "password": password, "dob": dob},
        )
        if status != 201:
            _raise_for_status(status, body, "signup")
        return body

    def get_user_data(self, user_id: str) -> Dict[str, Any]:
        status, body = self.transport.get("/api/user-data", params={"userId": user_id})
        if status != 200:
            _raise_for_status(status, body, "get user data")
        return body

    def put_user_data(
        self,
        user_id: str,
        applied_job_ids: Optional[Iterable[int]] = None,
        bookmarked_job_ids: Optional[Iterable[int]] = None,
    ) -> None:
        """Upsert a record; fields left as None are not sent and stay as stored."""
        payload: Dict[str, Any] = {"userId": user_id}
        if applied_job_ids is not None:
            payload["appliedJobIds"] = list(applied_job_ids)
        if bookmarked_job_ids is not None:
            payload["bookmarkedJobIds"] = list(bookmarked_job_ids)

        status, body = self.transport.post("/api/user-data", payload)
        if status != 200:
            _raise_for_status(status, body, "save user data")
