"""HTTP transport used by the client to reach the job board API."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional, Tuple

import requests

from jobboard.errors import TransportError

DEFAULT_API_URL = "http://localhost:5050"
DEFAULT_TIMEOUT = 10  # seconds

Response = Tuple[int, Dict[str, Any]]


class ApiTransport:
    """Send JSON requests and return ``(status, body)`` pairs."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("JOBBOARD_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.timeout = timeout or float(os.getenv("JOBBOARD_REQUEST_TIMEOUT", DEFAULT_TIMEOUT))
        self.session = session or requests.Session()

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Response:
        return self._send("GET", path, params=params)

    def post(self, path: str, json: Dict[str, Any]) -> Response:
        return self._send("POST", path, json=json)

    def _send(self, method: str, path: str, **kwargs: Any) -> Response:
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                timeout=self.timeout,
                **kwargs,
            )
        except requests.exceptions.Timeout:
            raise TransportError(f"{method} {path} timed out") from None
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return response.status_code, body
