"""Client-side authentication session.

The session moves between two states. It starts unauthenticated, becomes
authenticated after a successful login or signup (or once at startup via
:meth:`SessionManager.restore_session`) and returns to unauthenticated on
logout. Listeners registered with :meth:`SessionManager.subscribe` are told
about every transition with the new identity, or None after logout.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from jobboard.client.api import JobBoardApi
from jobboard.client.session_storage import SessionStorage
from jobboard.errors import ConflictError, JobBoardError

logger = logging.getLogger(__name__)

SESSION_KEY = "currentUser"

Listener = Callable[[Optional[Dict[str, Any]]], None]


class SessionManager:
    """Owns the authenticated identity for one client context."""

    def __init__(self, api: JobBoardApi, storage: SessionStorage) -> None:
        self.api = api
        self.storage = storage
        self._user: Optional[Dict[str, Any]] = None
        self._listeners: List[Listener] = []
        self._restored = False

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return dict(self._user) if self._user else None

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for session transitions; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        user = self.user
        for listener in list(self._listeners):
            try:
                listener(user)
            except Exception:
                logger.exception("Session listener %r failed", listener)

    def _establish(self, user: Dict[str, Any]) -> None:
        user = {key: value for key, value in user.items() if key != "password"}
        self._user = user
        self.storage.set_item(SESSION_KEY, json.dumps(user))
        logger.info("Session established for user %s", user["id"])
        self._notify()

    def login(self, email: str, password: str) -> bool:
        """Authenticate with email and password; returns False on any failure."""
        try:
            user = self.api.login(email, password)
        except JobBoardError as e:
            logger.error("Error during login: %s", e)
            return False

        if not user:
            return False

        self._establish(user)
        return True

    def signup(self, name: str, email: str, password: str, dob: str) -> bool:
        """Register and log in; returns False when the email is taken or the request fails."""
        try:
            user = self.api.signup(name, email, password, dob)
        except ConflictError:
            logger.info("Signup rejected, email already registered")
            return False
        except JobBoardError as e:
            logger.error("Error during signup: %s", e)
            return False

        self._establish(user)
        return True

    def logout(self) -> None:
        """Drop the identity, its session marker, and tell listeners to discard user state."""
        self._user = None
        self.storage.remove_item(SESSION_KEY)
        self._notify()

    def restore_session(self) -> bool:
        """Re-establish a session persisted earlier in this browsing session.

        Only the first call can restore anything. A marker that does not parse
        into an identity is discarded and the client stays unauthenticated.
        """
        if self._restored:
            return self.is_authenticated
        self._restored = True

        stored = self.storage.get_item(SESSION_KEY)
        if not stored:
            return False

        try:
            user = json.loads(stored)
            if not isinstance(user, dict) or not isinstance(user.get("id"), str) or not user["id"]:
                raise ValueError("session marker has no user id")
        except ValueError as e:
            logger.error("Error parsing stored user: %s", e)
            self.storage.remove_item(SESSION_KEY)
            return False

        self._establish(user)
        return True
