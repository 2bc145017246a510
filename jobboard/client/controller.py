"""Top-level client controller wiring the session and user data together."""

from __future__ import annotations

from concurrent.futures import Executor
from typing import Optional

from jobboard.client.api import JobBoardApi
from jobboard.client.session_manager import SessionManager
from jobboard.client.session_storage import SessionStorage
from jobboard.client.transport import ApiTransport
from jobboard.client.user_data import UserStateSynchronizer


class JobBoardClient:
    """Owns one client context: its session cache, session and user data."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session_file: Optional[str] = None,
        transport: Optional[ApiTransport] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self.api = JobBoardApi(transport or ApiTransport(base_url))
        self.storage = SessionStorage(session_file)
        self.session = SessionManager(self.api, self.storage)
        self.user_data = UserStateSynchronizer(self.api, self.session, executor)

    def start(self) -> bool:
        """Restore the session left by an earlier client in this browsing session."""
        return self.session.restore_session()

    def close(self, end_browsing_session: bool = False) -> None:
        """Finish outstanding saves; optionally forget the persisted session too."""
        self.user_data.close()
        if end_browsing_session:
            self.storage.clear()
