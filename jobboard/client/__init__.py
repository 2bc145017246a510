"""Client-side session and user data synchronization."""

from .api import JobBoardApi
from .controller import JobBoardClient
from .session_manager import SessionManager
from .session_storage import SessionStorage
from .transport import ApiTransport
from .user_data import UserStateSynchronizer

__all__ = [
    "ApiTransport",
    "JobBoardApi",
    "JobBoardClient",
    "SessionManager",
    "SessionStorage",
    "UserStateSynchronizer",
]
