"""Local copy of the applied and bookmarked job ids for the signed-in user.

The synchronizer follows the session manager. On login it loads the user's
record from the API in the background, and on logout it drops its local
state. Every mutation made after the load completes is pushed to the API as
the full current record. Saves run on a single worker, so they reach the
server in mutation order. A failed save is logged and the local change stays.
If the load fails, mutations are refused until :meth:`reload` succeeds, so a
blank local copy never overwrites the stored record.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional, Set

from jobboard.client.api import JobBoardApi
from jobboard.client.session_manager import SessionManager

logger = logging.getLogger(__name__)


class UserStateSynchronizer:
    """Applied/bookmarked job ids for the authenticated identity only."""

    def __init__(
        self,
        api: JobBoardApi,
        session: SessionManager,
        executor: Optional[Executor] = None,
    ) -> None:
        self.api = api
        self.session = session
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="user-data")
        self._lock = threading.Lock()
        self._pending: Set[Future] = set()
        self._listeners: List[Callable[[], None]] = []

        self._user_id: Optional[str] = None
        self._applied: List[int] = []
        self._bookmarked: List[int] = []
        self._loading = False
        # Set when the last load failed; saving then would overwrite the stored record.
        self._load_failed = False
        # Bumped on every session transition; stale loads compare against it.
        self._generation = 0

        self._unsubscribe = session.subscribe(self._on_session_change)
        if session.is_authenticated:
            self._on_session_change(session.user)

    @property
    def applied_job_ids(self) -> List[int]:
        with self._lock:
            return list(self._applied)

    @property
    def bookmarked_job_ids(self) -> List[int]:
        with self._lock:
            return list(self._bookmarked)

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def load_failed(self) -> bool:
        return self._load_failed

    def has_applied(self, job_id: int) -> bool:
        job_id = int(job_id)
        with self._lock:
            return job_id in self._applied

    def is_bookmarked(self, job_id: int) -> bool:
        job_id = int(job_id)
        with self._lock:
            return job_id in self._bookmarked

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Call ``listener`` whenever the local job ids change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("User data listener %r failed", listener)

    def _submit(self, fn: Callable[..., Any], *args: Any) -> None:
        future = self._executor.submit(fn, *args)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard_pending)

    def _discard_pending(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _on_session_change(self, user: Optional[Dict[str, Any]]) -> None:
        if user is None:
            self.clear()
            return

        self._start_load(user["id"])

    def _start_load(self, user_id: str) -> None:
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._user_id = user_id
            self._applied = []
            self._bookmarked = []
            self._loading = True
            self._load_failed = False
        self._notify()
        self._submit(self._load, user_id, generation)

    def reload(self) -> bool:
        """Fetch the stored record again, e.g. after a failed load; False when signed out."""
        with self._lock:
            user_id = self._user_id
        if user_id is None:
            return False
        self._start_load(user_id)
        return True

    def _load(self, user_id: str, generation: int) -> None:
        applied: Optional[List[int]] = None
        bookmarked: Optional[List[int]] = None
        try:
            record = self.api.get_user_data(user_id)
            applied = [int(job_id) for job_id in record.get("appliedJobIds") or []]
            bookmarked = [int(job_id) for job_id in record.get("bookmarkedJobIds") or []]
        except Exception:
            logger.warning("Error fetching user data for %s", user_id, exc_info=True)

        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding superseded user data load for %s", user_id)
                return
            if applied is not None and bookmarked is not None:
                self._applied = applied
                self._bookmarked = bookmarked
            else:
                self._load_failed = True
            self._loading = False
        self._notify()

    def clear(self) -> None:
        """Drop the local state; the stored record is left untouched."""
        with self._lock:
            self._generation += 1
            self._user_id = None
            self._applied = []
            self._bookmarked = []
            self._loading = False
            self._load_failed = False
        self._notify()

    def _mutate(self, change: Callable[[], None]) -> bool:
        with self._lock:
            if self._user_id is None:
                return False
            if self._loading:
                logger.debug("Ignoring user data change while the initial load is running")
                return False
            if self._load_failed:
                logger.warning("Ignoring user data change until the stored record loads; call reload()")
                return False
            change()
            user_id = self._user_id
            applied = list(self._applied)
            bookmarked = list(self._bookmarked)
        self._notify()
        self._submit(self._save, user_id, applied, bookmarked)
        return True

    def _save(self, user_id: str, applied: List[int], bookmarked: List[int]) -> None:
        try:
            self.api.put_user_data(user_id, applied, bookmarked)
        except Exception:
            logger.warning("Error saving user data for %s", user_id, exc_info=True)

    def apply(self, job_id: int) -> bool:
        """Record an application. Duplicates are not filtered; check has_applied first."""
        job_id = int(job_id)
        return self._mutate(lambda: self._applied.append(job_id))

    def withdraw(self, job_id: int) -> bool:
        """Remove every occurrence of ``job_id`` from the applied jobs."""
        job_id = int(job_id)

        def change() -> None:
            self._applied = [applied for applied in self._applied if applied != job_id]

        return self._mutate(change)

    def toggle_bookmark(self, job_id: int) -> bool:
        """Bookmark ``job_id``, or remove the bookmark when it is already set."""
        job_id = int(job_id)

        def change() -> None:
            if job_id in self._bookmarked:
                self._bookmarked = [bookmarked for bookmarked in self._bookmarked if bookmarked != job_id]
            else:
                self._bookmarked.append(job_id)

        return self._mutate(change)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for the outstanding load and saves; returns False on timeout."""
        with self._lock:
            pending = list(self._pending)
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Stop following the session and finish outstanding saves."""
        self._unsubscribe()
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        else:
            self.flush()
