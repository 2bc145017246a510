"""In-memory data stores used when MongoDB is disabled."""

import threading
from typing import Any, Dict

# Registered identities keyed by user id.
users: Dict[str, Dict[str, Any]] = {}

# Applied/bookmarked job ids keyed by user id.
user_data: Dict[str, Dict[str, Any]] = {}

# Guards read-modify-write sequences on the dicts above.
lock = threading.RLock()


def reset() -> None:
    """Drop every in-memory record."""
    with lock:
        users.clear()
        user_data.clear()
