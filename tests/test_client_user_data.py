"""Tests for keeping local applied/bookmarked job ids in sync with the API."""

from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jobboard.client import JobBoardClient  # noqa: E402
from jobboard.errors import TransportError  # noqa: E402
from jobboard.services import user_data_service  # noqa: E402


@pytest.fixture
def board(transport):
    client = JobBoardClient(transport=transport)
    yield client
    client.close()


def signed_in(board):
    assert board.session.signup("Ada", "ada@example.com", "secret", "1990-01-01")
    assert board.user_data.flush(timeout=5)
    return board.session.user["id"]


def test_apply_then_withdraw_is_persisted(board):
    user_id = signed_in(board)

    board.user_data.apply(42)
    board.user_data.withdraw(42)
    board.user_data.flush(timeout=5)

    assert 42 not in board.user_data.applied_job_ids
    assert 42 not in user_data_service.get_user_data(user_id)["appliedJobIds"]


def test_withdraw_removes_every_occurrence(board):
    user_id = signed_in(board)

    board.user_data.apply(5)
    board.user_data.apply(5)
    assert board.user_data.applied_job_ids == [5, 5]

    board.user_data.withdraw(5)
    board.user_data.flush(timeout=5)
    assert board.user_data.applied_job_ids == []
    assert user_data_service.get_user_data(user_id)["appliedJobIds"] == []


def test_toggle_bookmark_twice_restores_membership(board):
    user_id = signed_in(board)

    board.user_data.toggle_bookmark(7)
    assert board.user_data.is_bookmarked(7)
    board.user_data.toggle_bookmark(7)
    board.user_data.flush(timeout=5)

    assert not board.user_data.is_bookmarked(7)
    assert user_data_service.get_user_data(user_id)["bookmarkedJobIds"] == []


def test_every_mutation_pushes_full_record(board, transport):
    user_id = signed_in(board)

    board.user_data.apply(1)
    board.user_data.toggle_bookmark(9)
    board.user_data.flush(timeout=5)

    saves = [payload for method, path, payload in transport.requests if path == "/api/user-data" and method == "POST"]
    assert saves == [
        {"userId": user_id, "appliedJobIds": [1], "bookmarkedJobIds": []},
        {"userId": user_id, "appliedJobIds": [1], "bookmarkedJobIds": [9]},
    ]


def test_logout_clears_local_state_but_not_store(board):
    user_id = signed_in(board)
    board.user_data.apply(3)
    board.user_data.toggle_bookmark(4)
    board.user_data.flush(timeout=5)

    board.session.logout()
    assert board.user_data.applied_job_ids == []
    assert board.user_data.bookmarked_job_ids == []

    assert board.session.login("ada@example.com", "secret")
    board.user_data.flush(timeout=5)
    assert board.session.user["id"] == user_id
    assert board.user_data.applied_job_ids == [3]
    assert board.user_data.bookmarked_job_ids == [4]


def test_mutations_without_session_touch_nothing(board, transport, mongo_db):
    assert board.user_data.apply(1) is False
    assert board.user_data.withdraw(1) is False
    assert board.user_data.toggle_bookmark(1) is False
    board.user_data.flush(timeout=5)

    assert board.user_data.applied_job_ids == []
    assert transport.requests == []
    assert mongo_db.user_data.count_documents({}) == 0


def test_mutations_are_ignored_while_loading(transport):
    release = threading.Event()

    class SlowTransport:
        def get(self, path, params=None):
            release.wait(timeout=5)
            return transport.get(path, params)

        def post(self, path, json):
            return transport.post(path, json)

    client = JobBoardClient(transport=SlowTransport())
    try:
        assert client.session.signup("Ada", "ada@example.com", "secret", "1990-01-01")
        assert client.user_data.is_loading
        assert client.user_data.apply(1) is False

        release.set()
        client.user_data.flush(timeout=5)
        assert not client.user_data.is_loading
        assert client.user_data.apply(1) is True
    finally:
        release.set()
        client.close()


def test_load_superseded_by_logout_is_discarded(transport):
    release = threading.Event()
    user_data_service.put_user_data("stale-user", [99], [98])

    class SlowTransport:
        def get(self, path, params=None):
            release.wait(timeout=5)
            return transport.get(path, params)

        def post(self, path, json):
            return transport.post(path, json)

    client = JobBoardClient(transport=SlowTransport())
    try:
        client.session.storage.set_item("currentUser", '{"id": "stale-user"}')
        assert client.start()
        client.session.logout()

        release.set()
        client.user_data.flush(timeout=5)
        assert client.user_data.applied_job_ids == []
        assert client.user_data.bookmarked_job_ids == []
        assert not client.user_data.is_loading
    finally:
        release.set()
        client.close()


def test_failed_save_keeps_local_change(transport):
    class FailingSaves:
        def get(self, path, params=None):
            return transport.get(path, params)

        def post(self, path, json):
            if path == "/api/user-data":
                raise TransportError("connection reset")
            return transport.post(path, json)

    client = JobBoardClient(transport=FailingSaves())
    try:
        assert client.session.signup("Ada", "ada@example.com", "secret", "1990-01-01")
        client.user_data.flush(timeout=5)

        client.user_data.apply(11)
        assert client.user_data.flush(timeout=5)
        assert client.user_data.applied_job_ids == [11]
    finally:
        client.close()


def test_restored_session_loads_stored_record(transport, tmp_path):
    user_data_service.put_user_data("u1", [2], [3])
    session_file = tmp_path / "session.json"

    first = JobBoardClient(transport=transport, session_file=str(session_file))
    first.session.storage.set_item("currentUser", '{"id": "u1", "name": "Ada"}')
    first.close()

    second = JobBoardClient(transport=transport, session_file=str(session_file))
    try:
        assert second.start()
        second.user_data.flush(timeout=5)
        assert second.user_data.applied_job_ids == [2]
        assert second.user_data.bookmarked_job_ids == [3]
    finally:
        second.close(end_browsing_session=True)
    assert not session_file.exists()


def test_listeners_are_notified_of_changes(board):
    signed_in(board)
    calls = []
    board.user_data.subscribe(lambda: calls.append(board.user_data.applied_job_ids))

    board.user_data.apply(8)
    board.session.logout()

    assert calls == [[8], []]


def test_failed_load_blocks_mutations_until_reload(transport):
    user_data_service.put_user_data("u1", [1, 2, 3], [4, 5])
    outage = threading.Event()
    outage.set()

    class FlakyReads:
        def get(self, path, params=None):
            if outage.is_set():
                raise TransportError("connection reset")
            return transport.get(path, params)

        def post(self, path, json):
            return transport.post(path, json)

    client = JobBoardClient(transport=FlakyReads())
    try:
        client.session.storage.set_item("currentUser", '{"id": "u1"}')
        assert client.start()
        client.user_data.flush(timeout=5)

        assert client.user_data.load_failed
        assert client.user_data.apply(9) is False
        assert client.user_data.toggle_bookmark(4) is False
        client.user_data.flush(timeout=5)
        assert user_data_service.get_user_data("u1") == {
            "userId": "u1",
            "appliedJobIds": [1, 2, 3],
            "bookmarkedJobIds": [4, 5],
        }

        outage.clear()
        assert client.user_data.reload()
        client.user_data.flush(timeout=5)
        assert not client.user_data.load_failed
        assert client.user_data.apply(9) is True
        client.user_data.flush(timeout=5)
        assert user_data_service.get_user_data("u1")["appliedJobIds"] == [1, 2, 3, 9]
        assert user_data_service.get_user_data("u1")["bookmarkedJobIds"] == [4, 5]
    finally:
        client.close()


def test_reload_without_session_does_nothing(board):
    assert board.user_data.reload() is False
    assert board.user_data.flush(timeout=5)


def test_job_ids_are_normalized_to_integers(board):
    user_id = signed_in(board)

    board.user_data.apply("42")
    board.user_data.toggle_bookmark("7")
    assert board.user_data.applied_job_ids == [42]
    assert board.user_data.has_applied(42)
    assert board.user_data.has_applied("42")
    assert board.user_data.is_bookmarked("7")

    board.user_data.withdraw("42")
    board.user_data.flush(timeout=5)
    assert not board.user_data.has_applied(42)
    assert user_data_service.get_user_data(user_id) == {
        "userId": user_id,
        "appliedJobIds": [],
        "bookmarkedJobIds": [7],
    }
