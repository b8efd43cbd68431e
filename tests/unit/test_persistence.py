"""
Unit tests for session credential persistence backends.
"""

import json
import os
import stat

import pytest

from news_alerts.domains.session.persistence import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    TOKEN_KEY,
    USER_KEY
)
from news_alerts.domains.session.store import SessionStore
from news_alerts.shared.models.auth import User


@pytest.mark.unit
class TestInMemoryStore:

    def test_get_set_delete(self):
        store = InMemoryKeyValueStore()
        store.set(TOKEN_KEY, "abc")

        assert store.get(TOKEN_KEY) == "abc"
        store.delete(TOKEN_KEY)
        assert store.get(TOKEN_KEY) is None

    def test_delete_missing_key(self):
        """Test deleting an absent key is a no-op"""
        InMemoryKeyValueStore().delete(USER_KEY)


@pytest.mark.unit
class TestJsonFileStore:
    """Test the on-disk store used between process restarts"""

    def test_missing_file_reads_empty(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "nested" / "session.json")

        assert store.get(TOKEN_KEY) is None

    def test_roundtrip_across_instances(self, tmp_path):
        """Test values survive a new store instance over the same file"""
        path = tmp_path / "session.json"
        JsonFileKeyValueStore(path).set(TOKEN_KEY, "abc")

        assert JsonFileKeyValueStore(path).get(TOKEN_KEY) == "abc"
        assert json.loads(path.read_text()) == {TOKEN_KEY: "abc"}

    def test_delete_keeps_other_keys(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "session.json")
        store.set(TOKEN_KEY, "abc")
        store.set(USER_KEY, "{}")

        store.delete(TOKEN_KEY)

        assert store.get(TOKEN_KEY) is None
        assert store.get(USER_KEY) == "{}"

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")
    def test_file_is_private(self, tmp_path):
        path = tmp_path / "session.json"
        JsonFileKeyValueStore(path).set(TOKEN_KEY, "abc")

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_unreadable_file_treated_as_empty(self, tmp_path, content):
        path = tmp_path / "session.json"
        path.write_text(content)

        assert JsonFileKeyValueStore(path).get(TOKEN_KEY) is None

    def test_no_temp_files_left(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "session.json")
        store.set(TOKEN_KEY, "abc")
        store.delete(TOKEN_KEY)

        assert [p.name for p in tmp_path.iterdir()] == ["session.json"]

    def test_session_survives_restart(self, tmp_path):
        """Test a session set by one store is resolved by the next"""
        path = tmp_path / "session.json"
        first = SessionStore(JsonFileKeyValueStore(path))
        first.resolve_initial_session()
        first.set_session(User(id=1, email="a@b.c"), "tok")

        second = SessionStore(JsonFileKeyValueStore(path))

        assert second.resolve_initial_session().is_authenticated
        assert second.user.email == "a@b.c"
