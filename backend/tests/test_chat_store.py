import pytest
from sqlalchemy import event

from companion.core.errors import NotFoundError, PersistenceError
from companion.services.chat_store import ChatStore
from companion.services.types import Mode, Mood, Role


def _fill(store: ChatStore, session_id: str, n: int) -> list[int]:
    store.create_session(session_id, "t")
    return [
        store.save_turn(session_id, Role.USER if i % 2 == 0 else Role.ASSISTANT, f"m{i}")
        for i in range(n)
    ]


class TestSessions:
    def test_create_is_insert_or_ignore(self, store):
        assert store.create_session("s1", "First title") is True
        assert store.create_session("s1", "Other title") is False
        assert store.get_session("s1")["title"] == "First title"

    def test_get_unknown_session(self, store):
        assert store.get_session("nope") is None

    def test_list_orders_by_most_recent_update(self, store):
        store.create_session("a", "A")
        store.create_session("b", "B")
        store.create_session("c", "C")
        store.save_turn("a", Role.USER, "bump a")
        assert [s["id"] for s in store.list_sessions()] == ["a", "c", "b"]

    def test_message_count_is_live(self, store):
        _fill(store, "s1", 3)
        store.create_session("empty", "E")
        counts = {s["id"]: s["message_count"] for s in store.list_sessions()}
        assert counts == {"s1": 3, "empty": 0}

    def test_rename(self, store):
        store.create_session("s1", "Old")
        store.rename_session("s1", "New")
        assert store.get_session("s1")["title"] == "New"

    def test_rename_unknown_raises(self, store):
        with pytest.raises(NotFoundError):
            store.rename_session("missing", "x")

    def test_delete_cascades_to_turns(self, store):
        _fill(store, "s1", 4)
        store.delete_session("s1")
        assert store.get_session("s1") is None
        assert store.list_history("s1", 50) == []

    def test_delete_leaves_turns_to_the_database_cascade(self, store):
        _fill(store, "s1", 3)
        statements: list[str] = []

        def record(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        event.listen(store._engine, "before_cursor_execute", record)
        try:
            store.delete_session("s1")
        finally:
            event.remove(store._engine, "before_cursor_execute", record)
        assert any(s.startswith("DELETE FROM sessions") for s in statements)
        assert not any("conversations" in s for s in statements)
        assert store.list_history("s1", 50) == []

    def test_delete_unknown_raises(self, store):
        with pytest.raises(NotFoundError):
            store.delete_session("missing")

    def test_touch_refreshes_updated_at(self, store):
        store.create_session("s1", "t")
        before = store.get_session("s1")["updated_at"]
        store.touch_session("s1")
        assert store.get_session("s1")["updated_at"] > before


class TestTurns:
    def test_save_returns_increasing_ids(self, store):
        ids = _fill(store, "s1", 3)
        assert ids == sorted(ids)
        assert len(set(ids)) == 3

    def test_save_records_labels(self, store):
        store.create_session("s1", "t")
        store.save_turn("s1", Role.USER, "hi", Mood.HAPPY, Mode.CODE)
        (turn,) = store.list_history("s1", 10)
        assert turn["role"] == "user"
        assert turn["mood"] == "happy"
        assert turn["mode"] == "code"
        assert turn["session_id"] == "s1"
        assert turn["timestamp"]

    def test_save_to_unknown_session_raises(self, store):
        with pytest.raises(NotFoundError):
            store.save_turn("missing", Role.USER, "hello")

    def test_save_touches_session(self, store):
        store.create_session("s1", "t")
        before = store.get_session("s1")["updated_at"]
        store.save_turn("s1", Role.USER, "hello")
        assert store.get_session("s1")["updated_at"] > before

    def test_history_is_oldest_first_and_limited(self, store):
        _fill(store, "s1", 7)
        history = store.list_history("s1", 3)
        assert [t["content"] for t in history] == ["m4", "m5", "m6"]
        assert len(store.list_history("s1", 100)) == 7

    def test_history_round_trip_position(self, store):
        _fill(store, "s1", 2)
        new_id = store.save_turn("s1", Role.USER, "latest")
        history = store.list_history("s1", 10)
        assert history[-1]["id"] == new_id
        assert [t["content"] for t in history] == ["m0", "m1", "latest"]

    def test_history_is_per_session(self, store):
        _fill(store, "s1", 2)
        _fill(store, "s2", 1)
        assert [t["content"] for t in store.list_history("s2", 10)] == ["m0"]

    def test_non_positive_limit(self, store):
        _fill(store, "s1", 2)
        assert store.list_history("s1", 0) == []


class TestLifecycle:
    def test_closed_store_raises_persistence_error(self, tmp_path):
        store = ChatStore(f"sqlite:///{tmp_path / 'closed.db'}")
        with pytest.raises(PersistenceError):
            store.list_sessions()

    def test_context_manager_opens_and_closes(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'nested' / 'dir' / 'ctx.db'}"
        with ChatStore(url) as store:
            assert store.is_open
            store.create_session("s1", "t")
        assert not store.is_open
        # data survives reopening
        with ChatStore(url) as store:
            assert store.get_session("s1")["title"] == "t"
