import pytest

from todo_dashboard.models import Role, User
from todo_dashboard.session_store import MemorySessionStore, SqlSessionStore


USER = User(id="u1", email="alice@x.com", name="Alice", role=Role.ADMIN)


@pytest.fixture(params=["memory", "sql"])
def any_store(request, tmp_path):
    if request.param == "memory":
        yield MemorySessionStore()
    else:
        store = SqlSessionStore(f"sqlite:///{(tmp_path / 'session.db').as_posix()}")
        yield store
        store.dispose()


def test_store_round_trip_and_clear(any_store):
    assert any_store.get_token() is None
    assert any_store.get_user() is None
    any_store.set_token("tok")
    any_store.set_user(USER)
    any_store.set_token("tok-2")
    assert any_store.get_token() == "tok-2"
    assert any_store.get_user() == USER
    any_store.clear()
    assert any_store.get_token() is None
    assert any_store.get_user() is None


def test_memory_store_uses_backing_mapping():
    backing = {}
    store = MemorySessionStore(backing)
    store.set_token("abc")
    assert backing["todo_dashboard.token"] == "abc"


def test_corrupt_user_profile_is_ignored():
    backing = {"todo_dashboard.user": "{not json"}
    assert MemorySessionStore(backing).get_user() is None


def test_sql_store_survives_reopen(tmp_path):
    url = f"sqlite:///{(tmp_path / 'session.db').as_posix()}"
    first = SqlSessionStore(url)
    first.set_token("persisted")
    first.dispose()
    second = SqlSessionStore(url)
    assert second.get_token() == "persisted"
    second.dispose()
