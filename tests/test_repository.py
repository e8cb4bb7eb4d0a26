import pytest

from userapi.db import DatabaseError
from userapi.repository import RepositoryError, UserNotFoundError, UserRepository
from userapi.users import User


class FakeConnection:
    """Returns queued results in order and records every query."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def query(self, query, *args):
        self.calls.append((query, args))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_user(user_id=0, email="john@example.com"):
    password = "password"
    return User(id=user_id, email=email, password=password)


NO_ROWS = DatabaseError("sql: no rows in result set")


def test_delete_deleted():
    conn = FakeConnection([(1, "john@example.com", "password")])
    repo = UserRepository(conn)
    repo.delete(make_user(1))
    assert conn.calls == [("DELETE FROM users WHERE id = 1", ())]


def test_delete_not_found():
    conn = FakeConnection(NO_ROWS)
    repo = UserRepository(conn)
    with pytest.raises(RepositoryError):
        repo.delete(make_user(1))


def test_get_by_id_found():
    conn = FakeConnection([(1, "john@example.com", "password")])
    repo = UserRepository(conn)
    user = repo.get_user_by_id("1")
    assert user == make_user(1)
    assert conn.calls == [
        ("SELECT id, email, password FROM users WHERE id = $1", ("1",))
    ]


@pytest.mark.parametrize("user_id", ["100", "-1", "abc"])
def test_get_by_id_query_error(user_id):
    conn = FakeConnection(NO_ROWS)
    repo = UserRepository(conn)
    with pytest.raises(RepositoryError) as info:
        repo.get_user_by_id(user_id)
    assert not isinstance(info.value, UserNotFoundError)
    assert str(info.value).startswith(f"error finding user with id = {user_id}")


def test_get_by_id_no_rows_is_not_found():
    repo = UserRepository(FakeConnection([]))
    with pytest.raises(UserNotFoundError, match="user not found"):
        repo.get_user_by_id("100")


def test_get_by_id_empty_id_does_not_query():
    conn = FakeConnection()
    repo = UserRepository(conn)
    with pytest.raises(RepositoryError, match="User ID is required"):
        repo.get_user_by_id("")
    assert conn.calls == []


def test_get_by_id_bad_row():
    repo = UserRepository(FakeConnection([("x", "john@example.com", "password")]))
    with pytest.raises(RepositoryError, match="error scanning user data"):
        repo.get_user_by_id("1")


def test_save_added_new_user():
    conn = FakeConnection([(1,)])
    repo = UserRepository(conn)
    user = make_user()
    assert repo.save(user) == 1
    assert user.id == 1
    assert conn.calls == [
        (
            "INSERT INTO users (email, password) VALUES ($1, $2) RETURNING id",
            ("john@example.com", "password"),
        )
    ]


def test_save_handles_duplicate_email():
    conn = FakeConnection([(1,)], NO_ROWS)
    repo = UserRepository(conn)
    user = make_user(email="existing@example.com")
    assert repo.save(user) == 1
    with pytest.raises(RepositoryError, match="error inserting new user"):
        repo.save(user)
    assert conn.responses == []
    assert len(conn.calls) == 2


def test_save_without_returned_id():
    repo = UserRepository(FakeConnection([]))
    with pytest.raises(RepositoryError, match="error inserting new user"):
        repo.save(make_user())


def test_save_bad_id():
    repo = UserRepository(FakeConnection([("abc",)]))
    with pytest.raises(RepositoryError, match="error scanning user ID"):
        repo.save(make_user())


def test_update_both_fields_in_order():
    conn = FakeConnection([], [])
    repo = UserRepository(conn)
    repo.update(make_user(5, email="new@example.com"))
    assert conn.calls == [
        ("UPDATE users SET email = $1 WHERE id = $2", ("new@example.com", 5)),
        ("UPDATE users SET password = $1 WHERE id = $2", ("password", 5)),
    ]


def test_update_skips_empty_fields():
    conn = FakeConnection([])
    repo = UserRepository(conn)
    repo.update(User(id=3, email="new@example.com"))
    assert conn.calls == [
        ("UPDATE users SET email = $1 WHERE id = $2", ("new@example.com", 3))
    ]


def test_update_error():
    repo = UserRepository(FakeConnection(DatabaseError("boom")))
    with pytest.raises(RepositoryError, match="error updating user email"):
        repo.update(make_user(1))


@pytest.mark.parametrize(
    "response, expected",
    [([(2,)], True), ([(0,)], False), ([], False), (NO_ROWS, False), ([("x",)], False)],
)
def test_exists(response, expected):
    conn = FakeConnection(response)
    repo = UserRepository(conn)
    assert repo.exists(make_user(7)) is expected
    assert conn.calls == [("SELECT COUNT() FROM users WHERE id = $1", (7,))]