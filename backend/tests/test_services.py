import pytest
from sqlalchemy.exc import IntegrityError

from blog import services
from blog.errors import AuthenticationRequired, Conflict, Forbidden, InvalidCredentials, NotFound
from blog.sessions import Principal


def _principal(user):
    return Principal.from_user(user)


@pytest.fixture()
def accounts(db):
    return services.AccountService(db)


@pytest.fixture()
def boards(db):
    return services.BoardService(db)


@pytest.fixture()
def alice(accounts):
    return accounts.register("alice", "pw1", "a@x.com")


@pytest.fixture()
def bob(accounts):
    return accounts.register("bob", "pw2", "b@x.com")


def test_alice_scenario(accounts, boards, db):
    alice = accounts.register("alice", "pw1", "a@x.com")
    assert alice.id == 1
    board = boards.create("Hello", "World", _principal(alice))
    assert board.id == 1
    assert board.user_id == 1

    with pytest.raises(Forbidden):
        boards.update(1, "Hi", "World2", Principal(id=2, username="mallory"))
    db.expire_all()
    unchanged = boards.get(1)
    assert (unchanged.title, unchanged.content) == ("Hello", "World")

    boards.update(1, "Hi", "World2", _principal(alice))
    db.expire_all()
    updated = boards.get(1)
    assert (updated.title, updated.content) == ("Hi", "World2")


def test_register_duplicate_username_conflicts(accounts, alice):
    with pytest.raises(Conflict):
        accounts.register("alice", "other", "other@x.com")
    # usernames are case sensitive
    assert accounts.register("Alice", "pw", "c@x.com").id != alice.id


def test_register_conflict_from_unique_index(accounts, alice, monkeypatch):
    # simulate a concurrent registration committing between check and insert
    monkeypatch.setattr(accounts, "find_by_username", lambda _username: None)
    with pytest.raises(Conflict):
        accounts.register("alice", "pw", "x@x.com")
    # the session is still usable after the rollback
    assert accounts.register("carol", "pw", "c@x.com").id is not None


def test_register_other_constraint_failures_are_not_conflicts(accounts):
    # a missing email violates NOT NULL, not the username index
    with pytest.raises(IntegrityError):
        accounts.register("dave", "pw", None)
    assert accounts.find_by_username("dave") is None


def test_find_by_username_absent_is_not_an_error(accounts, alice):
    assert accounts.find_by_username("nobody") is None
    assert accounts.find_by_username("alice").id == alice.id


@pytest.mark.parametrize("username,password", [
    ("alice", "wrong"),
    ("nobody", "pw1"),
    ("ALICE", "pw1"),
])
def test_authenticate_rejects_any_mismatch(accounts, alice, username, password):
    with pytest.raises(InvalidCredentials):
        accounts.authenticate(username, password)


def test_authenticate_returns_matching_user(accounts, alice):
    assert accounts.authenticate("alice", "pw1").id == alice.id


def test_update_profile_changes_own_record(accounts, alice, db):
    updated = accounts.update_profile(_principal(alice), "newpw", "new@x.com")
    assert updated.id == alice.id
    assert updated.username == "alice"
    db.expire_all()
    assert accounts.authenticate("alice", "newpw").email == "new@x.com"
    with pytest.raises(InvalidCredentials):
        accounts.authenticate("alice", "pw1")


def test_update_profile_requires_login(accounts):
    with pytest.raises(AuthenticationRequired):
        accounts.update_profile(None, "pw", "x@x.com")
    with pytest.raises(AuthenticationRequired):
        accounts.profile(None)


def test_get_unknown_user_is_not_found(accounts):
    with pytest.raises(NotFound):
        accounts.get(999)


def test_create_requires_login(boards):
    with pytest.raises(AuthenticationRequired):
        boards.create("t", "c", None)


def test_titles_need_not_be_unique(boards, alice):
    first = boards.create("same", "a", _principal(alice))
    second = boards.create("same", "b", _principal(alice))
    assert first.id != second.id


def test_get_missing_board_is_not_found(boards):
    with pytest.raises(NotFound):
        boards.get(42)


def test_list_all_is_newest_first(boards, alice, bob):
    b1 = boards.create("one", "1", _principal(alice))
    b2 = boards.create("two", "2", _principal(bob))
    b3 = boards.create("three", "3", _principal(alice))
    assert [b.id for b in boards.list_all()] == [b3.id, b2.id, b1.id]


def test_update_is_idempotent_and_keeps_owner(boards, alice, db):
    board = boards.create("t", "c", _principal(alice))
    for _ in range(2):
        boards.update(board.id, "t2", "c2", _principal(alice))
        db.expire_all()
        again = boards.get(board.id)
        assert (again.id, again.user_id, again.title, again.content) == (board.id, alice.id, "t2", "c2")


def test_non_owner_cannot_update_or_delete(boards, alice, bob, db):
    board = boards.create("t", "c", _principal(alice))
    with pytest.raises(Forbidden):
        boards.update(board.id, "x", "y", _principal(bob))
    with pytest.raises(Forbidden):
        boards.delete(board.id, _principal(bob))
    with pytest.raises(Forbidden):
        boards.get_for_update(board.id, _principal(bob))
    db.expire_all()
    kept = boards.get(board.id)
    assert (kept.title, kept.content, kept.user_id) == ("t", "c", alice.id)


def test_anonymous_mutations_require_login(boards, alice):
    board = boards.create("t", "c", _principal(alice))
    with pytest.raises(AuthenticationRequired):
        boards.update(board.id, "x", "y", None)
    with pytest.raises(AuthenticationRequired):
        boards.delete(board.id, None)
    # login is checked before existence
    with pytest.raises(AuthenticationRequired):
        boards.delete(999, None)


def test_mutating_missing_board_is_not_found(boards, alice):
    with pytest.raises(NotFound):
        boards.update(999, "x", "y", _principal(alice))
    with pytest.raises(NotFound):
        boards.delete(999, _principal(alice))


def test_delete_then_get_is_not_found(boards, alice):
    board = boards.create("t", "c", _principal(alice))
    boards.delete(board.id, _principal(alice))
    with pytest.raises(NotFound):
        boards.get(board.id)
    with pytest.raises(NotFound):
        boards.delete(board.id, _principal(alice))
