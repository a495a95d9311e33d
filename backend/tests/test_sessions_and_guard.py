from blog.auth import is_owner
from blog.models import Board, User
from blog.sessions import Principal, SessionContext, SessionStore


def test_is_owner_compares_owner_id_only():
    board = Board(id=1, title="t", content="c", user_id=7)
    assert is_owner(board, 7) is True
    assert is_owner(board, 8) is False
    assert is_owner(board, None) is False


def test_anonymous_context_has_no_user_and_no_token():
    ctx = SessionContext(SessionStore())
    assert ctx.current_user() is None
    assert ctx.token is None
    # clearing an anonymous session is a no-op
    ctx.clear()
    assert ctx.current_user() is None


def test_login_then_logout_transitions():
    store = SessionStore()
    ctx = SessionContext(store)
    user = User(id=3, username="alice", password="pw1", email="a@x.com")
    principal = ctx.set_current_user(user)
    assert principal == Principal(id=3, username="alice", email="a@x.com")
    assert ctx.token
    # a later request carrying the same token sees the same user
    assert SessionContext(store, ctx.token).current_user() == principal
    ctx.clear()
    assert ctx.current_user() is None
    assert len(store) == 0


def test_refresh_keeps_token_and_replaces_payload():
    store = SessionStore()
    ctx = SessionContext(store)
    ctx.set_current_user(Principal(id=1, username="alice", email="old@x.com"))
    token = ctx.token
    ctx.set_current_user(User(id=1, username="alice", password="new", email="new@x.com"))
    assert ctx.token == token
    assert store.get(token).email == "new@x.com"


def test_sessions_are_isolated_by_token():
    store = SessionStore()
    a = SessionContext(store)
    b = SessionContext(store)
    a.set_current_user(Principal(id=1, username="alice"))
    b.set_current_user(Principal(id=2, username="bob"))
    assert a.token != b.token
    a.clear()
    assert b.current_user().username == "bob"
    assert SessionContext(store, "unknown-token").current_user() is None


def test_unknown_token_is_replaced_on_bind():
    store = SessionStore()
    ctx = SessionContext(store, "client-chosen")
    ctx.set_current_user(Principal(id=1, username="alice"))
    assert ctx.token != "client-chosen"
    assert store.get("client-chosen") is None
    assert store.get(ctx.token).username == "alice"


def test_new_session_rotates_a_known_token():
    store = SessionStore()
    ctx = SessionContext(store)
    ctx.set_current_user(Principal(id=1, username="alice"))
    old = ctx.token
    ctx.set_current_user(Principal(id=2, username="bob"), new_session=True)
    assert ctx.token != old
    assert store.get(old) is None
    assert len(store) == 1
