"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the blog. Controllers are
intentionally thin: they read the session, parse form posts into
schemas, delegate to services and return a logical outcome from
`blog.views` (a named view with its data, or a redirect).

Endpoints implemented:
- GET  /
- GET  /board/save-form
- POST /board/save
- GET  /board/{id}
- GET  /board/{id}/update-form
- POST /board/{id}/update-form
- POST /board/{id}/delete
- GET  /join-form
- POST /join
- GET  /login-form
- POST /login
- GET  /logout
- GET  /user/update-form
- POST /user/update
- GET  /health
"""

from fastapi import FastAPI, Depends, Form, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlmodel import Session
from typing import Optional
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from . import services
from .auth import get_principal, get_session_context, is_owner, set_session_cookie
from .config import settings
from .errors import AuthenticationRequired, BlogError, ValidationFailed
from .schemas import BoardListOut, BoardOut, BoardSaveIn, BoardUpdateIn, JoinIn, LoginIn, UserOut, UserUpdateIn
from .sessions import Principal, SessionContext
from .views import Render, RequireLogin, ShowDetail, ShowList, ShowUpdateForm, to_response

app = FastAPI(title="Blog API")
logger = logging.getLogger("blog.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
            ensure_ascii=True,
        ),
    )
    return response


@app.exception_handler(BlogError)
async def blog_error_handler(request: Request, exc: BlogError):
    """Map domain errors to a JSON body carrying the error kind."""
    content = {"error": exc.kind, "detail": exc.detail}
    if isinstance(exc, AuthenticationRequired):
        content["redirect"] = RequireLogin().url
    logger.info("%s %s -> %s", request.method, request.url.path, exc.kind)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed path or query values are reported like any other validation failure."""
    return await blog_error_handler(request, ValidationFailed(_describe(exc.errors())))


def _describe(errors) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ()) if p != 'body')}: {e.get('msg')}" for e in errors
    )


def _parse(schema, **fields):
    """Validate form fields into `schema`, raising `ValidationFailed` on error."""
    try:
        return schema(**fields)
    except ValidationError as e:
        raise ValidationFailed(_describe(e.errors()))


def _board_view(board) -> dict:
    return BoardOut.model_validate(board).model_dump()


# ---------------------------------------------------------------------------
# Boards
# ---------------------------------------------------------------------------


@app.get('/')
def index(db: Session = Depends(get_session)):
    """List every board, newest first."""
    boards = services.BoardService(db).list_all()
    board_list = BoardListOut.model_validate({'boardList': boards}, from_attributes=True)
    return to_response(Render('index', board_list.model_dump()))


@app.get('/board/save-form')
def board_save_form(principal: Optional[Principal] = Depends(get_principal)):
    """Show the new post form to logged-in users."""
    services.require_principal(principal)
    return to_response(Render('board/save-form'))


@app.post('/board/save')
def board_save(
    title: str = Form(default=''),
    content: str = Form(default=''),
    db: Session = Depends(get_session),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Create a post owned by the caller, then go back to the list."""
    services.require_principal(principal)
    logger.info("board save requested title=%s", title)
    req = _parse(BoardSaveIn, title=title, content=content)
    services.BoardService(db).create(req.title, req.content, principal)
    return to_response(ShowList())


@app.get('/board/{board_id}')
def board_detail(
    board_id: int,
    db: Session = Depends(get_session),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Show a single board. Anyone may read; `is_owner` drives edit buttons."""
    board = services.BoardService(db).get(board_id)
    acting_id = principal.id if principal else None
    return to_response(Render('board/detail', {
        'board': _board_view(board),
        'is_owner': is_owner(board, acting_id),
    }))


@app.get('/board/{board_id}/update-form')
def board_update_form(
    board_id: int,
    db: Session = Depends(get_session),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Show the edit form prefilled with the board, for its owner only."""
    board = services.BoardService(db).get_for_update(board_id, principal)
    return to_response(Render('board/update-form', {'board': _board_view(board)}))


@app.post('/board/{board_id}/update-form')
def board_update(
    board_id: int,
    title: str = Form(default=''),
    content: str = Form(default=''),
    db: Session = Depends(get_session),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Apply an edit from the owner and redirect to the detail page."""
    services.require_principal(principal)
    logger.info("board update requested id=%s title=%s", board_id, title)
    req = _parse(BoardUpdateIn, title=title, content=content)
    services.BoardService(db).update(board_id, req.title, req.content, principal)
    return to_response(ShowDetail(board_id))


@app.post('/board/{board_id}/delete')
def board_delete(
    board_id: int,
    db: Session = Depends(get_session),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Delete a board owned by the caller and return to the list."""
    services.BoardService(db).delete(board_id, principal)
    return to_response(ShowList())


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@app.get('/join-form')
def join_form():
    return to_response(Render('user/join-form'))


@app.post('/join')
def join(
    username: str = Form(default=''),
    password: str = Form(default=''),
    email: str = Form(default=''),
    db: Session = Depends(get_session),
):
    """Register a new account and send the user to the login form.

    Registration never logs the user in.
    """
    logger.info("join requested username=%s email=%s", username, email)
    req = _parse(JoinIn, username=username, password=password, email=email)
    services.AccountService(db).register(req.username, req.password, req.email)
    return to_response(RequireLogin())


@app.get('/login-form')
def login_form():
    return to_response(Render('user/login-form'))


@app.post('/login')
def login(
    username: str = Form(default=''),
    password: str = Form(default=''),
    db: Session = Depends(get_session),
    ctx: SessionContext = Depends(get_session_context),
):
    """Check credentials, bind the user to the session and go to the list."""
    logger.info("login requested username=%s", username)
    req = _parse(LoginIn, username=username, password=password)
    user = services.AccountService(db).authenticate(req.username, req.password)
    ctx.set_current_user(user, new_session=True)
    response = to_response(ShowList())
    set_session_cookie(response, ctx.token)
    return response


@app.get('/logout')
def logout(ctx: SessionContext = Depends(get_session_context)):
    """Forget the session server-side and drop the cookie."""
    ctx.clear()
    response = to_response(ShowList())
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


@app.get('/user/update-form')
def user_update_form(
    db: Session = Depends(get_session),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Show the caller's own profile for editing."""
    profile = services.AccountService(db).profile(principal)
    return to_response(Render('user/update-form', {'user': UserOut.model_validate(profile).model_dump()}))


@app.post('/user/update')
def user_update(
    password: str = Form(default=''),
    email: str = Form(default=''),
    db: Session = Depends(get_session),
    ctx: SessionContext = Depends(get_session_context),
):
    """Update the caller's password and email, then refresh the session."""
    principal = services.require_principal(ctx.current_user())
    logger.info("profile update requested user_id=%s", principal.id)
    req = _parse(UserUpdateIn, password=password, email=email)
    user = services.AccountService(db).update_profile(principal, req.password, req.email)
    ctx.set_current_user(user)
    return to_response(ShowUpdateForm())


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
