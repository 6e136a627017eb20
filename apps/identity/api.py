"""
Identity API endpoints.

Register, login, logout and "who am I". The session lives in an httpOnly
cookie managed by SessionStore; these handlers never read or write cookies
any other way.
"""
from django.http import HttpRequest, HttpResponse
from ninja import Router, Schema

from apps.core.errors import AuthenticationError
from .dtos import AuthOut, LoginIn, RegisterIn, RegisterOut, UserDTO, UserOut
from .services import authenticate_user, register_user
from .session import SessionData, SessionStore, get_session_store

router = Router(tags=["Auth"])


# =============================================================================
# Helper Functions
# =============================================================================

def require_session(request: HttpRequest, store: SessionStore | None = None) -> SessionData:
    """
    Require a valid session cookie. Raises 401 if absent or unreadable.
    """
    store = store or get_session_store()
    session = store.read(request)
    if session is None:
        raise AuthenticationError("Unauthorized")
    return session


def _user_out(user: UserDTO) -> UserOut:
    return UserOut(id=str(user.id), email=user.email, name=user.name)


def _session_for(user: UserDTO) -> SessionData:
    return SessionData(user_id=str(user.id), email=user.email, name=user.name)


def _json_response(payload: Schema) -> HttpResponse:
    return HttpResponse(payload.model_dump_json(), content_type='application/json')


# =============================================================================
# Auth Endpoints
# =============================================================================

@router.post("/register", response=RegisterOut, auth=None)
def register(request: HttpRequest, payload: RegisterIn):
    """
    Create an account, seed starter todos and start a session.
    """
    user, seeded = register_user(payload.email, payload.password, payload.name)

    response = _json_response(
        RegisterOut(success=True, user=_user_out(user), initialTodosCount=seeded)
    )
    get_session_store().issue(response, _session_for(user))
    return response


@router.post("/login", response=AuthOut, auth=None)
def login(request: HttpRequest, payload: LoginIn):
    """
    Check credentials and set the session cookie.
    """
    user = authenticate_user(payload.email, payload.password)

    response = _json_response(AuthOut(success=True, user=_user_out(user)))
    get_session_store().issue(response, _session_for(user))
    return response


@router.post("/logout", response=AuthOut, auth=None)
def logout(request: HttpRequest):
    """
    Clear the session cookie. Succeeds with or without a session.
    """
    response = _json_response(AuthOut(success=True, message="Logged out successfully"))
    get_session_store().revoke(response)
    return response


@router.get("/me", response=AuthOut, auth=None)
def me(request: HttpRequest):
    """
    Current user, rebuilt from the session payload.
    """
    session = require_session(request)
    return AuthOut(
        success=True,
        user=UserOut(id=session.user_id, email=session.email, name=session.name),
    )
