"""
Session cookie handling.

The session is carried entirely by the client in an httpOnly cookie named
"session". Its value is an HS256-signed JWT with the claims
{userId, email, name, iat, exp}; nothing is stored server-side.

Handlers never touch the cookie jar directly. They ask get_session_store()
for a SessionStore and thread the request/response through it.
"""
import os
import jwt
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.utils.module_loading import import_string


JWT_ALGORITHM = 'HS256'


@dataclass(frozen=True)
class SessionData:
    user_id: str
    email: str
    name: Optional[str] = None

    def to_claims(self) -> dict:
        return {
            'userId': self.user_id,
            'email': self.email,
            'name': self.name,
        }

    @classmethod
    def from_claims(cls, claims: dict) -> Optional["SessionData"]:
        """Build from decoded claims; None when required keys are missing."""
        user_id = claims.get('userId')
        email = claims.get('email')
        if not isinstance(user_id, str) or not isinstance(email, str) or not user_id or not email:
            return None
        name = claims.get('name')
        if name is not None and not isinstance(name, str):
            return None
        return cls(user_id=user_id, email=email, name=name)


def is_production() -> bool:
    """Check if running in production (Lambda or DEBUG=False) unless overridden."""
    configured = getattr(settings, 'SESSION_COOKIE_PRODUCTION', None)
    if configured is not None:
        return bool(configured)
    return bool(os.getenv('AWS_LAMBDA_FUNCTION_NAME')) or not settings.DEBUG


class SessionStore:
    """
    Issue, read and revoke the session cookie.

    Production: Secure, SameSite=Lax
    Development: Not secure (localhost), SameSite=Lax
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        cookie_name: Optional[str] = None,
        max_age: Optional[timedelta] = None,
        secure: Optional[bool] = None,
    ):
        self.secret = secret or settings.SESSION_JWT_SECRET
        self.cookie_name = cookie_name or settings.SESSION_COOKIE_NAME_APP
        self.max_age = max_age or timedelta(days=settings.SESSION_MAX_AGE_DAYS)
        self.secure = is_production() if secure is None else secure

    def cookie_settings(self) -> dict:
        return {
            'max_age': int(self.max_age.total_seconds()),
            'httponly': True,
            'secure': self.secure,
            'samesite': 'Lax',
            'path': '/',
        }

    def encode(self, data: SessionData) -> str:
        now = datetime.now(timezone.utc)
        claims = data.to_claims()
        claims['iat'] = now
        claims['exp'] = now + self.max_age
        return jwt.encode(claims, self.secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: str) -> Optional[SessionData]:
        """Decode a cookie value; malformed, tampered or expired yields None."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None
        return SessionData.from_claims(claims)

    def issue(self, response: HttpResponse, data: SessionData) -> HttpResponse:
        response.set_cookie(self.cookie_name, self.encode(data), **self.cookie_settings())
        return response

    def read(self, request: HttpRequest) -> Optional[SessionData]:
        token = request.COOKIES.get(self.cookie_name)
        if not token:
            return None
        return self.decode(token)

    def revoke(self, response: HttpResponse) -> HttpResponse:
        response.delete_cookie(self.cookie_name, path='/', samesite='Lax')
        return response


def get_session_store() -> SessionStore:
    """Instantiate the store named by settings.SESSION_STORE_CLASS."""
    store_class = import_string(settings.SESSION_STORE_CLASS)
    return store_class()
