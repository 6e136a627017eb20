"""DTOs for Identity app."""
from dataclasses import dataclass
from uuid import UUID
from typing import Optional

from ninja import Schema


@dataclass(frozen=True)
class UserDTO:
    id: UUID
    email: str
    name: Optional[str]


class UserOut(Schema):
    id: str
    email: str
    name: Optional[str] = None


# Fields are optional so missing values reach the service layer and come
# back as 400 with a readable message instead of a schema error.
class RegisterIn(Schema):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginIn(Schema):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthOut(Schema):
    success: bool
    user: Optional[UserOut] = None
    message: Optional[str] = None


class RegisterOut(AuthOut):
    initialTodosCount: int = 0
