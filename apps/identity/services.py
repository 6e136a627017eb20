"""Services for Identity app."""
import logging
from typing import Optional, Tuple

from django.db import IntegrityError, transaction

from apps.core.errors import AuthenticationError, ConflictError, ValidationError
from .models import User
from .dtos import UserDTO
from .passwords import burn_password_check, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def normalize_email(email: str) -> str:
    return User.objects.normalize_email(email.strip())


def to_user_dto(user: User) -> UserDTO:
    return UserDTO(id=user.id, email=user.email, name=user.name)


def find_user_by_email(email: str) -> Optional[User]:
    try:
        return User.objects.get(email=normalize_email(email))
    except User.DoesNotExist:
        return None


def create_user(email: str, password: str, name: Optional[str]) -> UserDTO:
    """
    Create a user with a hashed password.
    Raises ConflictError when the email is already registered.
    """
    email = normalize_email(email)
    if User.objects.filter(email=email).exists():
        raise ConflictError("User already exists")

    try:
        with transaction.atomic():
            user = User.objects.create_user(email=email, password=password, name=name)
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        raise ConflictError("User already exists")
    return to_user_dto(user)


def register_user(
    email: Optional[str],
    password: Optional[str],
    name: Optional[str],
) -> Tuple[UserDTO, int]:
    """
    Validate, create the account and seed its starter todos.

    Returns the new user and the number of seeded todos. Seeding is
    best-effort and never fails the registration.
    """
    if not email or not email.strip() or not password or not name or not name.strip():
        raise ValidationError("Email, password and name are required")

    user = create_user(email, password, name.strip())
    logger.info(f"Registered user {user.id}")

    from apps.todos.seed import seed_initial_todos
    seeded = seed_initial_todos(user.id)
    return user, seeded


def authenticate_user(email: Optional[str], password: Optional[str]) -> UserDTO:
    """
    Check credentials. Unknown email and wrong password raise the same
    AuthenticationError so the response cannot be used to enumerate accounts.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = find_user_by_email(email)
    if user is None:
        burn_password_check(password)
        logger.warning("Login failed: unknown email")
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not user.is_active or not verify_password(password, user.password):
        logger.warning(f"Login failed for user {user.id}")
        raise AuthenticationError(INVALID_CREDENTIALS)

    return to_user_dto(user)
