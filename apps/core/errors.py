"""
Error taxonomy shared by all API routers.

Services raise these; the NinjaAPI instance in config.urls maps them to
HTTP responses of the form {"error": "<message>"}.
"""
import logging

from django.http import HttpRequest
from ninja import NinjaAPI
from ninja.errors import ValidationError as SchemaValidationError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for errors that carry their own HTTP status."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(APIError):
    """Missing, empty or malformed input."""
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(APIError):
    """No session, or the session cookie could not be read."""
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(APIError):
    """Resource absent or owned by someone else."""
    status_code = 404
    default_message = "Not found"


class ConflictError(APIError):
    status_code = 409
    default_message = "Conflict"


class InternalError(APIError):
    status_code = 500


def register_exception_handlers(api: NinjaAPI) -> None:
    """Install the boundary mapping from exceptions to JSON error bodies."""

    @api.exception_handler(APIError)
    def handle_api_error(request: HttpRequest, exc: APIError):
        return api.create_response(request, {"error": exc.message}, status=exc.status_code)

    @api.exception_handler(SchemaValidationError)
    def handle_schema_error(request: HttpRequest, exc: SchemaValidationError):
        return api.create_response(
            request,
            {"error": "Invalid request", "details": exc.errors},
            status=400,
        )

    @api.exception_handler(Exception)
    def handle_unexpected(request: HttpRequest, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.path}: {exc}")
        return api.create_response(request, {"error": "Internal server error"}, status=500)
