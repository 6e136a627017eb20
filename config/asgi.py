"""
ASGI entry point for the todo tracker.

`application` serves Uvicorn or Daphne directly. `lambda_handler` exposes
the same app to API Gateway through Mangum (the `lambda` extra).
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

from django.core.asgi import get_asgi_application

application = get_asgi_application()

_mangum_handler = None


def build_mangum_handler():
    """Wrap `application` for Lambda. Fails with an install hint without mangum."""
    try:
        from mangum import Mangum
    except ImportError as exc:
        raise ImportError(
            "Serving the todo API on Lambda needs mangum: "
            "pip install 'tasktrack[lambda]'"
        ) from exc
    return Mangum(application, lifespan="off")


def lambda_handler(event, context):
    """API Gateway event -> todo API response. The Mangum wrapper is built once per container."""
    global _mangum_handler
    if _mangum_handler is None:
        _mangum_handler = build_mangum_handler()
    return _mangum_handler(event, context)
