import pytest


@pytest.fixture(autouse=True)
def fast_password_hashing(settings):
    """bcrypt at cost 12 makes every registration/login slow; tests use the minimum."""
    settings.PASSWORD_BCRYPT_ROUNDS = 4
