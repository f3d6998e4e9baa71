import pytest


@pytest.fixture(autouse=True)
def setup_db():
    """View-model tests are pure; they never touch the database."""
    yield
