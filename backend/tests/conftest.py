"""
Pytest configuration and fixtures
"""
import sys
from pathlib import Path

import pytest

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from fastapi.testclient import TestClient

from contact_manager.core.config import Settings
from contact_manager.core.database import Database
from contact_manager.main import create_app


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's .env and environment"""
    values = dict(
        app_env="test",
        database_url="sqlite://",
        log_format="text",
        log_level="WARNING",
        log_file_enabled=False,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="function")
def settings() -> Settings:
    return make_settings()


@pytest.fixture(scope="function")
def database(settings):
    """In-memory database with the contacts table created"""
    database = Database(settings).init()
    database.create_all()
    try:
        yield database
    finally:
        database.dispose()


@pytest.fixture(scope="function")
def db(database):
    """Create a database session for testing"""
    session = database.session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def app(settings, database):
    return create_app(settings, database=database)


@pytest.fixture(scope="function")
def client(app):
    """Test client with the application lifespan running"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def bram():
    """Form payload as the browser form would send it"""
    return {
        "firstName": "Bram",
        "lastName": "Stoker",
        "email": "bram@example.com",
        "zipcode": "",
        "isAVampire": "true",
        "age": "160",
    }


@pytest.fixture
def settings_factory():
    """Build isolated settings with overrides"""
    return make_settings
