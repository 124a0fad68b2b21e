"""
Test configuration and fixtures for the link shortener.
This centralizes all test setup, making individual tests clean.
"""

import os

# Must be set before the application settings are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CACHE_BACKEND", "none")
os.environ.setdefault("API_KEY", "test-api-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from hop_service.cache.accessor import CacheAsideAccessor
from hop_service.cache.strategies import InMemoryCache
from hop_service.config import settings
from hop_service.database.connection import Base, get_db
from hop_service.dependencies import get_cache_accessor
from tests.fakes import StatementCounter

# Test database configuration
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    # Create tables
    Base.metadata.create_all(bind=engine)

    # Create session
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        # Cleanup
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def select_counter():
    """Count SELECT statements hitting the test database"""
    counter = StatementCounter()
    event.listen(engine, "before_cursor_execute", counter)
    try:
        yield counter
    finally:
        event.remove(engine, "before_cursor_execute", counter)


@pytest.fixture(scope="function")
def memory_cache():
    return InMemoryCache()


@pytest.fixture(scope="function")
def cache_accessor(memory_cache):
    return CacheAsideAccessor(memory_cache, timeout=1.0)


@pytest.fixture(scope="function")
def client(db_session, cache_accessor):
    """
    Create a test client with database and cache dependencies overridden.
    Requests carry the API key by default.
    """
    def override_get_db():
        yield db_session

    # Override the database and cache dependencies
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache_accessor] = lambda: cache_accessor

    # Create test client
    with TestClient(app, headers={settings.api_key_header: settings.api_key}) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def anonymous_client(client):
    """Test client sharing the overrides of `client` but sending no API key"""
    return TestClient(app)
