"""
Integration test fixtures
"""

import pytest
from fastapi.testclient import TestClient

from storefront.api.config import get_settings
from storefront.api.dependencies import get_db
from storefront.api.main import create_app


@pytest.fixture
def app(settings, session_factory):
    """Application wired to the in-memory database and temp upload dir."""
    app = create_app(use_lifespan=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers(token_for):
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {token_for(user)}"}

    return _headers
