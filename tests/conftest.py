# This project was developed with assistance from AI tools.
"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock

import pytest
from db import get_db
from fastapi.testclient import TestClient

from factories import make_loan, make_matrix
from pricing_api.main import app


@pytest.fixture
def matrix():
    return make_matrix()


@pytest.fixture
def loan():
    return make_loan()


@pytest.fixture
def db_session():
    """Stand-in AsyncSession; tests configure execute() as needed."""
    return AsyncMock()


@pytest.fixture
def client(db_session):
    """TestClient with the database dependency replaced by ``db_session``."""

    async def fake_db():
        yield db_session

    app.dependency_overrides[get_db] = fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
