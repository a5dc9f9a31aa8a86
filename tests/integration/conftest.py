"""
Integration test conftest -- test database setup and FastAPI TestClient.
"""
import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

# Force SQLite for integration tests
os.environ["DATABASE_URL"] = ""
os.environ["CHAT_API_KEY"] = ""

from starlette.testclient import TestClient


@pytest.fixture
def client(app, temp_db):
    """TestClient on a fresh database per test."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def create_test_objective(temp_db):
    """Insert an objective (and optional {month: value} for 2025) straight into the DB."""
    from kpi_portal.database import create_objective, get_db, upsert_objective_value

    sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
    from __mocks__.fixtures import make_objective_payload

    def _create(monthly=None, year=2025, **overrides):
        with get_db() as conn:
            objective_id = create_objective(conn, make_objective_payload(**overrides))
            for month, value in (monthly or {}).items():
                upsert_objective_value(conn, objective_id, month, year, value)
        return objective_id

    return _create
