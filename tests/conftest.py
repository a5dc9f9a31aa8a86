"""
Root conftest.py -- shared fixtures for all test levels.
"""
import os
import sys
import pytest

# Ensure kpi_portal is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Force SQLite for testing (never hit a production PostgreSQL)
os.environ["DATABASE_URL"] = ""
os.environ["CHAT_API_KEY"] = ""


@pytest.fixture(scope="session")
def app():
    """Create the FastAPI app instance for testing."""
    # Must import after env vars are set
    from kpi_portal.main import app as fastapi_app
    return fastapi_app


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point the database module at a fresh SQLite file with the schema created."""
    import kpi_portal.database as database_mod

    db_path = tmp_path / "kpi_test.db"
    monkeypatch.setattr(database_mod, "DATABASE_PATH", db_path)

    with database_mod.get_db() as conn:
        database_mod.init_database(conn)
    return db_path
