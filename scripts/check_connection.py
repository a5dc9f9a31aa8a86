"""
Check connectivity to the configured database and report its contents.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kpi_portal.config import DATABASE_PATH, USE_POSTGRES
from kpi_portal.database import get_db


def check_connection():
    backend = "PostgreSQL" if USE_POSTGRES else f"SQLite ({DATABASE_PATH})"
    print(f"Connecting to {backend}...")
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS n FROM objectives")
            objectives = cursor.fetchone()["n"]
            cursor.execute("SELECT COUNT(*) AS n FROM objective_values")
            values = cursor.fetchone()["n"]
    except Exception as e:
        print(f"Connection failed: {e}")
        return False

    print("Connection OK")
    print(f"  objectives: {objectives}")
    print(f"  objective_values: {values}")
    return True


if __name__ == "__main__":
    sys.exit(0 if check_connection() else 1)
