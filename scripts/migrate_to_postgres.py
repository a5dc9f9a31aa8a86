"""
Copy objectives and monthly values from the local SQLite file to the
PostgreSQL database given by DATABASE_URL.

Ids are preserved so links to objectives keep working; the PostgreSQL id
sequence is advanced past the highest copied id.

Usage:
    DATABASE_URL=postgresql://... python scripts/migrate_to_postgres.py [--sqlite path/to/kpi_portal.db]
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
import sqlite3

import psycopg2

from kpi_portal.config import DATABASE_PATH, DATABASE_URL, USE_POSTGRES
from kpi_portal.database import OBJECTIVE_COLUMNS

OBJECTIVE_COPY_COLUMNS = ["id"] + OBJECTIVE_COLUMNS + ["created_at"]
VALUE_COPY_COLUMNS = ["objective_id", "month", "year", "value", "updated_at"]


def read_sqlite(path):
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        objectives = conn.execute(
            f"SELECT {', '.join(OBJECTIVE_COPY_COLUMNS)} FROM objectives ORDER BY id"
        ).fetchall()
        values = conn.execute(
            f"SELECT {', '.join(VALUE_COPY_COLUMNS)} FROM objective_values ORDER BY objective_id, year, month"
        ).fetchall()
    finally:
        conn.close()
    return [tuple(r) for r in objectives], [tuple(r) for r in values]


def migrate(sqlite_path):
    if not USE_POSTGRES:
        print("Error: DATABASE_URL must point to a PostgreSQL database")
        return False
    if not os.path.exists(sqlite_path):
        print(f"Error: SQLite database not found at {sqlite_path}")
        return False

    print(f"Reading {sqlite_path}...")
    objectives, values = read_sqlite(sqlite_path)
    print(f"  {len(objectives)} objectives, {len(values)} values")

    # Tables are created through the application schema
    from kpi_portal.database import get_db, init_database
    with get_db() as conn:
        init_database(conn)

    conn = psycopg2.connect(DATABASE_URL)
    try:
        cursor = conn.cursor()
        placeholders = ", ".join(["%s"] * len(OBJECTIVE_COPY_COLUMNS))
        cursor.executemany(
            f"INSERT INTO objectives ({', '.join(OBJECTIVE_COPY_COLUMNS)}) VALUES ({placeholders}) "
            "ON CONFLICT (id) DO NOTHING",
            objectives,
        )
        placeholders = ", ".join(["%s"] * len(VALUE_COPY_COLUMNS))
        cursor.executemany(
            f"INSERT INTO objective_values ({', '.join(VALUE_COPY_COLUMNS)}) VALUES ({placeholders}) "
            "ON CONFLICT (objective_id, month, year) DO UPDATE SET value = excluded.value",
            values,
        )
        cursor.execute(
            "SELECT setval(pg_get_serial_sequence('objectives', 'id'), COALESCE(MAX(id), 1)) FROM objectives"
        )
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()

    print("Migration completed.")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Copy local SQLite data to PostgreSQL")
    parser.add_argument("--sqlite", default=str(DATABASE_PATH), help="path of the SQLite database file")
    args = parser.parse_args()
    sys.exit(0 if migrate(args.sqlite) else 1)
