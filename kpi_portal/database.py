"""
Database connection and objective storage.
Supports both SQLite (local development) and PostgreSQL (managed production database).

Connections are opened per unit of work with get_db(); every repository
function takes the open connection as its first argument.
"""
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import List

from kpi_portal.app_logger import get_logger
from kpi_portal.config import (
    DATABASE_PATH,
    DATABASE_URL,
    DEPARTMENTS,
    NUMBER_FORMATS,
    OBJECTIVE_TYPES,
    USE_POSTGRES,
)
from kpi_portal.progress import ObjectiveWithValues, objective_from_row, value_from_row

# PostgreSQL support
if USE_POSTGRES:
    import psycopg2
    from psycopg2.extras import RealDictCursor

logger = get_logger(__name__)

OBJECTIVE_COLUMNS = [
    "department",
    "objective_name",
    "objective_smart",
    "type_objective",
    "target_numeric",
    "number_format",
    "start_date",
    "end_date",
    "order_index",
    "reverse_logic",
]


class DictRow:
    """Wrapper to make psycopg2 results behave like sqlite3.Row"""
    def __init__(self, data):
        self._data = data
        self._keys = list(data.keys()) if data else []

    def __getitem__(self, key):
        if isinstance(key, int):
            return self._data[self._keys[key]]
        return self._data[key]

    def __iter__(self):
        return iter(self._data.values())

    def keys(self):
        return self._keys


def get_db_connection():
    """Create a database connection with row factory."""
    if USE_POSTGRES:
        return psycopg2.connect(DATABASE_URL)
    conn = sqlite3.connect(str(DATABASE_PATH))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


class PostgresCursorWrapper:
    """Wrapper to make PostgreSQL cursor behave like SQLite cursor"""
    def __init__(self, cursor):
        self._cursor = cursor

    def execute(self, query, params=None):
        # Convert SQLite ? placeholders to PostgreSQL %s
        query = query.replace('?', '%s')
        # Convert AUTOINCREMENT to SERIAL for PostgreSQL
        query = query.replace('INTEGER PRIMARY KEY AUTOINCREMENT', 'SERIAL PRIMARY KEY')
        # SQLite PRAGMAs have no PostgreSQL counterpart
        if query.strip().upper().startswith('PRAGMA'):
            return self
        if params:
            self._cursor.execute(query, params)
        else:
            self._cursor.execute(query)
        return self

    def executemany(self, query, params_list):
        query = query.replace('?', '%s')
        for params in params_list:
            self._cursor.execute(query, params)
        return self

    def fetchone(self):
        row = self._cursor.fetchone()
        return DictRow(row) if row else None

    def fetchall(self):
        rows = self._cursor.fetchall()
        return [DictRow(row) for row in rows]

    @property
    def lastrowid(self):
        self._cursor.execute("SELECT lastval()")
        return self._cursor.fetchone()['lastval']

    @property
    def rowcount(self):
        return self._cursor.rowcount


class PostgresConnection:
    """Connection facade exposing the sqlite3 subset used by the repository."""
    def __init__(self, conn):
        self._conn = conn
        self._cursor = PostgresCursorWrapper(conn.cursor(cursor_factory=RealDictCursor))

    def cursor(self):
        return self._cursor

    def execute(self, *args, **kwargs):
        return self._cursor.execute(*args, **kwargs)

    def commit(self):
        return self._conn.commit()

    def rollback(self):
        return self._conn.rollback()


@contextmanager
def get_db():
    """Context manager for database connections."""
    conn = get_db_connection()
    try:
        if USE_POSTGRES:
            yield PostgresConnection(conn)
        else:
            yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def row_to_dict(row) -> dict:
    """Plain JSON-friendly dict from a sqlite3.Row or DictRow."""
    data = {}
    for key in row.keys():
        value = row[key]
        if isinstance(value, Decimal):
            value = float(value)
        elif isinstance(value, (date, datetime)):
            value = value.isoformat()
        data[key] = value
    if "reverse_logic" in data:
        data["reverse_logic"] = bool(data["reverse_logic"])
    return data


def _in_list(values) -> str:
    return ", ".join(f"'{v}'" for v in values)


# ── Schema ───────────────────────────────────────────────────────────

def init_database(conn):
    """Create tables and indexes if they do not exist."""
    cursor = conn.cursor()

    cursor.execute(f"""
        CREATE TABLE IF NOT EXISTS objectives (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            department TEXT NOT NULL CHECK (department IN ({_in_list(DEPARTMENTS)})),
            objective_name TEXT,
            objective_smart TEXT NOT NULL,
            type_objective TEXT NOT NULL CHECK (type_objective IN ({_in_list(OBJECTIVE_TYPES)})),
            target_numeric DECIMAL NOT NULL,
            number_format TEXT DEFAULT 'number' CHECK (number_format IN ({_in_list(NUMBER_FORMATS)})),
            start_date DATE NOT NULL,
            end_date DATE NOT NULL,
            order_index INTEGER DEFAULT 0,
            reverse_logic INTEGER DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS objective_values (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            objective_id INTEGER NOT NULL,
            month INTEGER NOT NULL CHECK (month BETWEEN 1 AND 12),
            year INTEGER NOT NULL,
            value DECIMAL NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (objective_id) REFERENCES objectives(id) ON DELETE CASCADE,
            UNIQUE(objective_id, month, year)
        )
    """)

    # Older databases predate these columns
    _add_column_if_missing(cursor, "objectives", "objective_name", "TEXT")
    _add_column_if_missing(cursor, "objectives", "order_index", "INTEGER DEFAULT 0")
    _add_column_if_missing(cursor, "objectives", "reverse_logic", "INTEGER DEFAULT 0")
    _add_column_if_missing(cursor, "objectives", "number_format", "TEXT DEFAULT 'number'")

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_objectives_department ON objectives(department, order_index)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_objective_values_objective ON objective_values(objective_id, year, month)")

    logger.info("Database initialized (%s)", "PostgreSQL" if USE_POSTGRES else "SQLite")


def _table_columns(cursor, table: str) -> List[str]:
    if USE_POSTGRES:
        cursor.execute(
            "SELECT column_name FROM information_schema.columns WHERE table_name = ?",
            (table,),
        )
        return [row['column_name'] for row in cursor.fetchall()]
    cursor.execute(f"PRAGMA table_info({table})")
    return [row['name'] for row in cursor.fetchall()]


def _add_column_if_missing(cursor, table: str, column: str, ddl: str):
    if column not in _table_columns(cursor, table):
        cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}")
        logger.info("Added column %s.%s", table, column)


def reset_database(conn):
    """Drop all objective data and recreate the schema (development only)."""
    cursor = conn.cursor()
    cursor.execute("DROP TABLE IF EXISTS objective_values")
    cursor.execute("DROP TABLE IF EXISTS objectives")
    init_database(conn)
    logger.warning("Database reset complete")


# ── Objectives ───────────────────────────────────────────────────────

def get_objective(conn, objective_id: int):
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM objectives WHERE id = ?", (objective_id,))
    row = cursor.fetchone()
    return row_to_dict(row) if row else None


def get_objectives(conn) -> List[dict]:
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM objectives ORDER BY department, order_index ASC, created_at DESC")
    return [row_to_dict(row) for row in cursor.fetchall()]


def get_objective_values(conn, objective_id: int) -> List[dict]:
    cursor = conn.cursor()
    cursor.execute("""
        SELECT * FROM objective_values
        WHERE objective_id = ?
        ORDER BY year, month
    """, (objective_id,))
    return [row_to_dict(row) for row in cursor.fetchall()]


def get_objectives_by_department(conn, department: str) -> List[dict]:
    """Objectives of a department in display order, each with its values."""
    cursor = conn.cursor()
    cursor.execute("""
        SELECT * FROM objectives
        WHERE department = ?
        ORDER BY order_index ASC, created_at DESC, id ASC
    """, (department,))
    objectives = [row_to_dict(row) for row in cursor.fetchall()]

    values_by_objective = {o["id"]: [] for o in objectives}
    if objectives:
        placeholders = ", ".join("?" for _ in objectives)
        cursor.execute(f"""
            SELECT * FROM objective_values
            WHERE objective_id IN ({placeholders})
            ORDER BY year, month
        """, tuple(values_by_objective))
        for row in cursor.fetchall():
            values_by_objective[row["objective_id"]].append(row_to_dict(row))

    for objective in objectives:
        objective["values"] = values_by_objective[objective["id"]]
    return objectives


def to_objectives_with_values(rows: List[dict]) -> List[ObjectiveWithValues]:
    """Calculation inputs from rows returned by get_objectives_by_department."""
    return [
        ObjectiveWithValues(
            objective=objective_from_row(row),
            values=[value_from_row(v) for v in row["values"]],
        )
        for row in rows
    ]


def load_department_objectives(conn, department: str) -> List[ObjectiveWithValues]:
    return to_objectives_with_values(get_objectives_by_department(conn, department))


def create_objective(conn, data: dict) -> int:
    """Insert an objective and return its id."""
    cursor = conn.cursor()
    cursor.execute(f"""
        INSERT INTO objectives ({", ".join(OBJECTIVE_COLUMNS)})
        VALUES ({", ".join("?" for _ in OBJECTIVE_COLUMNS)})
    """, (
        data["department"],
        data.get("objective_name") or None,
        data["objective_smart"],
        data["type_objective"],
        data["target_numeric"],
        data.get("number_format") or "number",
        str(data["start_date"]),
        str(data["end_date"]),
        data.get("order_index") or 0,
        1 if data.get("reverse_logic") else 0,
    ))
    objective_id = cursor.lastrowid
    logger.info("Created objective %s in %s", objective_id, data["department"])
    return objective_id


def update_objective(conn, objective_id: int, updates: dict) -> int:
    """
    Update the given fields of an objective.
    Fields set to None are left untouched. Returns the number of rows changed.
    """
    fields = []
    params = []
    for column in OBJECTIVE_COLUMNS:
        if column == "department" or updates.get(column) is None:
            continue
        value = updates[column]
        if column == "reverse_logic":
            value = 1 if value else 0
        elif column in ("start_date", "end_date"):
            value = str(value)
        fields.append(f"{column} = ?")
        params.append(value)

    if not fields:
        raise ValueError("No fields to update")

    params.append(objective_id)
    cursor = conn.cursor()
    cursor.execute(f"UPDATE objectives SET {', '.join(fields)} WHERE id = ?", tuple(params))
    return cursor.rowcount


def delete_objective(conn, objective_id: int) -> int:
    cursor = conn.cursor()
    cursor.execute("DELETE FROM objectives WHERE id = ?", (objective_id,))
    return cursor.rowcount


def delete_objectives(conn, objective_ids: List[int]) -> int:
    if not objective_ids:
        return 0
    placeholders = ", ".join("?" for _ in objective_ids)
    cursor = conn.cursor()
    cursor.execute(f"DELETE FROM objectives WHERE id IN ({placeholders})", tuple(objective_ids))
    logger.info("Deleted %s objectives", cursor.rowcount)
    return cursor.rowcount


def reorder_objectives(conn, department: str, ordered_ids: List[int]) -> int:
    """Set order_index from list position; ids outside the department are ignored."""
    cursor = conn.cursor()
    changed = 0
    for index, objective_id in enumerate(ordered_ids):
        cursor.execute(
            "UPDATE objectives SET order_index = ? WHERE id = ? AND department = ?",
            (index, objective_id, department),
        )
        changed += cursor.rowcount
    return changed


# ── Monthly values ───────────────────────────────────────────────────

def upsert_objective_value(conn, objective_id: int, month: int, year: int, value: float):
    """Record the value of a month, replacing any previous one."""
    cursor = conn.cursor()
    cursor.execute("""
        INSERT INTO objective_values (objective_id, month, year, value, updated_at)
        VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
        ON CONFLICT (objective_id, month, year)
        DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
    """, (objective_id, month, year, value))


def delete_objective_value(conn, objective_id: int, month: int, year: int) -> int:
    cursor = conn.cursor()
    cursor.execute(
        "DELETE FROM objective_values WHERE objective_id = ? AND month = ? AND year = ?",
        (objective_id, month, year),
    )
    return cursor.rowcount
