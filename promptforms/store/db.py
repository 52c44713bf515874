"""Database layer for forms, fields and resources.

Supports two backends:
- PostgreSQL (production, set PROMPTFORMS_DATABASE_URL)
- SQLite (local development, default)

Uses raw SQL via psycopg2 (Postgres) or sqlite3 (SQLite). No ORM.
Queries are written with %s placeholders and adapted for SQLite.

Thread-safety: Postgres uses a ThreadedConnectionPool for connection reuse.
SQLite uses per-call connections with check_same_thread=False.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from promptforms.config import get_settings

logger = logging.getLogger(__name__)

DATABASE_URL = get_settings().database_url
SQLITE_PATH = Path(get_settings().sqlite_path)

_initialized = False
_pg_pool = None


def configure(database_url: str = "", sqlite_path: Optional[str] = None) -> None:
    """Point the store at a different database.

    Resets the initialized flag and drops any Postgres pool, so the next
    init_db() call creates tables in the new location.
    """
    global DATABASE_URL, SQLITE_PATH, _initialized, _pg_pool
    DATABASE_URL = database_url
    if sqlite_path is not None:
        SQLITE_PATH = Path(sqlite_path)
    if _pg_pool is not None:
        _pg_pool.closeall()
        _pg_pool = None
    _initialized = False


def _is_postgres() -> bool:
    """Check if we're using Postgres."""
    return DATABASE_URL.startswith("postgres")


def _get_pg_pool():
    """Get or create the Postgres connection pool (lazy singleton)."""
    global _pg_pool
    if _pg_pool is None:
        import psycopg2.pool
        _pg_pool = psycopg2.pool.ThreadedConnectionPool(
            minconn=1,
            maxconn=5,
            dsn=DATABASE_URL,
        )
        logger.info("PostgreSQL connection pool initialized (1-5 connections)")
    return _pg_pool


@contextmanager
def get_connection():
    """Get a database connection (Postgres or SQLite).

    Usage:
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(...)
            conn.commit()
    """
    if _is_postgres():
        pool = _get_pg_pool()
        conn = pool.getconn()
        try:
            yield conn
        finally:
            pool.putconn(conn)
    else:
        conn = sqlite3.connect(str(SQLITE_PATH), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        try:
            yield conn
        finally:
            conn.close()


def _adapt(sql: str) -> str:
    """Adapt %s placeholders to the active backend."""
    if _is_postgres():
        return sql
    return sql.replace("%s", "?")


def _row_to_dict(cursor, row) -> dict:
    if _is_postgres():
        columns = [desc[0] for desc in cursor.description]
        return dict(zip(columns, row))
    return dict(row)


def execute(sql: str, params: tuple = (), fetch: str = "none") -> Any:
    """Execute a single SQL statement in its own transaction.

    Args:
        sql: SQL statement with %s placeholders
        params: Parameters tuple
        fetch: "none", "one", "all"

    Returns:
        None for "none", dict (or None) for "one", list[dict] for "all"
    """
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(_adapt(sql), params)

        if fetch == "one":
            row = cursor.fetchone()
            conn.commit()
            return _row_to_dict(cursor, row) if row is not None else None
        if fetch == "all":
            rows = cursor.fetchall()
            conn.commit()
            return [_row_to_dict(cursor, row) for row in rows]

        conn.commit()
        return None


class Transaction:
    """Cursor wrapper for several statements committed together."""

    def __init__(self, cursor):
        self._cursor = cursor

    def execute(self, sql: str, params: tuple = ()) -> None:
        self._cursor.execute(_adapt(sql), params)

    def fetch_one(self, sql: str, params: tuple = ()) -> Optional[dict]:
        self._cursor.execute(_adapt(sql), params)
        row = self._cursor.fetchone()
        return _row_to_dict(self._cursor, row) if row is not None else None

    def insert(self, sql: str, params: tuple = ()) -> int:
        """Run an INSERT into a table with an `id` key and return the new id."""
        if _is_postgres():
            self._cursor.execute(sql + " RETURNING id", params)
            return self._cursor.fetchone()[0]
        self._cursor.execute(_adapt(sql), params)
        return self._cursor.lastrowid

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount


@contextmanager
def transaction() -> Iterator[Transaction]:
    """Run several statements atomically; rolls back on any exception."""
    with get_connection() as conn:
        tx = Transaction(conn.cursor())
        try:
            yield tx
            conn.commit()
        except Exception:
            conn.rollback()
            raise


def init_db():
    """Create tables if they don't exist."""
    global _initialized
    if _initialized:
        return

    if _is_postgres():
        _init_postgres()
    else:
        _init_sqlite()

    _initialized = True
    backend = "PostgreSQL" if _is_postgres() else f"SQLite ({SQLITE_PATH})"
    logger.info(f"Forms database initialized: {backend}")


def _init_postgres():
    """Create Postgres tables."""
    ddl = """
    CREATE TABLE IF NOT EXISTS forms (
        id SERIAL PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT DEFAULT '',
        prompt_template TEXT NOT NULL DEFAULT '',
        provider VARCHAR(50) NOT NULL DEFAULT 'gemini',
        model VARCHAR(200) NOT NULL DEFAULT '',
        created_at TIMESTAMP DEFAULT NOW()
    );

    CREATE TABLE IF NOT EXISTS fields (
        id SERIAL PRIMARY KEY,
        form_id INTEGER NOT NULL REFERENCES forms(id) ON DELETE CASCADE,
        name VARCHAR(200) NOT NULL,
        label TEXT NOT NULL,
        type VARCHAR(20) NOT NULL DEFAULT 'text',
        placeholder TEXT DEFAULT '',
        required BOOLEAN NOT NULL DEFAULT FALSE,
        order_index INTEGER NOT NULL DEFAULT 0
    );

    CREATE INDEX IF NOT EXISTS idx_fields_form
        ON fields(form_id, order_index);

    CREATE TABLE IF NOT EXISTS resources (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        type VARCHAR(20) NOT NULL DEFAULT 'text',
        content TEXT NOT NULL,
        created_at TIMESTAMP DEFAULT NOW()
    );

    CREATE TABLE IF NOT EXISTS form_resources (
        form_id INTEGER NOT NULL REFERENCES forms(id) ON DELETE CASCADE,
        resource_id INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
        position INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (form_id, resource_id)
    );
    """
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(ddl)
        conn.commit()


def _init_sqlite():
    """Create SQLite tables."""
    ddl = """
    CREATE TABLE IF NOT EXISTS forms (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT DEFAULT '',
        prompt_template TEXT NOT NULL DEFAULT '',
        provider TEXT NOT NULL DEFAULT 'gemini',
        model TEXT NOT NULL DEFAULT '',
        created_at TEXT
    );

    CREATE TABLE IF NOT EXISTS fields (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        form_id INTEGER NOT NULL REFERENCES forms(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        label TEXT NOT NULL,
        type TEXT NOT NULL DEFAULT 'text',
        placeholder TEXT DEFAULT '',
        required INTEGER NOT NULL DEFAULT 0,
        order_index INTEGER NOT NULL DEFAULT 0
    );

    CREATE INDEX IF NOT EXISTS idx_fields_form
        ON fields(form_id, order_index);

    CREATE TABLE IF NOT EXISTS resources (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        type TEXT NOT NULL DEFAULT 'text',
        content TEXT NOT NULL,
        created_at TEXT
    );

    CREATE TABLE IF NOT EXISTS form_resources (
        form_id INTEGER NOT NULL REFERENCES forms(id) ON DELETE CASCADE,
        resource_id INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
        position INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (form_id, resource_id)
    );
    """
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.executescript(ddl)
        conn.commit()
