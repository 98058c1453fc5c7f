import logging
import os
import re
import sqlite3
from typing import Any, Mapping, Optional

import psycopg2

from utils.constants import DATABASE_URL, MIGRATIONS_DIR

logger = logging.getLogger(__name__)

_NAMED_PARAM = re.compile(r"%\((\w+)\)s")


def _is_sqlite() -> bool:
    return bool(DATABASE_URL) and DATABASE_URL.startswith("sqlite://")


def get_connection():
    """Get database connection - supports both PostgreSQL and SQLite for testing."""
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL environment variable not set")

    if _is_sqlite():
        db_path = DATABASE_URL.replace("sqlite://", "", 1)
        conn = sqlite3.connect(db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn
    return psycopg2.connect(DATABASE_URL)


def execute(cur, sql: str, params: Optional[Mapping[str, Any]] = None):
    """
    Execute a statement written with psycopg2 named parameters (``%(name)s``).

    sqlite3 only understands ``:name``, so the placeholders are rewritten
    when the cursor belongs to a SQLite connection.
    """
    if isinstance(cur, sqlite3.Cursor):
        sql = _NAMED_PARAM.sub(r":\1", sql)
    return cur.execute(sql, dict(params or {}))


def check_connection() -> bool:
    conn = get_connection()
    cur = conn.cursor()
    try:
        execute(cur, "SELECT 1")
        return cur.fetchone() is not None
    finally:
        cur.close()
        conn.close()


def run_migrations() -> None:
    logger.info("Starting database migrations...")
    migration_files = sorted(
        [f for f in os.listdir(MIGRATIONS_DIR) if f.endswith(".sql")]
    )

    if not migration_files:
        logger.info("No migration files found.")
        return

    conn = get_connection()
    cur = conn.cursor()
    try:
        for filename in migration_files:
            logger.info(f"Executing migration: {filename}")
            with open(os.path.join(MIGRATIONS_DIR, filename), "r") as f:
                sql_code = f.read()

            try:
                if _is_sqlite():
                    # SQLite doesn't support executing multiple statements at once
                    statements = [
                        stmt.strip() for stmt in sql_code.split(";") if stmt.strip()
                    ]
                    for statement in statements:
                        cur.execute(statement)
                else:
                    cur.execute(sql_code)
                conn.commit()
                logger.info(f"Successfully executed migration: {filename}")
            except Exception as e:
                conn.rollback()
                logger.error(f"Migration {filename} failed: {e}")
                raise
    finally:
        cur.close()
        conn.close()
    logger.info("Finished executing migrations.")
