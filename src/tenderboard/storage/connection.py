"""PostgreSQL connection management"""
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import psycopg2
from psycopg2.extensions import connection as PgConnection
from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

SCHEMA_FILE = Path(__file__).with_name('schema.sql')


def get_connection_string() -> str:
    """Build connection string from environment variables."""
    name = os.getenv('DB_NAME', 'tenderboard')
    user = os.getenv('DB_USER', '')
    password = os.getenv('DB_PASSWORD', '')
    host = os.getenv('DB_HOST', '')
    port = os.getenv('DB_PORT', '')

    # Only include non-empty values so unix socket auth works without a host
    parts = [f"dbname={name}"]
    if user:
        parts.append(f"user={user}")
    if password:
        parts.append(f"password={password}")
    if host:
        parts.append(f"host={host}")
    if port:
        parts.append(f"port={port}")

    return " ".join(parts)


@contextmanager
def get_connection() -> Generator[PgConnection, None, None]:
    """
    Get a PostgreSQL connection as a context manager.

    Commits on success, rolls back and re-raises on error.

    Usage:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
    """
    conn = psycopg2.connect(get_connection_string())
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_schema() -> None:
    """Create the tenderboard schema and tables if missing."""
    ddl = SCHEMA_FILE.read_text(encoding='utf-8')
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(ddl)

