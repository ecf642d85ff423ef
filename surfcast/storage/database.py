"""SQLite access: WAL connections and numbered schema migrations."""

import importlib
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
MIGRATIONS_PACKAGE = "surfcast.storage.migrations"


def connect(db_path: str | Path) -> sqlite3.Connection:
    """Open (creating parent directories) a WAL-mode connection with Row results."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def _pending_migrations(conn: sqlite3.Connection) -> list[str]:
    done = {row[0] for row in conn.execute("SELECT version FROM schema_versions")}
    available = sorted(p.stem for p in MIGRATIONS_DIR.glob("v[0-9]*_*.py"))
    return [name for name in available if name not in done]


def run_migrations(conn: sqlite3.Connection) -> list[str]:
    """Apply every migration not yet recorded in ``schema_versions``, oldest first.

    Each module exposes ``up(conn)``. Returns the names applied by this call.
    """
    conn.execute(
        "CREATE TABLE IF NOT EXISTS schema_versions ("
        "  version TEXT PRIMARY KEY,"
        "  applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP"
        ")"
    )
    conn.commit()

    applied = []
    for name in _pending_migrations(conn):
        importlib.import_module(f"{MIGRATIONS_PACKAGE}.{name}").up(conn)
        conn.execute("INSERT INTO schema_versions (version) VALUES (?)", (name,))
        conn.commit()
        logger.info("Applied migration %s", name)
        applied.append(name)
    return applied


@contextmanager
def open_database(db_path: str | Path) -> Iterator[sqlite3.Connection]:
    """Migrated connection that is closed on exit."""
    conn = connect(db_path)
    try:
        run_migrations(conn)
        yield conn
    finally:
        conn.close()
