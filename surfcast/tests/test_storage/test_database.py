"""Tests for SQLite connections and schema migrations."""

import sqlite3
from pathlib import Path

import pytest

from surfcast.storage.database import (
    connect,
    open_database,
    run_migrations,
)


def _tables(db: sqlite3.Connection) -> set[str]:
    rows = db.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {row["name"] for row in rows}


class TestConnect:
    def test_pragmas(self, tmp_path: Path):
        db = connect(tmp_path / "surf.db")
        assert db.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        assert db.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        db.close()

    def test_nested_path_and_rows_by_name(self, tmp_path: Path):
        db = connect(tmp_path / "a" / "b" / "surf.db")
        assert (tmp_path / "a" / "b").is_dir()
        row = db.execute("SELECT 42 AS answer").fetchone()
        assert row["answer"] == 42
        db.close()


class TestMigrations:
    def test_initial_schema(self, tmp_path: Path):
        db = connect(tmp_path / "surf.db")
        assert "v001_initial" in run_migrations(db)
        assert {"schema_versions", "forecast_points", "summary_runs"} <= _tables(db)
        db.close()

    def test_second_run_is_noop(self, tmp_path: Path):
        db = connect(tmp_path / "surf.db")
        run_migrations(db)
        assert run_migrations(db) == []
        db.close()

    def test_reopen_keeps_versions(self, tmp_path: Path):
        path = tmp_path / "surf.db"
        with open_database(path):
            pass
        db = connect(path)
        versions = [r["version"] for r in db.execute("SELECT version FROM schema_versions")]
        assert versions == ["v001_initial"]
        db.close()


class TestOpenDatabase:
    def test_migrated_and_closed(self, tmp_path: Path):
        with open_database(tmp_path / "surf.db") as db:
            assert db.execute("SELECT COUNT(*) FROM summary_runs").fetchone()[0] == 0
        with pytest.raises(sqlite3.ProgrammingError):
            db.execute("SELECT 1")
