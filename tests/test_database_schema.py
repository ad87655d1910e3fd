from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from qr_attendance.data import Database, StorageError


def test_initialize_creates_tables(tmp_path: Path) -> None:
    db_path = tmp_path / "attendance.db"
    database = Database(db_path)
    database.initialize()

    with database.connect() as connection:
        tables = {
            row[0]
            for row in connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            )
        }

    expected_tables = {
        "students",
        "attendance_records",
        "schema_migrations",
    }

    assert expected_tables.issubset(tables)


def test_initialize_is_idempotent(tmp_path: Path) -> None:
    database = Database(tmp_path / "attendance.db")
    database.initialize()
    database.initialize()

    with database.connect() as connection:
        applied = [row["name"] for row in connection.execute("SELECT name FROM schema_migrations")]

    assert applied == ["001_initial_schema.sql"]


def test_sql_errors_surface_as_storage_error(tmp_path: Path) -> None:
    database = Database(tmp_path / "attendance.db")
    database.initialize()

    with pytest.raises(StorageError) as excinfo:
        with database.connect() as connection:
            connection.execute("SELECT * FROM missing_table")

    assert isinstance(excinfo.value.__cause__, sqlite3.Error)


def test_failed_block_is_rolled_back(tmp_path: Path) -> None:
    database = Database(tmp_path / "attendance.db")
    database.initialize()

    with pytest.raises(StorageError):
        with database.connect() as connection:
            connection.execute("INSERT INTO students (id, name) VALUES ('student-001', 'Alice')")
            connection.execute("INSERT INTO students (id, name) VALUES ('student-001', 'Duplicate')")

    with database.connect() as connection:
        count = connection.execute("SELECT COUNT(*) FROM students").fetchone()[0]

    assert count == 0


def test_unusable_data_folder_surfaces_as_storage_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    database = Database(blocker / "attendance.db")

    with pytest.raises(StorageError) as excinfo:
        database.initialize()

    assert isinstance(excinfo.value.__cause__, OSError)
