"""Test fixtures: sample DDL, a sample VisualQuery document, SQLite engines."""

from __future__ import annotations

import json
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from visql.compile.base import SQLDialect
from visql.schema.datasource import DataSource, DataSourceType
from visql.settings import PoolSettings

_FIXTURES_DIR = Path(__file__).parent

REGIONS = ["north", "south", "east", "west"]


def load_query_document() -> dict[str, Any]:
    """Load the canonical camelCase VisualQuery document."""
    return json.loads((_FIXTURES_DIR / "visual_query.json").read_text())


def load_ddl() -> str:
    """Return the sample SQLite DDL."""
    return (_FIXTURES_DIR / "ddl_sqlite.sql").read_text()


def create_sales_db(path: Path, rows: int) -> Path:
    """Create a SQLite file at ``path`` holding ``rows`` sales rows."""
    conn = sqlite3.connect(path)
    try:
        conn.executescript(load_ddl())
        conn.executemany(
            "INSERT INTO products VALUES (?, ?, ?)",
            [(1, "Widget", "tools"), (2, "Gadget", None)],
        )
        conn.executemany(
            "INSERT INTO sales VALUES (?, ?, ?, ?, ?)",
            [
                (i, REGIONS[i % len(REGIONS)], 1 + i % 2, 10.5 * i, f"2024-01-{1 + i % 28:02d}")
                for i in range(1, rows + 1)
            ],
        )
        conn.commit()
    finally:
        conn.close()
    return path


def make_datasource(ds_id: str | int = "ds-1", **overrides: Any) -> DataSource:
    """A PostgreSQL-typed datasource; tests point it at SQLite via the factory."""
    fields: dict[str, Any] = {
        "id": ds_id,
        "type": DataSourceType.POSTGRESQL,
        "host": "localhost",
        "database": "analytics",
        "username": "reader",
        "password": "s3cret",
        "schema": "main",
    }
    fields.update(overrides)
    return DataSource.model_validate(fields)


class SQLiteEngineFactory:
    """Engine factory that ignores the datasource URL and opens a SQLite file.

    Pools are bounded exactly like production pools.  ``calls`` counts how
    many engines were built; ``delay`` widens the window in which concurrent
    callers could race; ``detect_types`` is passed to :func:`sqlite3.connect`.
    """

    def __init__(self, path: Path, delay: float = 0.0, detect_types: int = 0) -> None:
        self.path = path
        self.delay = delay
        self.detect_types = detect_types
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(
        self, datasource: DataSource, dialect: SQLDialect, pool: PoolSettings
    ) -> Engine:
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return create_engine(
            f"sqlite:///{self.path}",
            poolclass=QueuePool,
            pool_size=pool.max_size,
            max_overflow=0,
            pool_timeout=pool.connect_timeout,
            connect_args={"check_same_thread": False, "detect_types": self.detect_types},
        )
