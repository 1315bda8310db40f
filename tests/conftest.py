"""
Shared pytest fixtures for the Placement Predictor test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied and the default model state seeded.
  - ``file_db_config``: An ``AppConfig`` pointing at an initialized SQLite
    file under ``tmp_path``, for pipeline stages and the CLI which open
    their own connections.
  - Sample attribute sets and a labeled corpus.
"""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from placement_predictor.config import AppConfig, DatabaseConfig, LoggingConfig
from placement_predictor.db.connection import get_connection
from placement_predictor.db.schema import apply_schema
from placement_predictor.models.attributes import AttributeSet
from placement_predictor.models.training import LabeledRecord


# ── Database fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied.

    Foreign key enforcement is ON. Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    apply_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def file_db_config(tmp_path) -> AppConfig:
    """AppConfig backed by an initialized SQLite file; no log file."""
    db_path = str(tmp_path / "db" / "test.db")
    with get_connection(db_path) as conn:
        apply_schema(conn)
    return AppConfig(
        database=DatabaseConfig(db_path=db_path),
        logging=LoggingConfig(level="WARNING", log_file=""),
    )


# ── Sample domain objects ─────────────────────────────────────────────────────

@pytest.fixture
def high_profile() -> AttributeSet:
    """Strong applicant: scores well and triggers only the community rule."""
    return AttributeSet(
        cgpa=8.5,
        num_projects=5,
        has_internship=True,
        programming_skill=8,
        communication_skill=7,
        has_certifications=True,
    )


@pytest.fixture
def low_profile() -> AttributeSet:
    """Weak applicant: triggers all three high-priority rules."""
    return AttributeSet(
        cgpa=5.5,
        num_projects=1,
        has_internship=False,
        programming_skill=3,
        communication_skill=3,
        has_certifications=False,
    )


def _make_record(cgpa: float, was_placed: bool, **overrides) -> LabeledRecord:
    """Labeled record with minimal attributes apart from ``cgpa``."""
    fields = dict(
        cgpa=cgpa,
        num_projects=0,
        has_internship=False,
        programming_skill=1,
        communication_skill=1,
        has_certifications=False,
        was_placed=was_placed,
    )
    fields.update(overrides)
    return LabeledRecord(**fields)


@pytest.fixture
def cgpa_threshold_records() -> list[LabeledRecord]:
    """Ten records whose label is exactly ``cgpa >= 7``."""
    not_placed = [_make_record(c, False) for c in (4.0, 4.5, 5.0, 5.5, 6.0)]
    placed = [_make_record(c, True) for c in (8.0, 8.5, 9.0, 9.5, 10.0)]
    return not_placed + placed
