"""
SQLite schema DDL — all CREATE TABLE and CREATE INDEX statements.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent:
safe to call on an already-initialized database (e.g. after restart or in
tests). ``apply_schema()`` also seeds the single ``model_state`` row with
the default coefficients if it is missing.

Table creation order respects foreign key dependencies:
  1. model_state        (no FKs; exactly one row, state_id = 1)
  2. training_batches   (no FKs)
  3. training_data      (→ training_batches, ON DELETE CASCADE)
  4. predictions        (no FKs)
  5. run_metadata       (no FKs)
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_MODEL_STATE = """
CREATE TABLE IF NOT EXISTS model_state (
    state_id              INTEGER PRIMARY KEY CHECK (state_id = 1),
    cgpa_weight           REAL    NOT NULL,
    projects_weight       REAL    NOT NULL,
    internship_weight     REAL    NOT NULL,
    programming_weight    REAL    NOT NULL,
    communication_weight  REAL    NOT NULL,
    certifications_weight REAL    NOT NULL,
    bias                  REAL    NOT NULL,
    training_samples      INTEGER NOT NULL DEFAULT 0,
    accuracy              REAL,
    last_trained_at       TEXT,
    version               INTEGER NOT NULL DEFAULT 1,
    updated_by            TEXT,
    updated_at            TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_TRAINING_BATCHES = """
CREATE TABLE IF NOT EXISTS training_batches (
    batch_id      TEXT    NOT NULL PRIMARY KEY,
    filename      TEXT    NOT NULL,
    record_count  INTEGER NOT NULL DEFAULT 0,
    uploaded_by   TEXT,
    created_at    TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_TRAINING_DATA = """
CREATE TABLE IF NOT EXISTS training_data (
    record_id            INTEGER PRIMARY KEY AUTOINCREMENT,
    batch_id             TEXT    NOT NULL
                         REFERENCES training_batches(batch_id) ON DELETE CASCADE,
    cgpa                 REAL    NOT NULL CHECK (cgpa BETWEEN 0 AND 10),
    num_projects         INTEGER NOT NULL CHECK (num_projects >= 0),
    has_internship       INTEGER NOT NULL DEFAULT 0,
    programming_skill    INTEGER NOT NULL CHECK (programming_skill BETWEEN 1 AND 10),
    communication_skill  INTEGER NOT NULL CHECK (communication_skill BETWEEN 1 AND 10),
    has_certifications   INTEGER NOT NULL DEFAULT 0,
    was_placed           INTEGER NOT NULL,
    created_at           TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_TRAINING_DATA_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_training_data_batch
    ON training_data(batch_id);
"""

_DDL_PREDICTIONS = """
CREATE TABLE IF NOT EXISTS predictions (
    prediction_id        INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id              TEXT,
    cgpa                 REAL    NOT NULL,
    num_projects         INTEGER NOT NULL,
    has_internship       INTEGER NOT NULL DEFAULT 0,
    programming_skill    INTEGER NOT NULL,
    communication_skill  INTEGER NOT NULL,
    has_certifications   INTEGER NOT NULL DEFAULT 0,
    probability          INTEGER NOT NULL CHECK (probability BETWEEN 0 AND 100),
    prediction_result    TEXT    NOT NULL,
    recommendations      TEXT    NOT NULL DEFAULT '[]',
    model_version        INTEGER NOT NULL,
    created_at           TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_PREDICTIONS_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_predictions_created
    ON predictions(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_predictions_user_created
    ON predictions(user_id, created_at DESC)
    WHERE user_id IS NOT NULL;
"""

_DDL_RUN_METADATA = """
CREATE TABLE IF NOT EXISTS run_metadata (
    run_id           INTEGER PRIMARY KEY AUTOINCREMENT,
    run_slug         TEXT    NOT NULL UNIQUE,
    pipeline_stage   TEXT    NOT NULL,
    status           TEXT    NOT NULL DEFAULT 'started',
    triggered_by     TEXT,
    config_snapshot  TEXT    NOT NULL,
    rows_processed   INTEGER NOT NULL DEFAULT 0,
    error_message    TEXT,
    started_at       TEXT    NOT NULL,
    finished_at      TEXT
);
"""

_DDL_RUN_METADATA_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_run_stage_started
    ON run_metadata(pipeline_stage, started_at DESC);
"""

_ALL_DDL = [
    _DDL_MODEL_STATE,
    _DDL_TRAINING_BATCHES,
    _DDL_TRAINING_DATA,
    _DDL_TRAINING_DATA_INDEXES,
    _DDL_PREDICTIONS,
    _DDL_PREDICTIONS_INDEXES,
    _DDL_RUN_METADATA,
    _DDL_RUN_METADATA_INDEXES,
]

ALL_TABLE_NAMES: list[str] = [
    "model_state",
    "training_batches",
    "training_data",
    "predictions",
    "run_metadata",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn`` and seed the default model state.

    Idempotent — safe to call on an already-initialized database.

    Args:
        conn: An open ``sqlite3.Connection`` (FK enforcement should be ON).
    """
    from placement_predictor.db.repositories.model_state_repo import ModelStateRepository

    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        # Each block may contain multiple semicolon-separated statements
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    ModelStateRepository(conn).initialize_default()
    conn.commit()
    logger.info("Schema applied: %d tables, indexes created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return table names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Return explicitly created index names, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' "
        "AND name NOT LIKE 'sqlite_%' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
