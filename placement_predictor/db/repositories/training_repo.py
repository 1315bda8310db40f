"""
Repository for the training corpus: ``training_batches`` and ``training_data``.

Each upload becomes one batch that owns its records. Records are never
updated; they disappear only when their batch is deleted. ``delete_batch()``
removes the records first and then the batch row (the FK also cascades), so
there are never orphan records.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from placement_predictor.db.repositories.base import BaseRepository
from placement_predictor.models.training import LabeledRecord, TrainingBatch
from placement_predictor.utils.time_utils import parse_timestamp

logger = logging.getLogger(__name__)


class TrainingDataRepository(BaseRepository):
    """Read/write access to training batches and their labeled records."""

    def insert_batch(self, batch: TrainingBatch, records: list[LabeledRecord]) -> int:
        """Insert a batch row and all of its records.

        Both inserts run on the caller's connection, so they commit or roll
        back together.

        Args:
            batch:   Batch metadata. ``record_count`` must equal ``len(records)``.
            records: Validated labeled records; their ``batch_id`` is ignored
                and replaced with ``batch.batch_id``.

        Returns:
            Number of records inserted.

        Raises:
            ValueError: If ``batch.record_count`` disagrees with ``records``.
        """
        if batch.record_count != len(records):
            raise ValueError(
                f"Batch record_count ({batch.record_count}) does not match "
                f"the number of records supplied ({len(records)})."
            )

        if batch.created_at is None:
            self.execute(
                """
                INSERT INTO training_batches (batch_id, filename, record_count, uploaded_by)
                VALUES (?, ?, ?, ?);
                """,
                (batch.batch_id, batch.filename, batch.record_count, batch.uploaded_by),
            )
        else:
            self.execute(
                """
                INSERT INTO training_batches (
                    batch_id, filename, record_count, uploaded_by, created_at
                ) VALUES (?, ?, ?, ?, ?);
                """,
                (
                    batch.batch_id,
                    batch.filename,
                    batch.record_count,
                    batch.uploaded_by,
                    batch.created_at.isoformat(),
                ),
            )

        self.executemany(
            """
            INSERT INTO training_data (
                batch_id, cgpa, num_projects, has_internship,
                programming_skill, communication_skill, has_certifications,
                was_placed
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?);
            """,
            [
                (
                    batch.batch_id,
                    r.cgpa,
                    r.num_projects,
                    int(r.has_internship),
                    r.programming_skill,
                    r.communication_skill,
                    int(r.has_certifications),
                    int(r.was_placed),
                )
                for r in records
            ],
        )
        logger.info(
            "Inserted batch %s (%s) with %d record(s).",
            batch.batch_id, batch.filename, len(records),
        )
        return len(records)

    def get_batch(self, batch_id: str) -> Optional[TrainingBatch]:
        """Fetch one batch by id, or ``None``."""
        row = self.fetchone(
            "SELECT * FROM training_batches WHERE batch_id = ?;", (batch_id,)
        )
        return _row_to_batch(row) if row else None

    def list_batches(self) -> list[TrainingBatch]:
        """Return all batches, newest first."""
        rows = self.fetchall(
            "SELECT * FROM training_batches ORDER BY created_at DESC, rowid DESC;"
        )
        return [_row_to_batch(r) for r in rows]

    def delete_batch(self, batch_id: str) -> int:
        """Delete a batch and every record it owns.

        Args:
            batch_id: Batch to remove.

        Returns:
            Number of training records deleted.

        Raises:
            KeyError: If no batch with ``batch_id`` exists.
        """
        if self.get_batch(batch_id) is None:
            raise KeyError(f"Training batch not found: {batch_id}")

        cursor = self.execute(
            "DELETE FROM training_data WHERE batch_id = ?;", (batch_id,)
        )
        removed = cursor.rowcount
        self.execute("DELETE FROM training_batches WHERE batch_id = ?;", (batch_id,))
        logger.info("Deleted batch %s and %d record(s).", batch_id, removed)
        return removed

    def get_all_records(self) -> list[LabeledRecord]:
        """Return the full training corpus in insertion order."""
        rows = self.fetchall("SELECT * FROM training_data ORDER BY record_id;")
        return [_row_to_record(r) for r in rows]

    def get_records_for_batch(self, batch_id: str) -> list[LabeledRecord]:
        """Return the records owned by one batch, in insertion order."""
        rows = self.fetchall(
            "SELECT * FROM training_data WHERE batch_id = ? ORDER BY record_id;",
            (batch_id,),
        )
        return [_row_to_record(r) for r in rows]

    def count_records(self) -> int:
        """Return the total number of training records."""
        row = self.fetchone("SELECT COUNT(*) AS n FROM training_data;")
        assert row is not None
        return int(row["n"])

    def count_batches(self) -> int:
        """Return the total number of training batches."""
        row = self.fetchone("SELECT COUNT(*) AS n FROM training_batches;")
        assert row is not None
        return int(row["n"])


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_batch(row: sqlite3.Row) -> TrainingBatch:
    return TrainingBatch(
        batch_id=row["batch_id"],
        filename=row["filename"],
        record_count=row["record_count"],
        uploaded_by=row["uploaded_by"],
        created_at=parse_timestamp(row["created_at"]),
    )


def _row_to_record(row: sqlite3.Row) -> LabeledRecord:
    return LabeledRecord(
        record_id=row["record_id"],
        batch_id=row["batch_id"],
        cgpa=row["cgpa"],
        num_projects=row["num_projects"],
        has_internship=bool(row["has_internship"]),
        programming_skill=row["programming_skill"],
        communication_skill=row["communication_skill"],
        has_certifications=bool(row["has_certifications"]),
        was_placed=bool(row["was_placed"]),
    )
