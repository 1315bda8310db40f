"""
Repository for the single-row ``model_state`` table.

Write protocol
--------------
The stored coefficients are only ever replaced as a whole. ``replace()``
writes all seven coefficients plus the fit metadata in ONE ``UPDATE``
statement guarded by ``WHERE version = ?`` (compare-and-swap):

  1. The writer reads the current state and remembers its ``version``.
  2. It trains, then calls ``replace(new_state, expected_version)``.
  3. If another writer committed in between, the UPDATE matches zero rows
     and ``StaleModelStateError`` is raised; nothing is written.

Readers call ``get_current()`` without locking. A single-row UPDATE is
atomic in SQLite, so a reader sees either the old vector or the new one,
never a mix.
"""

from __future__ import annotations

import logging
import sqlite3

from placement_predictor.db.repositories.base import BaseRepository
from placement_predictor.exceptions import StaleModelStateError
from placement_predictor.models.coefficients import (
    DEFAULT_COEFFICIENTS,
    Coefficients,
    ModelState,
)
from placement_predictor.utils.time_utils import parse_timestamp, utcnow

logger = logging.getLogger(__name__)

_STATE_ID = 1


class ModelStateRepository(BaseRepository):
    """Read/replace access to the current ``ModelState``."""

    def initialize_default(self) -> bool:
        """Seed the model state with the default coefficients if absent.

        Returns:
            ``True`` if a row was inserted, ``False`` if one already existed.
        """
        c = DEFAULT_COEFFICIENTS
        cursor = self.execute(
            """
            INSERT OR IGNORE INTO model_state (
                state_id, cgpa_weight, projects_weight, internship_weight,
                programming_weight, communication_weight, certifications_weight,
                bias, training_samples, accuracy, last_trained_at, version
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, NULL, NULL, 1);
            """,
            (
                _STATE_ID,
                c.cgpa,
                c.projects,
                c.internship,
                c.programming,
                c.communication,
                c.certifications,
                c.bias,
            ),
        )
        inserted = cursor.rowcount == 1
        if inserted:
            logger.info("Seeded model_state with default coefficients.")
        return inserted

    def get_current(self) -> ModelState:
        """Return the current model state.

        Raises:
            LookupError: If the table has not been seeded (run ``init-db``).
        """
        row = self.fetchone("SELECT * FROM model_state WHERE state_id = ?;", (_STATE_ID,))
        if row is None:
            raise LookupError(
                "Model state not initialized. Run 'placement-predictor init-db' first."
            )
        return _row_to_state(row)

    def replace(self, state: ModelState, expected_version: int) -> ModelState:
        """Atomically replace the stored state if it is still at ``expected_version``.

        The stored version becomes ``expected_version + 1`` regardless of
        ``state.version``.

        Args:
            state:            New state to publish.
            expected_version: Version read before the new state was computed.

        Returns:
            The published state, carrying its new version.

        Raises:
            StaleModelStateError: If the stored version no longer matches.
        """
        new_version = expected_version + 1
        c = state.coefficients
        cursor = self.execute(
            """
            UPDATE model_state SET
                cgpa_weight           = ?,
                projects_weight       = ?,
                internship_weight     = ?,
                programming_weight    = ?,
                communication_weight  = ?,
                certifications_weight = ?,
                bias                  = ?,
                training_samples      = ?,
                accuracy              = ?,
                last_trained_at       = ?,
                version               = ?,
                updated_by            = ?,
                updated_at            = ?
            WHERE state_id = ? AND version = ?;
            """,
            (
                c.cgpa,
                c.projects,
                c.internship,
                c.programming,
                c.communication,
                c.certifications,
                c.bias,
                state.sample_count,
                state.accuracy,
                state.last_trained_at.isoformat() if state.last_trained_at else None,
                new_version,
                state.updated_by,
                utcnow().isoformat(),
                _STATE_ID,
                expected_version,
            ),
        )
        if cursor.rowcount != 1:
            actual = self.get_current().version
            raise StaleModelStateError(expected_version, actual)

        logger.info(
            "Model state replaced: version %d -> %d (samples=%d, accuracy=%s)",
            expected_version, new_version, state.sample_count, state.accuracy,
        )
        return state.model_copy(update={"version": new_version})


# ── Private helper ─────────────────────────────────────────────────────────────

def _row_to_state(row: sqlite3.Row) -> ModelState:
    """Convert a ``model_state`` row into a ``ModelState``."""
    return ModelState(
        coefficients=Coefficients(
            cgpa=row["cgpa_weight"],
            projects=row["projects_weight"],
            internship=row["internship_weight"],
            programming=row["programming_weight"],
            communication=row["communication_weight"],
            certifications=row["certifications_weight"],
            bias=row["bias"],
        ),
        sample_count=row["training_samples"],
        accuracy=row["accuracy"],
        last_trained_at=parse_timestamp(row["last_trained_at"]),
        version=row["version"],
        updated_by=row["updated_by"],
    )
