"""
Repository for the prediction history (``predictions`` table).

Each row stores the six submitted attributes, the score, the label, the
recommendations as a JSON array, and the model version that produced them.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Optional

from placement_predictor.db.repositories.base import BaseRepository
from placement_predictor.models.attributes import AttributeSet
from placement_predictor.models.prediction import (
    PredictionRecord,
    PredictionStats,
    Recommendation,
)
from placement_predictor.utils.time_utils import parse_timestamp

logger = logging.getLogger(__name__)


class PredictionRepository(BaseRepository):
    """Read/write access to ``predictions``."""

    def insert(self, record: PredictionRecord) -> int:
        """Insert a prediction and return its ``prediction_id``."""
        a = record.attributes
        self.execute(
            """
            INSERT INTO predictions (
                user_id, cgpa, num_projects, has_internship,
                programming_skill, communication_skill, has_certifications,
                probability, prediction_result, recommendations, model_version
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                record.user_id,
                a.cgpa,
                a.num_projects,
                int(a.has_internship),
                a.programming_skill,
                a.communication_skill,
                int(a.has_certifications),
                record.probability,
                record.prediction.value,
                json.dumps([r.model_dump(mode="json") for r in record.recommendations]),
                record.model_version,
            ),
        )
        return self.last_insert_rowid()

    def get_by_id(self, prediction_id: int) -> Optional[PredictionRecord]:
        """Fetch one prediction by PK, or ``None``."""
        row = self.fetchone(
            "SELECT * FROM predictions WHERE prediction_id = ?;", (prediction_id,)
        )
        return _row_to_prediction(row) if row else None

    def list_recent(
        self,
        limit: int = 10,
        offset: int = 0,
        user_id: Optional[str] = None,
    ) -> list[PredictionRecord]:
        """Return one page of predictions, newest first.

        Args:
            limit:   Page size.
            offset:  Rows to skip (``(page - 1) * page_size``).
            user_id: If given, restrict to this user's predictions.
        """
        if user_id is not None:
            rows = self.fetchall(
                """
                SELECT * FROM predictions
                WHERE user_id = ?
                ORDER BY created_at DESC, prediction_id DESC
                LIMIT ? OFFSET ?;
                """,
                (user_id, limit, offset),
            )
        else:
            rows = self.fetchall(
                """
                SELECT * FROM predictions
                ORDER BY created_at DESC, prediction_id DESC
                LIMIT ? OFFSET ?;
                """,
                (limit, offset),
            )
        return [_row_to_prediction(r) for r in rows]

    def get_latest_for_user(self, user_id: str) -> Optional[PredictionRecord]:
        """Return a user's most recent prediction, or ``None``."""
        page = self.list_recent(limit=1, user_id=user_id)
        return page[0] if page else None

    def count(self, user_id: Optional[str] = None) -> int:
        """Return the number of stored predictions, optionally for one user."""
        if user_id is not None:
            row = self.fetchone(
                "SELECT COUNT(*) AS n FROM predictions WHERE user_id = ?;", (user_id,)
            )
        else:
            row = self.fetchone("SELECT COUNT(*) AS n FROM predictions;")
        assert row is not None
        return int(row["n"])

    def stats(self) -> PredictionStats:
        """Aggregate totals over the whole history.

        ``avg_probability`` is rounded half up to an integer; it is 0 when
        there are no predictions.
        """
        row = self.fetchone(
            """
            SELECT
                COUNT(*)                                              AS total,
                COALESCE(AVG(probability), 0)                         AS avg_prob,
                COALESCE(SUM(prediction_result = 'Placed'), 0)        AS placed,
                COUNT(DISTINCT user_id)                               AS users
            FROM predictions;
            """
        )
        assert row is not None
        return PredictionStats(
            total_predictions=int(row["total"]),
            avg_probability=int(float(row["avg_prob"]) + 0.5),
            placed_count=int(row["placed"]),
            distinct_users=int(row["users"]),
        )


# ── Private helper ─────────────────────────────────────────────────────────────

def _row_to_prediction(row: sqlite3.Row) -> PredictionRecord:
    return PredictionRecord(
        prediction_id=row["prediction_id"],
        user_id=row["user_id"],
        attributes=AttributeSet(
            cgpa=row["cgpa"],
            num_projects=row["num_projects"],
            has_internship=bool(row["has_internship"]),
            programming_skill=row["programming_skill"],
            communication_skill=row["communication_skill"],
            has_certifications=bool(row["has_certifications"]),
        ),
        probability=row["probability"],
        prediction=row["prediction_result"],
        recommendations=[
            Recommendation(**r) for r in json.loads(row["recommendations"])
        ],
        model_version=row["model_version"],
        created_at=parse_timestamp(row["created_at"]),
    )
