"""
IngestStage — load a labeled training CSV into the corpus as one batch.

Flow
----
  1. Parse and validate every row (``parse_training_csv``). Any bad row
     rejects the whole file; nothing is written.
  2. Create a ``TrainingBatch`` (UUID id, source filename, record count).
  3. Insert the batch and all its records in one transaction.

Returns the number of records ingested. The created batch is available as
``stage.batch`` after a successful run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from uuid import uuid4

from placement_predictor.db.repositories.training_repo import TrainingDataRepository
from placement_predictor.ingestion.training_csv import parse_training_csv
from placement_predictor.models.meta import RunMetadata
from placement_predictor.models.training import TrainingBatch
from placement_predictor.pipeline.base import PipelineStage

logger = logging.getLogger(__name__)


class IngestStage(PipelineStage):
    """Validate a training CSV and store it as a new batch."""

    stage_name = "ingest"
    batch: Optional[TrainingBatch] = None

    def _execute(
        self,
        run: RunMetadata,
        path: Path | str | None = None,
        triggered_by: Optional[str] = None,
        **kwargs,
    ) -> int:
        """Ingest one CSV file.

        Args:
            run:          In-progress RunMetadata (mutable).
            path:         CSV file to ingest.
            triggered_by: Uploader identity, stored on the batch.

        Returns:
            Number of records ingested.

        Raises:
            ValueError: If no path is given, the file is malformed, or it
                contains no data rows.
            FileNotFoundError: If the file does not exist.
        """
        if path is None:
            raise ValueError("IngestStage requires a 'path' to a training CSV.")
        csv_path = Path(path)

        records = parse_training_csv(csv_path)
        if not records:
            raise ValueError(f"Training CSV contains no data rows: {csv_path.name}")

        batch = TrainingBatch(
            batch_id=str(uuid4()),
            filename=csv_path.name,
            record_count=len(records),
            uploaded_by=triggered_by,
        )
        with self._connect() as conn:
            inserted = TrainingDataRepository(conn).insert_batch(batch, records)

        self.batch = batch
        logger.info(
            "Ingested %d record(s) from %s as batch %s",
            inserted, csv_path.name, batch.batch_id,
        )
        return inserted
