"""
RetrainStage — refit the coefficients on the full training corpus.

Flow
----
  1. Take the process-wide retrain lock (non-blocking). A second retrain
     while one is running fails fast with ``RetrainInProgressError``.
  2. Load every labeled record and the current model-state version.
  3. Reject the run if the corpus is smaller than
     ``config.model.min_training_samples``.
  4. Fit from the default coefficients (``ml.trainer.retrain``) outside any
     DB transaction; scoring keeps using the old vector meanwhile.
  5. Publish the new vector with a compare-and-swap on the version read in
     step 2. If another writer got there first, ``StaleModelStateError``
     is raised and the stored state is left untouched.

Returns the number of records trained on. The fit summary is available as
``stage.summary`` after a successful run.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from placement_predictor.db.repositories.model_state_repo import ModelStateRepository
from placement_predictor.db.repositories.training_repo import TrainingDataRepository
from placement_predictor.exceptions import (
    InsufficientTrainingDataError,
    RetrainInProgressError,
)
from placement_predictor.ml.trainer import retrain
from placement_predictor.models.coefficients import ModelState
from placement_predictor.models.meta import RunMetadata
from placement_predictor.pipeline.base import PipelineStage
from placement_predictor.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

# Serializes retrains within this process. Cross-process races are caught
# by the version check in ModelStateRepository.replace().
_RETRAIN_LOCK = threading.Lock()


@dataclass(frozen=True)
class RetrainSummary:
    """What a successful retrain reports back.

    Attributes:
        samples:       Number of records trained on.
        accuracy:      Training-set accuracy percent, rounded to 2 places.
        coefficients:  Fitted coefficients, each rounded to 3 places.
        model_version: Version of the newly published model state.
        trained_at:    UTC time the new state was published.
    """

    samples:       int
    accuracy:      float
    coefficients:  dict[str, float]
    model_version: int
    trained_at:    datetime


class RetrainStage(PipelineStage):
    """Retrain the placement model and publish the new coefficients."""

    stage_name = "retrain"
    summary: Optional[RetrainSummary] = None

    def _execute(
        self,
        run: RunMetadata,
        triggered_by: Optional[str] = None,
        **kwargs,
    ) -> int:
        """Run one retrain.

        Args:
            run:          In-progress RunMetadata (mutable).
            triggered_by: Identity recorded as ``updated_by`` on the new state.

        Returns:
            Number of training records used.

        Raises:
            RetrainInProgressError: If another retrain holds the lock.
            InsufficientTrainingDataError: If the corpus is below the minimum.
            StaleModelStateError: If the model state changed during training.
        """
        if not _RETRAIN_LOCK.acquire(blocking=False):
            raise RetrainInProgressError()
        try:
            return self._retrain(triggered_by)
        finally:
            _RETRAIN_LOCK.release()

    def _retrain(self, triggered_by: Optional[str]) -> int:
        model_cfg = self.config.model

        with self._connect() as conn:
            records = TrainingDataRepository(conn).get_all_records()
            current = ModelStateRepository(conn).get_current()

        if len(records) < model_cfg.min_training_samples:
            raise InsufficientTrainingDataError(
                len(records), model_cfg.min_training_samples
            )

        result = retrain(
            records,
            learning_rate=model_cfg.learning_rate,
            iterations=model_cfg.iterations,
        )

        new_state = ModelState(
            coefficients=result.coefficients,
            sample_count=result.sample_count,
            accuracy=round(result.accuracy, 2),
            last_trained_at=utcnow(),
            updated_by=triggered_by,
        )
        with self._connect() as conn:
            published = ModelStateRepository(conn).replace(
                new_state, expected_version=current.version
            )

        self.summary = RetrainSummary(
            samples=published.sample_count,
            accuracy=published.accuracy,
            coefficients=published.coefficients.rounded(3),
            model_version=published.version,
            trained_at=published.last_trained_at,
        )
        logger.info(
            "Model retrained on %d sample(s): accuracy=%.2f%% version=%d",
            self.summary.samples, self.summary.accuracy, self.summary.model_version,
        )
        return result.sample_count
