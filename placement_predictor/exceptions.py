"""
Domain exceptions raised by the retrain path and the model-state store.

Input validation failures surface as ``pydantic.ValidationError`` and
malformed training files as ``ValueError``; the classes here cover the
conditions callers need to tell apart.
"""

from __future__ import annotations


class InsufficientTrainingDataError(RuntimeError):
    """Raised when a retrain is requested with too few labeled records.

    Attributes:
        sample_count: Number of records available.
        minimum:      Configured minimum (``config.model.min_training_samples``).
    """

    def __init__(self, sample_count: int, minimum: int) -> None:
        self.sample_count = sample_count
        self.minimum      = minimum
        super().__init__(
            f"Need at least {minimum} training samples to retrain the model "
            f"(found {sample_count})."
        )


class RetrainInProgressError(RuntimeError):
    """Raised when a retrain is requested while another one is running."""

    def __init__(self) -> None:
        super().__init__(
            "A retrain is already in progress. Wait for it to finish and try again."
        )


class StaleModelStateError(RuntimeError):
    """Raised when a model-state write loses the compare-and-swap race.

    Attributes:
        expected_version: Version the writer read before training.
        actual_version:   Version found in the store at write time.
    """

    def __init__(self, expected_version: int, actual_version: int) -> None:
        self.expected_version = expected_version
        self.actual_version   = actual_version
        super().__init__(
            f"Model state changed during retrain (expected version "
            f"{expected_version}, found {actual_version}). Re-run the retrain."
        )
