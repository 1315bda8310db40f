"""
Model coefficients and the persisted model state.

``Coefficients`` is the learned weight vector: six feature weights plus a
bias. It is frozen; the trainer produces a new instance rather than
mutating an existing one, so any reader holding a reference always sees a
complete, consistent vector.

``ModelState`` is the stored snapshot wrapping the current coefficients
with fit metadata. ``version`` increases by one on every replacement and
is what the store's compare-and-swap checks against.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

COEFFICIENT_NAMES: tuple[str, ...] = (
    "cgpa",
    "projects",
    "internship",
    "programming",
    "communication",
    "certifications",
)


class Coefficients(BaseModel):
    """Logistic-regression weights for the six scaled features plus bias."""

    model_config = ConfigDict(frozen=True)

    cgpa: float
    projects: float
    internship: float
    programming: float
    communication: float
    certifications: float
    bias: float

    def weights(self) -> tuple[float, ...]:
        """Feature weights in ``COEFFICIENT_NAMES`` order (bias excluded)."""
        return (
            self.cgpa,
            self.projects,
            self.internship,
            self.programming,
            self.communication,
            self.certifications,
        )

    def rounded(self, ndigits: int = 3) -> dict[str, float]:
        """Return a display dict with every value rounded to ``ndigits``."""
        return {name: round(val, ndigits) for name, val in self.model_dump().items()}


# Hand-chosen starting point. Every retrain starts from here, not from the
# previous fit.
DEFAULT_COEFFICIENTS = Coefficients(
    cgpa=0.45,
    projects=0.15,
    internship=0.20,
    programming=0.25,
    communication=0.15,
    certifications=0.10,
    bias=-2.5,
)


class ModelState(BaseModel):
    """The current model as held by the model-state store.

    Attributes:
        coefficients: Active coefficient vector used by scoring.
        sample_count: Records used in the last fit (0 before the first fit).
        accuracy: Training-set accuracy percent from the last fit; ``None``
            until the first retrain.
        last_trained_at: UTC time of the last successful retrain, or ``None``.
        version: Monotonic counter, 1 for the seeded default state.
        updated_by: Free-text identity of whoever triggered the last retrain.
    """

    model_config = ConfigDict(frozen=True)

    coefficients: Coefficients = DEFAULT_COEFFICIENTS
    sample_count: int = 0
    accuracy: Optional[float] = None
    last_trained_at: Optional[datetime] = None
    version: int = 1
    updated_by: Optional[str] = None

    @field_validator("accuracy")
    @classmethod
    def validate_accuracy(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 100.0:
            raise ValueError(f"accuracy must be a percentage in [0, 100], got {v}.")
        return v

    @property
    def is_default(self) -> bool:
        """True while the model has never been retrained."""
        return self.last_trained_at is None
