"""
Training corpus models.

A ``TrainingBatch`` is created once per uploaded file and owns the
``LabeledRecord`` rows parsed from it. Records are immutable after
ingestion and are only ever removed together with their batch.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from placement_predictor.models.attributes import AttributeSet


class LabeledRecord(AttributeSet):
    """An applicant profile with its known placement outcome.

    Attributes:
        record_id: Auto-assigned DB PK; ``None`` before insertion.
        was_placed: The training label.
        batch_id: Owning ``TrainingBatch.batch_id``; ``None`` until ingested.
    """

    record_id: Optional[int] = None
    was_placed: bool
    batch_id: Optional[str] = None

    def attributes(self) -> AttributeSet:
        """Strip the label and bookkeeping fields."""
        return AttributeSet(**self.model_dump(include=set(AttributeSet.model_fields)))


class TrainingBatch(BaseModel):
    """One ingestion event.

    Attributes:
        batch_id: UUID4 string.
        filename: Name of the uploaded source file.
        record_count: Number of records ingested from the file.
        uploaded_by: Free-text identity of the uploader, if known.
        created_at: UTC time of ingestion; filled by the DB when ``None``.
    """

    model_config = ConfigDict(frozen=True)

    batch_id: str
    filename: str
    record_count: int
    uploaded_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("record_count")
    @classmethod
    def validate_record_count(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"record_count must be non-negative, got {v}.")
        return v
