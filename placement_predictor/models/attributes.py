"""
Applicant attribute model — the six inputs to scoring and recommendations.

``AttributeSet`` is the validation boundary: out-of-domain values are
rejected here, at construction time, so the normalizer, scorer and
recommendation rules downstream can assume in-range input and never check
bounds themselves.

Domains:
  - ``cgpa``                 real, 0–10 inclusive
  - ``num_projects``         integer, >= 0 (no upper bound; scoring caps at 10)
  - ``programming_skill``    integer rating, 1–10 inclusive
  - ``communication_skill``  integer rating, 1–10 inclusive
  - ``has_internship`` / ``has_certifications``  booleans
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

CGPA_MIN, CGPA_MAX = 0.0, 10.0
SKILL_MIN, SKILL_MAX = 1, 10


class AttributeSet(BaseModel):
    """One applicant profile as submitted for a prediction.

    Attributes:
        cgpa: Cumulative grade point average on a 0–10 scale.
        num_projects: Number of completed projects.
        has_internship: Whether the applicant completed an internship.
        programming_skill: Self-rated programming skill, 1–10.
        communication_skill: Self-rated communication skill, 1–10.
        has_certifications: Whether the applicant holds relevant certifications.
    """

    model_config = ConfigDict(frozen=True)

    cgpa: float
    num_projects: int
    has_internship: bool = False
    programming_skill: int
    communication_skill: int
    has_certifications: bool = False

    @field_validator("cgpa")
    @classmethod
    def validate_cgpa(cls, v: float) -> float:
        if not CGPA_MIN <= v <= CGPA_MAX:
            raise ValueError(f"CGPA must be between 0 and 10, got {v}.")
        return v

    @field_validator("num_projects")
    @classmethod
    def validate_num_projects(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Number of projects must be a positive number, got {v}.")
        return v

    @field_validator("programming_skill", "communication_skill")
    @classmethod
    def validate_skill(cls, v: int) -> int:
        if not SKILL_MIN <= v <= SKILL_MAX:
            raise ValueError(f"Skill ratings must be between 1 and 10, got {v}.")
        return v
