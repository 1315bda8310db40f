"""
Feature construction for the logistic placement model.

Each raw attribute is normalized to roughly 0–1, then multiplied by a fixed
per-feature scale. Only the coefficients are learned; the scales below are
constants and are shared by scoring and training so both see identical
feature values.

    feature        transform                     scale   range
    -------------  ----------------------------  ------  -------
    cgpa           cgpa / 10                     x10     0–10
    projects       min(num_projects, 10) / 10    x5      0–5
    internship     1 if has_internship else 0    x2      {0, 2}
    programming    (skill - 1) / 9               x4      0–4
    communication  (skill - 1) / 9               x2      0–2
    certifications 1 if has_certifications       x1      {0, 1}
    bias           constant                              1

The normalizers do not validate. ``AttributeSet`` rejects out-of-domain
input before it reaches this module.
"""

from __future__ import annotations

from dataclasses import dataclass

from placement_predictor.models.attributes import AttributeSet

PROJECT_CAP = 10

CGPA_SCALE = 10.0
PROJECTS_SCALE = 5.0
INTERNSHIP_VALUE = 2.0
PROGRAMMING_SCALE = 4.0
COMMUNICATION_SCALE = 2.0
CERTIFICATIONS_VALUE = 1.0


def normalize_cgpa(cgpa: float) -> float:
    """Map the 0–10 academic scale onto 0–1."""
    return cgpa / 10


def normalize_skill(skill: float) -> float:
    """Map a 1–10 rating onto 0–1 (1 -> 0.0, 10 -> 1.0)."""
    return (skill - 1) / 9


def normalize_projects(num_projects: float) -> float:
    """Map a project count onto 0–1; anything above 10 counts as 10."""
    return min(num_projects, PROJECT_CAP) / PROJECT_CAP


@dataclass(frozen=True)
class FeatureVector:
    """Scaled features for one applicant, in coefficient order, plus bias.

    Attributes:
        cgpa:           0–10.
        projects:       0–5.
        internship:     0 or 2.
        programming:    0–4.
        communication:  0–2.
        certifications: 0 or 1.
        bias:           Always 1.0.
    """

    cgpa:           float
    projects:       float
    internship:     float
    programming:    float
    communication:  float
    certifications: float
    bias:           float = 1.0

    def features(self) -> tuple[float, ...]:
        """The six learned-weight inputs, bias excluded."""
        return (
            self.cgpa,
            self.projects,
            self.internship,
            self.programming,
            self.communication,
            self.certifications,
        )


def build_feature_vector(attrs: AttributeSet) -> FeatureVector:
    """Build the scaled feature vector for an attribute set.

    Deterministic and side-effect free; recomputed on every call.
    """
    return FeatureVector(
        cgpa=normalize_cgpa(attrs.cgpa) * CGPA_SCALE,
        projects=normalize_projects(attrs.num_projects) * PROJECTS_SCALE,
        internship=INTERNSHIP_VALUE if attrs.has_internship else 0.0,
        programming=normalize_skill(attrs.programming_skill) * PROGRAMMING_SCALE,
        communication=normalize_skill(attrs.communication_skill) * COMMUNICATION_SCALE,
        certifications=CERTIFICATIONS_VALUE if attrs.has_certifications else 0.0,
    )
