"""
Recommendation rules.

Each rule pairs a predicate over the raw attributes with a fixed piece of
advice. Rules are independent, not mutually exclusive: any subset may fire
for a given applicant. Declaration order matters only as the tie-break
between rules of equal priority.

    condition                                      priority  category
    ---------------------------------------------  --------  -----------
    cgpa < 7                                       high      Academics
    programming_skill < 6                          high      Technical
    not has_internship                             high      Experience
    num_projects < 3                               medium    Portfolio
    communication_skill < 6                        medium    Soft Skills
    not has_certifications                         low       Credentials
    programming_skill >= 6 and num_projects >= 3   low       Community
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from placement_predictor.models.attributes import AttributeSet
from placement_predictor.models.prediction import Priority, Recommendation

CGPA_TARGET = 7.0
SKILL_TARGET = 6
PROJECTS_TARGET = 3


@dataclass(frozen=True)
class Rule:
    """A named predicate and the advice it produces when it fires."""

    name:           str
    condition:      Callable[[AttributeSet], bool]
    recommendation: Recommendation


RULES: tuple[Rule, ...] = (
    Rule(
        name="low_cgpa",
        condition=lambda a: a.cgpa < CGPA_TARGET,
        recommendation=Recommendation(
            title="Improve Academic Performance",
            description=(
                "Focus on improving your CGPA. Strong academics are often a key "
                "filter for placement eligibility."
            ),
            priority=Priority.HIGH,
            category="Academics",
        ),
    ),
    Rule(
        name="low_programming",
        condition=lambda a: a.programming_skill < SKILL_TARGET,
        recommendation=Recommendation(
            title="Enhance Programming Skills",
            description=(
                "Practice DSA on LeetCode/HackerRank. Aim for at least 200+ problems. "
                "Focus on arrays, strings, trees, and graphs."
            ),
            priority=Priority.HIGH,
            category="Technical",
        ),
    ),
    Rule(
        name="no_internship",
        condition=lambda a: not a.has_internship,
        recommendation=Recommendation(
            title="Gain Internship Experience",
            description=(
                "Apply for summer internships. Real-world experience significantly "
                "boosts placement chances."
            ),
            priority=Priority.HIGH,
            category="Experience",
        ),
    ),
    Rule(
        name="few_projects",
        condition=lambda a: a.num_projects < PROJECTS_TARGET,
        recommendation=Recommendation(
            title="Build More Projects",
            description=(
                "Create at least 3-4 substantial projects showcasing different "
                "technologies. Include a full-stack project."
            ),
            priority=Priority.MEDIUM,
            category="Portfolio",
        ),
    ),
    Rule(
        name="low_communication",
        condition=lambda a: a.communication_skill < SKILL_TARGET,
        recommendation=Recommendation(
            title="Improve Communication Skills",
            description=(
                "Practice mock interviews, join public speaking clubs, and work on "
                "articulating technical concepts clearly."
            ),
            priority=Priority.MEDIUM,
            category="Soft Skills",
        ),
    ),
    Rule(
        name="no_certifications",
        condition=lambda a: not a.has_certifications,
        recommendation=Recommendation(
            title="Obtain Relevant Certifications",
            description=(
                "Consider AWS, Google Cloud, or industry-specific certifications "
                "to validate your skills."
            ),
            priority=Priority.LOW,
            category="Credentials",
        ),
    ),
    Rule(
        name="open_source_ready",
        condition=lambda a: (
            a.programming_skill >= SKILL_TARGET and a.num_projects >= PROJECTS_TARGET
        ),
        recommendation=Recommendation(
            title="Contribute to Open Source",
            description=(
                "Start contributing to open source projects to gain visibility and "
                "demonstrate collaboration skills."
            ),
            priority=Priority.LOW,
            category="Community",
        ),
    ),
)


def fired_rules(attrs: AttributeSet, rules: tuple[Rule, ...] = RULES) -> list[Rule]:
    """Return every rule whose condition holds, in declaration order."""
    return [rule for rule in rules if rule.condition(attrs)]
