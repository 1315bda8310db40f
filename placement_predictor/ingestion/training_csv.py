"""
CSV parser for labeled training uploads.

Format — comma delimited, with a header row. Header names are matched
case-insensitively after trimming whitespace.

Required columns:
  cgpa, num_projects, has_internship, programming_skill,
  communication_skill, has_certifications, was_placed

Value rules:
  cgpa                       → real, 0–10
  num_projects               → integer >= 0; empty string → 0
  programming_skill          → integer, 1–10
  communication_skill        → integer, 1–10
  has_internship             → boolean; empty string → False
  has_certifications         → boolean; empty string → False
  was_placed                 → boolean; required

Boolean columns:
  true/1/yes/t/y   → True
  false/0/no/f/n   → False
  anything else    → row error

Download a template with ``placement-predictor sample-csv PATH``.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from placement_predictor.models.training import LabeledRecord

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = frozenset({
    "cgpa", "num_projects", "has_internship", "programming_skill",
    "communication_skill", "has_certifications", "was_placed",
})

_TRUE_VALUES = frozenset({"true", "1", "yes", "t", "y"})
_FALSE_VALUES = frozenset({"false", "0", "no", "f", "n"})

SAMPLE_TRAINING_CSV = """\
cgpa,num_projects,has_internship,programming_skill,communication_skill,has_certifications,was_placed
8.5,5,true,8,7,true,true
7.2,3,false,6,6,false,true
6.5,2,false,5,5,false,false
9.0,6,true,9,8,true,true
7.8,4,true,7,7,true,true
6.0,1,false,4,4,false,false
8.2,4,true,8,6,true,true
7.0,3,false,6,7,false,true
5.5,1,false,3,3,false,false
8.8,5,true,9,8,true,true
"""


def parse_training_csv(path: Path) -> list[LabeledRecord]:
    """Parse a training CSV into validated :class:`LabeledRecord` objects.

    All rows are validated before any are returned. If **any** row fails,
    a single :class:`ValueError` is raised listing the first 10 failures.

    Args:
        path: Path to a ``.csv`` file.

    Returns:
        Validated records in file order (``batch_id`` unset).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is not ``.csv``, required columns are
            missing, or any row fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Training CSV file not found: {path}")
    if path.suffix.lower() != ".csv":
        raise ValueError(f"Please upload a CSV file (got '{path.name}').")

    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        reader.fieldnames = [h.strip().lower() for h in reader.fieldnames]
        actual_cols = set(reader.fieldnames)
        missing = REQUIRED_CSV_COLUMNS - actual_cols
        if missing:
            raise ValueError(
                f"CSV must contain: {', '.join(sorted(missing))}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        rows = list(reader)

    if not rows:
        logger.warning("Training CSV is empty (header only): %s", path)
        return []

    records: list[LabeledRecord] = []
    errors: list[tuple[int, str]] = []

    for i, row in enumerate(rows):
        line_no = i + 2  # 1-based, skip header row
        try:
            records.append(_row_to_record(row))
        except (ValueError, ValidationError) as exc:
            errors.append((line_no, str(exc)))

    if errors:
        max_shown = 10
        detail = "\n".join(f"  Row {ln}: {msg}" for ln, msg in errors[:max_shown])
        suffix = f"\n  … and {len(errors) - max_shown} more" if len(errors) > max_shown else ""
        raise ValueError(
            f"{len(errors)} row(s) failed validation in {path.name}:\n{detail}{suffix}"
        )

    logger.info("Parsed %d training records from %s", len(records), path.name)
    return records


def write_sample_csv(path: Path) -> Path:
    """Write the 10-row sample training file to ``path`` and return it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SAMPLE_TRAINING_CSV, encoding="utf-8")
    return path


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_record(row: dict[str, Optional[str]]) -> LabeledRecord:
    """Convert a CSV row dict to a validated :class:`LabeledRecord`."""
    label = _parse_bool(row, "was_placed")
    if label is None:
        raise ValueError("Required field 'was_placed' is empty.")

    return LabeledRecord(
        cgpa=_parse_number(row, "cgpa", float),
        num_projects=_parse_number(row, "num_projects", int, default=0),
        has_internship=bool(_parse_bool(row, "has_internship")),
        programming_skill=_parse_number(row, "programming_skill", int),
        communication_skill=_parse_number(row, "communication_skill", int),
        has_certifications=bool(_parse_bool(row, "has_certifications")),
        was_placed=label,
    )


def _opt(row: dict[str, Optional[str]], key: str) -> Optional[str]:
    """Return a stripped field value, or None if absent/empty."""
    v = (row.get(key) or "").strip()
    return v if v else None


def _parse_number(row, key, cast, default=None):
    """Parse a numeric field with ``cast``; empty uses ``default`` or raises."""
    v = _opt(row, key)
    if v is None:
        if default is None:
            raise ValueError(f"Required field '{key}' is empty.")
        return default
    try:
        return cast(v)
    except ValueError:
        kind = "an integer" if cast is int else "a number"
        raise ValueError(f"Invalid value for '{key}': '{v}'. Expected {kind}.")


def _parse_bool(row: dict[str, Optional[str]], key: str) -> Optional[bool]:
    """Parse a boolean-ish field; None when empty."""
    v = _opt(row, key)
    if v is None:
        return None
    lowered = v.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(
        f"Invalid boolean for '{key}': '{v}'. Use true/false, 1/0, or yes/no."
    )
