"""
Tests for placement_predictor.ingestion.training_csv — training CSV validation.

Covers:
  - parse_training_csv(): valid file, header normalization, missing columns,
    boolean spellings, blank defaults, domain errors, row numbering, empty file
  - write_sample_csv() output parses cleanly
"""

from __future__ import annotations

from pathlib import Path

import pytest

from placement_predictor.ingestion.training_csv import (
    REQUIRED_CSV_COLUMNS,
    SAMPLE_TRAINING_CSV,
    parse_training_csv,
    write_sample_csv,
)
from placement_predictor.models.training import LabeledRecord


# ── Helpers ────────────────────────────────────────────────────────────────────

HEADER = (
    "cgpa,num_projects,has_internship,programming_skill,"
    "communication_skill,has_certifications,was_placed"
)


def _write_csv(tmp_path: Path, content: str, name: str = "training.csv") -> Path:
    """Write CSV content to a temp file and return the path."""
    p = tmp_path / name
    p.write_text(content, encoding="utf-8")
    return p


def _csv(*rows: str) -> str:
    return HEADER + "\n" + "\n".join(rows) + "\n"


# ── Happy path ─────────────────────────────────────────────────────────────────

class TestParseTrainingCsvValid:
    def test_returns_labeled_records(self, tmp_path):
        path = _write_csv(tmp_path, _csv("8.5,5,true,8,7,true,true"))
        records = parse_training_csv(path)
        assert len(records) == 1
        r = records[0]
        assert isinstance(r, LabeledRecord)
        assert r.cgpa == 8.5
        assert r.num_projects == 5
        assert r.has_internship is True
        assert r.programming_skill == 8
        assert r.communication_skill == 7
        assert r.has_certifications is True
        assert r.was_placed is True
        assert r.batch_id is None

    def test_headers_case_insensitive_and_trimmed(self, tmp_path):
        header = " CGPA , Num_Projects,HAS_INTERNSHIP,programming_skill,communication_skill,has_certifications, Was_Placed "
        path = _write_csv(tmp_path, header + "\n7.0,3,false,6,6,false,true\n")
        assert len(parse_training_csv(path)) == 1

    def test_extra_columns_ignored(self, tmp_path):
        content = HEADER + ",student_name\n7.0,3,no,6,6,no,yes,Alice\n"
        records = parse_training_csv(_write_csv(tmp_path, content))
        assert records[0].was_placed is True

    @pytest.mark.parametrize("raw, expected", [
        ("true", True), ("TRUE", True), ("1", True), ("yes", True), ("t", True), ("Y", True),
        ("false", False), ("0", False), ("No", False), ("f", False), ("n", False),
    ])
    def test_boolean_spellings(self, tmp_path, raw, expected):
        path = _write_csv(tmp_path, _csv(f"7.0,3,{raw},6,6,{raw},{raw}"))
        r = parse_training_csv(path)[0]
        assert r.has_internship is expected
        assert r.has_certifications is expected
        assert r.was_placed is expected

    def test_blank_optional_fields_default(self, tmp_path):
        path = _write_csv(tmp_path, _csv("7.0,,,6,6,,false"))
        r = parse_training_csv(path)[0]
        assert r.num_projects == 0
        assert r.has_internship is False
        assert r.has_certifications is False

    def test_preserves_file_order(self, tmp_path):
        path = _write_csv(tmp_path, _csv("6.0,1,false,4,4,false,false", "9.0,6,true,9,8,true,true"))
        assert [r.cgpa for r in parse_training_csv(path)] == [6.0, 9.0]

    def test_header_only_returns_empty(self, tmp_path):
        path = _write_csv(tmp_path, HEADER + "\n")
        assert parse_training_csv(path) == []


# ── File-level errors ──────────────────────────────────────────────────────────

class TestParseTrainingCsvFileErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_training_csv(tmp_path / "nope.csv")

    def test_non_csv_extension(self, tmp_path):
        path = _write_csv(tmp_path, _csv("7.0,3,true,6,6,true,true"), name="training.txt")
        with pytest.raises(ValueError, match="Please upload a CSV file"):
            parse_training_csv(path)

    def test_missing_columns_listed(self, tmp_path):
        path = _write_csv(tmp_path, "cgpa,num_projects\n7.0,3\n")
        with pytest.raises(ValueError, match="CSV must contain") as exc_info:
            parse_training_csv(path)
        assert "was_placed" in str(exc_info.value)
        assert "programming_skill" in str(exc_info.value)

    def test_empty_file(self, tmp_path):
        path = _write_csv(tmp_path, "")
        with pytest.raises(ValueError):
            parse_training_csv(path)


# ── Row-level errors ───────────────────────────────────────────────────────────

class TestParseTrainingCsvRowErrors:
    def test_cgpa_out_of_range(self, tmp_path):
        path = _write_csv(tmp_path, _csv("11.0,3,true,6,6,true,true"))
        with pytest.raises(ValueError, match="CGPA must be between 0 and 10"):
            parse_training_csv(path)

    def test_skill_out_of_range(self, tmp_path):
        path = _write_csv(tmp_path, _csv("7.0,3,true,0,6,true,true"))
        with pytest.raises(ValueError, match="Skill ratings must be between 1 and 10"):
            parse_training_csv(path)

    def test_unrecognized_boolean(self, tmp_path):
        path = _write_csv(tmp_path, _csv("7.0,3,maybe,6,6,true,true"))
        with pytest.raises(ValueError, match="Invalid boolean for 'has_internship'"):
            parse_training_csv(path)

    def test_blank_label_rejected(self, tmp_path):
        path = _write_csv(tmp_path, _csv("7.0,3,true,6,6,true,"))
        with pytest.raises(ValueError, match="was_placed"):
            parse_training_csv(path)

    def test_non_numeric(self, tmp_path):
        path = _write_csv(tmp_path, _csv("seven,3,true,6,6,true,true"))
        with pytest.raises(ValueError, match="Invalid value for 'cgpa'"):
            parse_training_csv(path)

    def test_row_numbers_count_header(self, tmp_path):
        path = _write_csv(tmp_path, _csv(
            "7.0,3,true,6,6,true,true",
            "7.0,3,true,6,6,true,true",
            "7.0,3,true,99,6,true,true",
        ))
        with pytest.raises(ValueError, match="Row 4:"):
            parse_training_csv(path)

    def test_only_first_ten_errors_shown(self, tmp_path):
        bad_rows = ["12.0,3,true,6,6,true,true"] * 12
        path = _write_csv(tmp_path, _csv(*bad_rows))
        with pytest.raises(ValueError) as exc_info:
            parse_training_csv(path)
        msg = str(exc_info.value)
        assert "12 row(s) failed validation" in msg
        assert "Row 11:" in msg
        assert "Row 12:" not in msg
        assert "2 more" in msg

    def test_one_bad_row_rejects_file(self, tmp_path):
        path = _write_csv(tmp_path, _csv("7.0,3,true,6,6,true,true", "7.0,-1,true,6,6,true,true"))
        with pytest.raises(ValueError, match="Row 3:"):
            parse_training_csv(path)


# ── Sample file ────────────────────────────────────────────────────────────────

class TestSampleCsv:
    def test_required_columns_in_sample_header(self):
        header = SAMPLE_TRAINING_CSV.splitlines()[0].split(",")
        assert set(header) == REQUIRED_CSV_COLUMNS

    def test_sample_parses(self, tmp_path):
        path = write_sample_csv(tmp_path / "out" / "sample.csv")
        records = parse_training_csv(path)
        assert len(records) == 10
        assert sum(r.was_placed for r in records) == 7
