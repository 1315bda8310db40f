"""
ASCII terminal formatters for CLI commands.

All formatters accept domain models and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from datetime import datetime

from placement_predictor.models.coefficients import COEFFICIENT_NAMES, ModelState
from placement_predictor.models.prediction import (
    PredictionRecord,
    PredictionResult,
    PredictionStats,
    Recommendation,
)
from placement_predictor.models.training import LabeledRecord, TrainingBatch

NO_RECOMMENDATIONS_MESSAGE = "Great profile! Keep up the excellent work."


def _fmt_time(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


# ── Prediction ────────────────────────────────────────────────────────────────


def format_recommendations(recommendations: list[Recommendation]) -> str:
    """Numbered advice list, or a congratulation line when empty."""
    if not recommendations:
        return f"  {NO_RECOMMENDATIONS_MESSAGE}"

    lines: list[str] = []
    for i, rec in enumerate(recommendations, start=1):
        lines.append(f"  {i}. [{rec.priority.value.upper():<6}] {rec.title}  ({rec.category})")
        lines.append(f"       {rec.description}")
    return "\n".join(lines)


def format_prediction(result: PredictionResult, model_version: int | None = None) -> str:
    """Format one prediction response.

    Example::

        === Placement Prediction ===
          Probability: 88%
          Prediction:  Placed
          Model:       version 3

        Recommendations:
          1. [LOW   ] Contribute to Open Source  (Community)
               Your profile is strong! ...
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== Placement Prediction ===")
    lines.append(f"  Probability: {result.probability}%")
    lines.append(f"  Prediction:  {result.prediction.value}")
    if model_version is not None:
        lines.append(f"  Model:       version {model_version}")
    lines.append("")
    lines.append("Recommendations:")
    lines.append(format_recommendations(result.recommendations))
    return "\n".join(lines)


# ── Model status ──────────────────────────────────────────────────────────────


def format_model_status(state: ModelState) -> str:
    """Format the current model state with its coefficients."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Model Status ===")
    if state.is_default:
        lines.append("  Status:          default coefficients (never retrained)")
    else:
        lines.append(f"  Last trained:    {_fmt_time(state.last_trained_at)}")
        if state.updated_by:
            lines.append(f"  Trained by:      {state.updated_by}")
    lines.append(f"  Version:         {state.version}")
    lines.append(f"  Training samples:{state.sample_count:>6}")
    accuracy = f"{state.accuracy:.2f}%" if state.accuracy is not None else "-"
    lines.append(f"  Accuracy:        {accuracy}")
    lines.append("")
    lines.append("  Coefficients:")
    rounded = state.coefficients.rounded(3)
    for name in (*COEFFICIENT_NAMES, "bias"):
        lines.append(f"    {name:<15} {rounded[name]:>8.3f}")
    return "\n".join(lines)


# ── Training batches ──────────────────────────────────────────────────────────


def format_batches_table(batches: list[TrainingBatch]) -> str:
    """Format training batches, newest first."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Training Batches ===")
    if not batches:
        lines.append("  (no training data - run 'import-training' first)")
        return "\n".join(lines)

    header = f"  {'Batch ID':<36}  {'File':<24}  {'Records':>7}  {'Uploaded':<16}  By"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for b in batches:
        lines.append(
            f"  {b.batch_id:<36}  {b.filename[:24]:<24}  {b.record_count:>7}  "
            f"{_fmt_time(b.created_at):<16}  {b.uploaded_by or '-'}"
        )
    total = sum(b.record_count for b in batches)
    lines.append("")
    lines.append(f"  {len(batches)} batch(es), {total} record(s)")
    return "\n".join(lines)


def format_batch_records(batch: TrainingBatch, records: list[LabeledRecord]) -> str:
    """Format one batch header followed by its labeled records."""
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== Training Batch {batch.batch_id} ===")
    lines.append(f"  File:     {batch.filename}")
    lines.append(f"  Uploaded: {_fmt_time(batch.created_at)} by {batch.uploaded_by or '-'}")
    lines.append(f"  Records:  {len(records)}")
    if not records:
        return "\n".join(lines)

    lines.append("")
    header = (
        f"  {'ID':>5}  {'CGPA':>5}  {'Proj':>4}  {'Intern':<6}  "
        f"{'Prog':>4}  {'Comm':>4}  {'Cert':<4}  Placed"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for r in records:
        lines.append(
            f"  {r.record_id or '-':>5}  {r.cgpa:>5.1f}  {r.num_projects:>4}  "
            f"{_yes_no(r.has_internship):<6}  {r.programming_skill:>4}  "
            f"{r.communication_skill:>4}  {_yes_no(r.has_certifications):<4}  "
            f"{_yes_no(r.was_placed)}"
        )
    return "\n".join(lines)


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


# ── History ───────────────────────────────────────────────────────────────────


def format_history_table(
    records: list[PredictionRecord],
    page: int,
    total: int,
    page_size: int,
) -> str:
    """Format one page of the prediction history."""
    pages = max(1, (total + page_size - 1) // page_size)
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== Prediction History (page {page}/{pages}, {total} total) ===")
    if not records:
        lines.append("  (no predictions)")
        return "\n".join(lines)

    header = (
        f"  {'ID':>5}  {'When':<16}  {'User':<16}  {'CGPA':>5}  "
        f"{'Prob':>5}  {'Result':<10}  Model"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for r in records:
        lines.append(
            f"  {r.prediction_id or '-':>5}  {_fmt_time(r.created_at):<16}  "
            f"{(r.user_id or '-')[:16]:<16}  {r.attributes.cgpa:>5.1f}  "
            f"{r.probability:>4}%  {r.prediction.value:<10}  v{r.model_version}"
        )
    return "\n".join(lines)


def format_stats(stats: PredictionStats) -> str:
    """Format aggregate prediction statistics."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Prediction Statistics ===")
    lines.append(f"  Total predictions:   {stats.total_predictions}")
    lines.append(f"  Placed predictions:  {stats.placed_count}")
    lines.append(f"  Average probability: {stats.avg_probability}%")
    lines.append(f"  Distinct users:      {stats.distinct_users}")
    return "\n".join(lines)
