"""
Placement Predictor — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (DB init, prediction, CSV import, retrain, etc.).
  5. Report result to stdout.

Install and run::

    pip install -e .
    placement-predictor --help
    placement-predictor init-db
    placement-predictor predict --cgpa 8.5 --projects 5 --internship \\
        --programming 8 --communication 7 --certifications
    placement-predictor sample-csv data/sample_training.csv
    placement-predictor import-training data/sample_training.csv
    placement-predictor retrain
    placement-predictor model-status
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="placement-predictor",
    help="Student placement predictor — scoring, recommendations and retraining.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from placement_predictor.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from placement_predictor.utils.logging import configure_logging
    configure_logging(config.logging)


def _connect(config):
    from placement_predictor.db.connection import get_connection

    return get_connection(
        config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    )


def _exit_db_not_ready(exc: sqlite3.OperationalError):
    """Report a missing or uninitialized database and exit."""
    typer.echo(
        f"[ERROR] Database not ready ({exc}). Run 'placement-predictor init-db' first.",
        err=True,
    )
    raise typer.Exit(code=1)


def _validation_messages(exc) -> list[str]:
    """Plain messages from a pydantic ValidationError, without the type prefix."""
    return [err["msg"].removeprefix("Value error, ") for err in exc.errors()]


_CONFIG_OPTION_HELP = "Path to TOML config file."


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Initialize the SQLite database, apply the schema and seed the model.

    Safe to run multiple times — all DDL uses IF NOT EXISTS and the default
    coefficients are only seeded when no model state exists yet.
    """
    from placement_predictor.db.connection import get_connection
    from placement_predictor.db.schema import (
        ALL_TABLE_NAMES,
        apply_schema,
        get_existing_indexes,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with get_connection(
        target_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)
        indexes = get_existing_indexes(conn)

    typer.echo(f"  Tables:  {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo(f"  Indexes: {len(indexes)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:    {config.database.db_path}")
    typer.echo(f"  Learning rate:    {config.model.learning_rate}")
    typer.echo(f"  Iterations:       {config.model.iterations}")
    typer.echo(f"  Min samples:      {config.model.min_training_samples}")
    typer.echo(f"  Max advice items: {config.recommendations.max_items}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("predict")
def predict_cmd(
    cgpa: float = typer.Option(..., "--cgpa", help="CGPA on a 0-10 scale."),
    projects: int = typer.Option(0, "--projects", help="Number of completed projects."),
    internship: bool = typer.Option(
        False, "--internship/--no-internship", help="Completed an internship."
    ),
    programming: int = typer.Option(..., "--programming", help="Programming skill, 1-10."),
    communication: int = typer.Option(
        ..., "--communication", help="Communication skill, 1-10."
    ),
    certifications: bool = typer.Option(
        False, "--certifications/--no-certifications", help="Holds certifications."
    ),
    user: Optional[str] = typer.Option(
        None, "--user", help="Identity recorded with the saved prediction."
    ),
    no_save: bool = typer.Option(
        False, "--no-save", help="Do not record the prediction in the history."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Predict placement probability and print improvement advice.

    Scores with the currently published model coefficients.
    """
    from pydantic import ValidationError

    from placement_predictor.db.repositories.model_state_repo import ModelStateRepository
    from placement_predictor.db.repositories.prediction_repo import PredictionRepository
    from placement_predictor.ml.predictor import predict
    from placement_predictor.models.attributes import AttributeSet
    from placement_predictor.models.prediction import PredictionRecord
    from placement_predictor.reporting.formatters import format_prediction

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        attrs = AttributeSet(
            cgpa=cgpa,
            num_projects=projects,
            has_internship=internship,
            programming_skill=programming,
            communication_skill=communication,
            has_certifications=certifications,
        )
    except ValidationError as exc:
        for msg in _validation_messages(exc):
            typer.echo(f"[ERROR] {msg}", err=True)
        raise typer.Exit(code=1)

    try:
        with _connect(config) as conn:
            state = ModelStateRepository(conn).get_current()
    except LookupError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except sqlite3.OperationalError as exc:
        _exit_db_not_ready(exc)

    result = predict(
        attrs,
        state.coefficients,
        max_recommendations=config.recommendations.max_items,
    )

    if not no_save:
        record = PredictionRecord.from_result(
            attrs, result, model_version=state.version, user_id=user
        )
        with _connect(config) as conn:
            PredictionRepository(conn).insert(record)

    if as_json:
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        typer.echo(format_prediction(result, model_version=state.version))


@app.command("import-training")
def import_training(
    csv_file: str = typer.Argument(..., help="Path to a labeled training CSV."),
    user: Optional[str] = typer.Option(
        None, "--user", help="Uploader identity recorded on the batch."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Import a labeled training CSV as a new training batch.

    \b
    Required columns:
      cgpa, num_projects, has_internship, programming_skill,
      communication_skill, has_certifications, was_placed

    Run 'sample-csv' for a template. All rows must validate or nothing is
    imported.
    """
    from placement_predictor.pipeline.ingest import IngestStage

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    csv_path = Path(csv_file)
    if not csv_path.exists():
        typer.echo(f"[ERROR] Training file not found: {csv_path}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Importing training data from: {csv_path}")
    stage = IngestStage(config=config)
    try:
        run = stage.run(triggered_by=user, path=csv_path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] Import failed:\n{exc}", err=True)
        raise typer.Exit(code=1)
    except sqlite3.OperationalError as exc:
        _exit_db_not_ready(exc)

    typer.echo(f"  Batch:   {stage.batch.batch_id}")
    typer.echo(f"  Records: {run.rows_processed}")
    typer.echo("[OK] Training data imported.")


@app.command("list-batches")
def list_batches(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """List imported training batches, newest first."""
    from placement_predictor.db.repositories.training_repo import TrainingDataRepository
    from placement_predictor.reporting.formatters import format_batches_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        with _connect(config) as conn:
            batches = TrainingDataRepository(conn).list_batches()
    except sqlite3.OperationalError as exc:
        _exit_db_not_ready(exc)

    typer.echo(format_batches_table(batches))


@app.command("show-batch")
def show_batch(
    batch_id: str = typer.Argument(..., help="Batch ID as shown by 'list-batches'."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Show one training batch and the records it owns."""
    from placement_predictor.db.repositories.training_repo import TrainingDataRepository
    from placement_predictor.reporting.formatters import format_batch_records

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        with _connect(config) as conn:
            repo = TrainingDataRepository(conn)
            batch = repo.get_batch(batch_id)
            records = repo.get_records_for_batch(batch_id) if batch else []
    except sqlite3.OperationalError as exc:
        _exit_db_not_ready(exc)

    if batch is None:
        typer.echo(f"[ERROR] Training batch not found: {batch_id}", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_batch_records(batch, records))


@app.command("delete-batch")
def delete_batch(
    batch_id: str = typer.Argument(..., help="Batch ID as shown by 'list-batches'."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Delete a training batch and all of its records.

    The published model is not changed; run 'retrain' afterwards to refit
    without the removed records.
    """
    from placement_predictor.db.repositories.training_repo import TrainingDataRepository

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        with _connect(config) as conn:
            removed = TrainingDataRepository(conn).delete_batch(batch_id)
    except KeyError:
        typer.echo(f"[ERROR] Training batch not found: {batch_id}", err=True)
        raise typer.Exit(code=1)
    except sqlite3.OperationalError as exc:
        _exit_db_not_ready(exc)

    typer.echo(f"  Removed {removed} record(s).")
    typer.echo("[OK] Batch deleted.")


@app.command("retrain")
def retrain_cmd(
    user: Optional[str] = typer.Option(
        None, "--user", help="Identity recorded as the model's updater."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Retrain the model on all training data and publish the new coefficients.

    Always starts from the default coefficients and runs the configured
    number of gradient-descent iterations.
    """
    from placement_predictor.exceptions import (
        InsufficientTrainingDataError,
        RetrainInProgressError,
        StaleModelStateError,
    )
    from placement_predictor.pipeline.retrain import RetrainStage

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    typer.echo(
        f"Retraining: iterations={config.model.iterations} "
        f"learning_rate={config.model.learning_rate}"
    )
    stage = RetrainStage(config=config)
    try:
        stage.run(triggered_by=user)
    except (
        InsufficientTrainingDataError,
        RetrainInProgressError,
        StaleModelStateError,
        LookupError,
    ) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except sqlite3.OperationalError as exc:
        _exit_db_not_ready(exc)

    summary = stage.summary
    typer.echo(f"  Samples:  {summary.samples}")
    typer.echo(f"  Accuracy: {summary.accuracy:.2f}%")
    typer.echo(f"  Version:  {summary.model_version}")
    typer.echo("  Coefficients:")
    for name, value in summary.coefficients.items():
        typer.echo(f"    {name:<15} {value:>8.3f}")
    typer.echo("[OK] Model retrained successfully.")


@app.command("model-status")
def model_status(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Show the published model coefficients and training summary."""
    from placement_predictor.db.repositories.model_state_repo import ModelStateRepository
    from placement_predictor.db.repositories.training_repo import TrainingDataRepository
    from placement_predictor.reporting.formatters import format_model_status

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        with _connect(config) as conn:
            state = ModelStateRepository(conn).get_current()
            training_repo = TrainingDataRepository(conn)
            corpus_size = training_repo.count_records()
            batch_count = training_repo.count_batches()
    except LookupError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except sqlite3.OperationalError as exc:
        _exit_db_not_ready(exc)

    typer.echo(format_model_status(state))
    typer.echo(
        f"  Records available for retraining: {corpus_size} in {batch_count} batch(es)"
    )


@app.command("history")
def history(
    page: int = typer.Option(1, "--page", min=1, help="Page number (1-based)."),
    page_size: int = typer.Option(10, "--page-size", min=1, help="Predictions per page."),
    user: Optional[str] = typer.Option(None, "--user", help="Only show this user's predictions."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Show stored predictions, newest first."""
    from placement_predictor.db.repositories.prediction_repo import PredictionRepository
    from placement_predictor.reporting.formatters import format_history_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        with _connect(config) as conn:
            repo = PredictionRepository(conn)
            total = repo.count(user_id=user)
            records = repo.list_recent(
                limit=page_size, offset=(page - 1) * page_size, user_id=user
            )
    except sqlite3.OperationalError as exc:
        _exit_db_not_ready(exc)

    typer.echo(format_history_table(records, page=page, total=total, page_size=page_size))


@app.command("stats")
def stats(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Show aggregate prediction statistics."""
    from placement_predictor.db.repositories.prediction_repo import PredictionRepository
    from placement_predictor.reporting.formatters import format_stats

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        with _connect(config) as conn:
            summary = PredictionRepository(conn).stats()
    except sqlite3.OperationalError as exc:
        _exit_db_not_ready(exc)

    typer.echo(format_stats(summary))


@app.command("sample-csv")
def sample_csv(
    output: str = typer.Argument(..., help="Where to write the sample training CSV."),
) -> None:
    """Write a 10-row sample training CSV to use as an import template."""
    from placement_predictor.ingestion.training_csv import write_sample_csv

    path = write_sample_csv(Path(output))
    typer.echo(f"[OK] Sample training data written to: {path}")


if __name__ == "__main__":
    app()
