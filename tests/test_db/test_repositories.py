"""Tests for repository round-trip operations using in-memory SQLite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from placement_predictor.db.repositories.model_state_repo import ModelStateRepository
from placement_predictor.db.repositories.prediction_repo import PredictionRepository
from placement_predictor.db.repositories.run_repo import RunMetadataRepository
from placement_predictor.db.repositories.training_repo import TrainingDataRepository
from placement_predictor.exceptions import StaleModelStateError
from placement_predictor.ml.predictor import predict
from placement_predictor.models.attributes import AttributeSet
from placement_predictor.models.coefficients import (
    DEFAULT_COEFFICIENTS,
    Coefficients,
    ModelState,
)
from placement_predictor.models.meta import RunMetadata
from placement_predictor.models.prediction import PredictionLabel, PredictionRecord
from placement_predictor.models.training import LabeledRecord, TrainingBatch


# ── Helpers ────────────────────────────────────────────────────────────────────

def _records(n: int, placed: bool = True) -> list[LabeledRecord]:
    return [
        LabeledRecord(
            cgpa=5.0 + i * 0.1,
            num_projects=i,
            has_internship=bool(i % 2),
            programming_skill=5,
            communication_skill=6,
            has_certifications=False,
            was_placed=placed,
        )
        for i in range(n)
    ]


def _insert_batch(conn, batch_id: str, n: int, created_at=None) -> TrainingBatch:
    batch = TrainingBatch(
        batch_id=batch_id,
        filename=f"{batch_id}.csv",
        record_count=n,
        uploaded_by="admin",
        created_at=created_at,
    )
    TrainingDataRepository(conn).insert_batch(batch, _records(n))
    return batch


def _prediction(attrs: AttributeSet, user_id=None, version: int = 1) -> PredictionRecord:
    result = predict(attrs, DEFAULT_COEFFICIENTS)
    return PredictionRecord.from_result(attrs, result, model_version=version, user_id=user_id)


_FITTED = Coefficients(
    cgpa=0.6, projects=0.1, internship=0.3, programming=0.2,
    communication=0.1, certifications=0.05, bias=-3.0,
)


# ── Model state ────────────────────────────────────────────────────────────────

class TestModelStateRepository:
    def test_seeded_default(self, in_memory_db):
        state = ModelStateRepository(in_memory_db).get_current()
        assert state.coefficients == DEFAULT_COEFFICIENTS
        assert state.version == 1
        assert state.is_default

    def test_initialize_default_is_idempotent(self, in_memory_db):
        assert ModelStateRepository(in_memory_db).initialize_default() is False

    def test_replace_bumps_version(self, in_memory_db):
        repo = ModelStateRepository(in_memory_db)
        trained_at = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        new_state = ModelState(
            coefficients=_FITTED,
            sample_count=12,
            accuracy=83.33,
            last_trained_at=trained_at,
            updated_by="admin",
        )
        published = repo.replace(new_state, expected_version=1)
        assert published.version == 2

        current = repo.get_current()
        assert current.coefficients == _FITTED
        assert current.sample_count == 12
        assert current.accuracy == 83.33
        assert current.last_trained_at == trained_at
        assert current.updated_by == "admin"
        assert current.version == 2
        assert not current.is_default

    def test_stale_version_rejected(self, in_memory_db):
        repo = ModelStateRepository(in_memory_db)
        repo.replace(ModelState(coefficients=_FITTED, sample_count=10), expected_version=1)

        with pytest.raises(StaleModelStateError) as exc_info:
            repo.replace(ModelState(sample_count=11), expected_version=1)
        assert exc_info.value.expected_version == 1
        assert exc_info.value.actual_version == 2
        # losing writer changed nothing
        assert repo.get_current().coefficients == _FITTED

    def test_get_current_unseeded_raises(self, in_memory_db):
        in_memory_db.execute("DELETE FROM model_state;")
        with pytest.raises(LookupError):
            ModelStateRepository(in_memory_db).get_current()


# ── Training corpus ───────────────────────────────────────────────────────────

class TestTrainingDataRepository:
    def test_insert_and_fetch(self, in_memory_db):
        _insert_batch(in_memory_db, "b1", 3)
        repo = TrainingDataRepository(in_memory_db)
        records = repo.get_all_records()
        assert len(records) == 3
        assert all(r.batch_id == "b1" for r in records)
        assert all(r.record_id is not None for r in records)
        assert [r.num_projects for r in records] == [0, 1, 2]
        assert records[1].has_internship is True
        assert repo.get_batch("b1").uploaded_by == "admin"

    def test_count_mismatch_rejected(self, in_memory_db):
        batch = TrainingBatch(batch_id="b1", filename="b1.csv", record_count=5)
        with pytest.raises(ValueError):
            TrainingDataRepository(in_memory_db).insert_batch(batch, _records(2))

    def test_list_batches_newest_first(self, in_memory_db):
        _insert_batch(in_memory_db, "old", 1, datetime(2026, 1, 1, tzinfo=timezone.utc))
        _insert_batch(in_memory_db, "new", 1, datetime(2026, 2, 1, tzinfo=timezone.utc))
        batches = TrainingDataRepository(in_memory_db).list_batches()
        assert [b.batch_id for b in batches] == ["new", "old"]

    def test_delete_batch_removes_only_its_records(self, in_memory_db):
        _insert_batch(in_memory_db, "keep", 2)
        _insert_batch(in_memory_db, "drop", 4)
        repo = TrainingDataRepository(in_memory_db)

        removed = repo.delete_batch("drop")

        assert removed == 4
        assert repo.get_batch("drop") is None
        assert repo.get_records_for_batch("drop") == []
        assert repo.count_records() == 2
        assert repo.count_batches() == 1

    def test_delete_unknown_batch_raises(self, in_memory_db):
        with pytest.raises(KeyError):
            TrainingDataRepository(in_memory_db).delete_batch("nope")

    def test_cascade_on_raw_batch_delete(self, in_memory_db):
        _insert_batch(in_memory_db, "b1", 3)
        in_memory_db.execute("DELETE FROM training_batches WHERE batch_id = 'b1';")
        assert TrainingDataRepository(in_memory_db).count_records() == 0


# ── Prediction history ────────────────────────────────────────────────────────

class TestPredictionRepository:
    def test_insert_and_fetch(self, in_memory_db, high_profile):
        repo = PredictionRepository(in_memory_db)
        pid = repo.insert(_prediction(high_profile, user_id="alice"))
        fetched = repo.get_by_id(pid)
        assert fetched is not None
        assert fetched.user_id == "alice"
        assert fetched.attributes == high_profile
        assert fetched.probability == 96
        assert fetched.prediction == PredictionLabel.PLACED
        assert fetched.recommendations[0].category == "Community"
        assert fetched.created_at is not None

    def test_pagination_newest_first(self, in_memory_db, high_profile):
        repo = PredictionRepository(in_memory_db)
        ids = [repo.insert(_prediction(high_profile)) for _ in range(5)]

        first = repo.list_recent(limit=2, offset=0)
        second = repo.list_recent(limit=2, offset=2)
        last = repo.list_recent(limit=2, offset=4)

        assert [p.prediction_id for p in first] == [ids[4], ids[3]]
        assert [p.prediction_id for p in second] == [ids[2], ids[1]]
        assert [p.prediction_id for p in last] == [ids[0]]

    def test_filter_by_user(self, in_memory_db, high_profile, low_profile):
        repo = PredictionRepository(in_memory_db)
        repo.insert(_prediction(high_profile, user_id="alice"))
        repo.insert(_prediction(low_profile, user_id="bob"))
        repo.insert(_prediction(low_profile, user_id="alice"))

        assert repo.count() == 3
        assert repo.count(user_id="alice") == 2
        assert len(repo.list_recent(user_id="bob")) == 1
        latest = repo.get_latest_for_user("alice")
        assert latest.attributes == low_profile
        assert repo.get_latest_for_user("carol") is None

    def test_stats(self, in_memory_db, high_profile, low_profile):
        repo = PredictionRepository(in_memory_db)
        repo.insert(_prediction(high_profile, user_id="alice"))   # 96
        repo.insert(_prediction(low_profile, user_id="bob"))      # 58
        weak = AttributeSet(cgpa=3.0, num_projects=0, programming_skill=1, communication_skill=1)
        repo.insert(_prediction(weak))                            # 24

        stats = repo.stats()
        assert stats.total_predictions == 3
        assert stats.placed_count == 2
        assert stats.avg_probability == 59  # (96 + 58 + 24) / 3 = 59.33
        assert stats.distinct_users == 2

    def test_stats_empty(self, in_memory_db):
        stats = PredictionRepository(in_memory_db).stats()
        assert stats.total_predictions == 0
        assert stats.avg_probability == 0
        assert stats.placed_count == 0


# ── Run metadata ──────────────────────────────────────────────────────────────

class TestRunMetadataRepository:
    def test_insert_update_fetch(self, in_memory_db):
        repo = RunMetadataRepository(in_memory_db)
        run = RunMetadata(
            run_slug="run-1",
            pipeline_stage="retrain",
            triggered_by="admin",
            config_snapshot={"model": {"iterations": 1000}},
            started_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
        )
        run.run_id = repo.insert_run(run)
        run.status = "success"
        run.rows_processed = 12
        run.finished_at = datetime(2026, 3, 1, 0, 1, tzinfo=timezone.utc)
        repo.update_run(run)

        fetched = repo.get_run_by_slug("run-1")
        assert fetched.status == "success"
        assert fetched.rows_processed == 12
        assert fetched.config_snapshot == {"model": {"iterations": 1000}}
        assert repo.get_recent_runs(pipeline_stage="ingest") == []
        assert len(repo.get_recent_runs()) == 1

    def test_update_without_id_raises(self, in_memory_db):
        run = RunMetadata(
            run_slug="run-x",
            pipeline_stage="ingest",
            config_snapshot={},
            started_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
        )
        with pytest.raises(ValueError):
            RunMetadataRepository(in_memory_db).update_run(run)
