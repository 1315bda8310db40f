"""Tests for IngestStage — CSV file to stored training batch."""

from __future__ import annotations

import pytest

from placement_predictor.db.connection import get_connection
from placement_predictor.db.repositories.run_repo import RunMetadataRepository
from placement_predictor.db.repositories.training_repo import TrainingDataRepository
from placement_predictor.ingestion.training_csv import write_sample_csv
from placement_predictor.pipeline.ingest import IngestStage


class TestIngestStage:
    def test_ingests_sample_file(self, file_db_config, tmp_path):
        path = write_sample_csv(tmp_path / "sample.csv")
        stage = IngestStage(config=file_db_config)

        run = stage.run(triggered_by="admin", path=path)

        assert run.status == "success"
        assert run.rows_processed == 10
        assert stage.batch is not None
        assert stage.batch.filename == "sample.csv"
        assert stage.batch.uploaded_by == "admin"

        with get_connection(file_db_config.database.db_path) as conn:
            repo = TrainingDataRepository(conn)
            stored = repo.get_batch(stage.batch.batch_id)
            assert stored.record_count == 10
            assert len(repo.get_records_for_batch(stage.batch.batch_id)) == 10

    def test_each_run_creates_new_batch(self, file_db_config, tmp_path):
        path = write_sample_csv(tmp_path / "sample.csv")
        first = IngestStage(config=file_db_config)
        second = IngestStage(config=file_db_config)
        first.run(path=path)
        second.run(path=path)
        assert first.batch.batch_id != second.batch.batch_id

        with get_connection(file_db_config.database.db_path) as conn:
            assert TrainingDataRepository(conn).count_records() == 20

    def test_invalid_file_writes_nothing(self, file_db_config, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text(
            "cgpa,num_projects,has_internship,programming_skill,"
            "communication_skill,has_certifications,was_placed\n"
            "7.0,3,true,6,6,true,true\n"
            "15.0,3,true,6,6,true,true\n",
            encoding="utf-8",
        )
        stage = IngestStage(config=file_db_config)
        with pytest.raises(ValueError):
            stage.run(path=path)
        assert stage.batch is None

        with get_connection(file_db_config.database.db_path) as conn:
            assert TrainingDataRepository(conn).count_batches() == 0
            runs = RunMetadataRepository(conn).get_recent_runs(pipeline_stage="ingest")
        assert runs[0].status == "failed"

    def test_header_only_rejected(self, file_db_config, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text(
            "cgpa,num_projects,has_internship,programming_skill,"
            "communication_skill,has_certifications,was_placed\n",
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="no data rows"):
            IngestStage(config=file_db_config).run(path=path)

    def test_path_required(self, file_db_config):
        with pytest.raises(ValueError, match="requires a 'path'"):
            IngestStage(config=file_db_config).run()
