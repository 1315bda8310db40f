"""Tests for the PipelineStage base — run bookkeeping and failure handling."""

from __future__ import annotations

import pytest

from placement_predictor.db.connection import get_connection
from placement_predictor.db.repositories.run_repo import RunMetadataRepository
from placement_predictor.pipeline.base import PipelineStage
from placement_predictor.pipeline.ingest import IngestStage
from placement_predictor.pipeline.retrain import RetrainStage


class _CountingStage(PipelineStage):
    stage_name = "ingest"

    def _execute(self, run, triggered_by=None, rows=0, fail=False, **kwargs):
        if fail:
            raise ValueError("boom")
        return rows


def _runs(config):
    with get_connection(config.database.db_path) as conn:
        return RunMetadataRepository(conn).get_recent_runs()


class TestPipelineStageABC:
    def test_cannot_instantiate_base_directly(self):
        with pytest.raises(TypeError):
            PipelineStage(config=None)  # type: ignore

    def test_concrete_subclass_without_execute_raises(self):
        class IncompleteStage(PipelineStage):
            stage_name = "ingest"

        with pytest.raises(TypeError):
            IncompleteStage(config=None)  # type: ignore

    def test_stage_names(self):
        assert IngestStage.stage_name == "ingest"
        assert RetrainStage.stage_name == "retrain"


class TestRunBookkeeping:
    def test_success_recorded(self, file_db_config):
        run = _CountingStage(config=file_db_config).run(triggered_by="admin", rows=7)
        assert run.status == "success"
        assert run.rows_processed == 7
        assert run.finished_at is not None

        stored = _runs(file_db_config)
        assert len(stored) == 1
        assert stored[0].run_slug == run.run_slug
        assert stored[0].status == "success"
        assert stored[0].triggered_by == "admin"
        assert stored[0].config_snapshot["model"]["iterations"] == 1000

    def test_failure_recorded_and_reraised(self, file_db_config):
        with pytest.raises(ValueError, match="boom"):
            _CountingStage(config=file_db_config).run(fail=True)

        stored = _runs(file_db_config)
        assert stored[0].status == "failed"
        assert stored[0].error_message == "boom"

    def test_db_path_override(self, file_db_config, tmp_path):
        stage = _CountingStage(config=file_db_config, db_path=str(tmp_path / "other.db"))
        assert stage.db_path.endswith("other.db")
