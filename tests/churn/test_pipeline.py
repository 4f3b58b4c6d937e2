"""Tests for the pipeline orchestrator and Excel export."""

from __future__ import annotations

import pytest
from openpyxl import load_workbook

from churn_analytics import run_client
from churn_analytics.pipeline import PipelineResult, export_outputs, run_pipeline
from churn_analytics.settings import Settings


@pytest.fixture()
def pipeline_settings(sample_csv_path, tmp_path):
    return Settings.from_args(data_file=sample_csv_path, output_dir=tmp_path)


class TestRunPipeline:
    def test_returns_pipeline_result(self, pipeline_settings):
        result = run_pipeline(pipeline_settings, offload=False)
        assert isinstance(result, PipelineResult)
        assert len(result.df) == 400
        assert result.kpis is None

    def test_all_analyses_succeed(self, pipeline_settings):
        result = run_pipeline(pipeline_settings, offload=False)
        assert len(result.analyses) == 7
        failed = [a for a in result.analyses if a.error is not None]
        assert len(failed) == 0, f"Failed: {[a.name for a in failed]}"

    def test_filters_applied(self, sample_csv_path, tmp_path):
        settings = Settings.from_args(
            data_file=sample_csv_path,
            output_dir=tmp_path,
            filters={"contract": "Month-to-month"},
        )
        result = run_pipeline(settings, offload=False)
        assert 0 < len(result.filtered) < len(result.df)
        assert set(result.filtered["contract"]) == {"Month-to-month"}

    def test_worker_kpis_match_foreground(self, pipeline_settings):
        result = run_pipeline(pipeline_settings)
        assert result.kpis is not None
        assert result.kpis.count == len(result.filtered)
        kpis = result.get("kpi_summary").df.set_index("metric")["value"]
        assert round(result.kpis.churn, 2) == kpis["Churn rate %"]

    def test_progress_callback(self, pipeline_settings):
        calls = []

        def on_progress(step, total, msg):
            calls.append((step, total, msg))

        run_pipeline(pipeline_settings, on_progress=on_progress, offload=False)
        assert len(calls) == 3
        assert calls[0][0] == 0
        assert calls[2][0] == 2

    def test_demo_source(self, sample_settings):
        result = run_pipeline(sample_settings, offload=False)
        assert len(result.df) == sample_settings.demo_rows


class TestExportOutputs:
    def test_generates_excel(self, pipeline_settings):
        result = run_pipeline(pipeline_settings, offload=False)
        files = export_outputs(result)
        assert len(files) == 1
        assert files[0].suffix == ".xlsx"
        assert files[0].name.startswith("Churn_Analysis_")
        assert files[0].exists()

    def test_excel_sheets(self, pipeline_settings):
        result = run_pipeline(pipeline_settings, offload=False)
        path = export_outputs(result)[0]
        wb = load_workbook(path)
        assert wb.sheetnames[0] == "Report Info"
        for sheet in ("KPIs", "Cohort Tenure", "Cohort Contract", "Cohort Internet", "Risk Ranking", "What-If"):
            assert sheet in wb.sheetnames

    def test_excel_contents(self, pipeline_settings):
        result = run_pipeline(pipeline_settings, offload=False)
        wb = load_workbook(export_outputs(result)[0])
        ws = wb["Cohort Contract"]
        assert [c.value for c in ws[1]] == ["cohort", "customers", "churned", "churn_rate"]
        assert ws["A2"].value == "Month-to-month"
        # Percent columns are stored as fractions and formatted as %
        expected = result.get("cohort_contract").df.iloc[0]["churn_rate"] / 100
        assert ws["D2"].value == pytest.approx(expected)
        assert ws["D2"].number_format == "0.0%"

    def test_at_risk_rendered_as_flag(self, pipeline_settings):
        result = run_pipeline(pipeline_settings, offload=False)
        ws = load_workbook(export_outputs(result)[0])["Risk Ranking"]
        header = [c.value for c in ws[1]]
        col = header.index("at_risk")
        assert {row[col].value for row in ws.iter_rows(min_row=2)} <= {"Yes", "No"}

    def test_excel_disabled(self, sample_csv_path, tmp_path):
        settings = Settings.from_args(data_file=sample_csv_path, output_dir=tmp_path, outputs={"excel": False})
        result = run_pipeline(settings, offload=False)
        assert export_outputs(result) == []


class TestRunClient:
    def test_run_client(self, sample_csv_path, tmp_path):
        result = run_client(sample_csv_path, output_dir=tmp_path)
        assert len(result.analyses) == 7
        assert list(tmp_path.glob("Churn_Analysis_*.xlsx"))
