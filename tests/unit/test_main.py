"""
Unit Tests - Command Line, Configuration and Logging
"""
import dataclasses
import logging
from datetime import date

import pytest
import structlog
from pydantic import ValidationError
from sqlalchemy import create_engine

from retail_reports.config import Settings, get_settings
from retail_reports.config.logging import configure_logging, resolve_level
from retail_reports.config.settings import DataSettings, ReportSettings
from retail_reports.ingestion import seed_database, write_csv_directory
from retail_reports.main import main
from retail_reports.reporting import ReportingEngine, ReportName
from retail_reports.reporting.engine import REGISTRY


@pytest.fixture
def fresh_settings():
    """Re-read settings from the environment around a test"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for configuration"""

    def test_testing_environment(self, test_settings):
        assert test_settings.app_env == "testing"
        assert not test_settings.is_production

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(app_env="moon")

    def test_reference_date_from_environment(self, monkeypatch):
        monkeypatch.setenv("REPORTS_REFERENCE_DATE", "2024-06-30")
        monkeypatch.setenv("REPORTS_OUTPUT_FORMAT", "JSON")

        settings = ReportSettings()

        assert settings.reference_date == date(2024, 6, 30)
        assert settings.output_format == "json"

    def test_invalid_output_format(self):
        with pytest.raises(ValidationError):
            ReportSettings(output_format="xlsx")

    def test_invalid_data_source(self):
        with pytest.raises(ValidationError):
            DataSettings(source="ftp")


class TestMain:
    """Tests for the retail-reports entry point"""

    def test_runs_and_exports(self, sample_dataset, tmp_path, capsys):
        data_dir = tmp_path / "data"
        out_dir = tmp_path / "reports"
        write_csv_directory(sample_dataset, data_dir)

        code = main([
            "--data-dir", str(data_dir),
            "--reference-date", "2024-06-30",
            "--report", "claim_risk",
            "--report", "yearly_growth",
            "--output-dir", str(out_dir),
            "--format", "csv",
        ])

        assert code == 0
        assert sorted(p.name for p in out_dir.iterdir()) == ["claim_risk.csv", "yearly_growth.csv"]
        assert "Warranty claim risk per country" in capsys.readouterr().out

    def test_missing_dataset(self, tmp_path):
        assert main(["--data-dir", str(tmp_path), "--sequential"]) == 2

    def test_strict_validation_aborts(self, sample_dataset, tmp_path):
        write_csv_directory(sample_dataset, tmp_path)

        # The sample has a claim pointing at a missing sale
        assert main(["--data-dir", str(tmp_path), "--strict"]) == 1

    def test_unknown_report_rejected(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["--data-dir", str(tmp_path), "--report", "top_customers"])

    def test_reads_configured_database(self, sample_dataset, tmp_path, monkeypatch, fresh_settings):
        url = f"sqlite:///{tmp_path / 'retail.db'}"
        engine = create_engine(url)
        seed_database(engine, sample_dataset)
        engine.dispose()
        monkeypatch.setenv("DATABASE_URL", url)
        monkeypatch.setenv("DATA_SOURCE", "db")
        get_settings.cache_clear()

        assert main(["--report", "claim_risk", "--reference-date", "2024-06-30"]) == 0

    def test_unreadable_database(self, tmp_path):
        # A fresh SQLite file has none of the report tables
        url = f"sqlite:///{tmp_path / 'empty.db'}"

        assert main(["--database-url", url, "--report", "claim_risk"]) == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])

        assert exc.value.code == 0
        assert capsys.readouterr().out.strip() == "retail-reports 1.0.0"


class TestLogging:
    """Tests for logging setup"""

    def test_level_override(self, fresh_settings):
        assert configure_logging("warning") == logging.WARNING
        assert logging.getLogger().level == logging.WARNING

    def test_debug_mode(self):
        settings = Settings(debug=True)

        assert resolve_level(settings) == logging.DEBUG
        assert resolve_level(settings, "error") == logging.ERROR

    def test_unknown_level(self):
        assert resolve_level(Settings(), "chatty") == logging.INFO

    def test_report_context(self, sample_dataset, reference_date, monkeypatch):
        seen = {}

        def record(dataset):
            seen.update(structlog.contextvars.get_contextvars())
            return 0

        definition = dataclasses.replace(REGISTRY[ReportName.CLAIMS_2020], func=record)
        monkeypatch.setitem(REGISTRY, ReportName.CLAIMS_2020, definition)

        ReportingEngine(sample_dataset, reference_date=reference_date).run(ReportName.CLAIMS_2020)

        assert seen == {"report": "claims_2020", "reference_date": "2024-06-30"}
        assert "report" not in structlog.contextvars.get_contextvars()
