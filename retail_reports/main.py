"""
Report Runner

Command-line entry point: load the dataset, validate it, compute the
reports and print or export them.

Usage:
    retail-reports --data-dir ./data
    retail-reports --database-url postgresql+psycopg2://... --report claim_risk
    DATABASE_URL=sqlite:///retail.db retail-reports --source db
    retail-reports --reference-date 2024-06-30 --output-dir ./reports --format json
"""

import argparse
import sys
from datetime import date
from typing import List, Optional

import polars as pl
import structlog
from sqlalchemy.exc import SQLAlchemyError

from retail_reports.config import get_settings
from retail_reports.config.logging import configure_logging
from retail_reports.database import close_database, init_database
from retail_reports.ingestion import RetailDataset, load_csv_directory, load_from_database
from retail_reports.quality import validate_dataset
from retail_reports.reporting import ExportFormat, ReportingEngine, ReportName

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog=settings.app_name,
        description="Analytical reports over the retail sales dataset",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {settings.version}")
    parser.add_argument(
        "--source",
        choices=["csv", "db"],
        default=None,
        help=f"Read the dataset from CSV files or DATABASE_URL (default: {settings.data.source})",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--data-dir", default=None, help=f"CSV dataset directory (default: {settings.data.dir})")
    source.add_argument("--database-url", default=None, help="Read the dataset from this database URL")
    parser.add_argument("--date-format", default=None, help="strptime format of CSV date columns")
    parser.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        default=None,
        help="Date treated as today by relative-date reports (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--report",
        action="append",
        choices=[name.value for name in ReportName],
        dest="reports",
        help="Report to run; repeat for several (default: all)",
    )
    parser.add_argument("--output-dir", default=None, help="Export results to this directory")
    parser.add_argument("--format", choices=[f.value for f in ExportFormat], default=None, help="Export format")
    parser.add_argument("--sequential", action="store_true", help="Run reports one after another")
    parser.add_argument("--skip-validation", action="store_true", help="Do not run data quality checks")
    parser.add_argument("--strict", action="store_true", help="Abort when data quality checks fail")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def load_dataset(args: argparse.Namespace) -> RetailDataset:
    source = "db" if args.database_url else (args.source or get_settings().data.source)
    if source == "db":
        init_database(args.database_url)
        try:
            return load_from_database()
        finally:
            close_database()
    return load_csv_directory(args.data_dir, date_format=args.date_format)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        dataset = load_dataset(args)
    except (FileNotFoundError, ValueError, SQLAlchemyError) as e:
        logger.error("Could not load dataset", error=str(e))
        return 2

    if not args.skip_validation:
        report = validate_dataset(dataset, strict_mode=args.strict)
        if args.strict and not report.passed:
            for check in report.failures():
                logger.error("Data quality check failed", check=check.name, message=check.message)
            return 1

    engine = ReportingEngine(dataset, reference_date=args.reference_date)
    results = engine.run_all(args.reports, parallel=not args.sequential)

    with pl.Config(tbl_rows=50, tbl_hide_dataframe_shape=True):
        for result in results:
            print(f"\n{result.title} ({result.rows} rows)")
            print(result.data)

    if args.output_dir or args.format:
        engine.export(results, args.output_dir, args.format)

    return 0


if __name__ == "__main__":
    sys.exit(main())
