"""
Reporting Engine

Runs the retail reports over one immutable dataset snapshot, either one
at a time or all together on a thread pool, and exports the results.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import polars as pl
import structlog

from retail_reports.config import get_settings
from retail_reports.config.logging import report_context
from retail_reports.ingestion.dataset import RetailDataset
from . import reports

logger = structlog.get_logger(__name__)


class ReportName(str, Enum):
    """Available reports"""
    CLAIMS_2020 = "claims_2020"
    BEST_SELLING_DAY = "best_selling_day"
    LEAST_SELLING_PRODUCT = "least_selling_product"
    CLAIMS_WITHIN_180_DAYS = "claims_within_180_days"
    RECENT_PRODUCT_CLAIMS = "recent_product_claims"
    HIGH_VOLUME_MONTHS = "high_volume_months"
    CLAIMS_PER_CATEGORY = "claims_per_category"
    CLAIM_RISK = "claim_risk"
    YEARLY_GROWTH = "yearly_growth"


class ExportFormat(str, Enum):
    """Export file formats"""
    CSV = "csv"
    JSON = "json"


@dataclass(frozen=True)
class ReportDefinition:
    """How to compute one report"""
    name: ReportName
    title: str
    func: Callable[..., Union[int, pl.DataFrame]]
    uses_reference_date: bool = False
    # Column holding the value of reports that return a single count
    scalar_column: Optional[str] = None


REGISTRY: Dict[ReportName, ReportDefinition] = {
    definition.name: definition
    for definition in [
        ReportDefinition(
            ReportName.CLAIMS_2020,
            "Warranty claims filed in 2020",
            reports.claims_in_year,
            scalar_column="claim_count",
        ),
        ReportDefinition(
            ReportName.BEST_SELLING_DAY,
            "Best-selling day of the week per store",
            reports.best_selling_day_per_store,
        ),
        ReportDefinition(
            ReportName.LEAST_SELLING_PRODUCT,
            "Least-selling product per country",
            reports.least_selling_product_per_country,
        ),
        ReportDefinition(
            ReportName.CLAIMS_WITHIN_180_DAYS,
            "Claims filed within 180 days of sale",
            reports.claims_within_days_of_sale,
            scalar_column="claim_count",
        ),
        ReportDefinition(
            ReportName.RECENT_PRODUCT_CLAIMS,
            "Claims for products launched in the last two years",
            reports.recent_product_claims,
            uses_reference_date=True,
        ),
        ReportDefinition(
            ReportName.HIGH_VOLUME_MONTHS,
            "Months in the last three years with over 5,000 units sold in the USA",
            reports.high_volume_months,
            uses_reference_date=True,
        ),
        ReportDefinition(
            ReportName.CLAIMS_PER_CATEGORY,
            "Warranty claims per category in the last two years",
            reports.claims_per_category,
            uses_reference_date=True,
        ),
        ReportDefinition(
            ReportName.CLAIM_RISK,
            "Warranty claim risk per country",
            reports.claim_risk_by_country,
        ),
        ReportDefinition(
            ReportName.YEARLY_GROWTH,
            "Year-over-year revenue growth per store",
            reports.yearly_growth_by_store,
            uses_reference_date=True,
        ),
    ]
}


@dataclass
class ReportResult:
    """Outcome of running one report"""
    name: ReportName
    title: str
    data: pl.DataFrame
    reference_date: date
    duration_seconds: float

    @property
    def rows(self) -> int:
        return self.data.height

    @property
    def value(self) -> Any:
        """The single value of a count report"""
        if self.data.shape != (1, 1):
            raise ValueError(f"Report {self.name.value} is not a single value")
        return self.data.item()

    def to_dicts(self) -> List[Dict[str, Any]]:
        return self.data.to_dicts()


def _resolve(report: Union[ReportName, str]) -> ReportDefinition:
    try:
        return REGISTRY[ReportName(report)]
    except ValueError:
        raise ValueError(
            f"Unknown report: {report!r}. Available: {[n.value for n in ReportName]}"
        ) from None


class ReportingEngine:
    """
    Computes reports over a RetailDataset.

    The reference date is fixed when the engine is built, so every report in
    a run sees the same "today".

    Example:
        engine = ReportingEngine(dataset, reference_date=date(2024, 6, 30))
        risk = engine.run(ReportName.CLAIM_RISK).data
        results = engine.run_all()
    """

    def __init__(
        self,
        dataset: RetailDataset,
        reference_date: Optional[date] = None,
        max_workers: Optional[int] = None,
    ):
        settings = get_settings()
        self.dataset = dataset
        self.reference_date = reference_date or settings.reports.reference_date or date.today()
        self.max_workers = max_workers or settings.reports.max_workers

    def run(self, report: Union[ReportName, str]) -> ReportResult:
        """
        Compute a single report.

        Raises:
            ValueError: If the report name is unknown
        """
        definition = _resolve(report)
        started = time.perf_counter()

        with report_context(report=definition.name.value, reference_date=self.reference_date.isoformat()):
            if definition.uses_reference_date:
                output = definition.func(self.dataset, self.reference_date)
            else:
                output = definition.func(self.dataset)

            if definition.scalar_column:
                output = pl.DataFrame({definition.scalar_column: [output]}, schema={definition.scalar_column: pl.Int64})

            duration = time.perf_counter() - started
            logger.info("Report computed", rows=output.height, duration_ms=round(duration * 1000, 2))

        return ReportResult(
            name=definition.name,
            title=definition.title,
            data=output,
            reference_date=self.reference_date,
            duration_seconds=duration,
        )

    def run_all(
        self,
        report_names: Optional[Iterable[Union[ReportName, str]]] = None,
        parallel: bool = True,
    ) -> List[ReportResult]:
        """
        Compute several reports, all of them by default.

        Reports only read the dataset, so they run concurrently without
        locking. Results come back in the order requested.
        """
        if report_names is None:
            report_names = list(ReportName)
        names = [_resolve(r).name for r in report_names]
        logger.info(
            "Running reports",
            count=len(names),
            parallel=parallel,
            reference_date=self.reference_date.isoformat(),
        )

        if not parallel or len(names) <= 1:
            return [self.run(name) for name in names]

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="report") as executor:
            return list(executor.map(self.run, names))

    def export(
        self,
        results: Iterable[ReportResult],
        output_dir: Union[str, Path, None] = None,
        fmt: Union[ExportFormat, str, None] = None,
    ) -> List[Path]:
        """
        Write each result to <output_dir>/<report name>.<format>.

        Returns:
            Paths of the written files
        """
        settings = get_settings()
        output_dir = Path(output_dir or settings.reports.output_dir)
        fmt = ExportFormat(fmt or settings.reports.output_format)
        output_dir.mkdir(parents=True, exist_ok=True)

        written = []
        for result in results:
            path = output_dir / f"{result.name.value}.{fmt.value}"
            if fmt == ExportFormat.CSV:
                result.data.write_csv(path)
            else:
                result.data.write_json(path)
            written.append(path)

        logger.info("Reports exported", directory=str(output_dir), format=fmt.value, files=len(written))
        return written
