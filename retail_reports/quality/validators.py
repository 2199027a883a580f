"""
Data Validation Module

Rule-based quality checks for the retail dataset, run before reporting.

The reporting engine assumes referential integrity but does not require
it; these checks make violations visible instead of letting outer joins
silently turn them into nulls.

Features:
- Null checks
- Uniqueness checks
- Range checks
- Allowed-value checks
- Referential integrity checks
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from retail_reports.ingestion.dataset import RetailDataset

logger = structlog.get_logger(__name__)

REPAIR_STATUSES = ["Pending", "In Progress", "Completed", "Rejected"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Critical - reports may be wrong
    WARNING = "warning"  # Non-critical - logged only
    INFO = "info"  # Informational only


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100


def _missing_column(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
    return ValidationCheck(
        name=name,
        passed=False,
        severity=severity,
        message=f"Column '{column}' not found",
    )


class DataValidator:
    """
    Validator for a single relation.

    Example:
        validator = DataValidator()
        validator.add_not_null_check("sale_id")
        validator.add_range_check("quantity", min_value=1)
        result = validator.validate(df)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            null_count = df[column].null_count()
            total = len(df)
            passed = null_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                details={"null_count": null_count, "null_percentage": (null_count / total) * 100 if total > 0 else 0},
                failed_rows=null_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for uniqueness of column values"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"unique_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            total = len(df)
            duplicate_count = total - df[column].n_unique()
            passed = duplicate_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {duplicate_count} duplicate values" if not passed else f"Column '{column}' values are unique",
                details={"duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within specified range"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"range_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) < min_value)
            if max_value is not None:
                conditions.append(pl.col(column) > max_value)

            if not conditions:
                return ValidationCheck(
                    name=name,
                    passed=True,
                    severity=severity,
                    message="No range specified",
                )

            out_of_range = df.filter(pl.any_horizontal(conditions)).height
            total = len(df)
            passed = out_of_range == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside range [{min_value}, {max_value}]" if not passed else "All values in range",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_enum_check(
        self,
        column: str,
        allowed_values: List[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values in allowed set"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"enum_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            invalid = df.filter(
                ~pl.col(column).is_in(allowed_values) & pl.col(column).is_not_null()
            ).height
            total = len(df)
            passed = invalid == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {invalid} invalid values" if not passed else "All values are valid",
                details={"allowed_values": allowed_values, "invalid_count": invalid},
                failed_rows=invalid,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that non-null values exist in a referenced column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"ref_integrity_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            orphans = df.filter(pl.col(column).is_not_null()).join(
                reference_df.select(pl.col(reference_column).alias(column)).unique(),
                on=column,
                how="anti",
            ).height
            total = len(df)
            passed = orphans == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {orphans} orphan records" if not passed else "Referential integrity maintained",
                details={"orphan_count": orphans},
                failed_rows=orphans,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = _utcnow()
        results = []

        for check_func in self._checks:
            result = check_func(df)
            results.append(result)

            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                )

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0 and self.strict_mode:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        return ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=_utcnow(),
        )


@dataclass
class DatasetValidationReport:
    """Validation results for every relation of a dataset"""
    results: Dict[str, ValidationResult]

    @property
    def status(self) -> ValidationStatus:
        statuses = {r.status for r in self.results.values()}
        if ValidationStatus.FAILED in statuses:
            return ValidationStatus.FAILED
        if ValidationStatus.PARTIAL in statuses:
            return ValidationStatus.PARTIAL
        return ValidationStatus.PASSED

    @property
    def passed(self) -> bool:
        return self.status != ValidationStatus.FAILED

    def failures(self) -> List[ValidationCheck]:
        """All failed checks across relations"""
        return [c for r in self.results.values() for c in r.checks if not c.passed]


def create_validators(dataset: RetailDataset) -> Dict[str, DataValidator]:
    """Pre-configured validators for each relation of a dataset"""
    return {
        "stores": (
            DataValidator()
            .add_not_null_check("store_id")
            .add_unique_check("store_id")
            .add_not_null_check("country", severity=ValidationSeverity.WARNING)
        ),
        "category": (
            DataValidator()
            .add_not_null_check("category_id")
            .add_unique_check("category_id")
        ),
        "products": (
            DataValidator()
            .add_not_null_check("product_id")
            .add_unique_check("product_id")
            .add_range_check("price", min_value=0)
            .add_referential_integrity_check("category_id", dataset.category, "category_id")
        ),
        "sales": (
            DataValidator()
            .add_not_null_check("sale_id")
            .add_unique_check("sale_id")
            .add_not_null_check("sale_date")
            .add_range_check("quantity", min_value=1)
            .add_referential_integrity_check("store_id", dataset.stores, "store_id")
            .add_referential_integrity_check("product_id", dataset.products, "product_id")
        ),
        "warranty": (
            DataValidator()
            .add_not_null_check("claim_id")
            .add_unique_check("claim_id")
            .add_not_null_check("claim_date")
            .add_enum_check("repair_status", REPAIR_STATUSES, severity=ValidationSeverity.WARNING)
            # Orphan claims are expected in the source data
            .add_referential_integrity_check(
                "sale_id", dataset.sales, "sale_id", severity=ValidationSeverity.WARNING
            )
        ),
    }


def validate_dataset(dataset: RetailDataset, strict_mode: bool = False) -> DatasetValidationReport:
    """
    Validate every relation of a dataset.

    Args:
        dataset: Dataset to validate
        strict_mode: Treat warnings as failures

    Returns:
        DatasetValidationReport
    """
    results = {}
    for relation, validator in create_validators(dataset).items():
        validator.strict_mode = strict_mode
        results[relation] = validator.validate(getattr(dataset, relation))

    report = DatasetValidationReport(results=results)
    logger.info(
        f"Validation complete: {report.status.value}",
        failed_checks=sum(r.failed_checks for r in results.values()),
        warnings=sum(r.warning_count for r in results.values()),
    )
    return report
