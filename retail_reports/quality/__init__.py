"""
Data Quality Module
"""
from .validators import (
    DataValidator,
    DatasetValidationReport,
    ValidationResult,
    ValidationSeverity,
    ValidationStatus,
    validate_dataset,
)

__all__ = [
    "DataValidator",
    "DatasetValidationReport",
    "ValidationResult",
    "ValidationSeverity",
    "ValidationStatus",
    "validate_dataset",
]
