"""
Reporting Module
"""
from .engine import ReportingEngine, ReportName, ReportResult, ExportFormat, REGISTRY
from .reports import (
    claims_in_year,
    best_selling_day_per_store,
    least_selling_product_per_country,
    claims_within_days_of_sale,
    recent_product_claims,
    high_volume_months,
    claims_per_category,
    claim_risk_by_country,
    yearly_growth_by_store,
)

__all__ = [
    "ReportingEngine",
    "ReportName",
    "ReportResult",
    "ExportFormat",
    "REGISTRY",
    "claims_in_year",
    "best_selling_day_per_store",
    "least_selling_product_per_country",
    "claims_within_days_of_sale",
    "recent_product_claims",
    "high_volume_months",
    "claims_per_category",
    "claim_risk_by_country",
    "yearly_growth_by_store",
]
