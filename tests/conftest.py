"""
Test Suite Configuration
"""
from datetime import date

import polars as pl
import pytest
from sqlalchemy import create_engine

from retail_reports.config import Settings
from retail_reports.ingestion import RetailDataset

REFERENCE_DATE = date(2024, 6, 30)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def reference_date() -> date:
    return REFERENCE_DATE


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite engine"""
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def stores_df() -> pl.DataFrame:
    return pl.DataFrame({
        "store_id": ["ST-1", "ST-2", "ST-3"],
        "store_name": ["Downtown", "Mall", "Harbour"],
        "city": ["New York", "London", "Sydney"],
        "country": ["USA", "UK", "Australia"],
    })


@pytest.fixture
def category_df() -> pl.DataFrame:
    return pl.DataFrame({
        "category_id": ["C-1", "C-2", "C-3"],
        "category_name": ["Smartphone", "Laptop", "Audio"],
    })


@pytest.fixture
def products_df() -> pl.DataFrame:
    return pl.DataFrame({
        "product_id": ["P-1", "P-2", "P-3"],
        "product_name": ["Phone", "Book", "Buds"],
        "category_id": ["C-1", "C-2", "C-3"],
        "launch_date": [date(2023, 9, 1), date(2020, 1, 15), date(2023, 1, 10)],
        "price": [100.0, 1000.0, 50.0],
    })


@pytest.fixture
def sales_df() -> pl.DataFrame:
    return pl.DataFrame({
        "sale_id": ["S-1", "S-2", "S-3", "S-4", "S-5", "S-6"],
        "sale_date": [
            date(2022, 3, 7),   # Monday
            date(2023, 3, 6),   # Monday
            date(2023, 10, 4),  # Wednesday
            date(2024, 1, 9),   # Tuesday
            date(2024, 1, 10),  # Wednesday
            date(2024, 2, 12),  # Monday
        ],
        "store_id": ["ST-1", "ST-1", "ST-1", "ST-2", "ST-2", "ST-2"],
        "product_id": ["P-2", "P-2", "P-1", "P-1", "P-3", "P-2"],
        "quantity": [10, 15, 5, 4, 4, 1],
    })


@pytest.fixture
def warranty_df() -> pl.DataFrame:
    return pl.DataFrame({
        "claim_id": ["CL-1", "CL-2", "CL-3", "CL-4", "CL-5", "CL-6"],
        "claim_date": [
            date(2020, 5, 1),
            date(2022, 6, 1),    # 86 days after S-1
            date(2023, 12, 20),  # 77 days after S-3
            date(2024, 6, 15),   # 158 days after S-4
            date(2024, 5, 1),    # 422 days after S-2
            date(2020, 12, 31),
        ],
        "sale_id": [None, "S-1", "S-3", "S-4", "S-2", "S-999"],
        "repair_status": ["Completed", "Completed", "Pending", "In Progress", "Rejected", "Completed"],
    })


@pytest.fixture
def sample_dataset(stores_df, category_df, products_df, sales_df, warranty_df) -> RetailDataset:
    """Small dataset with an orphan claim and a claim pointing at a missing sale"""
    return RetailDataset(
        stores=stores_df,
        category=category_df,
        products=products_df,
        sales=sales_df,
        warranty=warranty_df,
    )


@pytest.fixture
def empty_dataset() -> RetailDataset:
    return RetailDataset.empty()
