"""
Synthetic Data Generator

Generates a realistic retail dataset for development, demos and tests:
- Stores spread over several countries
- A product catalog grouped in categories, with launch dates and prices
- Sales between a start date and the reference date
- Warranty claims filed after a fraction of sales, plus a few orphan claims
"""

from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

import numpy as np
import polars as pl
import structlog
from faker import Faker

from retail_reports.ingestion.dataset import RetailDataset

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

COUNTRY_LOCALES: Dict[str, str] = {
    "USA": "en_US",
    "United Kingdom": "en_GB",
    "Canada": "en_CA",
    "Australia": "en_AU",
    "Germany": "de_DE",
    "France": "fr_FR",
    "Japan": "ja_JP",
}

CATEGORIES: List[Tuple[str, List[str]]] = [
    ("Smartphone", ["Phone", "Phone Pro", "Phone Mini", "Phone Max"]),
    ("Laptop", ["Book Air", "Book Pro 14", "Book Pro 16"]),
    ("Tablet", ["Tab", "Tab Mini", "Tab Pro"]),
    ("Wearable", ["Watch", "Watch Ultra", "Watch SE"]),
    ("Audio", ["Buds", "Buds Pro", "Headphones Max"]),
    ("Desktop", ["Studio", "Mini Desktop", "All-in-One 24"]),
    ("Accessories", ["Pencil", "Keyboard", "Trackpad", "Charger"]),
    ("Streaming Device", ["TV Box", "TV Box 4K"]),
]

REPAIR_STATUSES = ["Pending", "In Progress", "Completed", "Rejected"]
REPAIR_STATUS_WEIGHTS = [0.15, 0.20, 0.55, 0.10]


class RetailDataGenerator:
    """
    Seeded generator for a complete RetailDataset.

    Example:
        generator = RetailDataGenerator(seed=42, reference_date=date(2024, 6, 30))
        dataset = generator.generate(n_stores=20, n_sales=50_000)
    """

    def __init__(
        self,
        seed: int = 42,
        reference_date: Optional[date] = None,
        history_years: int = 5,
        claim_rate: float = 0.05,
        orphan_claim_rate: float = 0.01,
    ):
        self.reference_date = reference_date or date.today()
        self.start_date = self.reference_date - timedelta(days=365 * history_years)
        self.claim_rate = claim_rate
        self.orphan_claim_rate = orphan_claim_rate

        self.rng = np.random.default_rng(seed)
        self.fake = Faker(list(COUNTRY_LOCALES.values()))
        self.fake.seed_instance(seed)

    def _random_dates(self, start: date, end: date, n: int) -> List[date]:
        span = max((end - start).days, 0)
        offsets = self.rng.integers(0, span + 1, n)
        return [start + timedelta(days=int(d)) for d in offsets]

    def generate_stores(self, n: int) -> pl.DataFrame:
        """Generate n stores, round-robin over the configured countries"""
        countries = list(COUNTRY_LOCALES)
        rows = []
        for i in range(n):
            country = countries[i % len(countries)]
            city = self.fake[COUNTRY_LOCALES[country]].city()
            rows.append({
                "store_id": f"ST-{i + 1}",
                "store_name": f"{city} Store {i + 1}",
                "city": city,
                "country": country,
            })
        return pl.DataFrame(rows)

    def generate_categories(self) -> pl.DataFrame:
        return pl.DataFrame({
            "category_id": [f"CAT-{i + 1}" for i in range(len(CATEGORIES))],
            "category_name": [name for name, _ in CATEGORIES],
        })

    def generate_products(self) -> pl.DataFrame:
        """One product per model and category, launched during the history window"""
        rows = []
        for i, (_, models) in enumerate(CATEGORIES):
            for model in models:
                rows.append({
                    "product_id": f"P-{len(rows) + 1}",
                    "product_name": model,
                    "category_id": f"CAT-{i + 1}",
                })
        n = len(rows)
        launch_dates = self._random_dates(self.start_date, self.reference_date, n)
        prices = np.round(self.rng.uniform(49, 2499, n), 2)
        return pl.DataFrame(rows).with_columns(
            pl.Series("launch_date", launch_dates, dtype=pl.Date),
            pl.Series("price", prices, dtype=pl.Float64),
        )

    def generate_sales(self, n: int, stores: pl.DataFrame, products: pl.DataFrame) -> pl.DataFrame:
        """Generate n sales; a product is only sold on or after its launch date"""
        product_ids = products["product_id"].to_list()
        store_ids = stores["store_id"].to_list()
        launches = products["launch_date"].to_list()

        picks = self.rng.integers(0, len(product_ids), n)
        sale_dates = [
            launches[p] + timedelta(days=int(self.rng.integers(0, max((self.reference_date - launches[p]).days, 0) + 1)))
            for p in picks
        ]

        return pl.DataFrame({
            "sale_id": [f"S-{i + 1}" for i in range(n)],
            "sale_date": pl.Series(sale_dates, dtype=pl.Date),
            "store_id": [store_ids[i] for i in self.rng.integers(0, len(store_ids), n)],
            "product_id": [product_ids[p] for p in picks],
            "quantity": self.rng.integers(1, 11, n),
        })

    def generate_warranty(self, sales: pl.DataFrame) -> pl.DataFrame:
        """Claims for a sample of sales, filed up to two years after the sale"""
        n_claims = int(sales.height * self.claim_rate)
        n_orphans = int(sales.height * self.orphan_claim_rate)

        claimed = sales.sample(n=n_claims, seed=int(self.rng.integers(0, 2**31))) if n_claims else sales.head(0)
        claim_dates = [
            min(d + timedelta(days=int(self.rng.integers(0, 731))), self.reference_date)
            for d in claimed["sale_date"].to_list()
        ]
        orphan_dates = self._random_dates(self.start_date, self.reference_date, n_orphans)

        total = n_claims + n_orphans
        return pl.DataFrame({
            "claim_id": [f"CL-{i + 1}" for i in range(total)],
            "claim_date": pl.Series(claim_dates + orphan_dates, dtype=pl.Date),
            "sale_id": pl.Series(claimed["sale_id"].to_list() + [None] * n_orphans, dtype=pl.Utf8),
            "repair_status": self.rng.choice(REPAIR_STATUSES, total, p=REPAIR_STATUS_WEIGHTS).tolist(),
        })

    def generate(self, n_stores: int = 75, n_sales: int = 100_000) -> RetailDataset:
        """Generate a complete dataset"""
        stores = self.generate_stores(n_stores)
        category = self.generate_categories()
        products = self.generate_products()
        sales = self.generate_sales(n_sales, stores, products)
        warranty = self.generate_warranty(sales)

        dataset = RetailDataset(
            stores=stores,
            category=category,
            products=products,
            sales=sales,
            warranty=warranty,
        )
        logger.info("Synthetic dataset generated", **dataset.row_counts())
        return dataset
