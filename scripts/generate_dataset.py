"""
Retail Dataset Generator
Writes a synthetic five-table dataset as CSV files, and optionally seeds a database.

Usage:
    python scripts/generate_dataset.py --stores 75 --sales 100000
    python scripts/generate_dataset.py --database-url sqlite:///retail_reports.db
"""

import argparse
from datetime import date
from pathlib import Path

from sqlalchemy import create_engine

from retail_reports.config import get_settings
from retail_reports.config.logging import configure_logging
from retail_reports.data import RetailDataGenerator
from retail_reports.ingestion import RELATIONS, seed_database, write_csv_directory


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Generate a synthetic retail dataset")
    parser.add_argument("--output-dir", default=settings.data.dir, help="Directory for the CSV files")
    parser.add_argument("--stores", type=int, default=75, help="Number of stores")
    parser.add_argument("--sales", type=int, default=100_000, help="Number of sales")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--reference-date", type=date.fromisoformat, default=None, help="Last day of generated history")
    parser.add_argument("--database-url", default=None, help="Also insert the dataset into this database")
    args = parser.parse_args()

    configure_logging()

    print("=" * 60)
    print("🛒 Retail Dataset Generator")
    print("=" * 60 + "\n")

    generator = RetailDataGenerator(seed=args.seed, reference_date=args.reference_date)
    dataset = generator.generate(n_stores=args.stores, n_sales=args.sales)

    counts = dataset.row_counts()
    for relation, path in zip(RELATIONS, write_csv_directory(dataset, args.output_dir)):
        size = path.stat().st_size / 1024 / 1024
        print(f"   📄 {path.name}: {counts[relation]:,} rows ({size:.2f} MB)")

    if args.database_url:
        engine = create_engine(args.database_url)
        try:
            inserted = seed_database(engine, dataset)
        finally:
            engine.dispose()
        print(f"\n🗄️  Seeded {sum(inserted.values()):,} rows into {engine.url.render_as_string(hide_password=True)}")

    print(f"\n📁 Output: {Path(args.output_dir).resolve()}\n")


if __name__ == "__main__":
    main()
