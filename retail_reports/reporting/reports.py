"""
Retail Reports

The nine analytical reports, each a pure function of a RetailDataset.
Reports that filter on a relative window ("last 2 years") take the
reference date explicitly; none of them read the system clock.
"""

from datetime import date

import polars as pl

from retail_reports.ingestion.dataset import RetailDataset
from .ranking import lag, top_ranked, years_before


def claims_in_year(dataset: RetailDataset, year: int = 2020) -> int:
    """Number of warranty claims filed during `year`."""
    return dataset.warranty.filter(pl.col("claim_date").dt.year() == year).height


def best_selling_day_per_store(dataset: RetailDataset) -> pl.DataFrame:
    """
    Day of the week with the highest units sold for each store.

    Every weekday tied at the store's maximum is returned.

    Columns: store_id, store_name, day_name, total_unit_sold, rank
    """
    daily = (
        dataset.sales
        .filter(pl.col("sale_date").is_not_null())
        .group_by(
            "store_id",
            pl.col("sale_date").dt.weekday().alias("weekday"),
            pl.col("sale_date").dt.strftime("%A").alias("day_name"),
        )
        .agg(pl.col("quantity").sum().alias("total_unit_sold"))
    )

    best = top_ranked(daily, "total_unit_sold", "store_id", descending=True)

    return (
        best.join(dataset.stores.select("store_id", "store_name"), on="store_id", how="left")
        .sort("store_id", "weekday")
        .select("store_id", "store_name", "day_name", "total_unit_sold", "rank")
    )


def least_selling_product_per_country(dataset: RetailDataset) -> pl.DataFrame:
    """
    Product with the fewest units sold in each country, all time.

    Columns: country, product_name, total_qty_sold, rank
    """
    totals = (
        dataset.sales.select("store_id", "product_id", "quantity")
        .join(dataset.stores.select("store_id", "country"), on="store_id", how="inner")
        .join(dataset.products.select("product_id", "product_name"), on="product_id", how="inner")
        .group_by("country", "product_name")
        .agg(pl.col("quantity").sum().alias("total_qty_sold"))
    )

    return (
        top_ranked(totals, "total_qty_sold", "country")
        .sort("country", "product_name")
        .select("country", "product_name", "total_qty_sold", "rank")
    )


def claims_within_days_of_sale(dataset: RetailDataset, days: int = 180) -> int:
    """
    Number of claims filed at most `days` days after the sale.

    Claims without a matching sale have no sale date and are not counted.
    """
    return (
        dataset.warranty.select("claim_id", "claim_date", "sale_id")
        .join(dataset.sales.select("sale_id", "sale_date"), on="sale_id", how="left")
        .filter((pl.col("claim_date") - pl.col("sale_date")).dt.total_days() <= days)
        .height
    )


def recent_product_claims(dataset: RetailDataset, reference_date: date, years: int = 2) -> pl.DataFrame:
    """
    Claims and sales per product launched within the last `years` years.

    Sales are the base of the join, so every sale of a recent product is
    counted even when it has no claim. Products without claims are dropped.

    Columns: product_name, claim_count, sale_count
    """
    cutoff = years_before(reference_date, years)
    recent = dataset.products.filter(pl.col("launch_date") >= cutoff).select("product_id", "product_name")

    return (
        dataset.sales.select("sale_id", "product_id")
        .join(dataset.warranty.select("claim_id", "sale_id"), on="sale_id", how="left")
        .join(recent, on="product_id", how="inner")
        .group_by("product_name")
        .agg(
            pl.col("claim_id").count().cast(pl.Int64).alias("claim_count"),
            pl.col("sale_id").count().cast(pl.Int64).alias("sale_count"),
        )
        .filter(pl.col("claim_count") > 0)
        .sort(["claim_count", "product_name"], descending=[True, False])
    )


def high_volume_months(
    dataset: RetailDataset,
    reference_date: date,
    country: str = "USA",
    years: int = 3,
    min_units: int = 5000,
) -> pl.DataFrame:
    """
    Months in the last `years` years where stores in `country` sold more
    than `min_units` units.

    Columns: month (MM-YYYY), total_unit_sold
    """
    cutoff = years_before(reference_date, years)
    stores = dataset.stores.filter(pl.col("country") == country).select("store_id")

    return (
        dataset.sales
        .join(stores, on="store_id", how="inner")
        .filter(pl.col("sale_date").is_not_null() & (pl.col("sale_date") >= cutoff))
        .group_by(
            pl.col("sale_date").dt.truncate("1mo").alias("month_start"),
            pl.col("sale_date").dt.strftime("%m-%Y").alias("month"),
        )
        .agg(pl.col("quantity").sum().alias("total_unit_sold"))
        .filter(pl.col("total_unit_sold") > min_units)
        .sort("month_start")
        .select("month", "total_unit_sold")
    )


def claims_per_category(dataset: RetailDataset, reference_date: date, years: int = 2) -> pl.DataFrame:
    """
    Warranty claims per product category over the last `years` years.

    Claims whose sale or product cannot be resolved are not attributed to
    any category. The category with the most claims comes first.

    Columns: category_name, total_claims
    """
    cutoff = years_before(reference_date, years)

    return (
        dataset.warranty.filter(pl.col("claim_date") >= cutoff).select("claim_id", "sale_id")
        .join(dataset.sales.select("sale_id", "product_id"), on="sale_id", how="left")
        .join(dataset.products.select("product_id", "category_id"), on="product_id", how="inner")
        .join(dataset.category.select("category_id", "category_name"), on="category_id", how="inner")
        .group_by("category_name")
        .agg(pl.col("claim_id").count().cast(pl.Int64).alias("total_claims"))
        .sort(["total_claims", "category_name"], descending=[True, False])
    )


def claim_risk_by_country(dataset: RetailDataset) -> pl.DataFrame:
    """
    Percentage of units sold that led to a warranty claim, per country.

    Countries whose sales have no claims show a risk of 0. A country with
    no units sold also gets 0 rather than a division error.

    Columns: country, total_unit_sold, total_claim, risk
    """
    totals = (
        dataset.sales.select("sale_id", "store_id", "quantity")
        .join(dataset.stores.select("store_id", "country"), on="store_id", how="inner")
        .join(dataset.warranty.select("claim_id", "sale_id"), on="sale_id", how="left")
        .group_by("country")
        .agg(
            pl.col("quantity").sum().cast(pl.Int64).alias("total_unit_sold"),
            pl.col("claim_id").count().cast(pl.Int64).alias("total_claim"),
        )
    )

    return (
        totals.with_columns(
            pl.when(pl.col("total_unit_sold") > 0)
            .then(pl.col("total_claim") * 100 / pl.col("total_unit_sold"))
            .otherwise(0.0)
            .round(2)
            .alias("risk")
        )
        .sort(["risk", "country"], descending=[True, False])
    )


def yearly_growth_by_store(dataset: RetailDataset, reference_date: date) -> pl.DataFrame:
    """
    Year-over-year revenue growth for each store.

    Revenue is quantity times list price. Each year is compared with the
    store's previous year that has sales. Sales without a date are
    ignored. The first year of a store and the reference date's calendar
    year are not reported.

    Columns: store_name, year, last_year_sale, current_year_sale, growth_ratio
    """
    yearly = (
        dataset.sales.select("sale_date", "store_id", "product_id", "quantity")
        .filter(pl.col("sale_date").is_not_null())
        .join(dataset.stores.select("store_id", "store_name"), on="store_id", how="inner")
        .join(dataset.products.select("product_id", "price"), on="product_id", how="inner")
        .group_by("store_id", "store_name", pl.col("sale_date").dt.year().cast(pl.Int64).alias("year"))
        .agg((pl.col("quantity") * pl.col("price")).sum().alias("current_year_sale"))
    )

    yearly = lag(yearly, "current_year_sale", "store_id", "year", alias="last_year_sale")

    return (
        yearly
        .filter(pl.col("last_year_sale").is_not_null() & (pl.col("year") != reference_date.year))
        .with_columns(
            pl.when(pl.col("last_year_sale") != 0)
            .then((pl.col("current_year_sale") - pl.col("last_year_sale")) * 100 / pl.col("last_year_sale"))
            .otherwise(0.0)
            .round(3)
            .alias("growth_ratio")
        )
        .sort("store_name", "year")
        .select("store_name", "year", "last_year_sale", "current_year_sale", "growth_ratio")
    )
