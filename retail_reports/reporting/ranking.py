"""
Window helpers

Polars equivalents of the SQL window functions the reports rely on:
RANK() and LAG() over a partition.
"""

from datetime import date
from typing import List, Sequence, Union

import polars as pl

ColumnNames = Union[str, Sequence[str]]


def _as_list(columns: ColumnNames) -> List[str]:
    return [columns] if isinstance(columns, str) else list(columns)


def competition_rank(
    value: str,
    partition_by: ColumnNames,
    descending: bool = False,
    alias: str = "rank",
) -> pl.Expr:
    """
    Standard competition ranking ("1224") of `value` within each partition.

    Tied values share the lowest rank of their group and the following rank
    is skipped, like SQL RANK().
    """
    return (
        pl.col(value)
        .rank(method="min", descending=descending)
        .over(_as_list(partition_by))
        .cast(pl.Int64)
        .alias(alias)
    )


def top_ranked(
    df: pl.DataFrame,
    value: str,
    partition_by: ColumnNames,
    descending: bool = False,
    alias: str = "rank",
) -> pl.DataFrame:
    """Rows ranked first within their partition, ties included"""
    return (
        df.with_columns(competition_rank(value, partition_by, descending=descending, alias=alias))
        .filter(pl.col(alias) == 1)
    )


def lag(
    df: pl.DataFrame,
    value: str,
    partition_by: ColumnNames,
    order_by: ColumnNames,
    alias: str,
) -> pl.DataFrame:
    """
    Add the previous row's `value` within each partition, like SQL LAG().

    The frame is sorted by partition then `order_by`; the first row of each
    partition gets null.
    """
    partition = _as_list(partition_by)
    return (
        df.sort(partition + _as_list(order_by))
        .with_columns(pl.col(value).shift(1).over(partition).alias(alias))
    )


def years_before(day: date, years: int) -> date:
    """Calendar subtraction of whole years; 29 February becomes 28 February"""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)
