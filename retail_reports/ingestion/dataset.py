"""
Retail Dataset

Canonical polars schemas of the five relations and the immutable
snapshot the reporting engine reads from.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


STORES_SCHEMA: Dict[str, pl.DataType] = {
    "store_id": pl.Utf8,
    "store_name": pl.Utf8,
    "city": pl.Utf8,
    "country": pl.Utf8,
}

CATEGORY_SCHEMA: Dict[str, pl.DataType] = {
    "category_id": pl.Utf8,
    "category_name": pl.Utf8,
}

PRODUCTS_SCHEMA: Dict[str, pl.DataType] = {
    "product_id": pl.Utf8,
    "product_name": pl.Utf8,
    "category_id": pl.Utf8,
    "launch_date": pl.Date,
    "price": pl.Float64,
}

SALES_SCHEMA: Dict[str, pl.DataType] = {
    "sale_id": pl.Utf8,
    "sale_date": pl.Date,
    "store_id": pl.Utf8,
    "product_id": pl.Utf8,
    "quantity": pl.Int64,
}

WARRANTY_SCHEMA: Dict[str, pl.DataType] = {
    "claim_id": pl.Utf8,
    "claim_date": pl.Date,
    "sale_id": pl.Utf8,
    "repair_status": pl.Utf8,
}

SCHEMAS: Dict[str, Dict[str, pl.DataType]] = {
    "stores": STORES_SCHEMA,
    "category": CATEGORY_SCHEMA,
    "products": PRODUCTS_SCHEMA,
    "sales": SALES_SCHEMA,
    "warranty": WARRANTY_SCHEMA,
}

# Load order respects foreign keys
RELATIONS: Tuple[str, ...] = tuple(SCHEMAS)


class DatasetLoadError(ValueError):
    """Raised when a relation cannot be loaded into its canonical schema"""

    def __init__(self, relation: str, message: str):
        self.relation = relation
        super().__init__(f"{relation}: {message}")


def conform(df: pl.DataFrame, relation: str) -> pl.DataFrame:
    """
    Cast a frame to the canonical schema of a relation.

    Missing columns are added as nulls, extra columns are dropped and
    columns are put in schema order.
    """
    schema = SCHEMAS[relation]
    exprs = []
    for column, dtype in schema.items():
        if column in df.columns:
            exprs.append(pl.col(column).cast(dtype))
        else:
            exprs.append(pl.lit(None, dtype=dtype).alias(column))
    try:
        return df.select(exprs)
    except pl.exceptions.PolarsError as e:
        raise DatasetLoadError(relation, str(e)) from e


def empty_frame(relation: str) -> pl.DataFrame:
    """Zero-row frame with the canonical schema of a relation"""
    return pl.DataFrame(schema=SCHEMAS[relation])


@dataclass(frozen=True)
class RetailDataset:
    """
    Read-only snapshot of the five retail relations.

    Frames are conformed to the canonical schemas on construction. Reports
    never modify them; polars frames are not mutated in place by any
    operation the engine uses, so a snapshot can be shared across threads.
    """
    stores: pl.DataFrame
    category: pl.DataFrame
    products: pl.DataFrame
    sales: pl.DataFrame
    warranty: pl.DataFrame

    def __post_init__(self) -> None:
        for relation in RELATIONS:
            object.__setattr__(self, relation, conform(getattr(self, relation), relation))

    @classmethod
    def empty(cls) -> "RetailDataset":
        """Dataset with zero rows in every relation"""
        return cls(**{relation: empty_frame(relation) for relation in RELATIONS})

    @classmethod
    def from_frames(cls, frames: Dict[str, Optional[pl.DataFrame]]) -> "RetailDataset":
        """Build a dataset from a mapping, treating absent relations as empty"""
        return cls(**{
            relation: frames.get(relation) if frames.get(relation) is not None else empty_frame(relation)
            for relation in RELATIONS
        })

    def frames(self) -> Iterator[Tuple[str, pl.DataFrame]]:
        """Iterate over (relation name, frame) pairs in load order"""
        for relation in RELATIONS:
            yield relation, getattr(self, relation)

    def row_counts(self) -> Dict[str, int]:
        """Number of rows per relation"""
        return {relation: df.height for relation, df in self.frames()}
