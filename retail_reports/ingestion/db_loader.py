"""
Database Dataset Loader

Reads the five relations from the report tables into a RetailDataset
inside a single read-only snapshot, and bulk-seeds the tables from a
dataset.
"""

from typing import Dict, Optional

import polars as pl
import structlog
from sqlalchemy import Engine, Float, cast, insert, select

from retail_reports.database.connection import create_schema, get_engine, read_only_snapshot
from retail_reports.database.models import MODELS
from .dataset import RELATIONS, SCHEMAS, RetailDataset

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1000


def _select_relation(relation: str):
    """SELECT for a relation with columns in canonical schema order"""
    model = MODELS[relation]
    columns = []
    for name, dtype in SCHEMAS[relation].items():
        column = getattr(model, name)
        # Numeric comes back as Decimal; reports work in floats
        if dtype == pl.Float64:
            column = cast(column, Float).label(name)
        columns.append(column)
    primary_key = list(model.__table__.primary_key.columns)
    return select(*columns).order_by(*primary_key)


def load_from_database(engine: Optional[Engine] = None) -> RetailDataset:
    """
    Load all five relations from the database.

    All tables are read in one read-only transaction so concurrent writers
    cannot produce a torn snapshot.

    Args:
        engine: SQLAlchemy engine (defaults to the one from init_database)

    Returns:
        RetailDataset snapshot
    """
    if engine is None:
        engine = get_engine()

    logger.info("Loading dataset from database", dialect=engine.dialect.name)

    frames = {}
    with read_only_snapshot(engine) as conn:
        for relation in RELATIONS:
            rows = conn.execute(_select_relation(relation)).all()
            frames[relation] = pl.DataFrame(
                [tuple(row) for row in rows],
                schema=SCHEMAS[relation],
                orient="row",
            )

    dataset = RetailDataset(**frames)
    logger.info("Dataset loaded", source="database", **dataset.row_counts())
    return dataset


def seed_database(engine: Engine, dataset: RetailDataset, create_tables: bool = True) -> Dict[str, int]:
    """
    Bulk insert a dataset into the report tables.

    Relations are inserted in foreign-key order, in chunks.

    Args:
        engine: SQLAlchemy engine
        dataset: Dataset to insert
        create_tables: Create missing tables first

    Returns:
        Rows inserted per relation
    """
    if create_tables:
        create_schema(engine)

    inserted = {}
    with engine.begin() as conn:
        for relation, df in dataset.frames():
            model = MODELS[relation]
            records = df.to_dicts()
            for i in range(0, len(records), CHUNK_SIZE):
                conn.execute(insert(model), records[i:i + CHUNK_SIZE])
            inserted[relation] = len(records)
            logger.debug(f"Inserted {len(records)} records into {model.__tablename__}")

    logger.info("Database seeded", **inserted)
    return inserted
