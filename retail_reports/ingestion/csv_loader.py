"""
CSV Dataset Loader

Reads the five relations from a directory of CSV files into a
RetailDataset. Headers are normalised to lower case, string values are
trimmed and date columns are parsed with the configured format.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

import polars as pl
import structlog

from retail_reports.config import get_settings
from .dataset import RELATIONS, SCHEMAS, DatasetLoadError, RetailDataset, conform

logger = structlog.get_logger(__name__)

NULL_VALUES: List[str] = ["", "NULL", "null", "None", "NA", "N/A"]


def _date_columns(relation: str) -> List[str]:
    return [col for col, dtype in SCHEMAS[relation].items() if dtype == pl.Date]


def _normalize_headers(df: pl.DataFrame) -> pl.DataFrame:
    """Lower-case and trim column names"""
    return df.rename({col: col.strip().lower() for col in df.columns})


def _trim_strings(df: pl.DataFrame) -> pl.DataFrame:
    """Trim whitespace from string columns"""
    string_cols = [col for col, dtype in zip(df.columns, df.dtypes) if dtype == pl.Utf8]
    if not string_cols:
        return df
    return df.with_columns([pl.col(col).str.strip_chars() for col in string_cols])


def _parse_dates(df: pl.DataFrame, relation: str, date_format: str) -> pl.DataFrame:
    """Parse string date columns, accepting ISO dates as a fallback"""
    for col in _date_columns(relation):
        if col not in df.columns or df[col].dtype != pl.Utf8:
            continue

        parsed = pl.coalesce(
            pl.col(col).str.strptime(pl.Date, date_format, strict=False),
            pl.col(col).str.strptime(pl.Date, "%Y-%m-%d", strict=False),
        )
        df = df.with_columns(parsed.alias(f"__{col}"))

        bad = df.filter(pl.col(col).is_not_null() & pl.col(f"__{col}").is_null())
        if bad.height:
            sample = bad[col].head(3).to_list()
            logger.error(
                "Unparsable dates",
                relation=relation,
                column=col,
                count=bad.height,
                sample=sample,
            )
            raise DatasetLoadError(
                relation,
                f"{bad.height} values in '{col}' do not match format {date_format!r}, e.g. {sample}",
            )

        df = df.drop(col).rename({f"__{col}": col})
    return df


def read_relation(
    file_path: Union[str, Path],
    relation: str,
    date_format: Optional[str] = None,
) -> pl.DataFrame:
    """
    Read a single relation from a CSV file.

    Args:
        file_path: CSV file path
        relation: Relation name (stores, category, products, sales, warranty)
        date_format: strptime format of date columns

    Returns:
        Frame conformed to the relation's canonical schema
    """
    if relation not in SCHEMAS:
        raise ValueError(f"Unknown relation: {relation}")

    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    date_format = date_format or get_settings().data.date_format

    # Everything is read as text first so identifiers keep leading zeros
    df = pl.read_csv(
        file_path,
        infer_schema_length=0,
        null_values=NULL_VALUES,
    )
    df = _normalize_headers(df)
    df = _trim_strings(df)
    df = _parse_dates(df, relation, date_format)

    # Remove completely null rows
    if df.width:
        df = df.filter(~pl.all_horizontal(pl.all().is_null()))

    df = conform(df, relation)
    logger.debug("Relation read", relation=relation, file=str(file_path), rows=df.height)
    return df


def load_csv_directory(
    directory: Union[str, Path, None] = None,
    date_format: Optional[str] = None,
    file_names: Optional[Dict[str, str]] = None,
) -> RetailDataset:
    """
    Load all five relations from a directory of CSV files.

    Args:
        directory: Directory containing the files (defaults to settings.data.dir)
        date_format: strptime format of date columns (defaults to settings.data.date_format)
        file_names: Per-relation file name overrides

    Returns:
        RetailDataset snapshot
    """
    settings = get_settings()
    directory = Path(directory or settings.data.dir)
    file_names = file_names or {}

    logger.info("Loading dataset from CSV", directory=str(directory))

    frames = {}
    for relation in RELATIONS:
        file_name = file_names.get(relation) or settings.data.file_for(relation)
        frames[relation] = read_relation(directory / file_name, relation, date_format)

    dataset = RetailDataset(**frames)
    logger.info("Dataset loaded", source="csv", **dataset.row_counts())
    return dataset


def write_csv_directory(dataset: RetailDataset, directory: Union[str, Path]) -> List[Path]:
    """Write each relation of a dataset to <directory>/<relation>.csv"""
    settings = get_settings()
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written = []
    for relation, df in dataset.frames():
        path = directory / settings.data.file_for(relation)
        df.write_csv(path, date_format="%Y-%m-%d")
        written.append(path)

    logger.info("Dataset written", directory=str(directory), files=len(written))
    return written
