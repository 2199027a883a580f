"""
Data Ingestion Module
"""
from .dataset import RetailDataset, DatasetLoadError, SCHEMAS, RELATIONS
from .csv_loader import load_csv_directory, read_relation, write_csv_directory
from .db_loader import load_from_database, seed_database

__all__ = [
    "RetailDataset",
    "DatasetLoadError",
    "SCHEMAS",
    "RELATIONS",
    "load_csv_directory",
    "read_relation",
    "write_csv_directory",
    "load_from_database",
    "seed_database",
]
