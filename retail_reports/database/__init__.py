"""
Database Module
"""
from .connection import (
    init_database,
    close_database,
    get_engine,
    create_schema,
    read_only_snapshot,
)
from .models import Base, Store, Category, Product, Sale, WarrantyClaim

__all__ = [
    "init_database",
    "close_database",
    "get_engine",
    "create_schema",
    "read_only_snapshot",
    "Base",
    "Store",
    "Category",
    "Product",
    "Sale",
    "WarrantyClaim",
]
