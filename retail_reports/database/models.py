"""
Database Models - Retail Sales Schema

Five-table schema backing the reports:

Dimension Tables:
- Store: physical stores and their location
- Category: product categories
- Product: product catalog with launch date and list price

Fact Tables:
- Sale: one row per sale transaction
- WarrantyClaim: warranty claims, optionally linked to a sale
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# DIMENSION TABLES
# =============================================================================

class Store(Base):
    """Store Dimension Table"""
    __tablename__ = "stores"

    store_id: Mapped[str] = mapped_column(String(10), primary_key=True)
    store_name: Mapped[str] = mapped_column(String(50), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(30))
    country: Mapped[Optional[str]] = mapped_column(String(30))

    sales: Mapped[List["Sale"]] = relationship(back_populates="store")


class Category(Base):
    """Category Dimension Table"""
    __tablename__ = "category"

    category_id: Mapped[str] = mapped_column(String(10), primary_key=True)
    category_name: Mapped[str] = mapped_column(String(30), nullable=False)

    products: Mapped[List["Product"]] = relationship(back_populates="category")


class Product(Base):
    """
    Product Dimension Table

    Launch date drives the "recently launched" reports; price is the list
    price used for revenue.
    """
    __tablename__ = "products"

    product_id: Mapped[str] = mapped_column(String(10), primary_key=True)
    product_name: Mapped[str] = mapped_column(String(50), nullable=False)
    category_id: Mapped[Optional[str]] = mapped_column(
        String(10), ForeignKey("category.category_id")
    )
    launch_date: Mapped[Optional[date]] = mapped_column(Date)
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))

    category: Mapped[Optional["Category"]] = relationship(back_populates="products")
    sales: Mapped[List["Sale"]] = relationship(back_populates="product")


# =============================================================================
# FACT TABLES
# =============================================================================

class Sale(Base):
    """Sales Fact Table"""
    __tablename__ = "sales"

    sale_id: Mapped[str] = mapped_column(String(15), primary_key=True)
    sale_date: Mapped[date] = mapped_column(Date, nullable=False)
    store_id: Mapped[str] = mapped_column(String(10), ForeignKey("stores.store_id"), nullable=False)
    product_id: Mapped[str] = mapped_column(String(10), ForeignKey("products.product_id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    store: Mapped["Store"] = relationship(back_populates="sales")
    product: Mapped["Product"] = relationship(back_populates="sales")
    claims: Mapped[List["WarrantyClaim"]] = relationship(back_populates="sale")

    __table_args__ = (
        Index("ix_sales_store_date", "store_id", "sale_date"),
        Index("ix_sales_product", "product_id"),
    )


class WarrantyClaim(Base):
    """
    Warranty Claims Fact Table

    sale_id is nullable: claims can exist without a matching sale.
    """
    __tablename__ = "warranty"

    claim_id: Mapped[str] = mapped_column(String(10), primary_key=True)
    claim_date: Mapped[date] = mapped_column(Date, nullable=False)
    sale_id: Mapped[Optional[str]] = mapped_column(String(15), ForeignKey("sales.sale_id"))
    repair_status: Mapped[Optional[str]] = mapped_column(String(15))

    sale: Mapped[Optional["Sale"]] = relationship(back_populates="claims")

    __table_args__ = (
        Index("ix_warranty_claim_date", "claim_date"),
        Index("ix_warranty_sale", "sale_id"),
    )


# Table per relation name, in foreign-key order
MODELS = {
    "stores": Store,
    "category": Category,
    "products": Product,
    "sales": Sale,
    "warranty": WarrantyClaim,
}
