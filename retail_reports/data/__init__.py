"""
Data Generation Module
"""
from .generators import RetailDataGenerator

__all__ = ["RetailDataGenerator"]
