"""
Retail Sales Reports

Read-only analytical reports over a five-table retail sales dataset.
"""

__version__ = "1.0.0"
