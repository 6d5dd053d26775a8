"""
Data models for merchant records and reference tables.
"""

from .store import MenuItem, RawRecord, CanonicalStore, DisplayGroup
from .reference import FranchiseTable, WebsiteTable, load_franchise_table, load_website_table

__all__ = [
    "MenuItem",
    "RawRecord",
    "CanonicalStore",
    "DisplayGroup",
    "FranchiseTable",
    "WebsiteTable",
    "load_franchise_table",
    "load_website_table",
]
