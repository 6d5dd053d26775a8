"""
Record-linkage pipeline: key derivation, merging, deduplication, grouping and descriptions.
"""

from .keys import CanonicalKeyBuilder
from .merger import RecordMerger, make_store_id
from .dedupe import AddressDeduplicator
from .grouping import DisplayAssembler, StoreFilter, dominant_category
from .descriptions import DescriptionGenerator, describe, describe_store

__all__ = [
    "CanonicalKeyBuilder",
    "RecordMerger",
    "make_store_id",
    "AddressDeduplicator",
    "DisplayAssembler",
    "StoreFilter",
    "dominant_category",
    "DescriptionGenerator",
    "describe",
    "describe_store",
]
