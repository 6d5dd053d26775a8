"""
Record Merger - folds raw merchant records into canonical stores.

Records sharing a canonical key (see CanonicalKeyBuilder) become one store
whose addresses and name variants are the union of its members. A single
pass over the input, in input order; the output preserves first-seen key
order.
"""

import hashlib
from typing import Any, Dict, Iterable, List, Union

from junapedia.config import DEFAULT_CATEGORY, DEFAULT_NAME
from junapedia.models.store import CanonicalStore, MenuItem, RawRecord
from junapedia.pipeline.keys import CanonicalKeyBuilder
from junapedia.utils.logging_config import logger
from junapedia.utils.normalization import normalize_text

ID_STRATEGIES = ('first', 'hash')


def make_store_id(key: str) -> str:
    """Stable id derived from a grouping key, so re-seeding upserts the same rows."""
    return 'csv-' + hashlib.sha1(key.encode('utf-8')).hexdigest()[:16]


class StoreAccumulator:
    """Mutable accumulator for one key; frozen into a CanonicalStore at the end."""

    def __init__(self, store_id: str, name: str, category: str):
        self.id = store_id
        self.name = name
        self.category = category
        self.addresses: List[str] = []
        self.source_names: List[str] = []
        self.menu_items: List[MenuItem] = []
        self.derived_from: List[str] = []
        self.merged = False
        self.count = 0

    @staticmethod
    def _union(target: List[str], values: Iterable[str]) -> None:
        for value in values:
            if value and value not in target:
                target.append(value)

    def absorb(self, record: RawRecord) -> None:
        self._union(self.addresses, record.all_addresses())
        self._union(self.source_names, record.source_names)
        self._union(self.derived_from, [*record.derived_from, record.id])
        self.menu_items.extend(record.menu_items)
        self.merged = self.merged or record.merged
        self.count += 1

    def to_store(self) -> CanonicalStore:
        return CanonicalStore(
            id=self.id,
            name=self.name,
            category=self.category,
            addresses=self.addresses,
            source_names=self.source_names,
            menu_items=self.menu_items,
            merged=self.merged or self.count > 1,
            derived_from=self.derived_from,
        )


class RecordMerger:
    """
    Merges raw records into canonical stores.

    Merge rules for a key that already has a store:
    - addresses and source names: set union, earlier entries first
    - merged: OR of the incoming flags, and true once two records fold together
    - category: replaced only while the current one is the default placeholder
    - name: an explicit canonical name from a later record replaces the current
      name when the two differ after normalization
    """

    def __init__(self, key_builder: CanonicalKeyBuilder, id_strategy: str = 'first'):
        if id_strategy not in ID_STRATEGIES:
            raise ValueError(f"id_strategy must be one of {ID_STRATEGIES}, got {id_strategy!r}")
        self.key_builder = key_builder
        self.id_strategy = id_strategy

    @staticmethod
    def _coerce(item: Union[RawRecord, Dict[str, Any]], index: int) -> RawRecord:
        record = item if isinstance(item, RawRecord) else RawRecord.model_validate(item or {})
        if not record.id:
            record = record.model_copy(update={'id': f'gen-{index}'})
        return record

    def _new_bucket(self, key: str, record: RawRecord) -> StoreAccumulator:
        store_id = make_store_id(key) if self.id_strategy == 'hash' else record.id
        name = self.key_builder.candidate_name(record) or DEFAULT_NAME
        category = (record.category or '').strip() or DEFAULT_CATEGORY
        return StoreAccumulator(store_id, name, category)

    @staticmethod
    def _merge_into(bucket: StoreAccumulator, record: RawRecord) -> None:
        incoming_category = (record.category or '').strip()
        if bucket.category == DEFAULT_CATEGORY and incoming_category and incoming_category != DEFAULT_CATEGORY:
            bucket.category = incoming_category

        explicit = (record.canonical_name or '').strip()
        if explicit and normalize_text(explicit) not in (normalize_text(bucket.name), normalize_text(DEFAULT_NAME)):
            bucket.name = explicit

    def merge(self, records: Iterable[Union[RawRecord, Dict[str, Any]]]) -> Dict[str, CanonicalStore]:
        """
        Folds records into canonical stores.

        Args:
            records: RawRecords or mappings accepted by RawRecord.

        Returns:
            Mapping of canonical key to CanonicalStore, in first-seen key order.
        """
        buckets: Dict[str, StoreAccumulator] = {}
        total = 0
        for index, item in enumerate(records):
            record = self._coerce(item, index)
            key = self.key_builder.record_key(record)
            bucket = buckets.get(key)
            if bucket is None:
                bucket = self._new_bucket(key, record)
                buckets[key] = bucket
            else:
                self._merge_into(bucket, record)
            bucket.absorb(record)
            total += 1

        stores = {key: bucket.to_store() for key, bucket in buckets.items()}
        logger.info(f"Merged {total} records into {len(stores)} canonical stores")
        return stores

    def merge_list(self, records: Iterable[Union[RawRecord, Dict[str, Any]]]) -> List[CanonicalStore]:
        return list(self.merge(records).values())

    def remerge(self, stores: Iterable[CanonicalStore]) -> List[CanonicalStore]:
        """Runs a canonical store set through the merger again."""
        return self.merge_list(store.to_record() for store in stores)
