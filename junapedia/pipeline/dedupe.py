"""
Second-pass deduplication of canonical records on name + address prefix.

Runs after the merger over the merged artifact. Two records collapse when
their key-normalized name and the first four words of their first address
agree; records that only carry a name (or only an address) join an earlier
record with that same lone name (or address).
"""

import re
from typing import Dict, Iterable, List, Tuple

from junapedia.config import DEFAULT_CATEGORY, DEFAULT_NAME
from junapedia.models.store import CanonicalStore, RawRecord
from junapedia.pipeline.merger import StoreAccumulator, make_store_id
from junapedia.utils.logging_config import logger
from junapedia.utils.normalization import compact, normalize_for_key, normalize_text

ADDRESS_PREFIX_WORDS = 4


def _slug(value: str) -> str:
    return re.sub(r'[^a-z0-9]+', '-', normalize_text(value)).strip('-')


class AddressDeduplicator:
    """Collapses near-duplicate canonical records keyed on name|address-prefix."""

    def keys_for(self, record: RawRecord, index: int = 0) -> Tuple[str, List[str]]:
        """
        Returns the key a new entry is registered under, and the lookup order.

        Lookup order: composite, name-only, address-only.
        """
        name = record.best_name()
        name_key = '' if normalize_text(name) == normalize_text(DEFAULT_NAME) else compact(normalize_for_key(name))
        addresses = record.all_addresses()
        address_words = normalize_for_key(addresses[0]).split(' ') if addresses else []
        address_key = compact(' '.join(address_words[:ADDRESS_PREFIX_WORDS]))

        name_only = f"n:{name_key}" if name_key else ''
        address_only = f"a:{address_key}" if address_key else ''
        if name_key and address_key:
            primary = f"{name_key}|{address_key}"
        else:
            primary = name_only or address_only or f"id:{record.id or index}"

        lookups = [k for k in (primary, name_only, address_only) if k]
        return primary, list(dict.fromkeys(lookups))

    def dedupe(self, records: Iterable[RawRecord]) -> List[CanonicalStore]:
        entries: Dict[str, StoreAccumulator] = {}
        total = 0
        for index, record in enumerate(records):
            total += 1
            primary, lookups = self.keys_for(record, index)
            found = next((k for k in lookups if k in entries), None)

            if found is None:
                name = record.best_name()
                if record.id:
                    store_id = record.id
                elif name:
                    store_id = f"franchise-{_slug(name)}"
                else:
                    store_id = make_store_id(primary)
                entry = StoreAccumulator(
                    store_id,
                    name or DEFAULT_NAME,
                    (record.category or '').strip() or DEFAULT_CATEGORY,
                )
                entries[primary] = entry
            else:
                entry = entries[found]
                if entry.name == DEFAULT_NAME and record.best_name():
                    entry.name = record.best_name()
            entry.absorb(record)

        stores = [entry.to_store() for entry in entries.values()]
        logger.info(f"Deduped {total} records down to {len(stores)}")
        return stores
