"""
Canonical key derivation.

Two independent stages use grouping keys:

- ``record_key`` runs during merging over raw records.
- ``display_key`` runs again over the canonical stores that survive a UI
  filter, so franchise variants that entered as separate canonical records
  still collapse into one card.
"""

from typing import Dict, Mapping, Optional

from junapedia.config import DEFAULT_NAME
from junapedia.matching.franchise_matcher import FranchiseMatcher
from junapedia.models.store import CanonicalStore, RawRecord
from junapedia.utils.normalization import normalize_for_key, normalize_text


class CanonicalKeyBuilder:
    """
    Computes grouping keys in strict priority:
    franchise token > normalized name > normalized first address > record id.
    """

    def __init__(self, matcher: FranchiseMatcher, merge_map: Optional[Mapping[str, str]] = None):
        self.matcher = matcher
        # Variant spellings forced onto a canonical name, keyed by normalized variant
        self.merge_map: Dict[str, str] = {
            normalize_for_key(k): v for k, v in (merge_map or {}).items() if normalize_for_key(k)
        }

    def candidate_name(self, record: RawRecord) -> str:
        name = record.best_name()
        if normalize_text(name) == normalize_text(DEFAULT_NAME):
            return ""
        norm = normalize_for_key(name)
        if norm and norm in self.merge_map:
            return self.merge_map[norm]
        return name

    def record_key(self, record: RawRecord) -> str:
        name = self.candidate_name(record)

        token = self.matcher.find_franchise_key(name)
        if token:
            return token

        name_key = normalize_for_key(name)
        if name_key:
            return name_key

        addresses = record.all_addresses()
        if addresses:
            address_key = normalize_for_key(addresses[0])
            if address_key:
                return address_key

        return record.id

    def display_key(self, store: CanonicalStore) -> str:
        """Same priority as record_key, applied to a canonical store's display name."""
        return self.record_key(store.to_record())
