"""
Filtering and display grouping for the store directory.

Runs on every search or filter change over the canonical store set, so it
only does linear passes and relies on the matcher's memoization.
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from junapedia.config import DEFAULT_CATEGORY
from junapedia.matching.franchise_matcher import FranchiseMatcher
from junapedia.models.store import CanonicalStore, DisplayGroup
from junapedia.pipeline.descriptions import describe_store
from junapedia.pipeline.keys import CanonicalKeyBuilder
from junapedia.utils.normalization import normalize_for_key, normalize_text

ALL = "all"
TAB_RESTAURANTS = "restaurants"
TAB_SUPERMARKETS = "supermarkets"
SUPERMARKET_CATEGORY_KEY = "supermercado"


class StoreFilter(BaseModel):
    """User-selected filters; ``all`` disables the category and comuna filters."""
    search: str = ""
    category: str = ALL
    comuna: str = ALL
    tab: str = TAB_RESTAURANTS

    def matches(self, store: CanonicalStore) -> bool:
        name_norm = normalize_text(store.name)
        addresses_norm = ' '.join(normalize_text(a) for a in store.addresses)
        cat_norm = normalize_text(store.category)

        query = normalize_text(self.search)
        if query and query not in name_norm and query not in addresses_norm:
            return False

        if self.category != ALL and cat_norm != normalize_text(self.category):
            return False

        if self.comuna != ALL and normalize_text(self.comuna) not in addresses_norm:
            return False

        is_supermarket = normalize_for_key(store.category) == SUPERMARKET_CATEGORY_KEY
        if self.tab == TAB_SUPERMARKETS:
            return is_supermarket
        return not is_supermarket

    def apply(self, stores: Iterable[CanonicalStore]) -> List[CanonicalStore]:
        return [s for s in stores if self.matches(s)]


def dominant_category(members: Iterable[CanonicalStore]) -> str:
    """Most frequent member category; ties go to the category seen first."""
    counts = Counter(m.category for m in members if m.category)
    if not counts:
        return DEFAULT_CATEGORY
    # most_common keeps first-encountered order among equal counts
    return counts.most_common(1)[0][0]


class DisplayAssembler:
    """
    Partitions canonical stores into display units.

    Display name priority: franchise table name for the group key, then a
    fuzzy franchise match over the members, then the first member's name.
    """

    def __init__(self, key_builder: CanonicalKeyBuilder):
        self.key_builder = key_builder

    @property
    def matcher(self) -> FranchiseMatcher:
        return self.key_builder.matcher

    def display_name(self, key: str, members: List[CanonicalStore]) -> str:
        direct = self.matcher.table.display_name(key)
        if direct:
            return direct
        first_name = members[0].name if members else ""
        fuzzy = self.matcher.find_franchise_display(first_name, members)
        return fuzzy or first_name

    def partition(self, stores: Iterable[CanonicalStore]) -> Dict[str, List[CanonicalStore]]:
        partitions: Dict[str, List[CanonicalStore]] = {}
        for store in stores:
            partitions.setdefault(self.key_builder.display_key(store), []).append(store)
        return partitions

    def assemble(self, stores: Iterable[CanonicalStore], store_filter: Optional[StoreFilter] = None) -> List[DisplayGroup]:
        if store_filter is not None:
            stores = store_filter.apply(stores)

        groups = []
        for key, members in self.partition(stores).items():
            name = self.display_name(key, members)
            if len(members) == 1:
                store = members[0]
                groups.append(DisplayGroup(
                    kind='single',
                    key=key,
                    name=name,
                    members=members,
                    addresses=list(store.addresses),
                    dominant_category=store.category,
                    description=describe_store(store, self.matcher),
                ))
                continue

            addresses: List[str] = []
            for member in members:
                for address in member.addresses:
                    if address not in addresses:
                        addresses.append(address)
            groups.append(DisplayGroup(
                kind='group',
                key=key,
                name=name,
                members=members,
                addresses=addresses,
                dominant_category=dominant_category(members),
                description=f"{len(members)} locales",
            ))
        return groups
