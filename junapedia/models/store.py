"""
Data models for merchant records flowing through the linkage pipeline.

RawRecord is the tolerant ingestion shape: it accepts the camelCase keys of
the JSON artifacts as well as the snake_case columns of the remote table.
CanonicalStore is the deduplicated, display-ready entity and enforces the
address invariants on construction. DisplayGroup is presentation-only.
"""

import uuid
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from junapedia.config import DEFAULT_CATEGORY, DEFAULT_NAME


def _as_list(value: Any) -> List[Any]:
    """Accepts a single value where a list is expected."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _unique(values: List[str]) -> List[str]:
    """Order-preserving deduplication, dropping blanks."""
    seen = set()
    out = []
    for value in values:
        if value is None:
            continue
        value = str(value).strip()
        if not value or value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out


class MenuItem(BaseModel):
    """A menu entry; a bare string is read as the item name."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    name: str = ""
    description: Optional[str] = None
    price: Optional[str] = None

    @field_validator('price', mode='before')
    @classmethod
    def coerce_price(cls, v):
        if v is None or v == "":
            return None
        return str(v)


def _coerce_menu_items(value: Any) -> List[Any]:
    items = []
    for item in _as_list(value):
        if isinstance(item, str):
            items.append({'name': item})
        elif item is not None:
            items.append(item)
    return items


class RawRecord(BaseModel):
    """
    A merchant row as ingested from a CSV file, a JSON artifact or the remote table.

    Read-only input to merging.
    """
    model_config = ConfigDict(frozen=True, extra='ignore', populate_by_name=True)

    id: str = ""
    name: Optional[str] = None
    canonical_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices('canonical_name', 'canonicalName')
    )
    address: Optional[str] = None
    addresses: List[str] = Field(default_factory=list)
    category: Optional[str] = Field(default=None, validation_alias=AliasChoices('category', 'type'))
    source_names: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices('source_names', 'sourceNames')
    )
    menu_items: List[MenuItem] = Field(
        default_factory=list, validation_alias=AliasChoices('menu_items', 'menuItems')
    )
    merged: bool = False
    derived_from: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices('derived_from', 'derivedFrom', '__derived_from'),
    )

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        return "" if v is None else str(v)

    @field_validator('name', 'canonical_name', 'address', 'category', mode='before')
    @classmethod
    def coerce_text(cls, v):
        if v is None:
            return None
        return str(v)

    @field_validator('addresses', 'source_names', 'derived_from', mode='before')
    @classmethod
    def coerce_string_list(cls, v):
        return [str(x) for x in _as_list(v) if x is not None]

    @field_validator('menu_items', mode='before')
    @classmethod
    def coerce_menu_items(cls, v):
        return _coerce_menu_items(v)

    @field_validator('merged', mode='before')
    @classmethod
    def coerce_merged(cls, v):
        return bool(v)

    def best_name(self) -> str:
        """canonical_name > name > first source name > ''."""
        for candidate in (self.canonical_name, self.name, *self.source_names[:1]):
            if candidate and candidate.strip():
                return candidate
        return ""

    def all_addresses(self) -> List[str]:
        """The address list, falling back to the single address field; blanks dropped."""
        if any(a and a.strip() for a in self.addresses):
            return [a for a in self.addresses if a and a.strip()]
        if self.address and self.address.strip():
            return [self.address]
        return []


class CanonicalStore(BaseModel):
    """
    The deduplicated representation of a real-world store.

    Invariants (enforced on construction):
    - ``addresses`` holds no blanks and no duplicates
    - ``address`` is ``addresses[0]`` or ``''``
    - more than one address implies ``merged``
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = DEFAULT_NAME
    category: str = DEFAULT_CATEGORY
    address: str = ""
    addresses: List[str] = Field(default_factory=list)
    source_names: List[str] = Field(default_factory=list)
    menu_items: List[MenuItem] = Field(default_factory=list)
    merged: bool = False
    derived_from: List[str] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def enforce_address_invariants(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        addresses = _unique(_as_list(data.get('addresses')))
        if not addresses and data.get('address'):
            addresses = _unique([data['address']])
        data['addresses'] = addresses
        data['address'] = addresses[0] if addresses else ""
        data['merged'] = bool(data.get('merged')) or len(addresses) > 1
        data['source_names'] = _unique(_as_list(data.get('source_names')))
        data['derived_from'] = _unique(_as_list(data.get('derived_from')))
        data['menu_items'] = _coerce_menu_items(data.get('menu_items'))
        if not data.get('name'):
            data['name'] = DEFAULT_NAME
        if not data.get('category'):
            data['category'] = DEFAULT_CATEGORY
        return data

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CanonicalStore":
        """Builds a store from a remote-table row, defaulting missing fields."""
        record = RawRecord.model_validate(row)
        store_id = record.id or record.canonical_name or uuid.uuid4().hex[:7]
        return cls(
            id=store_id,
            name=record.best_name() or DEFAULT_NAME,
            category=record.category or DEFAULT_CATEGORY,
            addresses=record.all_addresses(),
            source_names=record.source_names,
            menu_items=list(record.menu_items),
            merged=record.merged,
            derived_from=record.derived_from,
        )

    def to_row(self, seeded_at: str) -> Dict[str, Any]:
        """Projects the store onto the remote-table row shape."""
        return {
            'id': self.id,
            'canonical_name': self.name,
            'source_names': list(self.source_names),
            'addresses': list(self.addresses),
            'category': self.category,
            'menu_items': [item.model_dump(exclude_none=True) for item in self.menu_items],
            'merged': self.merged,
            'seeded_at': seeded_at,
        }

    def to_record(self) -> RawRecord:
        """Feeds the store back into the pipeline as raw input."""
        return RawRecord(
            id=self.id,
            name=self.name,
            addresses=list(self.addresses),
            category=self.category,
            source_names=list(self.source_names),
            menu_items=list(self.menu_items),
            merged=self.merged,
            derived_from=list(self.derived_from),
        )


class DisplayGroup(BaseModel):
    """A UI card: one store (``single``) or a franchise/name cluster (``group``)."""
    kind: Literal['single', 'group']
    key: str
    name: str
    members: List[CanonicalStore]
    addresses: List[str] = Field(default_factory=list)
    dominant_category: str = DEFAULT_CATEGORY
    description: str = ""

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def store(self) -> CanonicalStore:
        """The lone store of a single, or the first member of a group."""
        return self.members[0]
