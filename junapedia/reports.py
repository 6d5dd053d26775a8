"""
Diagnostic reports over raw or canonical store sets.

Used while curating the franchise table: which keys group the most stores,
which franchise tokens never match anything, and which frequent names are
still ungrouped (candidates for new tokens). Also extracts the comuna list
used by the directory filter.
"""

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from junapedia.matching.franchise_matcher import FranchiseMatcher
from junapedia.models.store import RawRecord
from junapedia.utils.normalization import normalize_for_key, normalize_text, title_case


def _name_of(record: RawRecord) -> str:
    return record.name or record.canonical_name or (record.source_names[0] if record.source_names else '')


def dump_groups(records: Iterable[RawRecord], matcher: FranchiseMatcher, limit: Optional[int] = 200) -> Dict[str, Any]:
    """
    Groups records by franchise token / name key.

    Returns:
        Dict with ``groups`` (key, count, token, example name; largest first)
        and ``unused_tokens`` (tokens with zero members).
    """
    groups: Dict[str, Dict[str, Any]] = {}
    for record in records:
        name = _name_of(record)
        token = matcher.find_franchise_key(name)
        key = token or normalize_for_key(name) or record.id
        group = groups.get(key)
        if group is None:
            group = {'key': key, 'count': 0, 'token': token, 'example': name}
            groups[key] = group
        group['count'] += 1

    ordered = sorted(groups.values(), key=lambda g: g['count'], reverse=True)
    used = {g['token'] for g in ordered if g['token']}
    unused = [
        {'token': t, 'display': matcher.table.display_name(t)}
        for t in matcher.table.tokens() if t not in used
    ]
    return {'groups': ordered[:limit] if limit else ordered, 'unused_tokens': unused}


def find_ungrouped(
    records: Iterable[RawRecord],
    matcher: FranchiseMatcher,
    min_count: int = 2,
    limit: Optional[int] = 100,
) -> List[Dict[str, Any]]:
    """Frequent name keys that no franchise token matches."""
    counts: Counter = Counter()
    samples: Dict[str, str] = {}
    for record in records:
        name = _name_of(record)
        if matcher.find_franchise_key(name):
            continue
        key = normalize_for_key(name) or name.lower()
        if not key:
            continue
        counts[key] += 1
        samples.setdefault(key, name)

    frequent = [
        {'key': key, 'count': count, 'example': samples[key]}
        for key, count in counts.most_common() if count >= min_count
    ]
    return frequent[:limit] if limit else frequent


def guess_comuna(address: str) -> str:
    """Text after the last comma; else the last word after the last dash."""
    parts = address.split(',')
    if len(parts) > 1:
        comuna = parts[-1].strip()
    else:
        tail = address.split('-')[-1].strip()
        comuna = tail.split(' ')[-1] if tail else ''
    return title_case(normalize_text(comuna))


def extract_comunas(records: Iterable[RawRecord]) -> Dict[str, Any]:
    """
    Counts the comuna guessed from each record's first address.

    Returns:
        Dict with ``counts`` (name/count, most frequent first, ties by name)
        and ``names`` in the same order.
    """
    counts: Counter = Counter()
    for record in records:
        candidates = record.all_addresses() or record.source_names
        address = next((a for a in candidates if a), '')
        if not address:
            continue
        comuna = guess_comuna(address)
        if comuna:
            counts[comuna] += 1

    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return {
        'counts': [{'name': name, 'count': count} for name, count in ordered],
        'names': [name for name, _ in ordered],
    }
