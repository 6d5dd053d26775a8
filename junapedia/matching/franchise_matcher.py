"""
Franchise Matcher - resolves free-text store names to known franchise tokens.

Strategy hierarchy (first hit wins):
1. Exact match of the key-normalized name against a token (or alias) form
2. Substring match, also on whitespace-free ("compact") forms so that
   "BURGERKING MALL" still finds ``burger-king``
3. The same two passes against the names of the group members

Tokens shorter than 3 characters are ignored and longer tokens are tried
first, so a short token never shadows a more specific one.
"""

from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from junapedia.models.reference import FranchiseTable
from junapedia.utils.normalization import compact, normalize_for_key, token_form

MIN_TOKEN_LENGTH = 3


class _Candidate(NamedTuple):
    token: str
    forms: Tuple[str, ...]
    compact_forms: Tuple[str, ...]
    spaced: str


def member_name(member: Any) -> str:
    """Name of a group member, whether a row dict or a model."""
    if member is None:
        return ""
    if isinstance(member, dict):
        return member.get('name') or member.get('canonical_name') or member.get('canonicalName') or ""
    return getattr(member, 'name', None) or getattr(member, 'canonical_name', None) or ""


class FranchiseMatcher:
    """
    Deterministic franchise token lookup over an injected FranchiseTable.

    Results are memoized per raw name; the matcher holds no other state.
    """

    def __init__(self, table: FranchiseTable):
        self.table = table
        self._candidates = self._build_candidates(table)
        self._cache: Dict[str, Optional[str]] = {}

    @staticmethod
    def _build_candidates(table: FranchiseTable) -> List[_Candidate]:
        tokens = [t for t in table.tokens() if t and len(t) >= MIN_TOKEN_LENGTH]
        # sorted() is stable, so equal-length tokens keep table order
        tokens = sorted(tokens, key=len, reverse=True)

        candidates = []
        for token in tokens:
            forms = [token_form(token)]
            forms.extend(normalize_for_key(alias) for alias in table.aliases_for(token))
            forms = tuple(f for f in dict.fromkeys(forms) if f)
            if not forms:
                continue
            candidates.append(_Candidate(
                token=token,
                forms=forms,
                compact_forms=tuple(compact(f) for f in forms),
                spaced=token.replace('-', ' '),
            ))
        return candidates

    @property
    def tokens(self) -> List[str]:
        """Candidate tokens in match priority order."""
        return [c.token for c in self._candidates]

    def _match_name(self, name: str) -> Optional[str]:
        if not name or not name.strip():
            return None
        if name in self._cache:
            return self._cache[name]

        norm = normalize_for_key(name)
        norm_compact = compact(norm)
        lowered = name.lower()
        found = None

        if norm:
            for cand in self._candidates:
                if norm in cand.forms:
                    found = cand.token
                    break

        if found is None:
            for cand in self._candidates:
                if norm and any(f in norm for f in cand.forms):
                    found = cand.token
                    break
                if norm_compact and any(c in norm_compact for c in cand.compact_forms):
                    found = cand.token
                    break
                if cand.spaced in lowered:
                    found = cand.token
                    break

        self._cache[name] = found
        return found

    def find_franchise_key(self, name: Optional[str], members: Iterable[Any] = ()) -> Optional[str]:
        """
        Returns the franchise token for a store name, or None.

        Args:
            name: Free-text store name.
            members: Optional group members (dicts or models with ``name`` /
                ``canonical_name``) consulted when the name itself has no match.
        """
        token = self._match_name(name or "")
        if token:
            return token
        for member in members or ():
            token = self._match_name(member_name(member))
            if token:
                return token
        return None

    def find_franchise_display(self, name: Optional[str], members: Iterable[Any] = ()) -> str:
        """Same lookup as find_franchise_key, returning the display name ('' on no match)."""
        token = self.find_franchise_key(name, members)
        if not token:
            return ""
        return self.table.display_name(token) or ""

    def is_franchise(self, name: Optional[str]) -> bool:
        return self.find_franchise_key(name) is not None
