"""
Read-only reference data: franchise brand tokens and website links.

Both tables are loaded once per process and passed explicitly to the
components that need them, so matching and merging stay pure functions of
their inputs.
"""

import json
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import quote_plus

from junapedia.config import FRANCHISE_NAMES_PATH, WEBSITE_MAP_PATH
from junapedia.utils.logging_config import logger


MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query={query}"


class FranchiseTable:
    """
    Mapping of franchise token (e.g. ``burger-king``) to display name.

    Tokens use hyphens between words. A token may also list alias spellings
    ("kentucky fried chicken" for ``kfc``) that resolve to the same token.
    """

    def __init__(self, names: Mapping[str, str], aliases: Optional[Mapping[str, Iterable[str]]] = None):
        self._names = MappingProxyType(dict(names))
        alias_map = {}
        for token, spellings in (aliases or {}).items():
            if token not in self._names:
                logger.warning(f"Ignoring aliases for unknown franchise token: {token}")
                continue
            alias_map[token] = tuple(s for s in spellings if s)
        self._aliases = MappingProxyType(alias_map)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "FranchiseTable":
        """
        Loads a table from JSON.

        Accepted layouts: a flat ``{token: display}`` object, or
        ``{"names": {token: display}, "aliases": {token: [spelling, ...]}}``.
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if 'names' in data and isinstance(data['names'], dict):
            return cls(data['names'], data.get('aliases'))
        return cls(data)

    @property
    def names(self) -> Mapping[str, str]:
        return self._names

    def tokens(self) -> List[str]:
        return list(self._names.keys())

    def display_name(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        return self._names.get(token)

    def aliases_for(self, token: str) -> tuple:
        return self._aliases.get(token, ())

    def __contains__(self, token: object) -> bool:
        return token in self._names

    def __len__(self) -> int:
        return len(self._names)


class WebsiteTable:
    """Franchise token to official website URL."""

    SEARCH_URL = "https://www.google.com/search?q={query}"

    def __init__(self, urls: Mapping[str, str]):
        self._urls = MappingProxyType(dict(urls))

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "WebsiteTable":
        with open(path, 'r', encoding='utf-8') as f:
            return cls(json.load(f))

    def get(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        return self._urls.get(token)

    def website_url(self, name: str, token: Optional[str] = None) -> str:
        """Known website for the token, else a web search for the store name."""
        mapped = self.get(token)
        if mapped:
            return mapped
        return self.SEARCH_URL.format(query=quote_plus(f"{name} sitio web"))


def maps_url(address: str) -> str:
    """Google Maps search link for a street address."""
    return MAPS_SEARCH_URL.format(query=quote_plus(address))


@lru_cache(maxsize=1)
def load_franchise_table(path: Optional[str] = None) -> FranchiseTable:
    """Process-wide franchise table (packaged data file unless a path is given)."""
    table = FranchiseTable.from_json(path or FRANCHISE_NAMES_PATH)
    logger.info(f"Loaded {len(table)} franchise tokens")
    return table


@lru_cache(maxsize=1)
def load_website_table(path: Optional[str] = None) -> WebsiteTable:
    return WebsiteTable.from_json(path or WEBSITE_MAP_PATH)
