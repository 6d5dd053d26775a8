"""
Store directory service backing the UI.

Loads canonical stores from the remote table once, then filters and groups
them in memory on every interaction. Load failures never propagate to the
presentation layer: they become a user-facing message and an empty list.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from junapedia.config import Settings
from junapedia.matching.franchise_matcher import FranchiseMatcher
from junapedia.models.reference import WebsiteTable, load_franchise_table, load_website_table
from junapedia.models.store import CanonicalStore, DisplayGroup
from junapedia.pipeline.grouping import DisplayAssembler, StoreFilter
from junapedia.pipeline.keys import CanonicalKeyBuilder
from junapedia.storage.store_repository import (
    StoreClientNotConfigured,
    StoreFetchError,
    StoreRepository,
)
from junapedia.utils.logging_config import logger

MSG_NOT_CONFIGURED = "Supabase no está configurado. Falta SUPABASE_URL o SUPABASE_ANON_KEY."
MSG_FETCH_FAILED = "No se pudo obtener datos de Supabase."


class DirectoryLoad(BaseModel):
    """Outcome of a directory load: the stores and an optional user-facing message."""
    stores: List[CanonicalStore] = Field(default_factory=list)
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.message is None


class StoreDirectory:
    """Orchestrates load -> filter -> group for the directory UI."""

    def __init__(self, repository: StoreRepository, assembler: DisplayAssembler, websites: Optional[WebsiteTable] = None):
        self.repository = repository
        self.assembler = assembler
        self.websites = websites

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreDirectory":
        matcher = FranchiseMatcher(load_franchise_table())
        assembler = DisplayAssembler(CanonicalKeyBuilder(matcher))
        return cls(StoreRepository.from_settings(settings), assembler, load_website_table())

    @property
    def matcher(self) -> FranchiseMatcher:
        return self.assembler.matcher

    def load(self) -> DirectoryLoad:
        try:
            rows = self.repository.fetch_rows()
        except StoreClientNotConfigured as e:
            logger.error(f"Store directory unavailable: {e}")
            return DirectoryLoad(message=MSG_NOT_CONFIGURED)
        except StoreFetchError as e:
            logger.error(f"Error fetching stores: {e}")
            return DirectoryLoad(message=MSG_FETCH_FAILED)

        stores = []
        for row in rows:
            if not isinstance(row, dict):
                logger.warning(f"Skipping malformed store row: {row!r}")
                continue
            try:
                stores.append(CanonicalStore.from_row(row))
            except ValueError as e:
                logger.warning(f"Skipping store row {row.get('id')}: {e}")
        logger.info(f"Directory loaded {len(stores)} stores")
        return DirectoryLoad(stores=stores)

    def view(self, stores: List[CanonicalStore], store_filter: Optional[StoreFilter] = None) -> List[DisplayGroup]:
        return self.assembler.assemble(stores, store_filter)

    def website_for(self, name: str) -> str:
        token = self.matcher.find_franchise_key(name)
        if self.websites is None:
            return WebsiteTable({}).website_url(name, token)
        return self.websites.website_url(name, token)
