from .store_repository import (
    StoreRepository,
    StoreClientNotConfigured,
    StoreFetchError,
    StoreUpsertError,
)

__all__ = ["StoreRepository", "StoreClientNotConfigured", "StoreFetchError", "StoreUpsertError"]
