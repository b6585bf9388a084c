"""Catalog and tenant stores."""

from featurizer.stores.backends import (
    DatabaseBackend,
    MemoryBackend,
    StoreBackend,
    UnitOfWork,
    create_backend,
)
from featurizer.stores.base import CatalogEntry, CatalogStore, TenantStore
from featurizer.stores.memory import InMemoryCatalogStore, InMemoryTenantStore

__all__ = [
    "CatalogEntry",
    "CatalogStore",
    "DatabaseBackend",
    "InMemoryCatalogStore",
    "InMemoryTenantStore",
    "MemoryBackend",
    "StoreBackend",
    "TenantStore",
    "UnitOfWork",
    "create_backend",
]
