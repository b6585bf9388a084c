# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""In-memory stores for tests and single-process development."""

import asyncio
import copy

from featurizer.keys import FeatureKey
from featurizer.stores.base import (
    CatalogEntry,
    CatalogStore,
    DocumentTenantStore,
    FlagDocument,
)


class InMemoryCatalogStore(CatalogStore):
    """Catalog kept in a dict, registration guarded by an asyncio lock."""

    def __init__(self) -> None:
        self._entries: dict[FeatureKey, CatalogEntry] = {}
        self._lock = asyncio.Lock()

    async def get_entry(self, key: FeatureKey) -> CatalogEntry | None:
        return self._entries.get(key)

    async def put_entry(self, key: FeatureKey, entry: CatalogEntry) -> None:
        self._entries[key] = entry

    async def put_entry_if_absent(self, key: FeatureKey, entry: CatalogEntry) -> bool:
        async with self._lock:
            if key in self._entries:
                return False
            self._entries[key] = entry
            return True

    async def list_group_members(self, vendor: str, group: str) -> set[str]:
        return {
            key.feature
            for key in self._entries
            if key.vendor == vendor and key.group == group
        }

    async def list_all(self) -> list[tuple[FeatureKey, CatalogEntry]]:
        return list(self._entries.items())


class InMemoryTenantStore(DocumentTenantStore):
    """Flag document of one tenant held in memory.

    Stores handed out by one registry share its document map, so a tenant
    with nothing enabled takes no space.
    """

    def __init__(
        self,
        tenant_id: str,
        documents: dict[str, FlagDocument] | None = None,
        lock: asyncio.Lock | None = None,
    ) -> None:
        super().__init__(tenant_id)
        self._documents = documents if documents is not None else {}
        self._lock = lock or asyncio.Lock()

    @property
    def document(self) -> FlagDocument | None:
        """Persisted document, None once nothing is enabled."""
        return copy.deepcopy(self._documents.get(self.tenant_id))

    async def _load(self, for_update: bool = False) -> FlagDocument:
        return copy.deepcopy(self._documents.get(self.tenant_id, {}))

    async def _save(self, document: FlagDocument) -> None:
        if document:
            self._documents[self.tenant_id] = copy.deepcopy(document)
        else:
            self._documents.pop(self.tenant_id, None)

    async def _mutate(self, change) -> None:
        async with self._lock:
            await super()._mutate(change)


class InMemoryTenantRegistry:
    """Process-wide flag documents of every tenant with something enabled."""

    def __init__(self) -> None:
        self._documents: dict[str, FlagDocument] = {}
        self._lock = asyncio.Lock()

    def get(self, tenant_id: str) -> InMemoryTenantStore:
        return InMemoryTenantStore(tenant_id, self._documents, self._lock)

    def tenant_ids(self) -> list[str]:
        return sorted(self._documents)
