# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Store interfaces consumed by the resolution engine.

Two stores back the engine:

* the **catalog store** (one per deployment) holds every registered feature
  and its teaser metadata;
* a **tenant store** (one per tenant) holds the features enabled for that
  tenant only.

Any key-value or document database can implement them. All keys passed in
are already normalized.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from featurizer.keys import FeatureKey

# {vendor: {group: [feature, ...]}}
FlagDocument = dict[str, dict[str, list[str]]]


@dataclass(frozen=True)
class CatalogEntry:
    """Descriptive metadata of a registered feature."""

    teaser_title: str = ""
    teaser_text_html: str = ""
    teaser_url: str = ""


class CatalogStore(ABC):
    """Network-wide registry of features."""

    @abstractmethod
    async def get_entry(self, key: FeatureKey) -> CatalogEntry | None:
        """Return the entry for ``key`` or None when not registered."""
        ...

    @abstractmethod
    async def put_entry(self, key: FeatureKey, entry: CatalogEntry) -> None:
        """Create or fully replace the entry for ``key``."""
        ...

    @abstractmethod
    async def put_entry_if_absent(self, key: FeatureKey, entry: CatalogEntry) -> bool:
        """Atomically create the entry unless one exists.

        Returns True if the entry was created.
        """
        ...

    @abstractmethod
    async def list_group_members(self, vendor: str, group: str) -> set[str]:
        """Return the feature names registered under ``(vendor, group)``."""
        ...

    @abstractmethod
    async def list_all(self) -> list[tuple[FeatureKey, CatalogEntry]]:
        """Return every registered feature with its entry."""
        ...


class TenantStore(ABC):
    """Enablement state of a single tenant.

    Storage is sparse: a key is enabled iff a flag exists for it.
    """

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id

    @abstractmethod
    async def get_flag(self, key: FeatureKey) -> bool:
        ...

    @abstractmethod
    async def set_flags(self, keys: Iterable[FeatureKey]) -> None:
        """Enable every key in one write."""
        ...

    @abstractmethod
    async def remove_flags(self, keys: Iterable[FeatureKey]) -> None:
        """Disable every key in one write."""
        ...

    @abstractmethod
    async def list_flags(self) -> set[FeatureKey]:
        """Return the keys currently enabled."""
        ...

    async def set_flag(self, key: FeatureKey, enabled: bool) -> None:
        if enabled:
            await self.set_flags([key])
        else:
            await self.remove_flags([key])

    async def remove_flag(self, key: FeatureKey) -> None:
        await self.remove_flags([key])


# ── Flag documents ────────────────────────────────────────────────────


def document_has(document: FlagDocument, key: FeatureKey) -> bool:
    return key.feature in document.get(key.vendor, {}).get(key.group, [])


def document_keys(document: FlagDocument) -> set[FeatureKey]:
    return {
        FeatureKey(vendor, group, feature)
        for vendor, groups in document.items()
        for group, features in groups.items()
        for feature in features
    }


def document_with(document: FlagDocument, keys: Iterable[FeatureKey]) -> FlagDocument:
    """Return a copy of ``document`` with ``keys`` added."""
    result = {vendor: {group: set(features) for group, features in groups.items()}
              for vendor, groups in document.items()}
    for key in keys:
        result.setdefault(key.vendor, {}).setdefault(key.group, set()).add(key.feature)
    return _freeze(result)


def document_without(document: FlagDocument, keys: Iterable[FeatureKey]) -> FlagDocument:
    """Return a copy of ``document`` with ``keys`` removed.

    Groups and vendors left without features are dropped.
    """
    result = {vendor: {group: set(features) for group, features in groups.items()}
              for vendor, groups in document.items()}
    for key in keys:
        result.get(key.vendor, {}).get(key.group, set()).discard(key.feature)
    return _freeze(result)


def _freeze(document: dict[str, dict[str, set[str]]]) -> FlagDocument:
    frozen: FlagDocument = {}
    for vendor, groups in document.items():
        kept = {group: sorted(features) for group, features in groups.items() if features}
        if kept:
            frozen[vendor] = kept
    return frozen


class DocumentTenantStore(TenantStore):
    """Tenant store persisting the whole flag set as one document.

    Every mutation is a read-modify-write of the document. Subclasses decide
    how (and whether) concurrent writers of the same tenant are serialized.
    """

    @abstractmethod
    async def _load(self, for_update: bool = False) -> FlagDocument:
        ...

    @abstractmethod
    async def _save(self, document: FlagDocument) -> None:
        """Persist ``document``; an empty document deletes the tenant state."""
        ...

    async def _mutate(self, change: Callable[[FlagDocument], FlagDocument]) -> None:
        document = await self._load(for_update=True)
        updated = change(document)
        if updated != document:
            await self._save(updated)

    async def get_flag(self, key: FeatureKey) -> bool:
        return document_has(await self._load(), key)

    async def set_flags(self, keys: Iterable[FeatureKey]) -> None:
        keys = list(keys)
        await self._mutate(lambda doc: document_with(doc, keys))

    async def remove_flags(self, keys: Iterable[FeatureKey]) -> None:
        keys = list(keys)
        await self._mutate(lambda doc: document_without(doc, keys))

    async def list_flags(self) -> set[FeatureKey]:
        return document_keys(await self._load())
