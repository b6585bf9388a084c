"""Tests for the in-memory stores and flag document helpers."""

import asyncio

from featurizer.keys import FeatureKey
from featurizer.stores.base import (
    CatalogEntry,
    document_has,
    document_keys,
    document_with,
    document_without,
)
from featurizer.stores.memory import InMemoryTenantRegistry, InMemoryTenantStore

SSO = FeatureKey("hiveit", "login", "sso")
TWO_FACTOR = FeatureKey("hiveit", "login", "two_factor")
GALLERY = FeatureKey("hiveit", "portfolio", "gallery")


class TestFlagDocuments:
    def test_with_adds_sorted_features(self):
        doc = document_with({}, [TWO_FACTOR, SSO])
        assert doc == {"hiveit": {"login": ["sso", "two_factor"]}}

    def test_with_does_not_mutate_input(self):
        original = {"hiveit": {"login": ["sso"]}}
        document_with(original, [GALLERY])
        assert original == {"hiveit": {"login": ["sso"]}}

    def test_without_collapses_empty_levels(self):
        doc = document_with({}, [SSO, GALLERY])
        assert document_without(doc, [GALLERY]) == {"hiveit": {"login": ["sso"]}}
        assert document_without(doc, [SSO, GALLERY]) == {}

    def test_without_missing_key_is_noop(self):
        doc = {"hiveit": {"login": ["sso"]}}
        assert document_without(doc, [FeatureKey("acme", "x", "y")]) == doc

    def test_has_and_keys(self):
        doc = document_with({}, [SSO, GALLERY])
        assert document_has(doc, SSO)
        assert not document_has(doc, TWO_FACTOR)
        assert document_keys(doc) == {SSO, GALLERY}


class TestInMemoryCatalogStore:
    async def test_put_if_absent(self, catalog):
        assert await catalog.put_entry_if_absent(SSO, CatalogEntry(teaser_title="first")) is True
        assert await catalog.put_entry_if_absent(SSO, CatalogEntry(teaser_title="second")) is False
        assert (await catalog.get_entry(SSO)).teaser_title == "first"

    async def test_put_entry_replaces(self, catalog):
        await catalog.put_entry(SSO, CatalogEntry(teaser_title="first"))
        await catalog.put_entry(SSO, CatalogEntry(teaser_url="https://hive.it"))
        assert await catalog.get_entry(SSO) == CatalogEntry(teaser_url="https://hive.it")

    async def test_missing_entry(self, catalog):
        assert await catalog.get_entry(SSO) is None

    async def test_group_members(self, catalog):
        for key in (SSO, TWO_FACTOR, GALLERY):
            await catalog.put_entry_if_absent(key, CatalogEntry())

        assert await catalog.list_group_members("hiveit", "login") == {"sso", "two_factor"}
        assert await catalog.list_group_members("hiveit", "unknown") == set()

    async def test_concurrent_registrations(self, catalog):
        keys = [FeatureKey("hiveit", "login", f"f{i}") for i in range(20)]
        results = await asyncio.gather(
            *(catalog.put_entry_if_absent(key, CatalogEntry()) for key in keys + keys)
        )
        assert results.count(True) == 20
        assert len(await catalog.list_all()) == 20


class TestInMemoryTenantStore:
    async def test_absent_flag_is_false(self, tenant):
        assert await tenant.get_flag(SSO) is False
        assert tenant.document is None

    async def test_set_and_remove_flag(self, tenant):
        await tenant.set_flag(SSO, True)
        assert await tenant.get_flag(SSO) is True

        await tenant.set_flag(SSO, False)
        assert await tenant.get_flag(SSO) is False
        assert tenant.document is None

    async def test_remove_flag(self, tenant):
        await tenant.set_flags([SSO, TWO_FACTOR])
        await tenant.remove_flag(SSO)
        assert await tenant.list_flags() == {TWO_FACTOR}

    async def test_document_is_a_copy(self, tenant):
        await tenant.set_flags([SSO])
        tenant.document["hiveit"]["login"].append("injected")
        assert await tenant.list_flags() == {SSO}

    async def test_concurrent_writes_are_serialized(self):
        store = InMemoryTenantStore("acme")
        keys = [FeatureKey("hiveit", "login", f"f{i}") for i in range(25)]

        await asyncio.gather(*(store.set_flags([key]) for key in keys))
        assert await store.list_flags() == set(keys)


class TestInMemoryTenantRegistry:
    async def test_reads_do_not_register_tenants(self):
        registry = InMemoryTenantRegistry()
        assert await registry.get("acme").list_flags() == set()
        assert await registry.get("globex").get_flag(SSO) is False

        assert registry.tenant_ids() == []

    async def test_state_shared_between_handles(self):
        registry = InMemoryTenantRegistry()
        await registry.get("acme").set_flags([SSO])

        assert await registry.get("acme").get_flag(SSO) is True
        assert await registry.get("globex").get_flag(SSO) is False
        assert registry.tenant_ids() == ["acme"]

    async def test_emptied_tenant_is_dropped(self):
        registry = InMemoryTenantRegistry()
        await registry.get("acme").set_flags([SSO])
        await registry.get("acme").remove_flags([SSO])

        assert registry.tenant_ids() == []
        assert registry.get("acme").document is None

    async def test_concurrent_handles_do_not_lose_updates(self):
        registry = InMemoryTenantRegistry()
        keys = [FeatureKey("hiveit", "login", f"f{i}") for i in range(10)]

        await asyncio.gather(*(registry.get("acme").set_flags([key]) for key in keys))
        assert await registry.get("acme").list_flags() == set(keys)
