# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for the SQLAlchemy stores (SQLite via aiosqlite)."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from featurizer.errors import StoreFailureError
from featurizer.keys import FeatureKey
from featurizer.models import TenantFeatureState
from featurizer.services.feature_service import FeatureService
from featurizer.stores.backends import DatabaseBackend
from featurizer.stores.base import CatalogEntry
from featurizer.stores.database import translate_errors

SSO = FeatureKey("hiveit", "login", "sso")
TWO_FACTOR = FeatureKey("hiveit", "login", "two_factor")


class TestSqlCatalogStore:
    async def test_put_if_absent(self, db_backend):
        async with db_backend.unit_of_work() as uow:
            assert await uow.catalog.put_entry_if_absent(SSO, CatalogEntry(teaser_title="first")) is True
            assert await uow.catalog.put_entry_if_absent(SSO, CatalogEntry(teaser_title="second")) is False

        async with db_backend.unit_of_work() as uow:
            entry = await uow.catalog.get_entry(SSO)
        assert entry.teaser_title == "first"

    async def test_put_entry_replaces(self, db_backend):
        async with db_backend.unit_of_work() as uow:
            await uow.catalog.put_entry_if_absent(SSO, CatalogEntry())
        async with db_backend.unit_of_work() as uow:
            await uow.catalog.put_entry(
                SSO, CatalogEntry(teaser_title="SSO", teaser_text_html="<p>x</p>", teaser_url="https://hive.it")
            )
        async with db_backend.unit_of_work() as uow:
            assert await uow.catalog.get_entry(SSO) == CatalogEntry(
                teaser_title="SSO", teaser_text_html="<p>x</p>", teaser_url="https://hive.it"
            )

    async def test_put_entry_creates_missing(self, db_backend):
        async with db_backend.unit_of_work() as uow:
            await uow.catalog.put_entry(SSO, CatalogEntry(teaser_title="SSO"))
            assert (await uow.catalog.get_entry(SSO)).teaser_title == "SSO"

    async def test_group_members_and_list_all(self, db_backend):
        async with db_backend.unit_of_work() as uow:
            for key in (SSO, TWO_FACTOR, FeatureKey("hiveit", "portfolio", "gallery")):
                await uow.catalog.put_entry_if_absent(key, CatalogEntry())

        async with db_backend.unit_of_work() as uow:
            assert await uow.catalog.list_group_members("hiveit", "login") == {"sso", "two_factor"}
            keys = [key for key, _ in await uow.catalog.list_all()]
        assert sorted(keys) == [
            FeatureKey("hiveit", "login", "sso"),
            FeatureKey("hiveit", "login", "two_factor"),
            FeatureKey("hiveit", "portfolio", "gallery"),
        ]

    async def test_failed_unit_of_work_rolls_back(self, db_backend):
        with pytest.raises(RuntimeError):
            async with db_backend.unit_of_work() as uow:
                await uow.catalog.put_entry_if_absent(SSO, CatalogEntry())
                raise RuntimeError("boom")

        async with db_backend.unit_of_work() as uow:
            assert await uow.catalog.get_entry(SSO) is None


class TestSqlTenantStore:
    async def test_flags_persist_across_units_of_work(self, db_backend):
        async with db_backend.unit_of_work() as uow:
            await uow.tenant("acme").set_flags([SSO, TWO_FACTOR])

        async with db_backend.unit_of_work() as uow:
            assert await uow.tenant("acme").list_flags() == {SSO, TWO_FACTOR}
            assert await uow.tenant("globex").list_flags() == set()

    async def test_update_existing_document(self, db_backend):
        async with db_backend.unit_of_work() as uow:
            await uow.tenant("acme").set_flags([SSO])
        async with db_backend.unit_of_work() as uow:
            await uow.tenant("acme").set_flags([TWO_FACTOR])
        async with db_backend.unit_of_work() as uow:
            assert await uow.tenant("acme").get_flag(SSO) is True
            assert await uow.tenant("acme").get_flag(TWO_FACTOR) is True

    async def test_empty_document_deletes_row(self, db_backend):
        async with db_backend.unit_of_work() as uow:
            await uow.tenant("acme").set_flags([SSO])
        async with db_backend.unit_of_work() as uow:
            await uow.tenant("acme").remove_flags([SSO])

        async with db_backend.session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(TenantFeatureState))
        assert count == 0

    async def test_stored_document_shape(self, db_backend):
        async with db_backend.unit_of_work() as uow:
            await uow.tenant("acme").set_flags([TWO_FACTOR, SSO])

        async with db_backend.session_factory() as session:
            row = await session.get(TenantFeatureState, "acme")
        assert row.flags == {"hiveit": {"login": ["sso", "two_factor"]}}


class TestServiceOverDatabase:
    async def test_register_enable_check(self, db_backend):
        async with db_backend.unit_of_work() as uow:
            service = FeatureService(uow.catalog)
            await service.register("hiveit", "login", "sso")
            await service.register("hiveit", "login", "two_factor")

        async with db_backend.unit_of_work() as uow:
            service = FeatureService(uow.catalog)
            await service.enable("hiveit", "login", tenant=uow.tenant("acme"))

        async with db_backend.unit_of_work() as uow:
            service = FeatureService(uow.catalog)
            assert await service.is_enabled("hiveit", "login", tenant=uow.tenant("acme")) is True
            await service.disable("hiveit", "login", "sso", tenant=uow.tenant("acme"))
            assert await service.is_enabled("hiveit", "login", tenant=uow.tenant("acme")) is False

    async def test_reregister_keeps_metadata(self, db_backend):
        async with db_backend.unit_of_work() as uow:
            service = FeatureService(uow.catalog)
            await service.register("hiveit", "login", "sso")
            await service.update_metadata("hiveit", "login", "sso", title="T1")
        async with db_backend.unit_of_work() as uow:
            service = FeatureService(uow.catalog)
            assert await service.register("hiveit", "login", "sso") is False
            rows = await service.list_catalog()
        assert rows[0].teaser_title == "T1"


class TestTranslateErrors:
    def test_sqlalchemy_error_becomes_store_failure(self):
        cause = OperationalError("SELECT 1", {}, Exception("database is locked"))
        with pytest.raises(StoreFailureError) as exc:
            with translate_errors("tenant.load"):
                raise cause
        assert exc.value.operation == "tenant.load"
        assert exc.value.__cause__ is cause

    def test_other_errors_pass_through(self):
        with pytest.raises(KeyError):
            with translate_errors("tenant.load"):
                raise KeyError("x")

    async def test_unreachable_database(self, tmp_path):
        backend = DatabaseBackend(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
        with pytest.raises(StoreFailureError):
            async with backend.unit_of_work() as uow:
                await uow.catalog.list_all()
        await backend.shutdown()
