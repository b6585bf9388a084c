# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""SQLAlchemy-backed stores.

Database errors are translated into ``StoreFailureError`` (chained to the
original exception) and never swallowed.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from featurizer.errors import StoreFailureError
from featurizer.keys import FeatureKey
from featurizer.logging_config import get_logger
from featurizer.models.catalog import CatalogFeature
from featurizer.models.tenant_flags import TenantFeatureState
from featurizer.stores.base import (
    CatalogEntry,
    CatalogStore,
    DocumentTenantStore,
    FlagDocument,
)

logger = get_logger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise database errors as ``StoreFailureError``."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Store operation failed", operation=operation, error=str(e))
        raise StoreFailureError(operation) from e


def _entry_from_row(row: CatalogFeature) -> CatalogEntry:
    return CatalogEntry(
        teaser_title=row.teaser_title,
        teaser_text_html=row.teaser_text_html,
        teaser_url=row.teaser_url,
    )


class SqlCatalogStore(CatalogStore):
    """Catalog stored as one ``catalog_features`` row per feature."""

    def __init__(self, session: AsyncSession, dialect: str = "postgresql"):
        self.session = session
        self.dialect = dialect

    async def _get_row(self, key: FeatureKey) -> CatalogFeature | None:
        return await self.session.get(CatalogFeature, (key.vendor, key.group, key.feature))

    async def get_entry(self, key: FeatureKey) -> CatalogEntry | None:
        with translate_errors("catalog.get_entry"):
            row = await self._get_row(key)
        return _entry_from_row(row) if row else None

    async def put_entry(self, key: FeatureKey, entry: CatalogEntry) -> None:
        with translate_errors("catalog.put_entry"):
            row = await self._get_row(key)
            if row is None:
                row = CatalogFeature(vendor=key.vendor, group_name=key.group, feature=key.feature)
                self.session.add(row)
            row.teaser_title = entry.teaser_title
            row.teaser_text_html = entry.teaser_text_html
            row.teaser_url = entry.teaser_url
            await self.session.flush()

    async def put_entry_if_absent(self, key: FeatureKey, entry: CatalogEntry) -> bool:
        values = {
            "vendor": key.vendor,
            "group_name": key.group,
            "feature": key.feature,
            "teaser_title": entry.teaser_title,
            "teaser_text_html": entry.teaser_text_html,
            "teaser_url": entry.teaser_url,
        }
        with translate_errors("catalog.put_entry_if_absent"):
            upsert = _UPSERT_DIALECTS.get(self.dialect)
            if upsert is None:
                # No ON CONFLICT support: check-then-insert
                if await self._get_row(key) is not None:
                    return False
                await self.session.execute(insert(CatalogFeature.__table__).values(**values))
                return True

            stmt = (
                upsert(CatalogFeature.__table__)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["vendor", "group_name", "feature"])
            )
            result = await self.session.execute(stmt)
            return result.rowcount == 1

    async def list_group_members(self, vendor: str, group: str) -> set[str]:
        with translate_errors("catalog.list_group_members"):
            result = await self.session.execute(
                select(CatalogFeature.feature)
                .where(CatalogFeature.vendor == vendor)
                .where(CatalogFeature.group_name == group)
            )
            return set(result.scalars().all())

    async def list_all(self) -> list[tuple[FeatureKey, CatalogEntry]]:
        with translate_errors("catalog.list_all"):
            result = await self.session.execute(select(CatalogFeature))
            rows = result.scalars().all()
        return [
            (FeatureKey(row.vendor, row.group_name, row.feature), _entry_from_row(row))
            for row in rows
        ]


class SqlTenantStore(DocumentTenantStore):
    """Tenant flags stored as one JSON document row per tenant.

    Writes load the row with ``SELECT ... FOR UPDATE`` so concurrent
    enable/disable calls on the same tenant are serialized by the database.
    SQLite ignores the lock and stays last-write-wins.
    """

    def __init__(self, session: AsyncSession, tenant_id: str):
        super().__init__(tenant_id)
        self.session = session

    async def _get_row(self, for_update: bool = False) -> TenantFeatureState | None:
        stmt = select(TenantFeatureState).where(TenantFeatureState.tenant_id == self.tenant_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _load(self, for_update: bool = False) -> FlagDocument:
        with translate_errors("tenant.load"):
            row = await self._get_row(for_update=for_update)
        if row is None:
            return {}
        return {vendor: {group: list(features) for group, features in groups.items()}
                for vendor, groups in (row.flags or {}).items()}

    async def _save(self, document: FlagDocument) -> None:
        with translate_errors("tenant.save"):
            row = await self._get_row()
            if not document:
                if row is not None:
                    await self.session.delete(row)
            elif row is None:
                self.session.add(TenantFeatureState(tenant_id=self.tenant_id, flags=document))
            else:
                # Assign a new object so the JSON column is flagged dirty
                row.flags = dict(document)
            await self.session.flush()
