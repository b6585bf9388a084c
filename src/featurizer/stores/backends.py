# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Store backends.

A backend opens a unit of work that hands out the catalog store and the
tenant store of any tenant. Bindings open one unit of work per request or
command; the database backend commits it when the operation succeeds.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from featurizer.config import Settings
from featurizer.database import build_engine, build_session_factory, init_db, session_scope
from featurizer.logging_config import get_logger
from featurizer.stores.base import CatalogStore, TenantStore
from featurizer.stores.database import SqlCatalogStore, SqlTenantStore, translate_errors
from featurizer.stores.memory import InMemoryCatalogStore, InMemoryTenantRegistry

logger = get_logger(__name__)


@dataclass
class UnitOfWork:
    """Stores available to one operation."""

    catalog: CatalogStore
    tenant_factory: Callable[[str], TenantStore]

    def tenant(self, tenant_id: str) -> TenantStore:
        return self.tenant_factory(tenant_id)


class StoreBackend(ABC):
    """Source of units of work."""

    name: str = "abstract"

    async def startup(self) -> None:
        """Prepare connections (optional)."""

    async def shutdown(self) -> None:
        """Release connections (optional)."""

    @abstractmethod
    def unit_of_work(self) -> "AsyncIterator[UnitOfWork]":
        ...


class MemoryBackend(StoreBackend):
    """Process-local stores; state is lost on restart."""

    name = "memory"

    def __init__(self) -> None:
        self.catalog = InMemoryCatalogStore()
        self.tenants = InMemoryTenantRegistry()

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[UnitOfWork]:
        yield UnitOfWork(catalog=self.catalog, tenant_factory=self.tenants.get)


class DatabaseBackend(StoreBackend):
    """SQLAlchemy async stores, one session per unit of work."""

    name = "database"

    def __init__(
        self,
        url: str,
        pool_size: int = 5,
        echo: bool = False,
        create_tables: bool = False,
    ) -> None:
        self.engine = build_engine(url, pool_size=pool_size, echo=echo)
        self.session_factory = build_session_factory(self.engine)
        self.create_tables = create_tables

    async def startup(self) -> None:
        if self.create_tables:
            await self.create_schema()

    async def create_schema(self) -> None:
        with translate_errors("schema.create"):
            await init_db(self.engine)
        logger.info("Database schema initialized", dialect=self.engine.dialect.name)

    async def shutdown(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[UnitOfWork]:
        dialect = self.engine.dialect.name
        with translate_errors("session"):
            async with session_scope(self.session_factory) as session:
                yield UnitOfWork(
                    catalog=SqlCatalogStore(session, dialect=dialect),
                    tenant_factory=lambda tenant_id: SqlTenantStore(session, tenant_id),
                )


def create_backend(settings: Settings, database_url: str | None = None) -> StoreBackend:
    """Build the backend selected by ``settings.store_backend``.

    An explicit ``database_url`` always selects the database backend.
    """
    if settings.store_backend == "memory" and database_url is None:
        return MemoryBackend()
    return DatabaseBackend(
        database_url or settings.database_url,
        pool_size=settings.db_pool_size,
        echo=settings.db_echo,
        create_tables=settings.db_auto_create,
    )
