# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""FastAPI dependencies wiring requests to stores and the engine."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request

from featurizer.keys import normalize_part
from featurizer.logging_config import bind_context
from featurizer.services.feature_service import FeatureService
from featurizer.stores.backends import StoreBackend, UnitOfWork
from featurizer.stores.base import TenantStore


def get_backend(request: Request) -> StoreBackend:
    """Backend created by the application lifespan."""
    return request.app.state.backend


async def get_unit_of_work(
    backend: StoreBackend = Depends(get_backend),
) -> AsyncGenerator[UnitOfWork, None]:
    """One unit of work per request, committed when the route succeeds."""
    async with backend.unit_of_work() as uow:
        yield uow


def get_feature_service(
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> FeatureService:
    return FeatureService(uow.catalog, override=getattr(request.app.state, "override", None))


def get_tenant_store(
    tenant_id: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> TenantStore:
    """Tenant store for the ``tenant_id`` path parameter."""
    tenant_key = normalize_part("tenant", tenant_id)
    bind_context(tenant_id=tenant_key)
    return uow.tenant(tenant_key)
