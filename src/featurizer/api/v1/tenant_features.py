# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tenant feature endpoints: status, enable, disable and listing.

`/{vendor}/{group}` targets every feature of the group and
`/{vendor}/{group}/{feature}` a single one.
Unknown vendor/group/feature combinations answer 404 (NOT_REGISTERED).
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, Request

from featurizer.api.dependencies import get_feature_service, get_tenant_store
from featurizer.api.limiter import MUTATION_LIMIT, limiter
from featurizer.keys import WHOLE_GROUP, Feature
from featurizer.schemas.features import (
    FeatureListResponse,
    FeatureStatusResponse,
    FlagChangeResponse,
    FlagStatusResponse,
    NestedFeatureListResponse,
)
from featurizer.services.feature_service import FeatureService, nest_statuses
from featurizer.stores.base import TenantStore

router = APIRouter(prefix="/tenants/{tenant_id}/features", tags=["features"])


def _change_response(keys, vendor: str, group: str) -> FlagChangeResponse:
    if keys:
        vendor, group = keys[0].vendor, keys[0].group
    return FlagChangeResponse(vendor=vendor, group=group, features=[key.feature for key in keys])


@router.get(
    "",
    response_model=FeatureListResponse | NestedFeatureListResponse,
    summary="List features of a tenant",
    description="Every registered feature with the tenant's enablement, sorted by vendor, group, feature.",
)
async def list_features(
    view: Literal["flat", "nested"] = Query("flat", description="Flat rows or vendor/group/feature map"),
    service: FeatureService = Depends(get_feature_service),
    tenant: TenantStore = Depends(get_tenant_store),
):
    rows = await service.list_all(tenant)
    if view == "nested":
        return NestedFeatureListResponse(result=nest_statuses(rows))
    return FeatureListResponse(
        result=[FeatureStatusResponse.model_validate(row) for row in rows]
    )


@router.get(
    "/{vendor}/{group}",
    response_model=FlagStatusResponse,
    summary="Get group status",
    description="True only when every feature of the group is enabled.",
)
async def get_group_status(
    vendor: str,
    group: str,
    service: FeatureService = Depends(get_feature_service),
    tenant: TenantStore = Depends(get_tenant_store),
) -> FlagStatusResponse:
    return FlagStatusResponse(result=await service.check(vendor, group, WHOLE_GROUP, tenant=tenant))


@router.get("/{vendor}/{group}/{feature}", response_model=FlagStatusResponse, summary="Get feature status")
async def get_feature_status(
    vendor: str,
    group: str,
    feature: str,
    service: FeatureService = Depends(get_feature_service),
    tenant: TenantStore = Depends(get_tenant_store),
) -> FlagStatusResponse:
    return FlagStatusResponse(result=await service.check(vendor, group, Feature(feature), tenant=tenant))


@router.put("/{vendor}/{group}", response_model=FlagChangeResponse, summary="Enable group")
@limiter.limit(MUTATION_LIMIT)
async def enable_group(
    request: Request,
    vendor: str,
    group: str,
    service: FeatureService = Depends(get_feature_service),
    tenant: TenantStore = Depends(get_tenant_store),
) -> FlagChangeResponse:
    """Enable every feature currently registered in the group."""
    keys = await service.enable(vendor, group, WHOLE_GROUP, tenant=tenant)
    return _change_response(keys, vendor, group)


@router.put("/{vendor}/{group}/{feature}", response_model=FlagChangeResponse, summary="Enable feature")
@limiter.limit(MUTATION_LIMIT)
async def enable_feature(
    request: Request,
    vendor: str,
    group: str,
    feature: str,
    service: FeatureService = Depends(get_feature_service),
    tenant: TenantStore = Depends(get_tenant_store),
) -> FlagChangeResponse:
    keys = await service.enable(vendor, group, Feature(feature), tenant=tenant)
    return _change_response(keys, vendor, group)


@router.delete("/{vendor}/{group}", response_model=FlagChangeResponse, summary="Disable group")
@limiter.limit(MUTATION_LIMIT)
async def disable_group(
    request: Request,
    vendor: str,
    group: str,
    service: FeatureService = Depends(get_feature_service),
    tenant: TenantStore = Depends(get_tenant_store),
) -> FlagChangeResponse:
    """Disable every feature currently registered in the group."""
    keys = await service.disable(vendor, group, WHOLE_GROUP, tenant=tenant)
    return _change_response(keys, vendor, group)


@router.delete("/{vendor}/{group}/{feature}", response_model=FlagChangeResponse, summary="Disable feature")
@limiter.limit(MUTATION_LIMIT)
async def disable_feature(
    request: Request,
    vendor: str,
    group: str,
    feature: str,
    service: FeatureService = Depends(get_feature_service),
    tenant: TenantStore = Depends(get_tenant_store),
) -> FlagChangeResponse:
    keys = await service.disable(vendor, group, Feature(feature), tenant=tenant)
    return _change_response(keys, vendor, group)
