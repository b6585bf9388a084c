# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Catalog API endpoints (network-wide feature registry)."""

from fastapi import APIRouter, Depends, Request, Response, status

from featurizer.api.limiter import MUTATION_LIMIT, limiter
from featurizer.keys import build_key
from featurizer.schemas.features import (
    CatalogFeatureResponse,
    CatalogListResponse,
    FeatureMetadataUpdate,
    FeatureRegister,
    RegisterResponse,
)
from featurizer.api.dependencies import get_feature_service
from featurizer.services.feature_service import FeatureService

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get(
    "",
    response_model=CatalogListResponse,
    summary="List registered features",
    description="All registered features sorted by vendor, group and feature.",
)
async def list_catalog(
    service: FeatureService = Depends(get_feature_service),
) -> CatalogListResponse:
    rows = await service.list_catalog()
    return CatalogListResponse(
        result=[CatalogFeatureResponse.model_validate(row) for row in rows]
    )


@router.post(
    "",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a feature",
    description="Idempotent: re-registering keeps the stored metadata and answers 200.",
)
@limiter.limit(MUTATION_LIMIT)
async def register_feature(
    request: Request,
    response: Response,
    payload: FeatureRegister,
    service: FeatureService = Depends(get_feature_service),
) -> RegisterResponse:
    created = await service.register(payload.vendor, payload.group, payload.feature)
    if not created:
        response.status_code = status.HTTP_200_OK

    key = build_key(payload.vendor, payload.group, payload.feature)
    entry = await service.catalog.get_entry(key)
    return RegisterResponse(
        result=CatalogFeatureResponse(
            vendor=key.vendor,
            group=key.group,
            feature=key.feature,
            teaser_title=entry.teaser_title,
            teaser_text_html=entry.teaser_text_html,
            teaser_url=entry.teaser_url,
        ),
        created=created,
    )


@router.put(
    "/{vendor}/{group}/{feature}",
    response_model=CatalogFeatureResponse,
    summary="Replace teaser metadata",
    description="Replaces title, HTML text and URL of a registered feature.",
)
@limiter.limit(MUTATION_LIMIT)
async def update_metadata(
    request: Request,
    vendor: str,
    group: str,
    feature: str,
    payload: FeatureMetadataUpdate,
    service: FeatureService = Depends(get_feature_service),
) -> CatalogFeatureResponse:
    """Raises 404 (NOT_REGISTERED) when the feature is unknown."""
    entry = await service.update_metadata(
        vendor,
        group,
        feature,
        title=payload.teaser_title,
        html=payload.teaser_text_html,
        url=payload.teaser_url,
    )
    key = build_key(vendor, group, feature)
    return CatalogFeatureResponse(
        vendor=key.vendor,
        group=key.group,
        feature=key.feature,
        teaser_title=entry.teaser_title,
        teaser_text_html=entry.teaser_text_html,
        teaser_url=entry.teaser_url,
    )
