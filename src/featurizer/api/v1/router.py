"""API v1 router assembly."""

from fastapi import APIRouter

from featurizer.api.v1 import catalog, tenant_features

router = APIRouter(prefix="/api/v1")

router.include_router(catalog.router)
router.include_router(tenant_features.router)
