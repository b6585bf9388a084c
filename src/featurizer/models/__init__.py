"""SQLAlchemy models."""

from featurizer.models.base import Base
from featurizer.models.catalog import CatalogFeature
from featurizer.models.tenant_flags import TenantFeatureState

__all__ = ["Base", "CatalogFeature", "TenantFeatureState"]
