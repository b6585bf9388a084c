"""Business logic services."""

from featurizer.services.feature_service import (
    CatalogFeatureInfo,
    FeatureService,
    FeatureStatus,
    nest_statuses,
)
from featurizer.services.overrides import OverrideHook, settings_override

__all__ = [
    "CatalogFeatureInfo",
    "FeatureService",
    "FeatureStatus",
    "OverrideHook",
    "nest_statuses",
    "settings_override",
]
