# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Catalog bootstrap from a YAML manifest.

Application modules declare their features in a manifest that is loaded
once at startup::

    features:
      acme:
        login:
          - sso
          - two_factor
        portfolio: [gallery]
"""

from pathlib import Path

import yaml

from featurizer.errors import ManifestError
from featurizer.keys import FeatureKey, build_key
from featurizer.logging_config import get_logger
from featurizer.services.feature_service import FeatureService

logger = get_logger(__name__)


def load_manifest(path: str | Path) -> list[FeatureKey]:
    """Read the feature keys declared in a manifest file.

    Raises:
        ManifestError: if the file is unreadable or not shaped as
            ``features -> vendor -> group -> [feature, ...]``
        InvalidKeyError: if a declared identifier does not normalize
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as e:
        raise ManifestError(str(path), f"cannot read file ({e.strerror})") from e
    except yaml.YAMLError as e:
        raise ManifestError(str(path), f"invalid YAML ({e})") from e

    if not isinstance(data, dict):
        raise ManifestError(str(path), "top level must be a mapping")
    vendors = data.get("features") or {}
    if not isinstance(vendors, dict):
        raise ManifestError(str(path), "'features' must map vendors to groups")

    keys: list[FeatureKey] = []
    for vendor, groups in vendors.items():
        if not isinstance(groups, dict):
            raise ManifestError(str(path), f"vendor '{vendor}' must map groups to feature lists")
        for group, features in groups.items():
            if not isinstance(features, list):
                raise ManifestError(str(path), f"group '{vendor}/{group}' must list its features")
            for feature in features:
                keys.append(build_key(str(vendor), str(group), str(feature)))
    return keys


async def bootstrap_catalog(service: FeatureService, keys: list[FeatureKey]) -> int:
    """Register every key; returns how many were new."""
    created = 0
    for key in keys:
        if await service.register(key.vendor, key.group, key.feature):
            created += 1
    logger.info("Catalog bootstrap complete", declared=len(keys), registered=created)
    return created
