# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Feature registration, enablement and resolution.

``FeatureService`` sits between the bindings (HTTP, CLI, application code)
and the two stores. The catalog store is injected at construction; the
tenant store is selected by the caller for every tenant-scoped operation.

Group semantics: a whole-group check is true only when the group has at
least one registered feature and every one of them is enabled for the
tenant. Bulk enable/disable act on the members registered at call time.
"""

from dataclasses import dataclass
from typing import Any

from featurizer.diagnostics import DiagnosticEvent, DiagnosticSink, log_diagnostic
from featurizer.errors import FeaturizerError, InvalidKeyError, NotRegisteredError
from featurizer.keys import (
    WHOLE_GROUP,
    Feature,
    FeatureKey,
    Target,
    WholeGroup,
    as_target,
    normalize_group,
)
from featurizer.logging_config import get_logger
from featurizer.services.metadata import clean_html, clean_title, clean_url
from featurizer.services.overrides import OverrideHook
from featurizer.stores.base import CatalogEntry, CatalogStore, TenantStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class CatalogFeatureInfo:
    """A catalog entry flattened with its key."""

    vendor: str
    group: str
    feature: str
    teaser_title: str = ""
    teaser_text_html: str = ""
    teaser_url: str = ""

    @property
    def sort_key(self) -> tuple[str, str, str]:
        return (self.vendor, self.group, self.feature)


@dataclass(frozen=True)
class FeatureStatus(CatalogFeatureInfo):
    """A catalog entry merged with one tenant's flag."""

    enabled: bool = False


def _raw_feature(target: Target | str | None) -> str:
    if isinstance(target, Feature):
        return target.name
    if isinstance(target, WholeGroup) or target is None:
        return ""
    return target


def _feature_name(target: Target) -> str:
    return target.name if isinstance(target, Feature) else ""


def nest_statuses(rows: list[FeatureStatus]) -> dict[str, dict[str, dict[str, dict[str, Any]]]]:
    """Nested ``{vendor: {group: {feature: {...}}}}`` view of a listing.

    Insertion order follows ``rows``, so a sorted listing stays sorted.
    """
    nested: dict[str, dict[str, dict[str, dict[str, Any]]]] = {}
    for row in rows:
        nested.setdefault(row.vendor, {}).setdefault(row.group, {})[row.feature] = {
            "teaser_title": row.teaser_title,
            "teaser_text_html": row.teaser_text_html,
            "teaser_url": row.teaser_url,
            "enabled": row.enabled,
        }
    return nested


class FeatureService:
    """Resolution engine over a catalog store and per-tenant stores."""

    def __init__(
        self,
        catalog: CatalogStore,
        override: OverrideHook | None = None,
        diagnostics: DiagnosticSink = log_diagnostic,
    ):
        self.catalog = catalog
        self.override = override
        self.diagnostics = diagnostics

    # ── Diagnostics ───────────────────────────────────────────────────

    def _report(
        self,
        operation: str,
        error: FeaturizerError,
        vendor: str,
        group: str,
        feature: str,
        tenant: TenantStore | None = None,
    ) -> FeaturizerError:
        self.diagnostics(
            DiagnosticEvent.from_error(
                operation,
                error,
                vendor=vendor,
                group=group,
                feature=feature,
                tenant_id=tenant.tenant_id if tenant is not None else None,
            )
        )
        return error

    def _normalize(
        self,
        operation: str,
        vendor: str,
        group: str,
        target: Target | str | None,
        tenant: TenantStore | None = None,
    ) -> tuple[str, str, Target]:
        try:
            vendor_key, group_key = normalize_group(vendor, group)
            return vendor_key, group_key, as_target(target)
        except InvalidKeyError as e:
            raise self._report(operation, e, vendor, group, _raw_feature(target), tenant)

    async def _members(
        self,
        operation: str,
        vendor: str,
        group: str,
        target: Target,
        tenant: TenantStore | None = None,
    ) -> set[str]:
        """Return the group members, failing if the target is unknown."""
        members = await self.catalog.list_group_members(vendor, group)
        feature = _feature_name(target)
        if not members or (feature and feature not in members):
            error = NotRegisteredError(vendor, group, feature)
            raise self._report(operation, error, vendor, group, feature, tenant)
        return members

    @staticmethod
    def _target_keys(vendor: str, group: str, target: Target, members: set[str]) -> list[FeatureKey]:
        if isinstance(target, Feature):
            return [FeatureKey(vendor, group, target.name)]
        return [FeatureKey(vendor, group, member) for member in sorted(members)]

    def _feature_key(self, operation: str, vendor: str, group: str, feature: str) -> FeatureKey:
        vendor_key, group_key, target = self._normalize(operation, vendor, group, feature)
        if not isinstance(target, Feature):
            error = InvalidKeyError("feature", feature, message="A feature name is required")
            raise self._report(operation, error, vendor, group, "")
        return FeatureKey(vendor_key, group_key, target.name)

    # ── Catalog ───────────────────────────────────────────────────────

    async def register(self, vendor: str, group: str, feature: str) -> bool:
        """Declare a feature in the catalog.

        Idempotent: an existing entry and its metadata are left untouched.

        Returns:
            True if the feature was newly registered
        """
        key = self._feature_key("register", vendor, group, feature)
        created = await self.catalog.put_entry_if_absent(key, CatalogEntry())
        if created:
            logger.info("Feature registered", vendor=key.vendor, group=key.group, feature=key.feature)
        return created

    async def update_metadata(
        self,
        vendor: str,
        group: str,
        feature: str,
        title: str = "",
        html: str = "",
        url: str = "",
    ) -> CatalogEntry:
        """Replace the teaser metadata of a registered feature.

        Raises:
            NotRegisteredError: if the exact feature is not registered
        """
        key = self._feature_key("update_metadata", vendor, group, feature)
        if await self.catalog.get_entry(key) is None:
            error = NotRegisteredError(key.vendor, key.group, key.feature)
            raise self._report("update_metadata", error, key.vendor, key.group, key.feature)

        entry = CatalogEntry(
            teaser_title=clean_title(title),
            teaser_text_html=clean_html(html),
            teaser_url=clean_url(url),
        )
        await self.catalog.put_entry(key, entry)
        logger.info("Feature metadata updated", vendor=key.vendor, group=key.group, feature=key.feature)
        return entry

    async def list_catalog(self) -> list[CatalogFeatureInfo]:
        """All registered features sorted by vendor, group, feature."""
        entries = await self.catalog.list_all()
        rows = [
            CatalogFeatureInfo(
                vendor=key.vendor,
                group=key.group,
                feature=key.feature,
                teaser_title=entry.teaser_title,
                teaser_text_html=entry.teaser_text_html,
                teaser_url=entry.teaser_url,
            )
            for key, entry in entries
        ]
        return sorted(rows, key=lambda row: row.sort_key)

    # ── Tenant state ──────────────────────────────────────────────────

    async def enable(
        self,
        vendor: str,
        group: str,
        target: Target | str | None = WHOLE_GROUP,
        *,
        tenant: TenantStore,
    ) -> list[FeatureKey]:
        """Enable one feature or every current member of a group.

        Idempotent. Features registered after a whole-group enable are not
        enabled retroactively.

        Raises:
            NotRegisteredError: if the group is empty or the feature unknown
        """
        vendor, group, target = self._normalize("enable", vendor, group, target, tenant)
        members = await self._members("enable", vendor, group, target, tenant)
        keys = self._target_keys(vendor, group, target, members)
        await tenant.set_flags(keys)
        logger.info(
            "Features enabled",
            tenant_id=tenant.tenant_id,
            vendor=vendor,
            group=group,
            features=[key.feature for key in keys],
        )
        return keys

    async def disable(
        self,
        vendor: str,
        group: str,
        target: Target | str | None = WHOLE_GROUP,
        *,
        tenant: TenantStore,
    ) -> list[FeatureKey]:
        """Disable one feature or every current member of a group.

        Idempotent. Empty group/vendor levels are removed from the tenant's
        flag document.

        Raises:
            NotRegisteredError: if the group is empty or the feature unknown
        """
        vendor, group, target = self._normalize("disable", vendor, group, target, tenant)
        members = await self._members("disable", vendor, group, target, tenant)
        keys = self._target_keys(vendor, group, target, members)
        await tenant.remove_flags(keys)
        logger.info(
            "Features disabled",
            tenant_id=tenant.tenant_id,
            vendor=vendor,
            group=group,
            features=[key.feature for key in keys],
        )
        return keys

    async def _resolve(
        self,
        operation: str,
        vendor: str,
        group: str,
        target: Target,
        tenant: TenantStore,
    ) -> bool:
        members = await self._members(operation, vendor, group, target, tenant)
        if isinstance(target, Feature):
            return await tenant.get_flag(FeatureKey(vendor, group, target.name))
        enabled = await tenant.list_flags()
        return all(FeatureKey(vendor, group, member) in enabled for member in members)

    async def check(
        self,
        vendor: str,
        group: str,
        target: Target | str | None = WHOLE_GROUP,
        *,
        tenant: TenantStore,
    ) -> bool:
        """Stored state of a feature or group, failing on unknown targets.

        Bindings use this to answer 404 for unknown flags. The override hook
        is not consulted.

        Raises:
            NotRegisteredError: if the group is empty or the feature unknown
            InvalidKeyError: if the key does not normalize
        """
        vendor, group, target = self._normalize("check", vendor, group, target, tenant)
        return await self._resolve("check", vendor, group, target, tenant)

    async def is_enabled(
        self,
        vendor: str,
        group: str,
        target: Target | str | None = WHOLE_GROUP,
        *,
        tenant: TenantStore,
    ) -> bool:
        """Flag check for application call sites.

        Never raises for unknown or malformed targets: those resolve to
        False and a diagnostic event is emitted. Store failures propagate.
        """
        try:
            vendor, group, target = self._normalize("is_enabled", vendor, group, target, tenant)
        except InvalidKeyError:
            return False

        if self.override is not None:
            decision = self.override(vendor, group, _feature_name(target))
            if decision is not None:
                return bool(decision)

        try:
            return await self._resolve("is_enabled", vendor, group, target, tenant)
        except NotRegisteredError:
            return False

    async def list_all(self, tenant: TenantStore) -> list[FeatureStatus]:
        """Every registered feature merged with the tenant's flag.

        Sorted ascending by vendor, then group, then feature. Flags of
        features missing from the catalog are ignored.
        """
        catalog = await self.list_catalog()
        enabled = await tenant.list_flags()
        return [
            FeatureStatus(
                vendor=info.vendor,
                group=info.group,
                feature=info.feature,
                teaser_title=info.teaser_title,
                teaser_text_html=info.teaser_text_html,
                teaser_url=info.teaser_url,
                enabled=FeatureKey(*info.sort_key) in enabled,
            )
            for info in catalog
        ]
