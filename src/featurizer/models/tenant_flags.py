# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tenant flag document model."""

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from featurizer.models.base import Base, TimestampMixin


class TenantFeatureState(Base, TimestampMixin):
    """Enabled features of one tenant, stored as a single sparse document.

    ``flags`` has the shape ``{vendor: {group: [feature, ...]}}``. A feature
    is enabled iff it is listed; empty groups and vendors are never stored,
    and a tenant with nothing enabled has no row at all.
    """

    __tablename__ = "tenant_feature_states"

    tenant_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    flags: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    def __repr__(self) -> str:
        return f"<TenantFeatureState tenant={self.tenant_id}>"
