# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Catalog model: one row per registered feature."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from featurizer.models.base import Base, TimestampMixin


class CatalogFeature(Base, TimestampMixin):
    """A feature declared by an application module.

    The composite primary key is the normalized ``(vendor, group, feature)``
    key, which makes registration a per-key upsert.
    """

    __tablename__ = "catalog_features"

    vendor: Mapped[str] = mapped_column(String(100), primary_key=True)
    # "group" is a reserved word in SQL
    group_name: Mapped[str] = mapped_column(String(100), primary_key=True)
    feature: Mapped[str] = mapped_column(String(100), primary_key=True)

    teaser_title: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    teaser_text_html: Mapped[str] = mapped_column(Text, default="", nullable=False)
    teaser_url: Mapped[str] = mapped_column(String(2048), default="", nullable=False)

    def __repr__(self) -> str:
        return f"<CatalogFeature {self.vendor}/{self.group_name}/{self.feature}>"
