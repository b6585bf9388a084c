# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Pydantic schemas for catalog and tenant feature endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class FeatureRegister(BaseModel):
    """Schema for registering a feature."""

    vendor: str = Field(..., min_length=1, max_length=100, examples=["hiveit"])
    group: str = Field(..., min_length=1, max_length=100, examples=["login"])
    feature: str = Field(..., min_length=1, max_length=100, examples=["two_factor"])


class FeatureMetadataUpdate(BaseModel):
    """Schema for replacing teaser metadata (all fields are replaced)."""

    teaser_title: str = Field("", max_length=255)
    teaser_text_html: str = ""
    teaser_url: str = Field("", max_length=2048)


class CatalogFeatureResponse(BaseModel):
    """A registered feature with its teaser metadata."""

    model_config = ConfigDict(from_attributes=True)

    vendor: str
    group: str
    feature: str
    teaser_title: str
    teaser_text_html: str
    teaser_url: str


class FeatureStatusResponse(CatalogFeatureResponse):
    """A registered feature merged with one tenant's flag."""

    enabled: bool


class FeatureState(BaseModel):
    """Leaf of the nested feature view."""

    teaser_title: str
    teaser_text_html: str
    teaser_url: str
    enabled: bool


class CatalogListResponse(BaseModel):
    result: list[CatalogFeatureResponse]


class RegisterResponse(BaseModel):
    result: CatalogFeatureResponse
    created: bool = Field(..., description="False if the feature was already registered")


class FeatureListResponse(BaseModel):
    result: list[FeatureStatusResponse]


class NestedFeatureListResponse(BaseModel):
    result: dict[str, dict[str, dict[str, FeatureState]]]


class FlagStatusResponse(BaseModel):
    result: bool


class FlagChangeResponse(BaseModel):
    """Result of an enable/disable call."""

    result: bool = True
    vendor: str
    group: str
    features: list[str] = Field(..., description="Features whose flag was set or removed")
