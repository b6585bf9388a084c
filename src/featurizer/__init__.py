# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Featurizer - hierarchical feature-flag control plane."""

__version__ = "1.0.0"
