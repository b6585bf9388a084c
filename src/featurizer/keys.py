# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Feature keys, targets and key normalization.

A feature is addressed by ``vendor -> group -> feature``. Every part goes
through :func:`normalize_key` before it is stored or compared, so
``"Acme"``, ``"acme"`` and ``"ac me"`` all address the same vendor.
"""

import re
from dataclasses import dataclass
from typing import Union

from .errors import InvalidKeyError

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9_\-]")


def normalize_key(value: str) -> str:
    """Lowercase ``value`` and drop every character outside ``[a-z0-9_-]``."""
    return _DISALLOWED_CHARS.sub("", value.lower())


@dataclass(frozen=True, order=True)
class FeatureKey:
    """Fully qualified, normalized feature key."""

    vendor: str
    group: str
    feature: str

    def __str__(self) -> str:
        return f"{self.vendor}/{self.group}/{self.feature}"


@dataclass(frozen=True)
class Feature:
    """Target a single feature of a group."""

    name: str


@dataclass(frozen=True)
class WholeGroup:
    """Target every feature registered under a group."""


WHOLE_GROUP = WholeGroup()

Target = Union[Feature, WholeGroup]


def normalize_part(part: str, value: str) -> str:
    """Normalize one key part, rejecting values that normalize to nothing."""
    normalized = normalize_key(value or "")
    if not normalized:
        raise InvalidKeyError(part, value)
    return normalized


def normalize_group(vendor: str, group: str) -> tuple[str, str]:
    """Normalize a ``(vendor, group)`` pair."""
    return normalize_part("vendor", vendor), normalize_part("group", group)


def as_target(target: Target | str | None) -> Target:
    """Coerce a binding argument into a normalized :data:`Target`.

    ``None`` and ``""`` mean the whole group. A non-empty string that
    normalizes to nothing is rejected instead of silently widening the
    operation to the whole group.
    """
    if isinstance(target, WholeGroup):
        return target
    if isinstance(target, Feature):
        return Feature(normalize_part("feature", target.name))
    if target is None or target == "":
        return WHOLE_GROUP
    return Feature(normalize_part("feature", target))


def build_key(vendor: str, group: str, feature: str) -> FeatureKey:
    """Build a normalized key for a single feature."""
    vendor, group = normalize_group(vendor, group)
    return FeatureKey(vendor, group, normalize_part("feature", feature))
