# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Override hooks consulted by flag checks before any store access."""

from typing import Callable, Optional

from featurizer.config import Settings
from featurizer.keys import normalize_key

# (vendor, group, feature) -> forced decision, or None to defer.
# Parts arrive normalized; feature is "" for a whole-group check.
OverrideHook = Callable[[str, str, str], Optional[bool]]


def settings_override(settings: Settings) -> OverrideHook | None:
    """Build the environment-wide kill switch from settings.

    Returns None when no kill switch is configured so the engine skips the
    hook entirely.
    """
    if settings.kill_switch:
        return lambda vendor, group, feature: False

    vendors = {normalize_key(v) for v in settings.kill_switch_vendors_list} - {""}
    if not vendors:
        return None

    def kill_vendors(vendor: str, group: str, feature: str) -> bool | None:
        return False if vendor in vendors else None

    return kill_vendors
