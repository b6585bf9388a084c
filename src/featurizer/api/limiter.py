# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Rate limiter shared by the mutating routes."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from featurizer.config import get_settings

limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)

MUTATION_LIMIT = get_settings().rate_limit_mutations
