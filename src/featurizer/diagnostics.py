# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Diagnostic events emitted alongside typed engine failures."""

from dataclasses import asdict, dataclass
from typing import Callable

from .errors import FeaturizerError
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DiagnosticEvent:
    """An invalid call observed by the engine."""

    operation: str
    code: str
    message: str
    vendor: str = ""
    group: str = ""
    feature: str = ""
    tenant_id: str | None = None

    @classmethod
    def from_error(
        cls,
        operation: str,
        error: FeaturizerError,
        vendor: str = "",
        group: str = "",
        feature: str = "",
        tenant_id: str | None = None,
    ) -> "DiagnosticEvent":
        return cls(
            operation=operation,
            code=error.code.value,
            message=error.message,
            vendor=vendor,
            group=group,
            feature=feature,
            tenant_id=tenant_id,
        )


DiagnosticSink = Callable[[DiagnosticEvent], None]


def log_diagnostic(event: DiagnosticEvent) -> None:
    """Default sink: record the event as a structured warning."""
    fields = asdict(event)
    message = fields.pop("message")
    logger.warning("featurizer.invalid_call", reason=message, **fields)
