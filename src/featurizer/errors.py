# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Featurizer error codes and exception classes.

Every failure the engine or its stores can surface is a ``FeaturizerError``
carrying a machine-readable code. Bindings render it as:

```json
{
  "error": {
    "code": "NOT_REGISTERED",
    "message": "Feature 'sso' in group 'login' is not registered",
    "details": {"vendor": "acme", "group": "login", "feature": "sso"},
    "suggestion": "Register the feature during module bootstrap ..."
  }
}
```
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FeaturizerErrorCode(str, Enum):
    """Standard Featurizer error codes."""

    # 400 Bad Request
    INVALID_KEY = "INVALID_KEY"
    INVALID_MANIFEST = "INVALID_MANIFEST"

    # 404 Not Found
    NOT_REGISTERED = "NOT_REGISTERED"

    # 500 Internal Server Error
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # 503 Service Unavailable
    STORE_FAILURE = "STORE_FAILURE"


ERROR_CODE_TO_HTTP_STATUS: dict[FeaturizerErrorCode, int] = {
    FeaturizerErrorCode.INVALID_KEY: 400,
    FeaturizerErrorCode.INVALID_MANIFEST: 400,
    FeaturizerErrorCode.NOT_REGISTERED: 404,
    FeaturizerErrorCode.INTERNAL_ERROR: 500,
    FeaturizerErrorCode.STORE_FAILURE: 503,
}


ERROR_CODE_SUGGESTIONS: dict[FeaturizerErrorCode, str] = {
    FeaturizerErrorCode.INVALID_KEY: "Use lowercase letters, digits, '_' or '-' for vendor, group and feature",
    FeaturizerErrorCode.INVALID_MANIFEST: "Check the manifest layout: features -> vendor -> group -> [feature, ...]",
    FeaturizerErrorCode.NOT_REGISTERED: "Register the feature during module bootstrap or list the catalog to find it",
    FeaturizerErrorCode.INTERNAL_ERROR: "Retry the request; if persistent, contact support",
    FeaturizerErrorCode.STORE_FAILURE: "The flag store is unavailable; retry later (enable/disable are idempotent)",
}


class FeaturizerErrorDetail(BaseModel):
    """Standard error response body."""

    code: str = Field(
        ...,
        description="Machine-readable error code (e.g., 'NOT_REGISTERED')",
        examples=["NOT_REGISTERED", "INVALID_KEY"],
    )
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(None, description="Additional context for debugging")
    suggestion: str | None = Field(None, description="Remediation hint")


class FeaturizerErrorResponse(BaseModel):
    """Wrapper for error responses."""

    error: FeaturizerErrorDetail


class FeaturizerError(Exception):
    """Base exception for Featurizer errors.

    Usage:
        raise FeaturizerError(
            code=FeaturizerErrorCode.NOT_REGISTERED,
            message="Feature 'sso' in group 'login' is not registered",
            details={"vendor": "acme", "group": "login", "feature": "sso"},
        )
    """

    def __init__(
        self,
        code: FeaturizerErrorCode | str,
        message: str,
        details: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        self.code = code if isinstance(code, FeaturizerErrorCode) else FeaturizerErrorCode(code)
        self.message = message
        self.details = details
        self.suggestion = suggestion or ERROR_CODE_SUGGESTIONS.get(self.code)
        super().__init__(message)

    @property
    def http_status(self) -> int:
        """Get HTTP status code for this error."""
        return ERROR_CODE_TO_HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
                "suggestion": self.suggestion,
            }
        }

    def to_response(self) -> FeaturizerErrorResponse:
        """Convert to Pydantic response model."""
        return FeaturizerErrorResponse(
            error=FeaturizerErrorDetail(
                code=self.code.value,
                message=self.message,
                details=self.details,
                suggestion=self.suggestion,
            )
        )


class NotRegisteredError(FeaturizerError):
    """Raised when a vendor/group/feature is unknown to the catalog."""

    def __init__(
        self,
        vendor: str,
        group: str,
        feature: str = "",
        message: str | None = None,
    ):
        if feature:
            default_msg = f"Feature '{feature}' in group '{group}' of vendor '{vendor}' is not registered"
        else:
            default_msg = f"Group '{group}' of vendor '{vendor}' has no registered features"
        super().__init__(
            code=FeaturizerErrorCode.NOT_REGISTERED,
            message=message or default_msg,
            details={"vendor": vendor, "group": group, "feature": feature},
        )
        self.vendor = vendor
        self.group = group
        self.feature = feature


class InvalidKeyError(FeaturizerError):
    """Raised when key normalization rejects an identifier."""

    def __init__(self, part: str, value: str, message: str | None = None):
        super().__init__(
            code=FeaturizerErrorCode.INVALID_KEY,
            message=message or f"Invalid {part} identifier: {value!r}",
            details={"part": part, "value": value},
        )
        self.part = part
        self.value = value


class StoreFailureError(FeaturizerError):
    """Raised when a persistence layer operation fails."""

    def __init__(self, operation: str, message: str | None = None):
        super().__init__(
            code=FeaturizerErrorCode.STORE_FAILURE,
            message=message or f"Store operation '{operation}' failed",
            details={"operation": operation},
        )
        self.operation = operation


class ManifestError(FeaturizerError):
    """Raised when a catalog manifest cannot be parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code=FeaturizerErrorCode.INVALID_MANIFEST,
            message=f"Invalid catalog manifest '{path}': {reason}",
            details={"path": path, "reason": reason},
        )
