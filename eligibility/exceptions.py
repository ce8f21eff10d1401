"""
Eligibility Exceptions - Custom exception hierarchy for external checks.

Raised inside validators and converted into rule outcomes at the
validator boundary. Nothing here ever escapes an eligibility check.
"""

from datetime import datetime
from typing import Any, Optional


class EligibilityError(Exception):
    """Base exception for all eligibility errors."""

    failure_kind: str = "unexpected"

    def __init__(
        self,
        message: str,
        rule_type: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.rule_type = rule_type
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "failure_kind": self.failure_kind,
            "message": self.message,
            "rule_type": self.rule_type,
            "original_error": type(self.original_error).__name__ if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.rule_type:
            parts.append(f"[rule={self.rule_type}]")
        if self.original_error:
            parts.append(f"(caused by: {type(self.original_error).__name__})")
        return " ".join(parts)


class UpstreamError(EligibilityError):
    """Error talking to the external eligibility API."""

    failure_kind = "server_error"

    def __init__(
        self,
        message: str,
        rule_type: Optional[str] = None,
        status_code: Optional[int] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, rule_type, original_error, context)
        self.status_code = status_code
        self.request_url = request_url

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "request_url": self.request_url,
        })
        return data

    def is_server_error(self) -> bool:
        """Check if error is server-side."""
        return self.status_code is not None and 500 <= self.status_code < 600


class UpstreamTimeoutError(UpstreamError):
    """The external call did not complete before its deadline."""

    failure_kind = "timeout"

    def __init__(
        self,
        message: str,
        rule_type: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            rule_type,
            request_url=request_url,
            original_error=original_error,
            context=context,
        )
        self.timeout_ms = timeout_ms

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["timeout_ms"] = self.timeout_ms
        return data


class UpstreamConnectionError(UpstreamError):
    """Network-level failure (DNS, refused connection, reset)."""

    failure_kind = "network"


class ResponseParseError(EligibilityError):
    """Response body could not be decoded as JSON."""

    failure_kind = "invalid_json"

    def __init__(
        self,
        message: str,
        rule_type: Optional[str] = None,
        body_preview: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, rule_type, original_error, context)
        self.body_preview = body_preview

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["body_preview"] = self.body_preview[:200] if self.body_preview else None
        return data


class RuleConfigurationError(EligibilityError):
    """Stored rule configuration is invalid."""

    failure_kind = "configuration"

    def __init__(
        self,
        message: str,
        rule_type: Optional[str] = None,
        rule_index: Optional[int] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, rule_type, original_error, context)
        self.rule_index = rule_index

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["rule_index"] = self.rule_index
        return data
