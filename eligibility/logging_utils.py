"""
Eligibility - Secure Logging Utilities.

============================================================
PURPOSE
============================================================
Secure logging for external eligibility checks with:
- Identity masking (CPF)
- Credential masking (API keys, bearer tokens)
- Structured logging format

============================================================
SECURITY REQUIREMENTS
============================================================
1. NEVER log a raw CPF, only its masked form
2. Mask sensitive headers (Authorization, X-API-Key, etc.)
3. Mask credentials passed in the query string
4. Free text (URLs, exception messages) is redacted before logging

============================================================
"""

import json
import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional



# ============================================================
# SENSITIVE DATA PATTERNS
# ============================================================

FULLY_MASKED_CPF = "***.***.***-**"

# Header names that should be masked
SENSITIVE_HEADERS = {
    "authorization",
    "x-api-key",
    "api-key",
    "apikey",
    "x-auth-token",
    "proxy-authorization",
}

# Query parameter names that should be masked
SENSITIVE_PARAMS = {
    "api_key",
    "apikey",
    "key",
    "token",
    "access_token",
    "secret",
    "password",
}

_NON_DIGITS = re.compile(r"\D")


# ============================================================
# MASKING FUNCTIONS
# ============================================================

def mask_cpf(cpf: Optional[str]) -> str:
    """
    Mask a CPF for logging.

    Args:
        cpf: CPF, possibly punctuated

    Returns:
        ``123.***.***-00`` style mask, or a fully masked
        placeholder when fewer than 11 digits are present
    """
    digits = _NON_DIGITS.sub("", cpf or "")
    if len(digits) < 11:
        return FULLY_MASKED_CPF
    return f"{digits[:3]}.***.***-{digits[9:11]}"


def redact_identifier(text: str, cpf: Optional[str]) -> str:
    """Replace any raw or digit-only form of the CPF inside free text."""
    if not text or not cpf:
        return text
    masked = mask_cpf(cpf)
    for form in (cpf, _NON_DIGITS.sub("", cpf)):
        if form:
            text = text.replace(form, masked)
    return text


def mask_value(value: str, show_chars: int = 4) -> str:
    """Hide an API key or token, keeping a short prefix to tell keys apart."""
    if not value or len(value) <= show_chars:
        return "***"
    return f"{value[:show_chars]}...***"


def mask_headers(headers: Dict[str, str], extra_names: Optional[set] = None) -> Dict[str, str]:
    """
    Copy of the headers sent to an eligibility API, safe to log.

    Credential headers keep only a key prefix. ``extra_names`` adds the
    rule's own auth header when it uses a custom name.
    """
    sensitive = SENSITIVE_HEADERS | {name.lower() for name in (extra_names or ())}
    return {
        name: mask_value(str(value)) if name.lower() in sensitive else value
        for name, value in (headers or {}).items()
    }


def mask_url(url: str, extra_params: Optional[set] = None) -> str:
    """
    Mask credentials in a URL query string.

    Args:
        url: URL string
        extra_params: Additional parameter names to mask (e.g. a custom
            ``key_name`` configured for query authentication)

    Returns:
        URL with sensitive params masked
    """
    if not url:
        return url

    names = SENSITIVE_PARAMS | {p.lower() for p in (extra_params or set())}
    for param in names:
        pattern = re.compile(rf"([?&]{re.escape(param)}=)([^&#]+)", re.IGNORECASE)
        url = pattern.sub(lambda m: f"{m.group(1)}***", url)

    return url


# ============================================================
# LOG ENTRY STRUCTURES
# ============================================================

@dataclass
class CheckLogEntry:
    """Structured log entry for one rule evaluation event."""

    timestamp: str
    rule_type: str
    event: str
    cpf: str  # always masked

    ok: bool = None
    status_code: int = None
    latency_ms: float = None
    failure_kind: str = None
    detail: str = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON logging."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False)


# ============================================================
# ELIGIBILITY LOGGER
# ============================================================

class EligibilityLogger:
    """
    Logging sink injected into the engine and validators.

    Every method takes the raw CPF and only ever writes its mask.
    Pass ``enabled=False`` to silence it without touching control flow.
    """

    PREFIX = "[eligibility]"

    def __init__(
        self,
        logger_name: str = "eligibility",
        enabled: bool = True,
    ):
        self._logger = logging.getLogger(logger_name)
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _emit(self, level: int, message: str) -> None:
        if self._enabled:
            self._logger.log(level, f"{self.PREFIX} {message}")

    def log_request(
        self,
        rule_type: str,
        cpf: str,
        method: str,
        url: str,
        headers: Dict[str, str] = None,
        query_key_name: Optional[str] = None,
        header_key_name: Optional[str] = None,
    ) -> None:
        """Log an outgoing request at debug level, fully masked."""
        extra = {query_key_name} if query_key_name else None
        safe_url = mask_url(redact_identifier(url, cpf), extra)
        detail = f"{method} {safe_url}"
        if headers:
            safe_headers = mask_headers(headers, {header_key_name} if header_key_name else None)
            detail += f" headers={json.dumps(safe_headers, sort_keys=True)}"
        entry = CheckLogEntry(
            timestamp=datetime.utcnow().isoformat(),
            rule_type=rule_type,
            event="request",
            cpf=mask_cpf(cpf),
            detail=detail,
        )
        self._emit(logging.DEBUG, f"CHECK: {entry.to_json()}")

    def log_outcome(
        self,
        rule_type: str,
        cpf: str,
        event: str,
        ok: bool,
        status_code: int = None,
        latency_ms: float = None,
        failure_kind: str = None,
        detail: str = None,
    ) -> None:
        """Log the structured outcome of one rule."""
        entry = CheckLogEntry(
            timestamp=datetime.utcnow().isoformat(),
            rule_type=rule_type,
            event=event,
            cpf=mask_cpf(cpf),
            ok=ok,
            status_code=status_code,
            latency_ms=round(latency_ms, 1) if latency_ms is not None else None,
            failure_kind=failure_kind,
            detail=redact_identifier(detail, cpf) if detail else None,
        )
        level = logging.ERROR if failure_kind else logging.INFO
        self._emit(level, f"CHECK: {entry.to_json()}")

    def info(self, message: str, cpf: Optional[str] = None) -> None:
        """Log info message."""
        self._emit(logging.INFO, redact_identifier(message, cpf))

    def warning(self, message: str, cpf: Optional[str] = None) -> None:
        """Log warning message."""
        self._emit(logging.WARNING, redact_identifier(message, cpf))

    def error(self, message: str, cpf: Optional[str] = None) -> None:
        """Log error message."""
        self._emit(logging.ERROR, redact_identifier(message, cpf))

    def debug(self, message: str, cpf: Optional[str] = None) -> None:
        """Log debug message."""
        self._emit(logging.DEBUG, redact_identifier(message, cpf))


def get_default_logger() -> EligibilityLogger:
    """Shared sink used when none is injected."""
    return _default_logger


_default_logger = EligibilityLogger()
