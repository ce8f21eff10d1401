"""
Pydantic Schemas for Eligibility Rule Configuration.

Mirrors the JSON stored against each modality. Keys are snake_case,
exactly as the admin forms persist them.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from eligibility.exceptions import RuleConfigurationError
from eligibility.response import MISSING


# =============================================================
# ENUMS
# =============================================================

class RuleType(str, Enum):
    API_REST = "api_rest"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class AuthType(str, Enum):
    NONE = "none"
    API_KEY_HEADER = "api_key_header"
    API_KEY_QUERY = "api_key_query"
    BEARER_TOKEN = "bearer_token"


class ValidationMode(str, Enum):
    HTTP_STATUS = "http_status"
    JSON_COMPARE = "json_compare"


class OnErrorPolicy(str, Enum):
    BLOCK = "block"
    ALLOW = "allow"
# =============================================================
# RULE SCHEMAS
# =============================================================

def _drop_nulls(data: Any, fields: Iterable[str]) -> Any:
    """Treat explicit nulls in stored JSON as absent, so defaults apply."""
    if not isinstance(data, dict):
        return data
    return {k: v for k, v in data.items() if not (k in fields and v is None)}


class AuthConfig(BaseModel):
    """Authentication injected into the outbound request."""
    model_config = ConfigDict(frozen=True)

    # Kept as a plain string so unknown schemes pass through untouched
    type: str = AuthType.NONE.value
    key_name: Optional[str] = None
    key_value: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def null_type_as_default(cls, data: Any) -> Any:
        return _drop_nulls(data, ("type",))


class RequestConfig(BaseModel):
    """How to call the external API."""
    model_config = ConfigDict(frozen=True)

    url: Optional[str] = None
    method: HttpMethod = HttpMethod.GET
    params: List[str] = Field(default_factory=list)
    headers: Dict[str, str] = Field(default_factory=dict)
    # None means the engine default; bounds are applied by EngineConfig.clamp_timeout
    timeout_ms: Optional[int] = None
    auth: Optional[AuthConfig] = None

    @model_validator(mode="before")
    @classmethod
    def nulls_as_defaults(cls, data: Any) -> Any:
        return _drop_nulls(data, ("method", "params", "headers"))

    @field_validator("method", mode="before")
    @classmethod
    def method_case_insensitive(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class ValidationConfig(BaseModel):
    """How to interpret the external API response."""
    model_config = ConfigDict(frozen=True)

    mode: ValidationMode = ValidationMode.HTTP_STATUS
    allowed_status: List[int] = Field(default_factory=lambda: [200])
    path: Optional[str] = None
    value: Any = None

    @model_validator(mode="before")
    @classmethod
    def nulls_as_defaults(cls, data: Any) -> Any:
        return _drop_nulls(data, ("mode", "allowed_status"))

    @property
    def expected_value(self) -> Any:
        """Value to compare against; MISSING when the rule sets none."""
        if "value" not in self.model_fields_set:
            return MISSING
        return self.value


class EligibilityRule(BaseModel):
    """One configured external-eligibility check tied to a modality."""
    model_config = ConfigDict(frozen=True)

    type: str = RuleType.API_REST.value
    enabled: bool = False
    request: Optional[RequestConfig] = None
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    on_error: OnErrorPolicy = OnErrorPolicy.BLOCK
    error_message: Optional[str] = None
    save_fields: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def nulls_as_defaults(cls, data: Any) -> Any:
        return _drop_nulls(data, ("type", "enabled", "validation", "on_error", "save_fields"))

    @property
    def is_active(self) -> bool:
        """Enabled and pointing at an endpoint."""
        return self.enabled and self.request is not None and bool(self.request.url)

    @property
    def allows_on_error(self) -> bool:
        return self.on_error == OnErrorPolicy.ALLOW


# =============================================================
# LOADING
# =============================================================

def is_active_config(raw: Any) -> bool:
    """
    Decide from stored JSON alone whether a rule takes part in a check.

    Used before strict parsing, so a disabled rule is skipped even
    when the rest of its configuration is invalid.
    """
    if isinstance(raw, EligibilityRule):
        return raw.is_active
    if not isinstance(raw, dict):
        return False
    request = raw.get("request")
    return bool(raw.get("enabled")) and isinstance(request, dict) and bool(request.get("url"))


def parse_rule(raw: Union[EligibilityRule, Dict[str, Any]], index: int = 0) -> EligibilityRule:
    """
    Parse one stored rule.

    Raises:
        RuleConfigurationError: If the stored rule is invalid
    """
    if isinstance(raw, EligibilityRule):
        return raw
    try:
        return EligibilityRule.model_validate(raw)
    except ValidationError as e:
        raise RuleConfigurationError(
            f"Invalid eligibility rule at position {index}: {e.error_count()} error(s)",
            rule_type=raw.get("type") if isinstance(raw, dict) else None,
            rule_index=index,
            original_error=e,
            context={"errors": [err["loc"] for err in e.errors()]},
        ) from e


def fallback_rule(raw: Any) -> EligibilityRule:
    """
    Policy-only view of a rule that failed to parse.

    Keeps the rule type, on_error policy and error message when they
    are usable, so the failure can still be resolved like any other.
    """
    data = raw if isinstance(raw, dict) else {}
    rule_type = data.get("type")
    error_message = data.get("error_message")
    return EligibilityRule(
        type=rule_type if isinstance(rule_type, str) else RuleType.API_REST.value,
        enabled=True,
        on_error=OnErrorPolicy.ALLOW if data.get("on_error") == "allow" else OnErrorPolicy.BLOCK,
        error_message=error_message if isinstance(error_message, str) else None,
    )


def load_rules(
    raw_rules: Iterable[Union[EligibilityRule, Dict[str, Any]]],
) -> List[EligibilityRule]:
    """
    Parse stored rule configurations strictly.

    Args:
        raw_rules: Rules as stored (dicts) or already-parsed models

    Returns:
        Parsed rules in the original order

    Raises:
        RuleConfigurationError: If any stored rule is invalid
    """
    return [parse_rule(raw, index) for index, raw in enumerate(raw_rules or [])]
