"""
Eligibility Package - External eligibility checks for race registrations.

Decides, at registration time, whether an athlete may sign up for a
modality by consulting the external systems configured on it.

Features:
- Rules evaluated strictly in order, one external call at a time
- Per-rule on_error policy (block or allow) for infrastructure failures
- Response fields extracted and stored alongside the registration
- CPF and credentials masked in every log line

Quick Start:
    from eligibility import AthleteData, execute_eligibility_check

    rules = [{
        "type": "api_rest",
        "enabled": True,
        "request": {
            "url": "https://registry.example.com/pacientes/{cpf}",
            "method": "GET",
            "params": ["cpf"],
            "auth": {"type": "api_key_header", "key_name": "X-API-Key", "key_value": "secret"},
        },
        "validation": {"mode": "json_compare", "path": "apto", "value": True},
        "on_error": "block",
        "error_message": "Atestado médico não encontrado",
        "save_fields": ["categoria"],
    }]

    async def register(payload):
        athlete = AthleteData.from_dict(payload)
        result = await execute_eligibility_check(athlete, rules)
        if not result.eligible:
            return result.first_message
        return result.extracted_data
"""

from eligibility.config import EngineConfig, MockServerConfig, setup_logging
from eligibility.engine import (
    EligibilityEngine,
    execute_eligibility_check,
    run_eligibility_check,
    validate_external_api,
)
from eligibility.exceptions import (
    EligibilityError,
    ResponseParseError,
    RuleConfigurationError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamTimeoutError,
)
from eligibility.export import eligibility_columns
from eligibility.logging_utils import EligibilityLogger, mask_cpf
from eligibility.models import AthleteData, EligibilityResult, RuleOutcome
from eligibility.registry import ValidatorRegistry, create_default_registry
from eligibility.response import MISSING, extract_fields, get_nested_value
from eligibility.schemas import (
    AuthConfig,
    AuthType,
    EligibilityRule,
    HttpMethod,
    OnErrorPolicy,
    RequestConfig,
    RuleType,
    ValidationConfig,
    ValidationMode,
    load_rules,
)
from eligibility.templating import apply_auth, sanitize_url
from eligibility.validators import ApiRestValidator, BaseRuleValidator

__version__ = "1.0.0"

__all__ = [
    # Engine
    "EligibilityEngine",
    "execute_eligibility_check",
    "run_eligibility_check",
    "validate_external_api",
    # Models
    "AthleteData",
    "EligibilityResult",
    "RuleOutcome",
    # Rule configuration
    "AuthConfig",
    "AuthType",
    "EligibilityRule",
    "HttpMethod",
    "OnErrorPolicy",
    "RequestConfig",
    "RuleType",
    "ValidationConfig",
    "ValidationMode",
    "load_rules",
    # Validators
    "ApiRestValidator",
    "BaseRuleValidator",
    "ValidatorRegistry",
    "create_default_registry",
    # Helpers
    "MISSING",
    "apply_auth",
    "eligibility_columns",
    "extract_fields",
    "get_nested_value",
    "mask_cpf",
    "sanitize_url",
    # Logging / config
    "EligibilityLogger",
    "EngineConfig",
    "MockServerConfig",
    "setup_logging",
    # Exceptions
    "EligibilityError",
    "ResponseParseError",
    "RuleConfigurationError",
    "UpstreamConnectionError",
    "UpstreamError",
    "UpstreamTimeoutError",
]
