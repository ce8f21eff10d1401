"""
Validator Registry - Dispatch from rule type to validator.

Provides:
- Validator registration and discovery
- Forward compatibility: unknown rule types resolve to None and are
  skipped by the engine instead of failing the check
"""

import logging
from typing import Optional

from eligibility.config import EngineConfig
from eligibility.logging_utils import EligibilityLogger
from eligibility.validators import ApiRestValidator, BaseRuleValidator


logger = logging.getLogger(__name__)


class ValidatorRegistry:
    """
    Central registry of rule validators.

    Usage:
        registry = ValidatorRegistry()
        registry.register(ApiRestValidator())

        validator = registry.get("api_rest")
    """

    def __init__(self) -> None:
        self._validators: dict[str, BaseRuleValidator] = {}

    def register(self, validator: BaseRuleValidator) -> None:
        """Register a validator under its rule type."""
        rule_type = validator.rule_type

        if rule_type in self._validators:
            logger.warning(f"Validator for '{rule_type}' already registered, replacing")

        self._validators[rule_type] = validator
        logger.debug(f"Registered validator for rule type '{rule_type}'")

    def unregister(self, rule_type: str) -> Optional[BaseRuleValidator]:
        """Unregister the validator for a rule type."""
        return self._validators.pop(rule_type, None)

    def get(self, rule_type: str) -> Optional[BaseRuleValidator]:
        """Get the validator for a rule type, or None if unsupported."""
        return self._validators.get(rule_type)

    def list_rule_types(self) -> list[str]:
        """List supported rule types in registration order."""
        return list(self._validators)

    def __contains__(self, rule_type: str) -> bool:
        return rule_type in self._validators

    def __len__(self) -> int:
        return len(self._validators)


def create_default_registry(
    config: Optional[EngineConfig] = None,
    log: Optional[EligibilityLogger] = None,
) -> ValidatorRegistry:
    """
    Create a registry with every built-in validator.

    Args:
        config: Engine configuration shared by the validators
        log: Logging sink shared by the validators

    Returns:
        Populated ValidatorRegistry
    """
    registry = ValidatorRegistry()
    registry.register(ApiRestValidator(config=config, log=log))
    return registry
