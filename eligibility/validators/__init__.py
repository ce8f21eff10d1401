"""
Rule Validators - One implementation per eligibility rule type.

Adding New Rule Types:
    1. Add the discriminator to RuleType
    2. Create a class extending BaseRuleValidator
    3. Implement: rule_type, check()
    4. Register it with ValidatorRegistry
"""

from eligibility.validators.api_rest import ApiRestValidator, UpstreamResponse
from eligibility.validators.base import BaseRuleValidator

__all__ = [
    "BaseRuleValidator",
    "ApiRestValidator",
    "UpstreamResponse",
]
