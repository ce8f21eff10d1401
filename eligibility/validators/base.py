"""
Base Rule Validator - Abstract interface for all eligibility rule types.

All validators MUST implement this interface to ensure:
- Isolation
- Replaceability
- Fail-safety
"""

from abc import ABC, abstractmethod
from typing import Optional

import aiohttp

from eligibility.config import EngineConfig
from eligibility.exceptions import EligibilityError
from eligibility.logging_utils import EligibilityLogger, get_default_logger
from eligibility.models import AthleteData, RuleOutcome
from eligibility.schemas import EligibilityRule


class BaseRuleValidator(ABC):
    """
    Abstract base class for all rule validators.

    Each validator implementation must:
    1. Implement rule_type - the discriminator it handles
    2. Implement check() - evaluate one rule, raising EligibilityError
       subclasses for infrastructure failures

    Features:
    - validate() never raises: infrastructure failures and unexpected
      errors are resolved through the rule's on_error policy
    - All logging goes through the injected EligibilityLogger
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        log: Optional[EligibilityLogger] = None,
    ) -> None:
        self._config = config or EngineConfig()
        self._log = log or get_default_logger()

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Rule discriminator handled by this validator."""
        pass

    @abstractmethod
    async def check(
        self,
        rule: EligibilityRule,
        athlete: AthleteData,
        session: aiohttp.ClientSession,
    ) -> RuleOutcome:
        """
        Evaluate one rule.

        Args:
            rule: Active rule of this validator's type
            athlete: Subject being checked
            session: HTTP session owned by the caller

        Returns:
            RuleOutcome for business answers (eligible or not)

        Raises:
            EligibilityError: On infrastructure failure
        """
        pass

    async def validate(
        self,
        rule: EligibilityRule,
        athlete: AthleteData,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> RuleOutcome:
        """
        Evaluate one rule (main entry point).

        Note:
            Never raises unhandled exceptions - every failure resolves
            to an outcome through the on_error policy
        """
        try:
            if session is None:
                async with aiohttp.ClientSession() as own_session:
                    return await self.check(rule, athlete, own_session)
            return await self.check(rule, athlete, session)

        except EligibilityError as e:
            return self.resolve_failure(rule, athlete, e)
        except Exception as e:
            error = EligibilityError(
                message=f"Unexpected error: {type(e).__name__}",
                rule_type=rule.type,
                original_error=e,
            )
            return self.resolve_failure(rule, athlete, error)

    def resolve_failure(
        self,
        rule: EligibilityRule,
        athlete: AthleteData,
        error: EligibilityError,
    ) -> RuleOutcome:
        """Apply the on_error policy to an infrastructure failure."""
        self._log.log_outcome(
            rule_type=rule.type,
            cpf=athlete.cpf,
            event="infra_failure",
            ok=rule.allows_on_error,
            status_code=getattr(error, "status_code", None),
            failure_kind=error.failure_kind,
            detail=error.message,
        )

        if rule.allows_on_error:
            return RuleOutcome(
                ok=True,
                message=self._config.unavailable_message,
                rule_type=rule.type,
                failure_kind=error.failure_kind,
            )
        return RuleOutcome(
            ok=False,
            message=rule.error_message or self._config.unexpected_error_message,
            rule_type=rule.type,
            failure_kind=error.failure_kind,
        )

    def ineligible(self, rule: EligibilityRule) -> RuleOutcome:
        """Definitive business negative."""
        return RuleOutcome(ok=False, message=rule.error_message, rule_type=rule.type)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(rule_type={self.rule_type})>"
