"""
Eligibility Engine - Orchestration across a modality's rules.

============================================================
RESPONSIBILITY
============================================================
Decides whether an athlete may register for a modality.

- Filters rules to the active ones
- Evaluates them strictly in order, one external call at a time
- Aggregates the verdict, messages and extracted data

============================================================
CONTRACT
============================================================
- eligible is the AND over all evaluated rules
- messages holds failing rules' messages, in rule order
- extracted data is merged, the later rule wins on collision
- no exception escapes a check, invalid stored rules included

============================================================
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import aiohttp

from eligibility.config import EngineConfig
from eligibility.logging_utils import EligibilityLogger, get_default_logger
from eligibility.models import AthleteData, EligibilityResult, RuleOutcome
from eligibility.registry import ValidatorRegistry, create_default_registry
from eligibility.exceptions import RuleConfigurationError
from eligibility.schemas import (
    EligibilityRule,
    RuleType,
    fallback_rule,
    is_active_config,
    parse_rule,
)
from eligibility.validators import ApiRestValidator


RuleInput = Union[EligibilityRule, Dict[str, Any]]

# Parsed rule, or a policy-only rule plus the error that replaced it
PreparedRule = Tuple[EligibilityRule, Optional[RuleConfigurationError]]


class EligibilityEngine:
    """
    Evaluates eligibility rules against external systems.

    Stateless between checks: one HTTP session is opened per check
    (unless the caller injects one) and closed when the check ends.

    Usage:
        engine = EligibilityEngine()
        result = await engine.execute_check(athlete, rules)
        if not result.eligible:
            reject(result.first_message)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        registry: Optional[ValidatorRegistry] = None,
        log: Optional[EligibilityLogger] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: Engine configuration
            registry: Rule type -> validator mapping
            log: Logging sink (masked, injectable)
            session: HTTP session owned by the caller, reused across checks
        """
        self._config = config or EngineConfig()
        self._log = log or get_default_logger()
        self._registry = registry or create_default_registry(self._config, self._log)
        self._session = session

    @property
    def registry(self) -> ValidatorRegistry:
        return self._registry

    def prepare_rules(self, rules: Iterable[RuleInput]) -> List[PreparedRule]:
        """
        Select the active rules and parse them.

        Inactive rules are dropped before parsing, so their configuration
        is never inspected. An active rule that fails to parse is kept as
        a policy-only rule paired with its configuration error.
        """
        prepared: List[PreparedRule] = []
        for index, raw in enumerate(rules or []):
            if not is_active_config(raw):
                continue
            try:
                rule = parse_rule(raw, index)
            except RuleConfigurationError as e:
                self._log.warning(f"{e.message}, applying its on_error policy")
                prepared.append((fallback_rule(raw), e))
                continue
            if rule.is_active:
                prepared.append((rule, None))
        return prepared

    async def execute_check(
        self,
        athlete: AthleteData,
        rules: Iterable[RuleInput],
    ) -> EligibilityResult:
        """
        Run every active rule and aggregate the verdict.

        Args:
            athlete: Subject being checked
            rules: Rule configurations, in evaluation order

        Returns:
            EligibilityResult
        """
        prepared = self.prepare_rules(rules)

        if not prepared:
            return EligibilityResult(eligible=True, messages=[])

        if self._session is not None:
            return await self._evaluate(athlete, prepared, self._session)

        async with aiohttp.ClientSession() as session:
            return await self._evaluate(athlete, prepared, session)

    async def _evaluate(
        self,
        athlete: AthleteData,
        rules: List[PreparedRule],
        session: aiohttp.ClientSession,
    ) -> EligibilityResult:
        eligible = True
        messages: List[str] = []
        extracted: Dict[str, Any] = {}

        # One external call at a time, in rule order
        for rule, config_error in rules:
            validator = self._registry.get(rule.type)
            if validator is None:
                self._log.debug(f"Ignoring rule of unsupported type '{rule.type}'")
                continue

            if config_error is not None:
                outcome = validator.resolve_failure(rule, athlete, config_error)
            else:
                outcome = await validator.validate(rule, athlete, session)

            if not outcome.ok:
                eligible = False
                if outcome.message:
                    messages.append(outcome.message)
            if outcome.extracted_data:
                extracted.update(outcome.extracted_data)

        return EligibilityResult(
            eligible=eligible,
            messages=messages,
            extracted_data=extracted or None,
        )


# ============================================================
# MODULE-LEVEL ENTRY POINTS
# ============================================================

async def execute_eligibility_check(
    athlete: AthleteData,
    rules: Iterable[RuleInput],
    config: Optional[EngineConfig] = None,
    log: Optional[EligibilityLogger] = None,
) -> EligibilityResult:
    """Check an athlete against a modality's rules with a fresh engine."""
    engine = EligibilityEngine(config=config, log=log)
    return await engine.execute_check(athlete, rules)


async def validate_external_api(
    rule: RuleInput,
    athlete: AthleteData,
    config: Optional[EngineConfig] = None,
    log: Optional[EligibilityLogger] = None,
) -> RuleOutcome:
    """
    Evaluate a single ``api_rest`` rule.

    A rule that fails to parse is resolved through its on_error policy.

    Raises:
        ValueError: If the rule is of another type
    """
    config_error = None
    try:
        parsed = parse_rule(rule)
    except RuleConfigurationError as e:
        parsed, config_error = fallback_rule(rule), e

    if parsed.type != RuleType.API_REST.value:
        raise ValueError(f"Expected an '{RuleType.API_REST.value}' rule, got '{parsed.type}'")

    validator = ApiRestValidator(config=config, log=log)
    if config_error is not None:
        return validator.resolve_failure(parsed, athlete, config_error)
    return await validator.validate(parsed, athlete)


def run_eligibility_check(
    athlete: AthleteData,
    rules: Iterable[RuleInput],
    config: Optional[EngineConfig] = None,
    log: Optional[EligibilityLogger] = None,
) -> EligibilityResult:
    """Blocking wrapper for callers without an event loop."""
    return asyncio.run(execute_eligibility_check(athlete, rules, config=config, log=log))
