"""
REST API Validator - Eligibility decided by an external HTTP endpoint.

Calls the configured endpoint once per check and interprets the
response by HTTP status or by comparing a JSON field.

Status handling:
- 404        -> subject not found upstream, definitive negative
- >= 500     -> infrastructure failure (on_error policy)
- otherwise  -> interpreted by validation mode
"""

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from eligibility.exceptions import (
    ResponseParseError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamTimeoutError,
)
from eligibility.models import AthleteData, RuleOutcome
from eligibility.response import (
    MISSING,
    extract_fields,
    get_nested_value,
    parse_json_body,
    strict_equals,
)
from eligibility.schemas import (
    AuthType,
    EligibilityRule,
    HttpMethod,
    RuleType,
    ValidationMode,
)
from eligibility.templating import apply_auth, sanitize_url
from eligibility.validators.base import BaseRuleValidator


@dataclass(frozen=True)
class UpstreamResponse:
    """Fully read response from the external API."""
    status: int
    body: bytes
    latency_ms: float


class ApiRestValidator(BaseRuleValidator):
    """
    Validator for ``api_rest`` rules.

    Request building:
    - URL template placeholders filled from athlete fields
    - ``Accept: application/json`` plus configured static headers
    - Authentication injected per rule (header, query or bearer)
    - POST sends the parameter map as a JSON body
    """

    @property
    def rule_type(self) -> str:
        return RuleType.API_REST.value

    async def check(
        self,
        rule: EligibilityRule,
        athlete: AthleteData,
        session: aiohttp.ClientSession,
    ) -> RuleOutcome:
        """Call the endpoint and interpret the response."""
        request = rule.request
        params = athlete.param_values(request.params)

        url = sanitize_url(request.url, params)
        headers = {
            "Accept": "application/json",
            "User-Agent": self._config.user_agent,
            **request.headers,
        }
        url, headers = apply_auth(url, headers, request.auth, self._log)

        method = request.method.value
        body = None
        if request.method == HttpMethod.POST:
            headers["Content-Type"] = "application/json"
            body = json.dumps(params)

        query_key_name = header_key_name = None
        if request.auth and request.auth.type == AuthType.API_KEY_QUERY.value:
            query_key_name = request.auth.key_name
        elif request.auth and request.auth.type == AuthType.API_KEY_HEADER.value:
            header_key_name = request.auth.key_name
        self._log.log_request(
            rule.type, athlete.cpf, method, url, headers,
            query_key_name=query_key_name, header_key_name=header_key_name,
        )

        timeout_ms = self._config.clamp_timeout(request.timeout_ms)
        response = await self._send(session, method, url, headers, body, timeout_ms, rule.type)

        return self._interpret(rule, athlete, response)

    async def _send(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Optional[str],
        timeout_ms: int,
        rule_type: str,
    ) -> UpstreamResponse:
        """
        Issue one request bounded by its own deadline.

        The connection is released when the ``async with`` block exits,
        whether the call completed, failed or was cancelled.
        """
        timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
        start_time = time.monotonic()

        try:
            async with session.request(
                method,
                url,
                headers=headers,
                data=body,
                timeout=timeout,
            ) as response:
                payload = await response.read()
                return UpstreamResponse(
                    status=response.status,
                    body=payload,
                    latency_ms=(time.monotonic() - start_time) * 1000,
                )

        except asyncio.TimeoutError as e:
            raise UpstreamTimeoutError(
                message=f"Request timed out after {timeout_ms}ms",
                rule_type=rule_type,
                timeout_ms=timeout_ms,
                original_error=e,
            )
        except aiohttp.ClientError as e:
            raise UpstreamConnectionError(
                message=f"Connection error: {type(e).__name__}",
                rule_type=rule_type,
                original_error=e,
            )

    def _interpret(
        self,
        rule: EligibilityRule,
        athlete: AthleteData,
        response: UpstreamResponse,
    ) -> RuleOutcome:
        """Turn a completed response into an outcome."""
        status = response.status

        if status == 404:
            self._log.log_outcome(
                rule.type, athlete.cpf, "not_found", ok=False,
                status_code=status, latency_ms=response.latency_ms,
                detail="subject not found upstream",
            )
            return self.ineligible(rule)

        if status >= 500:
            raise UpstreamError(
                message=f"HTTP {status}",
                rule_type=rule.type,
                status_code=status,
            )

        mode = rule.validation.mode
        payload: Any = MISSING

        if mode == ValidationMode.JSON_COMPARE or rule.save_fields:
            try:
                payload = parse_json_body(response.body)
            except ValueError as e:
                if mode == ValidationMode.JSON_COMPARE:
                    raise ResponseParseError(
                        message="Response body is not valid JSON",
                        rule_type=rule.type,
                        body_preview=response.body[:200].decode("utf-8", "replace"),
                        original_error=e,
                    )
                self._log.warning(
                    "Could not parse JSON to extract fields, continuing without extra data",
                    cpf=athlete.cpf,
                )

        extracted = None
        if payload is not MISSING and rule.save_fields:
            extracted = extract_fields(payload, rule.save_fields) or None

        if mode == ValidationMode.HTTP_STATUS:
            allowed = rule.validation.allowed_status or [200]
            if status in allowed:
                self._log.log_outcome(
                    rule.type, athlete.cpf, "eligible", ok=True,
                    status_code=status, latency_ms=response.latency_ms,
                    detail=f"status {status}",
                )
                return RuleOutcome(ok=True, extracted_data=extracted, rule_type=rule.type)

            self._log.log_outcome(
                rule.type, athlete.cpf, "ineligible", ok=False,
                status_code=status, latency_ms=response.latency_ms,
                detail=f"status {status} not in {allowed}",
            )
            return self.ineligible(rule)

        field_path = rule.validation.path or ""
        actual = get_nested_value(payload, field_path)

        if strict_equals(actual, rule.validation.expected_value):
            self._log.log_outcome(
                rule.type, athlete.cpf, "eligible", ok=True,
                status_code=status, latency_ms=response.latency_ms,
                detail=f"json_compare: {field_path} matched",
            )
            return RuleOutcome(ok=True, extracted_data=extracted, rule_type=rule.type)

        self._log.log_outcome(
            rule.type, athlete.cpf, "ineligible", ok=False,
            status_code=status, latency_ms=response.latency_ms,
            detail=f"json_compare: {field_path} did not match expected value",
        )
        return self.ineligible(rule)
