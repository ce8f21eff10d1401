"""
Request Templating - URL substitution and authentication injection.

Pure functions: inputs are never mutated, new values are returned.
"""

import re
from typing import Dict, Optional, Tuple
from urllib.parse import quote

from eligibility.logging_utils import EligibilityLogger, get_default_logger
from eligibility.schemas import AuthConfig, AuthType


# Same unreserved set as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "!~*'()"

_NON_DIGITS = re.compile(r"\D")

DEFAULT_API_KEY_HEADER = "X-API-Key"
DEFAULT_API_KEY_PARAM = "api_key"


def encode_component(value: str) -> str:
    """Percent-encode a single URL component."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def sanitize_url(template: str, params: Dict[str, str]) -> str:
    """
    Substitute ``{key}`` placeholders with encoded parameter values.

    The ``cpf`` parameter is reduced to digits before encoding.
    Placeholders without a matching parameter are left as they are.

    Args:
        template: URL template
        params: Parameter name -> raw value

    Returns:
        URL with placeholders substituted
    """
    url = template
    for key, value in params.items():
        if key == "cpf":
            value = _NON_DIGITS.sub("", value)
        url = url.replace(f"{{{key}}}", encode_component(value))
    return url


def apply_auth(
    url: str,
    headers: Dict[str, str],
    auth: Optional[AuthConfig],
    log: Optional[EligibilityLogger] = None,
) -> Tuple[str, Dict[str, str]]:
    """
    Inject the configured authentication scheme.

    Args:
        url: Request URL
        headers: Base headers
        auth: Authentication descriptor (may be None)
        log: Logging sink for misconfiguration warnings

    Returns:
        (url, headers) to use for the request
    """
    headers = dict(headers)

    if auth is None or auth.type == AuthType.NONE.value:
        return url, headers

    key_name = auth.key_name or ""
    key_value = auth.key_value or ""

    if not key_value:
        (log or get_default_logger()).warning(
            "Auth configured but key_value is empty, skipping authentication"
        )
        return url, headers

    if auth.type == AuthType.API_KEY_HEADER.value:
        headers[key_name or DEFAULT_API_KEY_HEADER] = key_value
    elif auth.type == AuthType.API_KEY_QUERY.value:
        separator = "&" if "?" in url else "?"
        param_name = key_name or DEFAULT_API_KEY_PARAM
        url = f"{url}{separator}{encode_component(param_name)}={encode_component(key_value)}"
    elif auth.type == AuthType.BEARER_TOKEN.value:
        headers["Authorization"] = f"Bearer {key_value}"

    return url, headers
