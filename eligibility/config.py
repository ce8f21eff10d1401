"""
Eligibility Engine - Configuration.

============================================================
PURPOSE
============================================================
All configuration for the eligibility engine and its tooling.

CRITICAL CONSTRAINTS:
- Every external call is bounded by a timeout
- No retries: one call per rule per check
- Deterministic message ordering

============================================================
"""

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_MOCK_DATA_PATH = Path(__file__).parent / "data" / "mock_eligibility.json"


# ============================================================
# ENGINE CONFIGURATION
# ============================================================

@dataclass
class EngineConfig:
    """
    Engine-wide defaults.

    Per-rule values (timeout, messages) take precedence.
    """

    default_timeout_ms: int = 3000
    """Timeout used when a rule does not set one."""

    min_timeout_ms: int = 500
    """Lower bound accepted for rule timeouts."""

    max_timeout_ms: int = 30000
    """Upper bound accepted for rule timeouts."""

    unavailable_message: str = (
        "Validação externa temporariamente indisponível, inscrição permitida."
    )
    """Advisory message when an infra failure is allowed through."""

    unexpected_error_message: str = "Erro inesperado na validação externa."
    """Fallback when a blocking rule has no error message."""

    user_agent: str = "RaceEligibility/1.0"
    """User-Agent sent to external APIs."""

    log_level: str = "INFO"
    """Log level for the CLI."""

    log_format: str = "text"
    """Log output format (json or text)."""

    def clamp_timeout(self, timeout_ms: Optional[int]) -> int:
        """Apply the default and bounds to a rule timeout."""
        if not timeout_ms:
            return self.default_timeout_ms
        return max(self.min_timeout_ms, min(self.max_timeout_ms, timeout_ms))

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "EngineConfig":
        """Build configuration from ELIGIBILITY_* environment variables."""
        load_dotenv(env_file)
        defaults = cls()
        return cls(
            default_timeout_ms=int(os.getenv(
                "ELIGIBILITY_DEFAULT_TIMEOUT_MS", defaults.default_timeout_ms
            )),
            unavailable_message=os.getenv(
                "ELIGIBILITY_UNAVAILABLE_MESSAGE", defaults.unavailable_message
            ),
            unexpected_error_message=os.getenv(
                "ELIGIBILITY_UNEXPECTED_ERROR_MESSAGE", defaults.unexpected_error_message
            ),
            user_agent=os.getenv("ELIGIBILITY_USER_AGENT", defaults.user_agent),
            log_level=os.getenv("ELIGIBILITY_LOG_LEVEL", defaults.log_level),
            log_format=os.getenv("ELIGIBILITY_LOG_FORMAT", defaults.log_format),
        )


# ============================================================
# MOCK SERVER CONFIGURATION
# ============================================================

@dataclass
class MockServerConfig:
    """Mock upstream used for development and end-to-end tests."""

    api_key: str = "test-key-2026"
    """Key accepted via header, query string or bearer token."""

    data_path: Path = DEFAULT_MOCK_DATA_PATH
    """JSON file with an ``athletes`` list."""

    host: str = "127.0.0.1"
    port: int = 8099

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "MockServerConfig":
        """Build configuration from ELIGIBILITY_MOCK_* environment variables."""
        load_dotenv(env_file)
        defaults = cls()
        return cls(
            api_key=os.getenv("ELIGIBILITY_MOCK_API_KEY", defaults.api_key),
            data_path=Path(os.getenv("ELIGIBILITY_MOCK_DATA_PATH", str(defaults.data_path))),
            host=os.getenv("ELIGIBILITY_MOCK_HOST", defaults.host),
            port=int(os.getenv("ELIGIBILITY_MOCK_PORT", defaults.port)),
        )


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(level: str = "INFO", log_format: str = "text") -> logging.Logger:
    """
    Set up process-wide logging for the CLI.

    Args:
        level: Log level
        log_format: Output format (json or text)

    Returns:
        The package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("eligibility")
