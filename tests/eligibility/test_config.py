"""
Configuration Tests.
"""

import logging

import pytest

from eligibility.config import EngineConfig, MockServerConfig, setup_logging


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self):
        config = EngineConfig()

        assert config.default_timeout_ms == 3000
        assert config.unavailable_message == (
            "Validação externa temporariamente indisponível, inscrição permitida."
        )
        assert config.unexpected_error_message == "Erro inesperado na validação externa."

    @pytest.mark.parametrize("timeout_ms,expected", [
        (None, 3000),
        (0, 3000),
        (100, 500),
        (1500, 1500),
        (60000, 30000),
    ])
    def test_clamp_timeout(self, timeout_ms, expected):
        assert EngineConfig().clamp_timeout(timeout_ms) == expected

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ELIGIBILITY_DEFAULT_TIMEOUT_MS", "1200")
        monkeypatch.setenv("ELIGIBILITY_UNAVAILABLE_MESSAGE", "Tente depois")
        monkeypatch.setenv("ELIGIBILITY_LOG_FORMAT", "json")

        config = EngineConfig.from_env(str(tmp_path / "absent.env"))

        assert config.default_timeout_ms == 1200
        assert config.unavailable_message == "Tente depois"
        assert config.log_format == "json"

    def test_from_env_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ELIGIBILITY_USER_AGENT", "placeholder")
        monkeypatch.delenv("ELIGIBILITY_USER_AGENT")
        env_file = tmp_path / ".env"
        env_file.write_text("ELIGIBILITY_USER_AGENT=Inscricoes/2.0\n", encoding="utf-8")

        config = EngineConfig.from_env(str(env_file))

        assert config.user_agent == "Inscricoes/2.0"


class TestMockServerConfig:
    """Tests for MockServerConfig."""

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ELIGIBILITY_MOCK_API_KEY", "other-key")
        monkeypatch.setenv("ELIGIBILITY_MOCK_PORT", "9999")

        config = MockServerConfig.from_env(str(tmp_path / "absent.env"))

        assert config.api_key == "other-key"
        assert config.port == 9999
        assert config.data_path.name == "mock_eligibility.json"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level_and_logger(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            logger = setup_logging(level="WARNING", log_format="json")

            assert logger.name == "eligibility"
            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
