"""
Request Templating Tests.

============================================================
PURPOSE
============================================================
Tests for URL substitution and authentication injection.

TEST CATEGORIES:
- URL tests: placeholder substitution and encoding
- Auth tests: header, query and bearer schemes
- Misconfiguration tests: empty key values

============================================================
"""

import logging

import pytest

from eligibility.schemas import AuthConfig
from eligibility.templating import apply_auth, encode_component, sanitize_url


# ============================================================
# URL TESTS
# ============================================================

class TestSanitizeUrl:
    """Tests for sanitize_url."""

    def test_cpf_reduced_to_digits(self):
        """Test punctuated CPF is normalized before substitution."""
        url = sanitize_url("https://x/{cpf}", {"cpf": "123.456.789-00"})

        assert url == "https://x/12345678900"

    def test_other_params_percent_encoded(self):
        """Test non-CPF values are encoded but not normalized."""
        url = sanitize_url(
            "https://x/busca?nome={nome}&nasc={dataNascimento}",
            {"nome": "José da Silva/Jr", "dataNascimento": "1990-05-17"},
        )

        assert url == "https://x/busca?nome=Jos%C3%A9%20da%20Silva%2FJr&nasc=1990-05-17"

    def test_unresolved_placeholder_left_verbatim(self):
        """Test placeholders without a value stay in the URL."""
        url = sanitize_url("https://x/{cpf}/{email}", {"cpf": "12345678900"})

        assert url == "https://x/12345678900/{email}"

    def test_every_occurrence_replaced(self):
        """Test a placeholder used twice is substituted twice."""
        url = sanitize_url("https://x/{cpf}?again={cpf}", {"cpf": "123.456.789-00"})

        assert url == "https://x/12345678900?again=12345678900"

    def test_empty_value_substituted(self):
        """Test empty strings are substituted, not skipped."""
        url = sanitize_url("https://x/?sexo={sexo}", {"sexo": ""})

        assert url == "https://x/?sexo="

    def test_encode_component_matches_uri_component_rules(self):
        """Test reserved characters are encoded and marks are kept."""
        assert encode_component("a b&c=d") == "a%20b%26c%3Dd"
        assert encode_component("it's(ok)!*~") == "it's(ok)!*~"


# ============================================================
# AUTH TESTS
# ============================================================

class TestApplyAuth:
    """Tests for apply_auth."""

    def test_no_auth_passes_through(self):
        """Test absent auth leaves URL and headers unchanged."""
        url, headers = apply_auth("https://x/1", {"Accept": "application/json"}, None)

        assert url == "https://x/1"
        assert headers == {"Accept": "application/json"}

    def test_none_type_passes_through(self):
        """Test explicit 'none' auth leaves the request unchanged."""
        auth = AuthConfig(type="none", key_name="X-Key", key_value="secret")
        url, headers = apply_auth("https://x/1", {}, auth)

        assert url == "https://x/1"
        assert headers == {}

    def test_api_key_header_custom_name(self):
        """Test API key sent under the configured header name."""
        auth = AuthConfig(type="api_key_header", key_name="X-Token", key_value="secret")
        url, headers = apply_auth("https://x/1", {}, auth)

        assert url == "https://x/1"
        assert headers == {"X-Token": "secret"}

    def test_api_key_header_default_name(self):
        """Test API key header defaults to X-API-Key."""
        auth = AuthConfig(type="api_key_header", key_value="secret")
        _, headers = apply_auth("https://x/1", {}, auth)

        assert headers == {"X-API-Key": "secret"}

    def test_api_key_query_without_existing_query(self):
        """Test query key appended with '?'."""
        auth = AuthConfig(type="api_key_query", key_value="s3cr3t&x")
        url, headers = apply_auth("https://x/1", {}, auth)

        assert url == "https://x/1?api_key=s3cr3t%26x"
        assert headers == {}

    def test_api_key_query_with_existing_query(self):
        """Test query key appended with '&'."""
        auth = AuthConfig(type="api_key_query", key_name="token", key_value="abc")
        url, _ = apply_auth("https://x/1?full=1", {}, auth)

        assert url == "https://x/1?full=1&token=abc"

    def test_bearer_token(self):
        """Test bearer token sent in Authorization."""
        auth = AuthConfig(type="bearer_token", key_value="jwt-value")
        _, headers = apply_auth("https://x/1", {"Accept": "application/json"}, auth)

        assert headers == {
            "Accept": "application/json",
            "Authorization": "Bearer jwt-value",
        }

    def test_unknown_type_passes_through(self):
        """Test unknown auth types are ignored."""
        auth = AuthConfig(type="oauth2_client", key_value="secret")
        url, headers = apply_auth("https://x/1", {}, auth)

        assert url == "https://x/1"
        assert headers == {}

    def test_input_headers_not_mutated(self):
        """Test the caller's header mapping is left untouched."""
        base = {"Accept": "application/json"}
        auth = AuthConfig(type="bearer_token", key_value="jwt-value")
        apply_auth("https://x/1", base, auth)

        assert base == {"Accept": "application/json"}


# ============================================================
# MISCONFIGURATION TESTS
# ============================================================

class TestAuthMisconfiguration:
    """Tests for auth configured without a key value."""

    @pytest.mark.parametrize("auth_type", ["api_key_header", "api_key_query", "bearer_token"])
    def test_empty_key_skips_auth(self, auth_type, check_log, caplog):
        """Test empty key value omits auth and warns."""
        caplog.set_level(logging.WARNING, logger="eligibility.test")
        auth = AuthConfig(type=auth_type, key_name="X-Key", key_value="")

        url, headers = apply_auth("https://x/1", {}, auth, check_log)

        assert url == "https://x/1"
        assert headers == {}
        assert "key_value is empty" in caplog.text
        assert caplog.records[-1].levelno == logging.WARNING

    def test_missing_key_skips_auth(self, check_log, caplog):
        """Test absent key value behaves like an empty one."""
        caplog.set_level(logging.WARNING, logger="eligibility.test")
        auth = AuthConfig(type="bearer_token")

        _, headers = apply_auth("https://x/1", {}, auth, check_log)

        assert "Authorization" not in headers
        assert "skipping authentication" in caplog.text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
