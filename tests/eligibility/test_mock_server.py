"""
Mock Upstream API Tests.

============================================================
PURPOSE
============================================================
Tests for the development registry served by FastAPI.

TEST CATEGORIES:
- Auth tests: header, query and bearer keys
- Lookup tests: GET by path, POST by body
- Data tests: dataset loading

============================================================
"""

import json

import pytest
from fastapi.testclient import TestClient

from eligibility.config import DEFAULT_MOCK_DATA_PATH, MockServerConfig
from eligibility.mock_server import create_app, load_mock_athletes, normalize_cpf


API_KEY = "test-key-2026"


@pytest.fixture
def client():
    """Client for the app serving the bundled dataset."""
    return TestClient(create_app(MockServerConfig(api_key=API_KEY)))


# ============================================================
# AUTH TESTS
# ============================================================

class TestMockAuth:
    """Tests for API key handling."""

    def test_missing_key(self, client):
        response = client.get("/pacientes/12345678900")

        assert response.status_code == 401
        assert response.json() == {"error": "API key inválida ou ausente"}

    def test_wrong_key(self, client):
        response = client.get("/pacientes/12345678900", headers={"X-API-Key": "wrong"})

        assert response.status_code == 401

    def test_header_key(self, client):
        response = client.get("/pacientes/12345678900", headers={"X-API-Key": API_KEY})

        assert response.status_code == 200

    def test_query_key(self, client):
        response = client.get("/pacientes/12345678900", params={"api_key": API_KEY})

        assert response.status_code == 200

    def test_bearer_key(self, client):
        response = client.get(
            "/pacientes/12345678900",
            headers={"Authorization": f"Bearer {API_KEY}"},
        )

        assert response.status_code == 200

    def test_post_requires_key(self, client):
        response = client.post("/validar", json={"cpf": "12345678900"})

        assert response.status_code == 401


# ============================================================
# LOOKUP TESTS
# ============================================================

class TestMockLookup:
    """Tests for athlete lookups."""

    def test_get_known_athlete(self, client):
        response = client.get("/pacientes/123.456.789-00", headers={"X-API-Key": API_KEY})

        assert response.status_code == 200
        assert response.json() == {
            "cpf": "12345678900",
            "nome": "Ana Beatriz Souza",
            "apto": True,
            "categoria": "Adulto",
            "observacao": "Atestado médico válido até 2027-03-01",
        }

    def test_get_unfit_athlete(self, client):
        response = client.get("/pacientes/98765432100", headers={"X-API-Key": API_KEY})

        assert response.status_code == 200
        assert response.json()["apto"] is False

    def test_get_unknown_athlete(self, client):
        response = client.get("/pacientes/00000000000", headers={"X-API-Key": API_KEY})

        assert response.status_code == 404
        assert response.json() == {"error": "CPF não encontrado na base de dados"}

    def test_post_known_athlete(self, client):
        response = client.post(
            "/validar",
            json={"cpf": "111.444.777-35"},
            headers={"X-API-Key": API_KEY},
        )

        assert response.status_code == 200
        assert response.json()["nome"] == "Mariana Costa Pereira"

    def test_post_unknown_athlete(self, client):
        response = client.post("/validar", json={"cpf": "000"}, headers={"X-API-Key": API_KEY})

        assert response.status_code == 404

    @pytest.mark.parametrize("body", [{}, {"cpf": ""}, {"nome": "Ana"}])
    def test_post_without_cpf(self, client, body):
        response = client.post("/validar", json=body, headers={"X-API-Key": API_KEY})

        assert response.status_code == 400
        assert response.json() == {"error": "CPF é obrigatório"}

    def test_post_invalid_json(self, client):
        response = client.post(
            "/validar",
            content=b"not json",
            headers={"X-API-Key": API_KEY, "Content-Type": "application/json"},
        )

        assert response.status_code == 400


# ============================================================
# DATA TESTS
# ============================================================

class TestMockData:
    """Tests for dataset loading."""

    def test_bundled_dataset(self):
        athletes = load_mock_athletes(DEFAULT_MOCK_DATA_PATH)

        assert {a["cpf"] for a in athletes} == {"12345678900", "98765432100", "11144477735"}

    def test_missing_file(self, tmp_path):
        assert load_mock_athletes(tmp_path / "missing.json") == []

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        assert load_mock_athletes(path) == []

    def test_custom_dataset(self, tmp_path):
        path = tmp_path / "athletes.json"
        path.write_text(json.dumps({"athletes": [
            {"cpf": "22233344405", "nome": "Teste", "apto": True},
        ]}), encoding="utf-8")
        client = TestClient(create_app(MockServerConfig(api_key="k", data_path=path)))

        response = client.get("/pacientes/22233344405", params={"api_key": "k"})

        assert response.status_code == 200
        assert response.json() == {
            "cpf": "22233344405",
            "nome": "Teste",
            "apto": True,
            "categoria": "",
            "observacao": "",
        }

    def test_normalize_cpf(self):
        assert normalize_cpf("123.456.789-00") == "12345678900"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
