"""
Shared fixtures for eligibility tests.
"""

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from eligibility.logging_utils import EligibilityLogger
from eligibility.models import AthleteData
from tests.eligibility.upstream import Upstream, create_upstream_app


# ============================================================
# FIXTURES
# ============================================================

@pytest_asyncio.fixture
async def upstream():
    """Running fake upstream API."""
    requests: list = []
    server = TestServer(create_upstream_app(requests))
    await server.start_server()
    try:
        yield Upstream(server, requests)
    finally:
        await server.close()


@pytest.fixture
def athlete():
    """Athlete known upstream and fit to compete."""
    return AthleteData(
        cpf="123.456.789-00",
        nome="Ana Beatriz Souza",
        email="ana@example.com",
        data_nascimento="1990-05-17",
        sexo="F",
    )


@pytest.fixture
def unfit_athlete():
    """Athlete known upstream but not fit to compete."""
    return AthleteData(cpf="987.654.321-00", nome="Carlos Eduardo Lima")


@pytest.fixture
def unknown_athlete():
    """Athlete the upstream has never heard of."""
    return AthleteData(cpf="111.222.333-44", nome="Pessoa Desconhecida")


@pytest.fixture
def check_log():
    """Logging sink on a dedicated logger name, for caplog assertions."""
    return EligibilityLogger(logger_name="eligibility.test")
