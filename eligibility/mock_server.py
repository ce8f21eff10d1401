"""
Eligibility - Mock Upstream API.

============================================================
RESPONSIBILITY
============================================================
Emulates a third-party athlete registry for local development
and end-to-end tests of eligibility rules.

- Accepts the three authentication schemes rules can inject
- Looks athletes up by CPF (GET path parameter or POST body)
- Returns 404 for unknown athletes

============================================================
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from eligibility.config import MockServerConfig


logger = logging.getLogger(__name__)


# ============================================================
# Response Models
# ============================================================

class AthleteRecordResponse(BaseModel):
    cpf: str
    nome: str
    apto: bool
    categoria: str = ""
    observacao: str = ""


class ErrorResponse(BaseModel):
    error: str


# ============================================================
# Data Access
# ============================================================

def load_mock_athletes(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Load athletes from a JSON file with an ``athletes`` list.

    A missing or malformed file yields an empty dataset.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return data.get("athletes", [])
    except (OSError, ValueError, AttributeError) as e:
        logger.error(f"[mock-eligibility] Failed to load mock data from {path}: {type(e).__name__}")
        return []


def normalize_cpf(cpf: str) -> str:
    return cpf.replace(".", "").replace("-", "")


def find_athlete(path: Union[str, Path], cpf: str) -> Optional[Dict[str, Any]]:
    """Find an athlete by CPF, reloading the dataset on every call."""
    clean = normalize_cpf(cpf)
    for athlete in load_mock_athletes(path):
        if athlete.get("cpf") == clean:
            return athlete
    return None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def _record(athlete: Dict[str, Any]) -> Dict[str, Any]:
    return AthleteRecordResponse(
        cpf=athlete["cpf"],
        nome=athlete.get("nome", ""),
        apto=bool(athlete.get("apto", False)),
        categoria=athlete.get("categoria", ""),
        observacao=athlete.get("observacao", ""),
    ).model_dump()


# ============================================================
# FastAPI Application
# ============================================================

def create_app(config: Optional[MockServerConfig] = None) -> FastAPI:
    """
    Create the mock upstream application.

    Args:
        config: Mock server configuration (API key, data file)

    Returns:
        FastAPI application
    """
    config = config or MockServerConfig()

    app = FastAPI(
        title="Mock Eligibility API",
        description="Athlete registry used to exercise eligibility rules",
        version="1.0.0",
    )

    def is_authorized(request: Request) -> bool:
        key = config.api_key
        if request.headers.get("x-api-key") == key:
            return True
        if request.query_params.get("api_key") == key:
            return True
        return request.headers.get("authorization") == f"Bearer {key}"

    @app.get(
        "/pacientes/{cpf}",
        response_model=AthleteRecordResponse,
        responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    )
    async def get_athlete(cpf: str, request: Request):
        """Look an athlete up by CPF in the path."""
        if not is_authorized(request):
            return _error(401, "API key inválida ou ausente")

        athlete = find_athlete(config.data_path, cpf)
        if athlete is None:
            return _error(404, "CPF não encontrado na base de dados")

        return _record(athlete)

    @app.post(
        "/validar",
        response_model=AthleteRecordResponse,
        responses={
            400: {"model": ErrorResponse},
            401: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
        },
    )
    async def validate_athlete(request: Request):
        """Look an athlete up by the CPF sent in the JSON body."""
        if not is_authorized(request):
            return _error(401, "API key inválida ou ausente")

        try:
            body = await request.json()
        except ValueError:
            body = {}

        cpf = body.get("cpf") if isinstance(body, dict) else None
        if not cpf:
            return _error(400, "CPF é obrigatório")

        athlete = find_athlete(config.data_path, str(cpf))
        if athlete is None:
            return _error(404, "CPF não encontrado na base de dados")

        return _record(athlete)

    return app
