"""
Eligibility Models - Athlete input and check results.

Inputs are immutable; the engine never mutates the athlete record.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


# Wire names used in stored rule configurations -> attribute names
PARAM_ALIASES = {
    "dataNascimento": "data_nascimento",
}


@dataclass(frozen=True)
class AthleteData:
    """
    The subject being checked.

    Field names follow the registration records they come from
    (cpf = national identity number, nome = full name).
    """
    cpf: str
    nome: str
    email: Optional[str] = None
    data_nascimento: Optional[str] = None
    sexo: Optional[str] = None

    def get_param(self, name: str) -> Optional[str]:
        """
        Resolve a configured parameter name to a value.

        Accepts both the wire name (``dataNascimento``) and the attribute
        name. Unknown names resolve to None.
        """
        attr = PARAM_ALIASES.get(name, name)
        if attr not in self.__dataclass_fields__:
            return None
        return getattr(self, attr)

    def param_values(self, names: list[str]) -> dict[str, str]:
        """Build the parameter map for a request, skipping absent fields."""
        values: dict[str, str] = {}
        for name in names:
            value = self.get_param(name)
            if value is not None:
                values[name] = str(value)
        return values

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AthleteData":
        """Create from a registration payload (camelCase or snake_case)."""
        return cls(
            cpf=data["cpf"],
            nome=data["nome"],
            email=data.get("email"),
            data_nascimento=data.get("data_nascimento", data.get("dataNascimento")),
            sexo=data.get("sexo"),
        )


@dataclass(frozen=True)
class RuleOutcome:
    """Result of evaluating a single rule."""
    ok: bool
    message: Optional[str] = None
    extracted_data: Optional[dict[str, Any]] = None
    rule_type: Optional[str] = None
    failure_kind: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {"ok": self.ok}
        if self.message is not None:
            data["message"] = self.message
        if self.extracted_data is not None:
            data["extractedData"] = self.extracted_data
        return data


@dataclass
class EligibilityResult:
    """Aggregate verdict over all active rules."""
    eligible: bool
    messages: list[str] = field(default_factory=list)
    extracted_data: Optional[dict[str, Any]] = None

    @property
    def first_message(self) -> Optional[str]:
        """Message to surface to the athlete when rejected."""
        return self.messages[0] if self.messages else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the caller-facing shape."""
        data: dict[str, Any] = {
            "eligible": self.eligible,
            "messages": list(self.messages),
        }
        if self.extracted_data is not None:
            data["extractedData"] = dict(self.extracted_data)
        return data
