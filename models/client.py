"""Client registry model."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Dict, Any, Optional


PHYSICAL = "physical"
JURIDICAL = "juridical"


@dataclass(frozen=True)
class Client:
    """
    A client that quotes are addressed to.

    Physical persons carry a CPF; companies (juridical persons) carry a CNPJ
    and optionally a state registration.
    """

    id: str
    name: str
    kind: str = PHYSICAL
    cpf: Optional[str] = None
    cnpj: Optional[str] = None
    state_registration: Optional[str] = None
    address: str = ""
    city: str = ""
    zip_code: str = ""
    phone: str = ""
    email: Optional[str] = None

    @property
    def tax_id(self) -> Optional[str]:
        """CNPJ for companies, CPF for people."""
        return self.cnpj if self.kind == JURIDICAL else self.cpf

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind,
            "name": self.name,
            "cpf": self.cpf,
            "cnpj": self.cnpj,
            "stateRegistration": self.state_registration,
            "address": self.address,
            "city": self.city,
            "zipCode": self.zip_code,
            "phone": self.phone,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Client":
        kind = data.get("type", PHYSICAL)
        if kind not in (PHYSICAL, JURIDICAL):
            kind = PHYSICAL
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            name=data.get("name", ""),
            kind=kind,
            cpf=data.get("cpf") or None,
            cnpj=data.get("cnpj") or None,
            state_registration=data.get("stateRegistration") or None,
            address=data.get("address", ""),
            city=data.get("city", ""),
            zip_code=data.get("zipCode", ""),
            phone=data.get("phone", ""),
            email=data.get("email") or None,
        )
