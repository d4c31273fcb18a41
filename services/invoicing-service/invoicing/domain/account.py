from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class Account:
    """Registered identity that owns clients, companies and invoices."""

    id: str
    email: str
    password_hash: str
    first_name: str | None = None
    last_name: str | None = None
    gender: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "passwordHash": self.password_hash,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "gender": self.gender,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        return cls(
            id=data["id"],
            email=data["email"],
            password_hash=data["passwordHash"],
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            gender=data.get("gender"),
        )
