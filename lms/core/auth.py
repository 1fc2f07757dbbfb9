from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any

from passlib.context import CryptContext


class Role(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class SessionClaims:
    """Authenticated claims carried by a server-side session."""

    user_id: int
    role: Role

    def to_dict(self) -> dict[str, Any]:
        return {"user_id": self.user_id, "role": self.role.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionClaims:
        return cls(user_id=int(data["user_id"]), role=Role(data["role"]))


class PasswordHasher:
    """Opaque credential verifier backed by passlib's bcrypt scheme."""

    def __init__(self, *, rounds: int | None = None) -> None:
        options = {"bcrypt__rounds": rounds} if rounds else {}
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", **options)

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        return self._context.verify(plaintext, hashed)

    def dummy_verify(self) -> bool:
        """Spend the same time as a real verification; always False."""
        return self._context.dummy_verify()


class TokenGenerator:
    """Generates unguessable identifiers with 122 bits of randomness (UUID4)."""

    def generate(self) -> str:
        return str(uuid.uuid4())

