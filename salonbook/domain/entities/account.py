from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from salonbook.domain.entities.session import Role


@dataclass(frozen=True)
class Account:
    user_id: str
    role: Role
    collection: str  # users | salonOwners
    email: str | None = None
    name: str | None = None
    is_active: bool = True

    @staticmethod
    def from_document(collection: str, doc: dict[str, Any]) -> "Account":
        return Account(
            user_id=str(doc["id"]),
            role=Role(doc.get("role", Role.USER.value)),
            collection=collection,
            email=doc.get("email"),
            name=doc.get("name") or doc.get("ownerName"),
            is_active=bool(doc.get("isActive", True)),
        )
