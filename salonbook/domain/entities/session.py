from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    USER = "user"
    SALON_OWNER = "salon_owner"
    ADMIN = "admin"


def home_path(role: Role) -> str:
    """Landing page for a signed-in principal."""
    if role is Role.ADMIN:
        return "/admin-dashboard"
    if role is Role.SALON_OWNER:
        return "/salon-dashboard"
    if role is Role.USER:
        return "/dashboard"
    raise ValueError(f"Unhandled role: {role!r}")


@dataclass(frozen=True)
class Session:
    user_id: str
    role: Role
    email: str | None = None

    @property
    def is_customer(self) -> bool:
        return self.role is Role.USER

    @property
    def is_salon_owner(self) -> bool:
        return self.role is Role.SALON_OWNER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
