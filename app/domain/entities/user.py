from __future__ import annotations

from dataclasses import dataclass

from app.domain.entities.principal import Role


@dataclass(frozen=True)
class User:
    user_id: str
    name: str
    email: str
    role: Role = Role.CUSTOMER


@dataclass(frozen=True)
class CustomerProfile:
    # joined to User by user_id; only customers carry one
    user_id: str
    address: str | None = None
    skin_type: str | None = None
