from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    CUSTOMER = "CUSTOMER"
    STAFF = "STAFF"
    ADMIN = "ADMIN"


PRIVILEGED_ROLES = frozenset({Role.STAFF, Role.ADMIN})


@dataclass(frozen=True)
class Principal:
    """The caller a request acts on behalf of."""

    user_id: str
    role: Role = Role.CUSTOMER

    @staticmethod
    def from_headers(user_id: str | None, role: str | Role | None) -> "Principal":
        if isinstance(role, Enum):
            role = role.value
        role_str = str(role or Role.CUSTOMER.value).strip().upper()
        return Principal(user_id=(user_id or "").strip(), role=Role(role_str))
