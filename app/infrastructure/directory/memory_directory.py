from __future__ import annotations

from collections.abc import Iterable

from app.application.ports.customer_directory import CustomerDirectoryPort
from app.domain.entities.principal import Role
from app.domain.entities.user import CustomerProfile, User


class MemoryCustomerDirectory(CustomerDirectoryPort):
    def __init__(
        self,
        users: Iterable[User] = (),
        profiles: Iterable[CustomerProfile] = (),
    ) -> None:
        self._users = {u.user_id: u for u in users}
        self._profiles = {p.user_id: p for p in profiles}

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def get_customer_profile(self, user_id: str) -> CustomerProfile | None:
        return self._profiles.get(user_id)

    def add_customer(self, user: User, profile: CustomerProfile | None = None) -> None:
        self._users[user.user_id] = user
        self._profiles[user.user_id] = profile or CustomerProfile(user_id=user.user_id)

    def add_user(self, user: User) -> None:
        self._users[user.user_id] = user


def seed_directory() -> MemoryCustomerDirectory:
    """Demo users for dev/local runs."""
    directory = MemoryCustomerDirectory()
    directory.add_customer(
        User(user_id="customer-1", name="Lan Nguyen", email="lan@example.com"),
        CustomerProfile(user_id="customer-1", address="12 Le Loi, District 1", skin_type="combination"),
    )
    directory.add_customer(User(user_id="customer-2", name="Minh Tran", email="minh@example.com"))
    directory.add_user(User(user_id="staff-1", name="Hoa Pham", email="hoa@example.com", role=Role.STAFF))
    directory.add_user(User(user_id="admin-1", name="Admin", email="admin@example.com", role=Role.ADMIN))
    return directory
