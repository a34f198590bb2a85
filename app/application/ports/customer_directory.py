from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities.user import CustomerProfile, User


class CustomerDirectoryPort(ABC):
    @abstractmethod
    def get_user(self, user_id: str) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def get_customer_profile(self, user_id: str) -> CustomerProfile | None:
        raise NotImplementedError

    def is_customer(self, user_id: str) -> bool:
        return self.get_user(user_id) is not None and self.get_customer_profile(user_id) is not None
