from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: tuple[T, ...]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total + self.size - 1) // self.size
