"""Authenticated caller, as supplied by the identity collaborator."""

from __future__ import annotations

from dataclasses import dataclass

ADMIN = "admin"
CUSTOMER = "customer"


@dataclass(frozen=True)
class Identity:
    id: int
    role: str = CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN
