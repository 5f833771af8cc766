"""Actors, roles, and capability gates for privileged transitions."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol

from pydantic import BaseModel

from skillhub.errors import AuthenticationError, PermissionDeniedError


class Role(StrEnum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class Actor(BaseModel):
    id: str
    role: Role = Role.USER


class Account(BaseModel):
    id: str
    handle: str
    role: Role = Role.USER
    created_at: int
    deactivated_at: int | None = None

    @property
    def is_active(self) -> bool:
        return self.deactivated_at is None

    def as_actor(self) -> Actor:
        return Actor(id=self.id, role=self.role)


class AccountLookup(Protocol):
    def get_account(self, account_id: str) -> Account | None: ...


def assert_moderator(actor: Actor) -> None:
    if actor.role not in (Role.MODERATOR, Role.ADMIN):
        raise PermissionDeniedError("Moderator role required")


def assert_admin(actor: Actor) -> None:
    if actor.role != Role.ADMIN:
        raise PermissionDeniedError("Admin role required")


class AccessControl:
    """Resolves the calling actor from the account lookup."""

    def __init__(self, accounts: AccountLookup) -> None:
        self._accounts = accounts

    def require_actor(self, actor_id: str | None) -> Actor:
        if not actor_id:
            raise AuthenticationError("Unauthorized")
        account = self._accounts.get_account(actor_id)
        if account is None or not account.is_active:
            raise AuthenticationError("Unauthorized")
        return account.as_actor()
